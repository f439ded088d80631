"""
Buildings are the places where people meet and where the virus spreads. Each building is a grid of positions and
every position hosts at most one individual per day.

The way the virus spreads inside a building depends on its `Spreading` mode:

1. Everyone: if there is one infected person in the building, then every healthy person gets infected.
2. One: each infected person infects one healthy person, regardless of where they are. The healthy people are
   chosen in row-major order.
3. OneNear: infected people infect someone next to them, horizontally, vertically or diagonally. As there can be
   more than one infected per building, they work collectively and infect as many people as possible, under the
   restriction that each of them infects only one other individual. That is a maximum matching in the graph of
   positions where the edges connect neighbours that can infect each other.
4. OneVeryNear: the same as OneNear, but diagonal neighbours are not close enough.

Whatever the mode, infected people progress to their next stage (see :meth:`Individual.progress`).
"""
import logging
from enum import Enum
from functools import partial
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

import networkx as nx  # type: ignore
import numpy as np  # type: ignore

from virus_alert.errors import BuildingFullError, BuildingSickError
from virus_alert.individual import Individual

logger = logging.getLogger(__name__)

# (row, column) of a position inside a building
Cell = Tuple[int, int]


class Spreading(Enum):
    """Spreading mode inside a building."""
    EVERYONE = "Everyone"
    ONE = "One"
    ONE_NEAR = "OneNear"
    ONE_VERY_NEAR = "OneVeryNear"

    def __str__(self):
        return self.value


DEFAULT_SPREADING = Spreading.ONE_NEAR

# Only half of the neighbourhood is needed, every pair of cells is visited once from its first cell in row-major order
NEAR_OFFSETS = [(0, 1), (1, -1), (1, 0), (1, 1)]
VERY_NEAR_OFFSETS = [(0, 1), (1, 0)]


def _emptyGrid(rows: int, columns: int) -> np.ndarray:
    return np.full((rows, columns), None, dtype=object)


def _countFree(people: np.ndarray) -> int:
    return int(np.count_nonzero(np.equal(people, None)))


def _occupants(people: np.ndarray) -> List[Tuple[Cell, Individual]]:
    """Occupied positions of the grid with their individual, in row-major order"""
    return [(cell, individual) for cell, individual in np.ndenumerate(people) if individual is not None]


def interactionGraph(people: np.ndarray, offsets: Iterable[Cell]) -> nx.Graph:
    """
    Builds the graph with one node per occupied position, where two nodes are connected if they are neighbours and
    one of them can infect the other.

    :param people: grid of individuals (None for free positions)
    :param offsets: relative positions considered as neighbours
    :return: an undirected graph whose nodes are (row, column) tuples
    """
    rows, columns = people.shape
    graph = nx.Graph()
    for cell, individual in _occupants(people):
        graph.add_node(cell)
        row, column = cell
        for rowOffset, columnOffset in offsets:
            other_row, other_column = row + rowOffset, column + columnOffset
            if not (0 <= other_row < rows and 0 <= other_column < columns):
                continue
            other = people[other_row, other_column]
            if other is not None and individual.interacts_with(other):
                graph.add_edge(cell, (other_row, other_column))
    return graph


def _infectEveryone(people: np.ndarray) -> Set[Cell]:
    occupants = _occupants(people)
    if not any(individual.is_infected() for _, individual in occupants):
        return set()
    return {cell for cell, individual in occupants if individual is Individual.HEALTHY}


def _infectOne(people: np.ndarray) -> Set[Cell]:
    occupants = _occupants(people)
    infected = sum(1 for _, individual in occupants if individual.is_infected())
    healthy = [cell for cell, individual in occupants if individual is Individual.HEALTHY]
    return set(healthy[:infected])


def _infectNear(people: np.ndarray, offsets: Iterable[Cell]) -> Set[Cell]:
    graph = interactionGraph(people, offsets)
    # With unit weights, the maximum weight matching among maximum cardinality ones is a maximum matching
    matching = nx.max_weight_matching(graph, maxcardinality=True)
    return {cell for edge in matching for cell in edge if people[cell] is Individual.HEALTHY}


_INFECTION_POLICIES: Dict[Spreading, Callable[[np.ndarray], Set[Cell]]] = {
    Spreading.EVERYONE: _infectEveryone,
    Spreading.ONE: _infectOne,
    Spreading.ONE_NEAR: partial(_infectNear, offsets=NEAR_OFFSETS),
    Spreading.ONE_VERY_NEAR: partial(_infectNear, offsets=VERY_NEAR_OFFSETS),
}


class Building:
    """
    Building in the board game where spreading can happen.

    :param columns: number of positions in each row
    :param rows: number of rows
    :param name: name of the building, used by the board to open and close it
    :param spreading: how the virus spreads inside the building
    :param penalty: cost of keeping the building closed for a day
    :param is_open: closed buildings receive no visitors
    """
    # pylint: disable=too-many-arguments
    def __init__(
            self,
            columns: int = 0,
            rows: int = 0,
            name: str = "Default",
            spreading: Spreading = DEFAULT_SPREADING,
            penalty: int = 0,
            is_open: bool = True,
    ):
        if columns < 0 or rows < 0:
            raise ValueError(f"invalid building size {columns}x{rows}")
        self._people = _emptyGrid(rows, columns)
        # Every position before the cursor, in row-major order, is occupied
        self._cursor = 0
        self._free = self._people.size
        self.name = name
        self.spreading = spreading
        self.penalty = penalty
        self._open = is_open

    @classmethod
    def unchecked_from(cls, array, **kwargs) -> "Building":
        """
        Creates a building with the given people inside, without checking them.

        :param array: a 2D array-like of individuals, None marks a free position
        :param kwargs: any of the keyword arguments accepted by the constructor
        :return: the new building
        """
        people = np.array(array, dtype=object)
        if people.ndim != 2:
            raise ValueError(f"buildings are two dimensional, got {people.ndim} dimensions")
        building = cls(0, 0, **kwargs)
        # pylint: disable=protected-access
        building._people = people
        building._free = _countFree(people)
        return building

    @classmethod
    def from_array(cls, array, **kwargs) -> "Building":
        """
        Creates a building with the given people inside.

        :param array: a 2D array-like of individuals, None marks a free position
        :param kwargs: any of the keyword arguments accepted by the constructor
        :return: the new building
        :raises BuildingSickError: if there is a sick individual in the array
        """
        building = cls.unchecked_from(array, **kwargs)
        if any(individual is Individual.SICK for _, individual in _occupants(building._people)):
            raise BuildingSickError()
        return building

    def __eq__(self, other) -> bool:
        if not isinstance(other, Building):
            return NotImplemented
        return (
            self.shape == other.shape
            and self._people.tolist() == other._people.tolist()
            and self.name == other.name
            and self.spreading == other.spreading
            and self.penalty == other.penalty
            and self._open == other._open
        )

    def __repr__(self):
        return (
            f"Building(name={self.name!r}, shape={self.shape}, spreading={self.spreading}, open={self._open}, "
            f"people={self._people.tolist()})"
        )

    @property
    def people(self) -> np.ndarray:
        """A copy of the grid of people currently in the building"""
        return self._people.copy()

    @property
    def shape(self) -> Tuple[int, int]:
        """(rows, columns)"""
        return self._people.shape

    @property
    def capacity(self) -> int:
        """The number of individuals the building can host"""
        return self._people.size

    def is_full(self) -> bool:
        return self._free == 0

    def is_empty(self) -> bool:
        return self._free == self.capacity

    def is_open(self) -> bool:
        return self._open

    def is_closed(self) -> bool:
        return not self._open

    def open(self) -> "Building":
        self._open = True
        return self

    def close(self) -> "Building":
        """Closes the building. Only empty buildings can be closed."""
        assert self.is_empty(), f"can not close {self.name}, there are people inside"
        self._open = False
        return self

    def toggle(self) -> "Building":
        """Closes an open building, or opens a closed one"""
        return self.close() if self._open else self.open()

    def empty(self) -> List[Individual]:
        """
        Empties the building of people.

        :return: the individuals that were inside, in row-major order
        """
        individuals = [individual for _, individual in _occupants(self._people)]
        self._people = _emptyGrid(*self.shape)
        self._cursor = 0
        self._free = self.capacity
        return individuals

    def try_push(self, individual: Individual):
        """
        Places an individual in the first free position of the building, in row-major order.

        :param individual: the individual entering the building
        :raises BuildingFullError: if there is no free position
        :raises BuildingSickError: if the individual is sick
        """
        if self.is_full():
            raise BuildingFullError(self.name)
        if individual is Individual.SICK:
            raise BuildingSickError()
        while self._people.flat[self._cursor] is not None:
            self._cursor += 1
        self._people.flat[self._cursor] = individual
        self._cursor += 1
        self._free -= 1

    def propagate(self) -> int:
        """
        Propagates the infection inside the building, according to its spreading mode. Every new state is computed
        from the people present before the propagation.

        :return: the number of newly infected individuals
        """
        occupants = _occupants(self._people)
        for _, individual in occupants:
            assert individual is not Individual.SICK, "There should not have been a sick person in the building"

        toInfect = _INFECTION_POLICIES[self.spreading](self._people)
        nextPeople = _emptyGrid(*self.shape)
        for cell, individual in occupants:
            nextPeople[cell] = Individual.INFECTED1 if cell in toInfect else individual.progress()
        self._people = nextPeople

        logger.debug("%s: %s newly infected out of %s visitors", self.name, len(toInfect), len(occupants))
        return len(toInfect)


class BuildingBuilder:
    """
    Builder for `Building`.

    >>> BuildingBuilder("Bakery").with_size(2, 2).with_penalty(3).and_is_closed().build().shape
    (2, 2)
    """
    def __init__(self, name: str = "Default"):
        self.name = name
        self.columns = 0
        self.rows = 0
        self.penalty = 0
        self.spreading = DEFAULT_SPREADING
        self.is_open = True

    def with_size(self, columns: int, rows: int) -> "BuildingBuilder":
        self.columns = columns
        self.rows = rows
        return self

    def with_penalty(self, penalty: int) -> "BuildingBuilder":
        self.penalty = penalty
        return self

    def with_spreading(self, spreading: Spreading) -> "BuildingBuilder":
        self.spreading = spreading
        return self

    def and_is_open(self) -> "BuildingBuilder":
        self.is_open = True
        return self

    def and_is_closed(self) -> "BuildingBuilder":
        self.is_open = False
        return self

    def build(self, spreading: Optional[Spreading] = None) -> Building:
        """
        Returns the corresponding building.

        :param spreading: overrides the spreading mode of the builder
        """
        return Building(
            self.columns,
            self.rows,
            name=self.name,
            spreading=self.spreading if spreading is None else spreading,
            penalty=self.penalty,
            is_open=self.is_open,
        )
