"""
The board has the whole state of a game: the population, the buildings and the recording of what happened so far.

Every day of the game (:meth:`Board.advance`) has three steps, each one depending on the previous one:

1. visit: the population is shuffled and people fill the open buildings, one building after the other. Sick people
   and the ones who found no place stay at home (the inactive list).
2. propagate: the virus spreads inside each building. People at home do not get infected, but their disease still
   progresses.
3. go_back: everyone returns home, the buildings are emptied and the day is recorded.

Outside of :meth:`Board.advance`, each individual is in the population and nowhere else.
"""
import logging
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np  # type: ignore

from virus_alert.building import DEFAULT_SPREADING, Building, Spreading
from virus_alert.common import Lazy
from virus_alert.errors import BuildingSickError, NoHealthyLeftError, NoImmuneLeftError
from virus_alert.individual import Individual
from virus_alert.population import Population
from virus_alert.recording import CountingTable, Recording

logger = logging.getLogger(__name__)


class BuildingSpec(NamedTuple):
    """
    Plain description of a building, as found in configuration files
    """
    columns: int
    rows: int
    name: Optional[str] = None
    penalty: int = 0
    is_open: bool = True


DEFAULT_BUILDINGS = (
    BuildingSpec(5, 4, "Concert Hall"),
    BuildingSpec(2, 2, "Bakery"),
    BuildingSpec(4, 4, "School"),
    BuildingSpec(2, 2, "Pharmacy"),
    BuildingSpec(3, 2, "Restaurant"),
    BuildingSpec(4, 2, "Gym"),
    BuildingSpec(2, 2, "Supermarket"),
    BuildingSpec(4, 2, "Shopping Center"),
)


class Board:
    """
    Represents the state of the game and has the high level commands.

    :param population: initial population
    :param buildings: buildings of the town, in the order they are visited
    :param random_state: random number generator used to shuffle the population every day
    """
    def __init__(
            self,
            population: Optional[Population] = None,
            buildings: Optional[Iterable[Building]] = None,
            random_state: Optional[np.random.Generator] = None,
    ):
        self.population = Population() if population is None else population
        self.buildings: List[Building] = [] if buildings is None else list(buildings)
        self.inactive: List[Individual] = []
        self.recording = Recording(self.population, self.buildings)
        self.random_state = np.random.default_rng() if random_state is None else random_state

    @classmethod
    def default(cls, random_state: Optional[np.random.Generator] = None) -> "Board":
        """The board of the game: 98 healthy and 2 infected people in a town with eight buildings"""
        return BoardBuilder().build(random_state)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return (
            self.population == other.population
            and self.buildings == other.buildings
            and self.inactive == other.inactive
            and self.recording == other.recording
        )

    def counting_table(self) -> CountingTable:
        return self.recording.counting_table

    def advance(self) -> "Board":
        """Advances one day in the game"""
        self.visit()
        self.propagate()
        newly_infected = self.go_back()
        logger.debug(
            "Day %s: %s newly infected. Status: %s",
            self.recording.timeline,
            newly_infected,
            Lazy(lambda: {str(k): v for k, v in self.counting_table().last_day().items()}),
        )
        return self

    def advance_many(self, days: int) -> "Board":
        """Advances `days` days in the game, one after the other"""
        for _ in range(days):
            self.advance()
        return self

    def visit(self):
        """
        First step of any day. Buildings are populated by non-sick individuals chosen at random. Whoever is left
        when every building is full stays inactive.
        """
        self.population.shuffle(self.random_state)
        for index in range(len(self.buildings)):
            self.visit_building(index)
        individual = self.population.next()
        while individual is not None:
            self.inactive.append(individual)
            individual = self.population.next()

    def visit_building(self, index: int) -> Building:
        """
        Fills a building with the next individuals of the population, until the building is full or the population
        runs out. Closed buildings receive nobody.

        :param index: position of the building in the board
        :return: the visited building
        """
        building = self.buildings[index]
        if building.is_closed():
            return building
        while not building.is_full():
            individual = self.population.next()
            if individual is None:
                break
            try:
                building.try_push(individual)
            except BuildingSickError:
                self.inactive.append(individual)
        return building

    def propagate(self):
        """
        Second step of any day. The virus spreads in each building, and the disease progresses for the people who
        stayed at home.
        """
        for building in self.buildings:
            building.propagate()
        self.inactive = [individual.progress() for individual in self.inactive]

    def go_back(self, record: bool = True) -> int:
        """
        Third step of any day. The population returns home and changes are recorded.

        :param record: if False, the day is not added to the recording
        :return: the number of newly infected individuals
        """
        newPopulation: List[Individual] = []
        for building in self.buildings:
            newPopulation.extend(building.empty())
        newPopulation.extend(self.inactive)
        self.inactive = []

        newly_infected = sum(1 for individual in newPopulation if individual is Individual.INFECTED1)
        self.population.update(newPopulation)
        if record:
            self.recording.register(newly_infected, self.buildings)
        return newly_infected

    def _building(self, name: str) -> Building:
        for building in self.buildings:
            if building.name == name:
                return building
        raise KeyError(f"there is no building named {name!r}")

    def open(self, name: str) -> Building:
        return self._building(name).open()

    def close(self, name: str) -> Building:
        return self._building(name).close()

    def toggle(self, name: str) -> Building:
        """Opens the named building if it is closed, closes it otherwise"""
        return self._building(name).toggle()

    def immunize(self) -> "Board":
        """
        Vaccinates one healthy individual.

        :raises NoHealthyLeftError: if there is no healthy individual left
        """
        self._swap(Individual.HEALTHY, Individual.IMMUNE, NoHealthyLeftError)
        self.recording.immunize()
        return self

    def reverse_immunize(self) -> "Board":
        """
        Reverts the vaccination of one immune individual.

        :raises NoImmuneLeftError: if there is no immune individual left
        """
        self._swap(Individual.IMMUNE, Individual.HEALTHY, NoImmuneLeftError)
        self.recording.reverse_immunize()
        return self

    def _swap(self, source: Individual, target: Individual, error):
        individuals = self.population.individuals
        try:
            index = individuals.index(source)
        except ValueError:
            raise error() from None
        individuals[index] = target
        self.population.update(individuals)


class BoardBuilder(NamedTuple):
    """
    Builder for the `Board`. Although a `Board` can be created directly, this type is a plain description of the
    initial state which can be written in a configuration file. A `Board` could be in the middle of a game, therefore
    it is not as human-friendly.
    """
    healthy: int = 98
    infected1: int = 2
    infected2: int = 0
    infected3: int = 0
    sick: int = 0
    immune: int = 0
    buildings: Sequence[Union[BuildingSpec, Tuple[int, int]]] = DEFAULT_BUILDINGS
    spreading: Spreading = DEFAULT_SPREADING

    def population(self) -> Population:
        return Population(
            [Individual.HEALTHY] * self.healthy
            + [Individual.INFECTED1] * self.infected1
            + [Individual.INFECTED2] * self.infected2
            + [Individual.INFECTED3] * self.infected3
            + [Individual.SICK] * self.sick
            + [Individual.IMMUNE] * self.immune
        )

    def build_buildings(self) -> List[Building]:
        """Creates the buildings, all of them with the spreading mode of the builder"""
        buildings = []
        for index, spec in enumerate(self.buildings):
            if not isinstance(spec, BuildingSpec):
                spec = BuildingSpec(*spec)
            buildings.append(Building(
                spec.columns,
                spec.rows,
                name=f"Building {index}" if spec.name is None else spec.name,
                spreading=self.spreading,
                penalty=spec.penalty,
                is_open=spec.is_open,
            ))
        return buildings

    def build(self, random_state: Optional[np.random.Generator] = None) -> Board:
        """
        Returns the corresponding board

        :param random_state: random number generator of the board
        """
        return Board(self.population(), self.build_buildings(), random_state)
