"""
Keeps the history of a game. The `CountingTable` has the number of individuals of each type per day and the
`Recording` updates it at the end of every day from the number of newly infected people.
"""
import logging
from typing import Dict, Iterable, List, Mapping, Tuple, Union

import numpy as np  # type: ignore
import pandas as pd  # type: ignore

from virus_alert.errors import NoHealthyLeftError, NoImmuneLeftError
from virus_alert.individual import Individual

logger = logging.getLogger(__name__)

HEADER = "Individual\\Day"


class CountingTable:
    """
    Table with the counting of individual types per day. The quantity of each individual type present in the
    population is counted and the list of numbers represents the count for each of the days that have passed, starting
    with the initial state (day 0).

    >>> print(CountingTable([(individual, [1, 0]) for individual in Individual]))  # doctest: +NORMALIZE_WHITESPACE
    Individual\\Day 0  1
    Healthy        1  0
    Infected1      1  0
    Infected2      1  0
    Infected3      1  0
    Sick           1  0
    Immune         1  0

    :param counts: pairs of (individual type, counts per day), or a mapping between them
    """
    def __init__(self, counts: Union[Mapping[Individual, List[int]], Iterable[Tuple[Individual, List[int]]]] = ()):
        if isinstance(counts, Mapping):
            counts = counts.items()
        self.inner: Dict[Individual, List[int]] = {individual: list(values) for individual, values in counts}

    @classmethod
    def from_population_counts(cls, counts: Mapping[Individual, int]) -> "CountingTable":
        """Creates a table with a single day, for the given census"""
        return cls((individual, [counts.get(individual, 0)]) for individual in Individual)

    def __getitem__(self, individual: Individual) -> List[int]:
        return self.inner[individual]

    def __eq__(self, other) -> bool:
        if not isinstance(other, CountingTable):
            return NotImplemented
        return self.inner == other.inner

    def __repr__(self):
        return f"CountingTable({ {str(individual): values for individual, values in self.inner.items()} })"

    def __str__(self):
        lines = []
        for row in self.to_rows():
            lines.append(f"{row[0]:<15}" + "".join(f"{value:<3}" for value in row[1:]))
        return "\n".join(lines) + "\n"

    def days(self) -> int:
        """Returns the number of days counted, including the initial day"""
        return len(self.inner.get(Individual.HEALTHY, []))

    def append(self, counts: Mapping[Individual, int]):
        """
        Appends one day to the table.

        :param counts: the count of every individual type on the new day
        """
        assert set(counts) == set(self.inner), "every individual type must be counted"
        for individual, value in counts.items():
            self.inner[individual].append(value)

    def last_day(self) -> Dict[Individual, int]:
        """
        Returns the counting on the last day in the table.

        :raises IndexError: if the table is empty
        """
        return {individual: values[-1] for individual, values in self.inner.items()}

    def is_contained(self) -> bool:
        """
        Returns `True` if the outbreak of the virus is contained in the last day. An outbreak is contained if two
        conditions hold:

        - There is no individual who can infect another
        - There is at least one non-sick person (could be immune or healthy)
        """
        last_day = self.last_day()
        infected = last_day[Individual.INFECTED1] + last_day[Individual.INFECTED2] + last_day[Individual.INFECTED3]
        return last_day[Individual.HEALTHY] + last_day[Individual.IMMUNE] > 0 and infected == 0

    def diagram(self) -> Tuple[List[int], List[int], List[int]]:
        """
        Returns the total number of healthy, infected and sick individuals, respectively, for each day that has been
        recorded.
        """
        infected = [
            first + second + third for first, second, third in zip(
                self.inner[Individual.INFECTED1],
                self.inner[Individual.INFECTED2],
                self.inner[Individual.INFECTED3],
            )
        ]
        return list(self.inner[Individual.HEALTHY]), infected, list(self.inner[Individual.SICK])

    def to_rows(self) -> List[List[str]]:
        """
        Converts the table into rows of text: a header with the days followed by one row per individual type.
        """
        rows = [[HEADER] + [str(day) for day in range(self.days())]]
        for individual in Individual:
            rows.append([str(individual)] + [str(value) for value in self.inner[individual]])
        return rows

    def to_array(self) -> np.ndarray:
        """Returns a (individual types x days) array of counts"""
        if not self.inner:
            return np.zeros((len(Individual), 0), dtype=int)
        return np.array([self.inner[individual] for individual in Individual], dtype=int).reshape(
            len(Individual), self.days()
        )

    def to_pandas(self) -> pd.DataFrame:
        """
        Converts the table into a DataFrame indexed by individual type with one column per day
        """
        return pd.DataFrame(
            self.to_array(),
            index=pd.Index([str(individual) for individual in Individual], name=HEADER),
            columns=range(self.days()),
        )

    def write_csv(self, path_or_buf, mode: str = "w"):
        """
        Writes the table as CSV: the header row is ``Individual\\Day,0,1,...`` followed by one row per individual type.

        :param path_or_buf: file path or file-like object
        :param mode: file mode, use "a" to add the table after the existing content of a file
        """
        self.to_pandas().to_csv(path_or_buf, mode=mode)


class Recording:
    """
    Records the state of a game, day by day.

    :param population: population of the initial state
    :param buildings: buildings of the game, used to keep track of penalties
    """
    def __init__(self, population: Iterable[Individual], buildings: Iterable = ()):
        counts = {individual: 0 for individual in Individual}
        for individual in population:
            counts[individual] += 1
        self.counting_table = CountingTable.from_population_counts(counts)
        self.timeline = 0
        self.penalty: Dict[str, List[int]] = {building.name: [0] for building in buildings}

    def __eq__(self, other) -> bool:
        if not isinstance(other, Recording):
            return NotImplemented
        return (self.counting_table, self.timeline, self.penalty) == \
            (other.counting_table, other.timeline, other.penalty)

    def last_day_individuals(self) -> Dict[Individual, int]:
        return self.counting_table.last_day()

    def register(self, newly_infected: int, buildings: Iterable = ()) -> "Recording":
        """
        Registers the end of a day, given the number of newly infected individuals. Everyone else moves one stage
        forward: infected people advance their infection and the ones in the last stage get sick.

        :param newly_infected: number of healthy individuals that got infected during the day
        :param buildings: buildings of the game, closed buildings add their penalty to the day
        :return: this recording
        """
        self._register_counting_table(newly_infected)
        self._register_penalty(buildings)
        self.timeline += 1
        return self

    def _register_counting_table(self, newly_infected: int):
        last = self.counting_table.last_day()
        assert last[Individual.HEALTHY] >= newly_infected, \
            f"{newly_infected} newly infected but only {last[Individual.HEALTHY]} healthy"
        self.counting_table.append({
            Individual.HEALTHY: last[Individual.HEALTHY] - newly_infected,
            Individual.INFECTED1: newly_infected,
            Individual.INFECTED2: last[Individual.INFECTED1],
            Individual.INFECTED3: last[Individual.INFECTED2],
            Individual.SICK: last[Individual.SICK] + last[Individual.INFECTED3],
            Individual.IMMUNE: last[Individual.IMMUNE],
        })

    def _register_penalty(self, buildings: Iterable):
        closed = {building.name: building.penalty for building in buildings if building.is_closed()}
        for name, history in self.penalty.items():
            history.append(closed.get(name, 0))

    def immunize(self) -> "Recording":
        """
        Changes one healthy individual into an immune one, in the last day.

        :raises NoHealthyLeftError: if there is no healthy individual
        """
        self._swap(Individual.HEALTHY, Individual.IMMUNE, NoHealthyLeftError)
        return self

    def reverse_immunize(self) -> "Recording":
        """
        Changes one immune individual into a healthy one, in the last day.

        :raises NoImmuneLeftError: if there is no immune individual
        """
        self._swap(Individual.IMMUNE, Individual.HEALTHY, NoImmuneLeftError)
        return self

    def _swap(self, source: Individual, target: Individual, error):
        table = self.counting_table
        if table[source][-1] == 0:
            raise error()
        table[source][-1] -= 1
        table[target][-1] += 1
