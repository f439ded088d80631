"""
Results of running a simulation many times. A `Report` keeps the counting table of every run and summarises them day
by day, a `ReportLastDay` only keeps a few numbers from the last day of each run.
"""
from typing import Iterable, List, NamedTuple, Tuple

import numpy as np  # type: ignore
import pandas as pd  # type: ignore

from virus_alert.common import Variance
from virus_alert.individual import Individual
from virus_alert.recording import CountingTable


class ReportPlan(NamedTuple):
    """
    What to run: the number of independent games and the number of days each game advances
    """
    num_simulations: int = 1
    days: int = 10


class Report:
    """
    Report of a simulation of a game: one counting table per run.

    :param counting_tables: counting tables of the runs, all of them with the same number of days
    """
    def __init__(self, counting_tables: Iterable[CountingTable] = ()):
        self.counting_tables: List[CountingTable] = list(counting_tables)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Report):
            return NotImplemented
        return self.counting_tables == other.counting_tables

    def __len__(self) -> int:
        return len(self.counting_tables)

    def days(self) -> int:
        return self.counting_tables[0].days() if self.counting_tables else 0

    def to_array(self) -> np.ndarray:
        """Returns the counting tables stacked in a (runs x individual types x days) array"""
        if not self.counting_tables:
            return np.zeros((0, len(Individual), 0))
        return np.stack([counting_table.to_array() for counting_table in self.counting_tables]).astype(float)

    def moments(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Returns the mean and the unbiased variance across the runs, both as (individual types x days) arrays. The
        variance is zero when there are less than two runs.
        """
        runs = self.to_array()
        if len(runs) == 0:
            return np.zeros(runs.shape[1:]), np.zeros(runs.shape[1:])
        mean = runs.mean(axis=0)
        variance = runs.var(axis=0, ddof=1) if len(runs) > 1 else np.zeros_like(mean)
        return mean, variance

    def average_counting_table(self) -> np.ndarray:
        """
        Returns the average "counting table" over all runs. It can not be a `CountingTable` since the averages are
        estimators, so it is a (individual types x days) array where each cell has the `Variance` of that individual
        type on that day across the runs.
        """
        mean, variance = self.moments()
        average = np.empty(mean.shape, dtype=object)
        for cell in np.ndindex(mean.shape):
            average[cell] = Variance.from_moments(len(self), mean[cell], variance[cell])
        return average

    def individual(self, individual: Individual) -> List[List[int]]:
        """
        Returns the trajectory over time of one individual type for all runs. Each element of the list is a run, which
        consists of the values of that individual type over time.

        :param individual: the individual type
        """
        return [list(counting_table[individual]) for counting_table in self.counting_tables]

    def individual_transpose(self, individual: Individual) -> List[List[int]]:
        """
        Like `individual`, but each element of the list is a day of the game, which has the values for each run.
        """
        return [list(day) for day in zip(*self.individual(individual))]

    def individual_last(self, individual: Individual) -> List[int]:
        """Returns the value on the last day, for every run"""
        return [values[-1] for values in self.individual(individual)]

    def individual_first(self, individual: Individual) -> int:
        """
        Returns the initial number of individuals of that type, which is the same for all runs.

        :raises ValueError: if there are no runs
        """
        if not self.counting_tables:
            raise ValueError("There is no simulation to compute the initial number of individuals")
        return self.counting_tables[0][individual][0]

    def average_individual(self, individual: Individual) -> List[Variance]:
        """Returns the average over all runs of one individual type, per day"""
        return list(self.average_counting_table()[list(Individual).index(individual)])

    def contained(self) -> float:
        """Fraction of runs where the outbreak was contained on the last day"""
        if not self.counting_tables:
            return float("nan")
        return float(np.mean([table.is_contained() for table in self.counting_tables]))

    def infection_probability(self) -> Variance:
        """
        Approximates the probability that an initially healthy individual gets infected during the game, with
        one sample per run. The estimate is NaN when nobody was healthy in the beginning, and empty when there are no
        runs.
        """
        if not self.counting_tables:
            return Variance()
        initial = self.individual_first(Individual.HEALTHY)
        last = np.array(self.individual_last(Individual.HEALTHY), dtype=float)
        if initial == 0:
            return Variance(np.full(len(last), np.nan))
        return Variance(1.0 - last / initial)

    def to_pandas(self) -> pd.DataFrame:
        """
        Summarises the runs as a DataFrame with the columns individual, day, mean, std and error
        """
        mean, variance = self.moments()
        std = np.sqrt(variance)
        error = std / np.sqrt(len(self)) if len(self) > 1 else np.zeros_like(std)
        index = pd.MultiIndex.from_product(
            [[str(individual) for individual in Individual], range(mean.shape[1])], names=["individual", "day"]
        )
        summary = pd.DataFrame({"mean": mean.ravel(), "std": std.ravel(), "error": error.ravel()}, index=index)
        return summary.reset_index()


class ReportLastDay(NamedTuple):
    """
    Report of the last day of every run: the number of healthy and sick individuals, and whether the outbreak was
    contained.
    """
    healthy: List[int]
    sick: List[int]
    contained: List[bool]

    def to_pandas(self) -> pd.DataFrame:
        return pd.DataFrame({"healthy": self.healthy, "sick": self.sick, "contained": self.contained})
