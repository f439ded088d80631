"""
The population of the game. People are drawn one by one from a shuffled population when the buildings are filled.
"""
from typing import Dict, Iterable, Iterator, List, Optional

import numpy as np  # type: ignore

from virus_alert.individual import Individual

DEFAULT_HEALTHY = 98
DEFAULT_INFECTED = 2


class Population:
    """
    Ordered collection of individuals with a cursor. `next` hands out the individuals in their current order without
    removing them, and `shuffle` reorders them and restarts the cursor.

    :param individuals: initial individuals. The default population has 98 healthy and 2 infected people.
    """
    def __init__(self, individuals: Optional[Iterable[Individual]] = None):
        if individuals is None:
            individuals = [Individual.HEALTHY] * DEFAULT_HEALTHY + [Individual.INFECTED1] * DEFAULT_INFECTED
        self._individuals: List[Individual] = list(individuals)
        self._counter = 0

    def __len__(self) -> int:
        return len(self._individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(list(self._individuals))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Population):
            return NotImplemented
        return self._individuals == other._individuals and self._counter == other._counter

    def __repr__(self):
        return f"Population({self.counting_all()})"

    @property
    def individuals(self) -> List[Individual]:
        """A copy of the individuals, in their current order"""
        return list(self._individuals)

    def shuffle(self, rng: np.random.Generator):
        """
        Reorders the population uniformly at random and restarts the cursor, so that `next` draws a fresh sample
        without replacement.

        :param rng: random number generator used for the permutation
        """
        rng.shuffle(self._individuals)
        self._counter = 0

    def next(self) -> Optional[Individual]:
        """
        Returns the next individual not yet handed out since the last shuffle (or update).

        :return: an individual, or None when all of them were consumed
        """
        if self._counter >= len(self._individuals):
            return None
        self._counter += 1
        return self._individuals[self._counter - 1]

    def counting(self, query: Individual) -> int:
        """Returns the number of individuals of the given type."""
        return sum(1 for individual in self._individuals if individual is query)

    def counting_all(self) -> Dict[Individual, int]:
        """Returns the number of individuals of each type. Every type is present, even with a count of zero."""
        counts = {individual: 0 for individual in Individual}
        for individual in self._individuals:
            counts[individual] += 1
        return counts

    def update(self, new_population: Iterable[Individual]):
        """
        Changes the current population for `new_population` and restarts the cursor.

        :param new_population: the individuals replacing the current ones
        """
        new_population = list(new_population)
        assert len(new_population) == len(self._individuals), \
            f"population size changed from {len(self._individuals)} to {len(new_population)}"
        self._individuals = new_population
        self._counter = 0
