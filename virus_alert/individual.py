"""
Health states of the people in the game
"""
from enum import Enum


class Individual(Enum):
    """
    Individual in the game, it represents a person. The order of the members is the order used in every table.
    """
    HEALTHY = "Healthy"
    INFECTED1 = "Infected1"
    INFECTED2 = "Infected2"
    INFECTED3 = "Infected3"
    SICK = "Sick"
    IMMUNE = "Immune"

    def __str__(self):
        return self.value

    def is_infected(self) -> bool:
        """Returns True for any of the three infected stages"""
        return self in (Individual.INFECTED1, Individual.INFECTED2, Individual.INFECTED3)

    def can_infect(self, other: "Individual") -> bool:
        """
        Return True if `other` can be infected by `self`. This is only possible if self is infected and other is
        healthy.

        :param other: the individual that could get infected
        :return: whether the infection can happen
        """
        return self.is_infected() and other is Individual.HEALTHY

    def interacts_with(self, other: "Individual") -> bool:
        """Returns True if either can infect the other."""
        return self.can_infect(other) or other.can_infect(self)

    def progress(self) -> "Individual":
        """
        Moves the disease one day forward, disregarding new infections: infected people advance one stage and people in
        the last infected stage get sick. Everyone else stays as they are.

        :return: the state of this individual on the next day
        """
        return _PROGRESSION.get(self, self)


_PROGRESSION = {
    Individual.INFECTED1: Individual.INFECTED2,
    Individual.INFECTED2: Individual.INFECTED3,
    Individual.INFECTED3: Individual.SICK,
}
