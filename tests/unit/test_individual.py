import pytest

from virus_alert.individual import Individual


@pytest.mark.parametrize("individual", [Individual.INFECTED1, Individual.INFECTED2, Individual.INFECTED3])
def test_infected_can_infect_healthy(individual):
    assert individual.is_infected()
    assert individual.can_infect(Individual.HEALTHY)
    assert not Individual.HEALTHY.can_infect(individual)
    assert individual.interacts_with(Individual.HEALTHY)
    assert Individual.HEALTHY.interacts_with(individual)


@pytest.mark.parametrize("other", [
    Individual.INFECTED1, Individual.INFECTED2, Individual.INFECTED3, Individual.SICK, Individual.IMMUNE
])
def test_infected_can_only_infect_healthy(other):
    assert not Individual.INFECTED1.can_infect(other)


@pytest.mark.parametrize("individual", [Individual.HEALTHY, Individual.SICK, Individual.IMMUNE])
def test_not_infected_never_infect(individual):
    assert not individual.is_infected()
    for other in Individual:
        assert not individual.can_infect(other)


def test_interacts_with_is_symmetric():
    for first in Individual:
        for second in Individual:
            assert first.interacts_with(second) == second.interacts_with(first)


def test_progress():
    assert Individual.INFECTED1.progress() is Individual.INFECTED2
    assert Individual.INFECTED2.progress() is Individual.INFECTED3
    assert Individual.INFECTED3.progress() is Individual.SICK
    assert Individual.SICK.progress() is Individual.SICK
    assert Individual.HEALTHY.progress() is Individual.HEALTHY
    assert Individual.IMMUNE.progress() is Individual.IMMUNE


def test_str_and_order():
    assert [str(individual) for individual in Individual] == [
        "Healthy", "Infected1", "Infected2", "Infected3", "Sick", "Immune"
    ]
