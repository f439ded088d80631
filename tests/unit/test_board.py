import numpy as np
import pytest

from virus_alert.board import DEFAULT_BUILDINGS, Board, BoardBuilder, BuildingSpec
from virus_alert.building import Building, Spreading
from virus_alert.errors import NoHealthyLeftError, NoImmuneLeftError
from virus_alert.individual import Individual
from virus_alert.population import Population


def _board(individuals, buildings, rng=None):
    return Board(Population(individuals), buildings, rng)


def test_visit_building():
    board = _board([Individual.HEALTHY], [Building.unchecked_from([[None]])])

    assert board.visit_building(0) == Building.unchecked_from([[Individual.HEALTHY]])


def test_visit_building_sick_stays_at_home():
    board = _board([Individual.SICK], [Building.unchecked_from([[None]])])

    assert board.visit_building(0) == Building.unchecked_from([[None]])
    assert board.inactive == [Individual.SICK]


def test_visit_building_already_full():
    board = _board(
        [Individual.INFECTED1, Individual.HEALTHY], [Building.unchecked_from([[Individual.HEALTHY]])]
    )

    board.visit_building(0)

    assert board.visit_building(0) == Building.unchecked_from([[Individual.HEALTHY]])


def test_visit_building_closed():
    board = _board([Individual.HEALTHY], [Building(1, 1, is_open=False)])

    assert board.visit_building(0).is_empty()
    assert board.population.next() is Individual.HEALTHY


def test_visit_fills_buildings_in_order(rng):
    board = _board([Individual.HEALTHY] * 5, [Building(2, 1), Building(1, 1)], rng)

    board.visit()

    assert board.buildings[0].is_full()
    assert board.buildings[1].is_full()
    assert board.inactive == [Individual.HEALTHY] * 2


def test_propagate():
    board = _board(
        [Individual.HEALTHY, Individual.INFECTED1],
        [Building.unchecked_from([[Individual.HEALTHY, Individual.INFECTED1]])],
    )

    board.propagate()

    assert board.buildings[0] == Building.unchecked_from([[Individual.INFECTED1, Individual.INFECTED2]])


def test_propagate_progresses_inactive():
    board = _board([Individual.INFECTED3], [])
    board.visit()

    board.propagate()

    assert board.inactive == [Individual.SICK]


def test_go_back():
    board = _board([Individual.HEALTHY, Individual.INFECTED1, Individual.SICK], [Building(2, 1)])

    board.visit_building(0)
    board.inactive.append(board.population.next())
    board.propagate()
    newly_infected = board.go_back()

    assert newly_infected == 1
    assert board.buildings[0].is_empty()
    assert board.inactive == []
    assert board.population.counting_all() == board.counting_table().last_day()
    assert board.counting_table()[Individual.INFECTED1] == [1, 1]
    assert board.counting_table()[Individual.INFECTED2] == [0, 1]


def test_go_back_without_recording():
    board = _board([Individual.HEALTHY, Individual.INFECTED1], [Building(2, 1)])
    board.visit()
    board.propagate()

    assert board.go_back(record=False) == 1
    assert board.counting_table().days() == 1
    assert board.recording.timeline == 0


def test_advance_keeps_population_and_table_in_sync(rng):
    board = BoardBuilder(healthy=90, infected1=4, infected3=3, sick=2, immune=1).build(rng)

    for day in range(1, 15):
        board.advance()

        assert len(board.population) == 100
        assert board.population.counting_all() == board.counting_table().last_day()
        assert board.counting_table().days() == day + 1
        assert board.recording.timeline == day
        assert all(building.is_empty() for building in board.buildings)
        assert board.inactive == []


def test_advance_many_is_reproducible():
    first = Board.default(np.random.default_rng(7)).advance_many(10)
    second = Board.default(np.random.default_rng(7)).advance_many(10)

    assert first.counting_table() == second.counting_table()


def test_advance_closed_buildings_add_penalty(rng):
    board = BoardBuilder(buildings=[BuildingSpec(2, 2, "Bakery", penalty=2, is_open=False)]).build(rng)

    board.advance_many(3)

    assert board.recording.penalty == {"Bakery": [0, 2, 2, 2]}
    assert board.counting_table()[Individual.INFECTED1] == [2, 0, 0, 0]


def test_open_close_toggle():
    board = Board.default()

    assert board.close("Bakery").is_closed()
    assert board.toggle("Bakery").is_open()
    assert board.toggle("Bakery").is_closed()
    assert board.open("Bakery").is_open()


def test_unknown_building():
    with pytest.raises(KeyError):
        Board.default().close("Hospital")


def test_immunize():
    board = _board([Individual.HEALTHY, Individual.INFECTED1], [])

    board.immunize()

    assert board.population.counting(Individual.IMMUNE) == 1
    assert board.population.counting(Individual.HEALTHY) == 0
    assert board.population.counting_all() == board.counting_table().last_day()
    with pytest.raises(NoHealthyLeftError):
        board.immunize()

    board.reverse_immunize()

    assert board.population.counting(Individual.HEALTHY) == 1
    assert board.population.counting_all() == board.counting_table().last_day()
    with pytest.raises(NoImmuneLeftError):
        board.reverse_immunize()


def test_default_board():
    board = Board.default()

    assert len(board.population) == 100
    assert board.population.counting(Individual.INFECTED1) == 2
    assert [building.name for building in board.buildings] == [
        "Concert Hall", "Bakery", "School", "Pharmacy", "Restaurant", "Gym", "Supermarket", "Shopping Center"
    ]
    assert board.buildings[0].shape == (4, 5)
    assert sum(building.capacity for building in board.buildings) == 70


def test_board_builder():
    builder = BoardBuilder(
        healthy=3, infected2=1, sick=2, immune=1, buildings=[(3, 2), (1, 1)], spreading=Spreading.EVERYONE
    )

    board = builder.build()

    assert board.population.counting_all() == {
        Individual.HEALTHY: 3,
        Individual.INFECTED1: 0,
        Individual.INFECTED2: 1,
        Individual.INFECTED3: 0,
        Individual.SICK: 2,
        Individual.IMMUNE: 1,
    }
    assert [building.name for building in board.buildings] == ["Building 0", "Building 1"]
    assert board.buildings[0].shape == (2, 3)
    assert all(building.spreading == Spreading.EVERYONE for building in board.buildings)


def test_board_builder_defaults():
    builder = BoardBuilder()

    assert builder.buildings == DEFAULT_BUILDINGS
    assert builder.spreading == Spreading.ONE_NEAR
    assert builder.build() == Board.default()
