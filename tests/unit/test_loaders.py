import io

import pytest

from virus_alert import loaders
from virus_alert.board import DEFAULT_BUILDINGS, BoardBuilder, BuildingSpec
from virus_alert.building import Spreading
from virus_alert.report import ReportPlan
from virus_alert.simulation import SimulationBuilder


def test_readSimulationBuilders(config_yaml):
    builders = loaders.readSimulationBuilders(config_yaml)

    assert builders == [
        SimulationBuilder(
            board_builder=BoardBuilder(
                healthy=20,
                infected1=2,
                infected2=0,
                infected3=0,
                sick=0,
                immune=0,
                buildings=(BuildingSpec(3, 2), BuildingSpec(2, 2, "Bakery", penalty=3)),
                spreading=Spreading.ONE_NEAR,
            ),
            report_plan=ReportPlan(num_simulations=3, days=4),
        ),
        SimulationBuilder(
            board_builder=BoardBuilder(
                healthy=10,
                infected1=0,
                immune=5,
                buildings=DEFAULT_BUILDINGS,
                spreading=Spreading.EVERYONE,
            ),
            report_plan=ReportPlan(num_simulations=2, days=2),
        ),
    ]


def test_readSimulationBuilders_file_object(config_yaml):
    assert len(loaders.readSimulationBuilders(io.StringIO(config_yaml))) == 2


def test_readSimulationBuilders_default_report_plan():
    builders = loaders.readSimulationBuilders("- board: {healthy: 1}")

    assert builders[0].report_plan == ReportPlan()
    assert builders[0].report_plan.days == 10


@pytest.mark.parametrize("document", [
    "",
    "board: {healthy: 1}",
    "- report_plan: {days: 1}",
    "- [1, 2]",
    "- board: [1, 2]",
    "- board: {healthy: 1\n",
])
def test_readSimulationBuilders_invalid(document):
    with pytest.raises(ValueError):
        loaders.readSimulationBuilders(document)


@pytest.mark.parametrize("board", [
    {"healthy": -1},
    {"healthy": 1.5},
    {"healthy": "ten"},
    {"healthy": True},
    {"hospitals": 2},
    {"spreading": "Nobody"},
    {"buildings": "big"},
    {"buildings": [[1, 2, 3]]},
    {"buildings": [{"columns": 1}]},
    {"buildings": [{"columns": 1, "rows": 1, "floors": 2}]},
    {"buildings": [[-1, 2]]},
])
def test_readBoardBuilder_invalid(board):
    with pytest.raises(ValueError):
        loaders.readBoardBuilder(board)


def test_readBoardBuilder_defaults():
    assert loaders.readBoardBuilder({}) == BoardBuilder(healthy=0, infected1=0)


@pytest.mark.parametrize("name", ["Everyone", "One", "OneNear", "OneVeryNear"])
def test_readSpreading(name):
    assert str(loaders.readSpreading(name)) == name


def test_readBuilding():
    assert loaders.readBuilding([4, 2]) == BuildingSpec(4, 2)
    assert loaders.readBuilding({"columns": 4, "rows": 2, "name": "Gym", "open": False}) == BuildingSpec(
        4, 2, "Gym", 0, False
    )


@pytest.mark.parametrize("plan", [{"days": -1}, {"num_simulations": "many"}, {"num_simulations": 0}, [1, 2]])
def test_readReportPlan_invalid(plan):
    with pytest.raises(ValueError):
        loaders.readReportPlan(plan)


def test_readReportPlan_defaults():
    assert loaders.readReportPlan({}) == ReportPlan()
    assert loaders.readReportPlan({"days": 3}) == ReportPlan(num_simulations=1, days=3)
    assert loaders.readReportPlan({"num_simulations": 5, "days": 0}) == ReportPlan(num_simulations=5, days=0)
