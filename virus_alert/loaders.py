"""This module contains functions to read and check configuration files."""
import logging
from typing import Any, Dict, List, Mapping

import yaml

from virus_alert.board import BoardBuilder, BuildingSpec
from virus_alert.building import DEFAULT_SPREADING, Spreading
from virus_alert.report import ReportPlan
from virus_alert.simulation import SimulationBuilder

logger = logging.getLogger(__name__)

BOARD_COUNTS = ["healthy", "infected1", "infected2", "infected3", "sick", "immune"]


def _readCount(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be a positive number, got {value}")
    return value


def readSpreading(value: Any) -> Spreading:
    """Converts the name of a spreading mode ("Everyone", "One", "OneNear" or "OneVeryNear") into a `Spreading`"""
    try:
        return Spreading(value)
    except ValueError:
        valid = ", ".join(str(spreading) for spreading in Spreading)
        raise ValueError(f"Unknown spreading mode {value!r}, expected one of: {valid}") from None


def readBuilding(value: Any) -> BuildingSpec:
    """
    Reads a building, either as a pair ``[columns, rows]`` or as a mapping with the keys columns, rows and optionally
    name, penalty and open.

    :param value: raw building description
    :return: the building specification
    """
    if isinstance(value, Mapping):
        unknown = set(value) - {"columns", "rows", "name", "penalty", "open"}
        if unknown:
            raise ValueError(f"Unknown building fields: {sorted(unknown)}")
        if "columns" not in value or "rows" not in value:
            raise ValueError(f"Building {value} must have columns and rows")
        name = value.get("name")
        return BuildingSpec(
            columns=_readCount(value["columns"], "columns"),
            rows=_readCount(value["rows"], "rows"),
            name=None if name is None else str(name),
            penalty=_readCount(value.get("penalty", 0), "penalty"),
            is_open=bool(value.get("open", True)),
        )
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return BuildingSpec(columns=_readCount(value[0], "columns"), rows=_readCount(value[1], "rows"))
    raise ValueError(f"Invalid building {value!r}, expected [columns, rows] or a mapping")


def readBoardBuilder(board: Mapping) -> BoardBuilder:
    """
    Reads the initial state of a board. Missing counts are zero, and missing buildings or spreading mode take the
    default values of the game.

    :param board: raw board description
    :return: the board builder
    """
    if not isinstance(board, Mapping):
        raise ValueError(f"board must be a mapping, got {board!r}")
    unknown = set(board) - set(BOARD_COUNTS) - {"buildings", "spreading"}
    if unknown:
        raise ValueError(f"Unknown board fields: {sorted(unknown)}")

    counts: Dict[str, int] = {name: _readCount(board.get(name, 0), name) for name in BOARD_COUNTS}
    if "buildings" in board:
        if not isinstance(board["buildings"], list):
            raise ValueError("buildings must be a list")
        buildings = tuple(readBuilding(building) for building in board["buildings"])
    else:
        buildings = BoardBuilder().buildings
    spreading = readSpreading(board["spreading"]) if "spreading" in board else DEFAULT_SPREADING
    return BoardBuilder(buildings=buildings, spreading=spreading, **counts)


def readReportPlan(plan: Mapping) -> ReportPlan:
    """
    Read the number of runs and days of a simulation. Missing keys take the defaults of `ReportPlan`.

    :raises ValueError: if a value is not a count or there are no runs at all
    """
    if not isinstance(plan, Mapping):
        raise ValueError(f"report_plan must be a mapping, got {plan!r}")
    defaults = ReportPlan()
    num_simulations = _readCount(plan.get("num_simulations", defaults.num_simulations), "num_simulations")
    if num_simulations < 1:
        raise ValueError("num_simulations must be at least 1")
    return ReportPlan(num_simulations=num_simulations, days=_readCount(plan.get("days", defaults.days), "days"))


def readSimulationBuilders(stream) -> List[SimulationBuilder]:
    """
    Read a YAML document with a list of simulations. Each simulation has a board and a report_plan::

        - board:
            healthy: 98
            infected1: 2
            spreading: OneNear
            buildings:
              - [5, 4]
              - {columns: 2, rows: 2, name: Bakery}
          report_plan:
            num_simulations: 100
            days: 10

    :param stream: a string or a file-like object with the YAML document
    :return: one builder per simulation, in the order of the document
    """
    try:
        document = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
    if not isinstance(document, list):
        raise ValueError("The configuration must be a list of simulations")

    builders = []
    for simulation in document:
        if not isinstance(simulation, Mapping) or "board" not in simulation:
            raise ValueError(f"Every simulation must have a board, got {simulation!r}")
        builders.append(SimulationBuilder(
            board_builder=readBoardBuilder(simulation["board"]),
            report_plan=readReportPlan(simulation.get("report_plan", {})),
        ))
    logger.info("Read %s simulations", len(builders))
    return builders
