"""
Runs many independent games from the same initial board. Every run works on its own copy of the board, with its own
random number generator spawned from a single seed, so the runs can happen in parallel and a seeded simulation always
gives the same report.
"""
# pylint: disable=import-error
import copy
import logging
from concurrent import futures
from typing import Any, Callable, List, NamedTuple, Optional, Tuple

import numpy as np  # type: ignore

from virus_alert.board import Board, BoardBuilder
from virus_alert.individual import Individual
from virus_alert.recording import CountingTable
from virus_alert.report import Report, ReportLastDay, ReportPlan

logger = logging.getLogger(__name__)


def runTrial(board: Board, days: int, generator: np.random.Generator) -> CountingTable:
    """Run one game on a copy of the board

    :param board: the initial board, it is not modified
    :param days: number of days to advance
    :param generator: random number generator for this run
    :return: the counting table of the run
    """
    board = copy.deepcopy(board)
    board.random_state = generator
    board.advance_many(days)
    return board.counting_table()


def runTrialLastDay(board: Board, days: int, generator: np.random.Generator) -> Tuple[int, int, bool]:
    """Run one game on a copy of the board, keeping track of the last day only

    :param board: the initial board, it is not modified
    :param days: number of days to advance
    :param generator: random number generator for this run
    :return: number of healthy and sick individuals in the last day, and whether the outbreak was contained
    """
    board = copy.deepcopy(board)
    board.random_state = generator
    last = board.counting_table().last_day()
    healthy = last[Individual.HEALTHY]
    infected1 = last[Individual.INFECTED1]
    infected2 = last[Individual.INFECTED2]
    infected3 = last[Individual.INFECTED3]
    sick = last[Individual.SICK]
    for _ in range(days):
        board.visit()
        board.propagate()
        newly_infected = board.go_back(record=False)
        healthy -= newly_infected
        sick += infected3
        infected1, infected2, infected3 = newly_infected, infected1, infected2
    contained = (healthy + last[Individual.IMMUNE] > 0) and (infected1 + infected2 + infected3 == 0)
    return healthy, sick, contained


class Simulation:
    """
    Simulation of a game: the initial board and the plan of what to run. Running it never modifies the board.

    :param board: the initial board
    :param report_plan: number of runs and number of days per run
    """
    def __init__(self, board: Optional[Board] = None, report_plan: Optional[ReportPlan] = None):
        self._board = Board.default() if board is None else board
        self._report_plan = ReportPlan() if report_plan is None else report_plan

    @property
    def board(self) -> Board:
        return self._board

    @property
    def report_plan(self) -> ReportPlan:
        return self._report_plan

    def run(self, random_seed: Optional[int] = None, max_workers: Optional[int] = 1) -> Report:
        """Returns the counting tables of every run of the simulation

        :param random_seed: seed to use when instantiating the SeedSequence object
        :param max_workers: maximum number of processes running the games, 1 runs them in this process and None uses
                            every CPU
        :return: the report of all the runs
        """
        return Report(self._runTrials(runTrial, random_seed, max_workers))

    def run_last_day(self, random_seed: Optional[int] = None, max_workers: Optional[int] = 1) -> ReportLastDay:
        """Returns the results of the last day of every run of the simulation, without keeping the daily history

        :param random_seed: seed to use when instantiating the SeedSequence object
        :param max_workers: maximum number of processes running the games, 1 runs them in this process and None uses
                            every CPU
        :return: the last day report of all the runs
        """
        results = self._runTrials(runTrialLastDay, random_seed, max_workers)
        return ReportLastDay(
            healthy=[healthy for healthy, _, _ in results],
            sick=[sick for _, sick, _ in results],
            contained=[contained for _, _, contained in results],
        )

    def _runTrials(
            self,
            trial: Callable[[Board, int, np.random.Generator], Any],
            random_seed: Optional[int],
            max_workers: Optional[int],
    ) -> List[Any]:
        total = self._report_plan.num_simulations
        seeds = np.random.SeedSequence(random_seed).spawn(total)
        if max_workers == 1:
            results = []
            for t, seq in enumerate(seeds, start=1):
                logger.debug("Running simulation (%s/%s)", t, total)
                results.append(trial(self._board, self._report_plan.days, np.random.default_rng(seq)))
            return results

        with futures.ProcessPoolExecutor(max_workers=max_workers) as executor:
            delayed: List[futures.Future] = []
            for seq in seeds:
                delayed.append(
                    executor.submit(trial, self._board, self._report_plan.days, np.random.default_rng(seq))
                )
            # Collected in submission order so that a seeded run does not depend on scheduling
            results = []
            for t, future in enumerate(delayed, start=1):
                results.append(future.result())
                logger.debug("Finished simulation (%s/%s)", t, total)
        return results


class SimulationBuilder(NamedTuple):
    """
    Builder for `Simulation`, a plain description which can be read from a configuration file
    """
    board_builder: BoardBuilder = BoardBuilder()
    report_plan: ReportPlan = ReportPlan()

    def build(self, random_state: Optional[np.random.Generator] = None) -> Simulation:
        return Simulation(self.board_builder.build(random_state), self.report_plan)
