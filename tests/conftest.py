import matplotlib
import numpy as np
import pytest

from virus_alert.individual import Individual
from virus_alert.recording import CountingTable

# Plots are only saved to files, never shown
matplotlib.use("Agg")


@pytest.fixture
def rng():
    yield np.random.default_rng(123)


@pytest.fixture
def config_yaml():
    yield """
- board:
    healthy: 20
    infected1: 2
    spreading: OneNear
    buildings:
      - [3, 2]
      - {columns: 2, rows: 2, name: Bakery, penalty: 3}
  report_plan:
    num_simulations: 3
    days: 4
- board:
    healthy: 10
    immune: 5
    spreading: Everyone
  report_plan:
    num_simulations: 2
    days: 2
"""


def make_table(healthy, infected1, infected2, infected3, sick, immune):
    """Helper to write counting tables in tests, one list of counts per individual type"""
    return CountingTable([
        (Individual.HEALTHY, healthy),
        (Individual.INFECTED1, infected1),
        (Individual.INFECTED2, infected2),
        (Individual.INFECTED3, infected3),
        (Individual.SICK, sick),
        (Individual.IMMUNE, immune),
    ])


@pytest.fixture
def table_factory():
    yield make_table
