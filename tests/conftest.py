import matplotlib
import numpy as np
import pytest

matplotlib.use("Agg")

from sirsim.config import SimulationConfig
from sirsim.model import CompartmentState, Parameters


@pytest.fixture
def reference_config() -> SimulationConfig:
    """N=10000, I0=10, beta=0.3, gamma=0.1, days 0..100"""
    return SimulationConfig()


@pytest.fixture
def params() -> Parameters:
    return Parameters(N=10_000, beta=0.3, gamma=0.1)


@pytest.fixture
def seed() -> CompartmentState:
    return CompartmentState.seeded(10_000, I0=10)


@pytest.fixture
def days() -> np.ndarray:
    return np.arange(0, 101, dtype=float)
