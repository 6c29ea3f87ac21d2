"""
Deterministic SIR simulation and outbreak metrics.

This package exposes the main engine entry points for convenience.
"""

from .config import SimulationConfig
from .errors import (
    ConfigurationError,
    MetricsError,
    NumericalFailure,
    SimulationWarning,
    SIRError,
)
from .integrator import Trajectory, integrate
from .metrics import Metrics, derive_metrics
from .model import CompartmentState, Parameters, sir_rhs
from .simulate import run
from .solvers import RK4Solver, ScipySolver, Tolerances
