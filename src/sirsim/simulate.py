"""
===========================================================
simulate.py
Last Updated: 2026-10-19
===========================================================

Description:
    One-call pipeline: configuration -> trajectory -> metrics.

Example Usage:
    from sirsim.config import SimulationConfig
    from sirsim.simulate import run
    traj, metrics = run(SimulationConfig(beta=0.25))
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

from typing import Optional, Tuple, Union

from .config import SimulationConfig
from .integrator import Trajectory, integrate
from .metrics import Metrics, derive_metrics
from .solvers import Solver, Tolerances


def run(config: Optional[SimulationConfig] = None,
        tolerances: Optional[Tolerances] = None,
        solver: Union[str, Solver, None] = None,
        precision: int = 2) -> Tuple[Trajectory, Metrics]:
    """Integrate the configured outbreak and derive its metrics"""
    config = config if config is not None else SimulationConfig()
    traj = integrate(
        config.initial_state(),
        config.parameters(),
        config.time_grid(),
        tolerances=tolerances,
        solver=solver,
    )
    return traj, derive_metrics(traj, config.N, precision=precision)
