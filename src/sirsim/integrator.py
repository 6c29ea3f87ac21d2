"""
===========================================================
integrator.py
Last Updated: 2026-10-19
===========================================================

Description:
    Drives the SIR model definition across a time grid with a
    numerical ODE solver and returns an immutable Trajectory.

API:
    integrate(initial_state, parameters, time_grid,
              tolerances=None, solver=None) -> Trajectory

Example Usage:
    from sirsim.model import Parameters, CompartmentState
    from sirsim.integrator import integrate
    p = Parameters(N=10000, beta=0.3, gamma=0.1)
    traj = integrate(CompartmentState.seeded(10000, I0=10), p, np.arange(0, 101))

Notes:
    - Inputs are validated eagerly (ConfigurationError).
    - Solver failures and NaN/Inf surface as NumericalFailure; no
      partial trajectory is ever returned.
    - Conservation drift and negative compartments are reported as
      SimulationWarning, never corrected.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .errors import ConfigurationError, SimulationWarning
from .model import CompartmentState, Parameters, make_derivative
from .solvers import Solver, Tolerances, get_solver

logger = logging.getLogger(__name__)

# relative drift in S+I+R tolerated before warning
CONSERVATION_RTOL = 1e-6


def _readonly(a: np.ndarray) -> np.ndarray:
    a = np.array(a, dtype=float)
    a.setflags(write=False)
    return a


@dataclass(frozen=True)
class Trajectory:
    """
    Compartment time series, one entry per requested time point.

    Attributes:
    t, S, I, R: np.ndarray (read-only), all the same length
    parameters: Parameters the run was produced from
    """
    t: np.ndarray
    S: np.ndarray
    I: np.ndarray
    R: np.ndarray
    parameters: Optional[Parameters] = None

    def __post_init__(self) -> None:
        for name in ("t", "S", "I", "R"):
            object.__setattr__(self, name, _readonly(getattr(self, name)))
        n = len(self.t)
        if not (len(self.S) == len(self.I) == len(self.R) == n):
            raise ValueError("t, S, I and R must have the same length")

    def __len__(self) -> int:
        return len(self.t)

    def __getitem__(self, k: int) -> Tuple[float, CompartmentState]:
        return float(self.t[k]), CompartmentState(self.S[k], self.I[k], self.R[k])

    def __iter__(self) -> Iterator[Tuple[float, CompartmentState]]:
        for k in range(len(self)):
            yield self[k]

    @property
    def totals(self) -> np.ndarray:
        """S + I + R at every time point"""
        return self.S + self.I + self.R

    @property
    def incidence(self) -> np.ndarray:
        """new infections per step, approximated as the drop in S (0 at t0)"""
        inc = np.zeros_like(self.S)
        inc[1:] = np.maximum(self.S[:-1] - self.S[1:], 0.0)
        return inc

    def to_frame(self) -> pd.DataFrame:
        """Tidy DataFrame with columns t, S, I, R, incidence"""
        return pd.DataFrame({
            "t": self.t,
            "S": self.S,
            "I": self.I,
            "R": self.R,
            "incidence": self.incidence,
        })


def _validate_grid(time_grid: Union[Sequence[float], np.ndarray]) -> np.ndarray:
    t = np.asarray(time_grid, dtype=float)
    if t.ndim != 1 or len(t) < 2:
        raise ConfigurationError("time grid must be one-dimensional with at least 2 points")
    if not np.all(np.isfinite(t)):
        raise ConfigurationError("time grid must contain only finite values")
    if not np.all(np.diff(t) > 0):
        raise ConfigurationError("time grid must be strictly increasing")
    return t


def _validate_initial_state(state: CompartmentState, params: Parameters) -> None:
    y0 = state.as_array()
    if not np.all(np.isfinite(y0)):
        raise ConfigurationError(f"initial compartments must be finite, got {state}")
    if np.any(y0 < 0):
        raise ConfigurationError(f"initial compartments must be non-negative, got {state}")
    slack = max(1e-9 * params.N, 1e-6)
    if abs(state.total - params.N) > slack:
        raise ConfigurationError(
            f"initial compartments sum to {state.total:.6g}, but population is {params.N:.6g}"
        )


def check_trajectory(traj: Trajectory, N: float, epsilon: float = 1e-6,
                     stacklevel: int = 2) -> bool:
    """
    Post hoc check of conservation and non-negativity.

    Emits a SimulationWarning for each violated property and returns
    True when the trajectory passed both. stacklevel is forwarded to
    warnings.warn so the warning points at the caller's code.
    """
    ok = True
    drift = np.max(np.abs(traj.totals - N)) / N
    if drift > CONSERVATION_RTOL:
        ok = False
        msg = f"S+I+R drifted from N by {drift:.3g} (relative)"
        logger.warning(msg)
        warnings.warn(msg, SimulationWarning, stacklevel=stacklevel)

    floor = min(traj.S.min(), traj.I.min(), traj.R.min())
    if floor < -epsilon * max(N, 1.0):
        ok = False
        msg = f"compartment fell to {floor:.3g}, below zero"
        logger.warning(msg)
        warnings.warn(msg, SimulationWarning, stacklevel=stacklevel)
    return ok


def integrate(initial_state: CompartmentState,
              parameters: Parameters,
              time_grid: Union[Sequence[float], np.ndarray],
              tolerances: Optional[Tolerances] = None,
              solver: Union[str, Solver, None] = None) -> Trajectory:
    """
    Integrate the SIR system from time_grid[0] to time_grid[-1].

    Parameters:
    initial_state: CompartmentState. S0, I0, R0 summing to N
    parameters: Parameters. N, beta, gamma
    time_grid: array-like. Strictly increasing report times, len >= 2
    tolerances: Tolerances, optional. Defaults to rtol=1e-6, atol=1e-8
    solver: str or solver object, optional. Defaults to adaptive RK45

    Returns:
    Trajectory with one entry per grid point

    Raises:
    ConfigurationError: invalid inputs, before any integration
    NumericalFailure: solver failure or non-finite values
    """
    parameters.validate()
    t = _validate_grid(time_grid)
    _validate_initial_state(initial_state, parameters)
    tolerances = tolerances if tolerances is not None else Tolerances()
    tolerances.validate()
    solver = get_solver(solver)

    logger.debug(
        "integrating %s from t=%g to t=%g (%d points) with %r",
        parameters, t[0], t[-1], len(t), solver,
    )
    y = solver.solve(make_derivative(parameters), initial_state.as_array(), t, tolerances)
    S, I, R = y.T

    traj = Trajectory(t=t, S=S, I=I, R=R, parameters=parameters)
    check_trajectory(traj, parameters.N, stacklevel=3)
    return traj
