"""
===========================================================
solvers.py
Last Updated: 2026-10-19
===========================================================

Description:
    Numerical ODE solvers behind one interface:

        solver.solve(fun, y0, t_eval, tolerances) -> ndarray (len(t_eval), n)

    Provided:
        - ScipySolver: scipy.integrate.solve_ivp with adaptive step
          control (RK45 by default; RK23, DOP853, Radau, BDF, LSODA).
        - RK4Solver: classical fixed-step Runge-Kutta 4th order,
          stepping exactly between grid points with optional substeps.

Notes:
    - Every solver counts derivative evaluations and gives up with
      NumericalFailure once Tolerances.max_evaluations is exceeded.
    - Non-finite output is always a NumericalFailure.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

import numpy as np
from scipy.integrate import solve_ivp

from .errors import ConfigurationError, NumericalFailure

logger = logging.getLogger(__name__)

Derivative = Callable[[float, np.ndarray], np.ndarray]

ADAPTIVE_METHODS = ("RK45", "RK23", "DOP853", "Radau", "BDF", "LSODA")


@dataclass(frozen=True)
class Tolerances:
    """Error control for a solver run"""
    rtol: float = 1e-6      # relative
    atol: float = 1e-8      # absolute, in individuals
    max_evaluations: int = 100_000  # derivative evaluations before giving up

    def validate(self) -> None:
        if not self.rtol > 0:
            raise ConfigurationError("rtol must be positive")
        if not self.atol > 0:
            raise ConfigurationError("atol must be positive")
        if self.max_evaluations < 1:
            raise ConfigurationError("max_evaluations must be at least 1")


class _EvaluationBudget:
    """Wraps a derivative so a stalled solver cannot run forever"""

    def __init__(self, fun: Derivative, limit: int):
        self.fun = fun
        self.limit = limit
        self.count = 0

    def __call__(self, t: float, y: np.ndarray) -> np.ndarray:
        self.count += 1
        if self.count > self.limit:
            raise NumericalFailure(
                f"derivative evaluated more than {self.limit} times (stalled near t={t:.6g})"
            )
        return self.fun(t, y)


def _check_finite(y: np.ndarray, t_eval: np.ndarray) -> None:
    bad = ~np.isfinite(y)
    if bad.any():
        k = int(np.argmax(bad.any(axis=1)))
        raise NumericalFailure(f"non-finite state produced at t={t_eval[k]:.6g}")


class ScipySolver:
    """
    Adaptive solver delegating to scipy.integrate.solve_ivp.

    Parameters:
    method: str, default='RK45'. One of ADAPTIVE_METHODS
    max_step: float, optional. Upper bound on the internal step size
    """

    def __init__(self, method: str = "RK45", max_step: Optional[float] = None):
        if method not in ADAPTIVE_METHODS:
            raise ConfigurationError(
                f"unknown solver method {method!r}; expected one of {', '.join(ADAPTIVE_METHODS)}"
            )
        if max_step is not None and not max_step > 0:
            raise ConfigurationError(f"max_step must be positive, got {max_step}")
        self.method = method
        self.max_step = max_step

    def __repr__(self) -> str:
        return f"ScipySolver(method={self.method!r}, max_step={self.max_step!r})"

    def solve(self, fun: Derivative, y0: np.ndarray, t_eval: np.ndarray,
              tolerances: Tolerances) -> np.ndarray:
        budget = _EvaluationBudget(fun, tolerances.max_evaluations)
        kwargs = {}
        if self.max_step is not None:
            kwargs["max_step"] = self.max_step
        solution = solve_ivp(
            fun=budget,
            t_span=(float(t_eval[0]), float(t_eval[-1])),
            y0=np.asarray(y0, dtype=float),
            method=self.method,
            t_eval=t_eval,
            rtol=tolerances.rtol,
            atol=tolerances.atol,
            **kwargs,
        )

        if not solution.success:
            raise NumericalFailure(f"ODE solver failed: {solution.message}")
        if solution.y.shape[1] != len(t_eval):
            raise NumericalFailure(
                f"solver reported {solution.y.shape[1]} of {len(t_eval)} requested time points"
            )

        y = solution.y.T
        _check_finite(y, t_eval)
        logger.debug("%s finished: nfev=%d, njev=%d", self, solution.nfev, solution.njev)
        return y


def _rk4_step(fun: Derivative, t: float, y: np.ndarray, h: float) -> np.ndarray:
    """single RK4 step"""
    k1 = fun(t, y)
    k2 = fun(t + 0.5*h, y + 0.5*h*k1)
    k3 = fun(t + 0.5*h, y + 0.5*h*k2)
    k4 = fun(t + h, y + h*k3)
    return y + (h/6.0)*(k1 + 2*k2 + 2*k3 + k4)


class RK4Solver:
    """
    Classical fixed-step RK4. Each grid interval is split into `substeps`
    equal steps; tolerances only contribute the evaluation budget since
    there is no error estimate to control.
    """

    def __init__(self, substeps: int = 1):
        if substeps < 1:
            raise ConfigurationError("substeps must be at least 1")
        self.substeps = int(substeps)

    def __repr__(self) -> str:
        return f"RK4Solver(substeps={self.substeps})"

    def solve(self, fun: Derivative, y0: np.ndarray, t_eval: np.ndarray,
              tolerances: Tolerances) -> np.ndarray:
        budget = _EvaluationBudget(fun, tolerances.max_evaluations)
        y = np.empty((len(t_eval), len(y0)), dtype=float)
        y[0] = y0
        with np.errstate(over="raise", invalid="raise"):
            try:
                for k in range(1, len(t_eval)):
                    h = float(t_eval[k] - t_eval[k-1]) / self.substeps
                    yk, tk = y[k-1], float(t_eval[k-1])
                    for _ in range(self.substeps):
                        yk = _rk4_step(budget, tk, yk, h)
                        tk += h
                    y[k] = yk
            except FloatingPointError as e:
                raise NumericalFailure(f"floating point error during integration: {e}") from e

        _check_finite(y, t_eval)
        logger.debug("%s finished: nfev=%d", self, budget.count)
        return y


Solver = Union[ScipySolver, RK4Solver]


def get_solver(name: Union[str, Solver, None] = None) -> Solver:
    """Resolve a solver by name ('RK4' or any of ADAPTIVE_METHODS); None gives RK45"""
    if name is None:
        return ScipySolver()
    if not isinstance(name, str):
        return name
    if name.upper() == "RK4":
        return RK4Solver()
    return ScipySolver(method=name)


def available_solvers() -> Dict[str, str]:
    descriptions = {
        "RK45": "explicit Runge-Kutta 4(5), adaptive (default)",
        "RK23": "explicit Runge-Kutta 2(3), adaptive",
        "DOP853": "explicit Runge-Kutta 8(5,3), adaptive",
        "Radau": "implicit Runge-Kutta Radau IIA order 5, for stiff regimes",
        "BDF": "implicit backward differentiation, for stiff regimes",
        "LSODA": "Adams/BDF with automatic stiffness switching",
        "RK4": "classical Runge-Kutta 4, fixed step at grid spacing",
    }
    return descriptions
