"""
===========================================================
config.py
Last Updated: 2026-10-19
===========================================================
Simulation configuration for the SIR engine.

One frozen record carries everything a run needs: population,
initial seed, rates and time grid bounds. It is constructed once
and threaded through integrate()/derive_metrics(), never mutated.

Defaults reproduce the reference outbreak: N=10000, 10 initial
infections, beta=0.3, gamma=0.1 (R0 = 3), days 0..100.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

import numpy as np

from .errors import ConfigurationError
from .model import CompartmentState, Parameters


@dataclass(frozen=True)
class SimulationConfig:
    """
    Parameters and initial conditions of one SIR run.

    All rates are per unit time (days for the defaults).
    """

    # ==================== Population ============================================
    N: float = 10_000           # total population
    I0: float = 10              # initially infected
    R0: float = 0               # initially recovered (not the reproduction number)

    # ==================== Transmission ==========================================
    beta: float = 0.3           # transmission rate
    gamma: float = 0.1          # recovery rate, 1/gamma = infectious period

    # ==================== Time grid =============================================
    t_start: float = 0.0
    t_end: float = 100.0        # inclusive
    dt: float = 1.0             # report spacing

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "SimulationConfig":
        """Build a config from a plain dict, rejecting unknown keys"""
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(f"unknown configuration keys: {', '.join(sorted(unknown))}")
        try:
            return cls(**{k: float(v) for k, v in values.items()})
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"invalid configuration value: {e}") from e

    def with_updates(self, **changes: Any) -> "SimulationConfig":
        """Copy with some fields replaced; None values are ignored"""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def parameters(self) -> Parameters:
        return Parameters(N=self.N, beta=self.beta, gamma=self.gamma)

    def initial_state(self) -> CompartmentState:
        """S0 = N - I0 - R0; rejects seeds larger than the population"""
        if self.I0 < 0 or self.R0 < 0:
            raise ConfigurationError("I0 and R0 must be non-negative")
        if self.I0 + self.R0 > self.N:
            raise ConfigurationError(
                f"I0 + R0 = {self.I0 + self.R0:g} exceeds population N = {self.N:g}"
            )
        return CompartmentState.seeded(self.N, self.I0, self.R0)

    def time_grid(self) -> np.ndarray:
        """t_start..t_end inclusive at spacing dt"""
        if not self.dt > 0:
            raise ConfigurationError("dt must be positive")
        if not self.t_end > self.t_start:
            raise ConfigurationError("t_end must be greater than t_start")
        n = int(np.floor((self.t_end - self.t_start) / self.dt + 1e-9)) + 1
        return self.t_start + self.dt * np.arange(n, dtype=float)
