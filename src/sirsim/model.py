"""
===========================================================
model.py
Last Updated: 2026-10-19
===========================================================
SIR (Susceptible-Infected-Recovered) Model Definition

A basic compartmental epidemiological model that divides
a population into three compartments:
- S: Susceptible individuals
- I: Infected (and infectious) individuals
- R: Recovered (and immune) individuals

This model assumes:
- Homogeneous mixing (everyone has equal contact probability)
- No births, deaths, or migrations (closed population)
- Permanent immunity after recovery
- Frequency-dependent transmission

Defines:
    - Parameters: immutable (N, beta, gamma) record
    - CompartmentState: immutable (S, I, R) snapshot
    - sir_rhs(): the ODE right-hand side
    - make_derivative(): solver-facing f(t, y) closure
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError

COMPARTMENTS = ("S", "I", "R")


@dataclass(frozen=True)
class Parameters:
    """
    Epidemiological parameters of one run.

    Parameters:
    -----------
    N: float
        Total population size
    beta: float
        Transmission rate (contacts per time x probability of transmission per contact)
    gamma: float
        Recovery rate (1/gamma = mean infectious period)
    """
    N: float
    beta: float
    gamma: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "N", float(self.N))
        object.__setattr__(self, "beta", float(self.beta))
        object.__setattr__(self, "gamma", float(self.gamma))

    @property
    def R0(self) -> float:
        """
        Basic reproduction number: average number of secondary infections
        caused by a single infected individual in a fully susceptible population
        """
        return self.beta / self.gamma if self.gamma > 0 else np.inf

    def validate(self) -> None:
        """Raise ConfigurationError unless the parameters are physically reasonable"""
        if not all(math.isfinite(v) for v in (self.N, self.beta, self.gamma)):
            raise ConfigurationError(f"parameters must be finite, got {self}")
        if self.N <= 0:
            raise ConfigurationError("population N must be positive")
        if self.beta < 0:
            raise ConfigurationError("transmission rate beta must be non-negative")
        if self.gamma < 0:
            raise ConfigurationError("recovery rate gamma must be non-negative")


@dataclass(frozen=True)
class CompartmentState:
    """Compartment counts at a single instant"""
    S: float
    I: float
    R: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "S", float(self.S))
        object.__setattr__(self, "I", float(self.I))
        object.__setattr__(self, "R", float(self.R))

    @classmethod
    def from_array(cls, y: Sequence[float]) -> "CompartmentState":
        S, I, R = y
        return cls(S, I, R)

    @classmethod
    def seeded(cls, N: float, I0: float, R0: float = 0.0) -> "CompartmentState":
        """Initial state with everyone not infected or recovered susceptible"""
        return cls(float(N) - I0 - R0, I0, R0)

    @property
    def total(self) -> float:
        return self.S + self.I + self.R

    def as_array(self) -> np.ndarray:
        return np.array([self.S, self.I, self.R], dtype=float)


def sir_rhs(t: float, state: CompartmentState, params: Parameters) -> Tuple[float, float, float]:
    """
    Right-hand side of the SIR equations.

    Parameters:
    -----------
    t: float
        current time (not used in autonomous system, but required by solvers)
    state: CompartmentState
        current compartments
    params: Parameters
        N, beta, gamma

    Returns:
    --------
    (dS, dI, dR): tuple of float, summing to zero
    """
    if params.N == 0:
        raise ZeroDivisionError("population N is zero; transmission term is undefined")
    infection = params.beta * state.S * state.I / params.N
    recovery = params.gamma * state.I
    dS = -infection
    dI = infection - recovery
    dR = recovery
    return dS, dI, dR


def make_derivative(params: Parameters) -> Callable[[float, np.ndarray], np.ndarray]:
    """Bind params into an f(t, y) suitable for the solvers in sirsim.solvers"""
    def deriv(t: float, y: np.ndarray) -> np.ndarray:
        return np.array(sir_rhs(t, CompartmentState.from_array(y), params))
    return deriv
