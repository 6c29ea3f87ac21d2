"""
===========================================================
metrics.py
Last Updated: 2026-10-19
===========================================================

Description:
    Key epidemic metrics derived from a completed Trajectory:
    peak size, time of peak, final recovered fraction, peak
    prevalence and approximate epidemic duration.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict

import numpy as np

from .errors import MetricsError
from .integrator import Trajectory

# epidemic is considered over once I drops below this share of its peak
DURATION_THRESHOLD = 0.01


@dataclass(frozen=True)
class Metrics:
    """
    Attributes:
    peak_infected: float. Maximum number of infected individuals
    time_of_peak: float. Earliest time at which the peak occurs
    final_recovered_fraction: float. R at the last time point over N, rounded for reporting
    final_recovered_fraction_exact: float. Same ratio, unrounded
    peak_prevalence: float. peak_infected / N
    epidemic_duration: float. Time from t0 until I falls below 1% of peak after the peak
    """
    peak_infected: float
    time_of_peak: float
    final_recovered_fraction: float
    final_recovered_fraction_exact: float
    peak_prevalence: float
    epidemic_duration: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def _epidemic_duration(t: np.ndarray, I: np.ndarray, peak_idx: int) -> float:
    threshold = DURATION_THRESHOLD * I[peak_idx]
    below = np.where(I[peak_idx:] < threshold)[0]
    if len(below) > 0:
        return float(t[peak_idx + below[0]] - t[0])
    return float(t[-1] - t[0])


def derive_metrics(trajectory: Trajectory, total_population: float, precision: int = 2) -> Metrics:
    """
    Compute key epidemic metrics from simulation results.

    Parameters
    ----------
    trajectory : Trajectory
        Completed integration output, at least one entry
    total_population : float
        N, used to turn counts into fractions
    precision : int
        Decimal places for the reported final recovered fraction

    Returns
    -------
    Metrics
    """
    if len(trajectory) == 0:
        raise MetricsError("cannot derive metrics from an empty trajectory")
    if not total_population > 0:
        raise MetricsError(f"total population must be positive, got {total_population}")
    if precision < 0:
        raise MetricsError(f"precision must be non-negative, got {precision}")

    t, I, R = trajectory.t, trajectory.I, trajectory.R
    # argmax returns the first occurrence, so ties resolve to the earliest time
    peak_idx = int(np.argmax(I))
    peak_infected = float(I[peak_idx])
    N = float(total_population)
    final_fraction = float(R[-1] / N)

    return Metrics(
        peak_infected=peak_infected,
        time_of_peak=float(t[peak_idx]),
        final_recovered_fraction=round(final_fraction, precision),
        final_recovered_fraction_exact=final_fraction,
        peak_prevalence=peak_infected / N,
        epidemic_duration=_epidemic_duration(t, I, peak_idx),
    )
