"""
===========================================================
experiments.py
Last Updated: 2026-10-19
===========================================================

Description:
    Batch (non-interactive) parameter grids for the SIR engine:
    run every (beta, gamma) combination and collect summary
    metrics as a tidy DataFrame.

Example Usage:
    from sirsim.experiments import grid_sweep, pivot_for_plot
    df = grid_sweep(betas, gammas, SimulationConfig())
    X, Y, Z = pivot_for_plot(df, x='beta', y='gamma', value='final_size')

Notes:
    - Runs are independent, so they can be spread over worker
      processes with max_workers > 1.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor
from itertools import product
from typing import Dict, Iterable, Optional

import numpy as np
import pandas as pd

from .config import SimulationConfig
from .simulate import run


def _summarize_one(config: SimulationConfig) -> Dict[str, float]:
    """Run one simulation and return a dict of summary statistics"""
    traj, metrics = run(config)
    return {
        "beta": float(config.beta),
        "gamma": float(config.gamma),
        "R0": float(traj.parameters.R0),
        "peak_day": metrics.time_of_peak,
        "peak_infected": metrics.peak_infected,
        "peak_prevalence": metrics.peak_prevalence,
        "final_size": metrics.final_recovered_fraction_exact,
        "max_incidence": float(np.max(traj.incidence)),
    }


def grid_sweep(betas: Iterable[float],
               gammas: Iterable[float],
               config: Optional[SimulationConfig] = None,
               max_workers: Optional[int] = None) -> pd.DataFrame:
    """
    Evaluate the SIR model across a grid of (beta, gamma) values. Returns
    a tidy pandas DataFrame with one row per parameter combo
    """
    config = config if config is not None else SimulationConfig()
    configs = [config.with_updates(beta=float(b), gamma=float(g)) for b, g in product(betas, gammas)]
    if max_workers and max_workers > 1:
        with ProcessPoolExecutor(max_workers=max_workers) as pool:
            records = list(pool.map(_summarize_one, configs))
    else:
        records = [_summarize_one(c) for c in configs]
    df = pd.DataFrame.from_records(records, columns=[
        "beta", "gamma", "R0", "peak_day", "peak_infected",
        "peak_prevalence", "final_size", "max_incidence",
    ])
    return df.sort_values(["beta", "gamma"]).reset_index(drop=True)


def pivot_for_plot(df: pd.DataFrame, x: str, y: str, value: str):
    """Pivot a DataFrame to 2D arrays for plotting (heatmaps/contour)
    Return X_grid, Y_grid, Z_values
    """
    table = df.pivot_table(index=y, columns=x, values=value).sort_index().sort_index(axis=1)
    X, Y = np.meshgrid(table.columns.to_numpy(dtype=float), table.index.to_numpy(dtype=float))
    return X, Y, table.to_numpy(dtype=float)
