"""
===========================================================
plotting.py
Last Updated: 2026-10-19
===========================================================
Reporting helpers for SIR runs: time series charts, PNG output,
parameter grid heatmaps and console text for metrics.
"""
from pathlib import Path
from typing import Optional, Union

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.axes import Axes
from matplotlib.figure import Figure

from ..experiments import pivot_for_plot
from ..integrator import Trajectory
from ..metrics import Metrics


def plot_trajectory(traj: Trajectory,
                    metrics: Optional[Metrics] = None,
                    ax: Optional[Axes] = None,
                    show: bool = False,
                    title: Optional[str] = None) -> Axes:
    """
    Plot SIR simulation results as time series.

    Parameters
    ----------
    traj : Trajectory
        Output of integrate()
    metrics : Metrics, optional
        When given, the infection peak is marked
    ax : matplotlib.axes.Axes, optional
        Axes to plot on. If None, creates new figure
    show : bool
        Whether to display the plot immediately
    title : str, optional
        Custom title. If None, R0 is shown when parameters are known

    Returns
    -------
    ax : matplotlib.axes.Axes
        The axes object with the plot
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 6))

    ax.plot(traj.t, traj.S, 'b-', linewidth=2, label='Susceptible')
    ax.plot(traj.t, traj.I, 'r-', linewidth=2, label='Infected')
    ax.plot(traj.t, traj.R, 'g-', linewidth=2, label='Recovered')

    if metrics is not None:
        ax.axvline(metrics.time_of_peak, color='r', linestyle=':', alpha=0.6)
        ax.annotate(f'peak {metrics.peak_infected:.0f} at t={metrics.time_of_peak:g}',
                    xy=(metrics.time_of_peak, metrics.peak_infected),
                    xytext=(8, 8), textcoords='offset points', fontsize=10)

    ax.set_xlabel('Time', fontsize=12)
    ax.set_ylabel('Number of individuals', fontsize=12)

    if title:
        ax.set_title(title, fontsize=14)
    elif traj.parameters is not None:
        ax.set_title(f'SIR Model ($R_0$ = {traj.parameters.R0:.2f})', fontsize=14)
    else:
        ax.set_title('SIR Model Dynamics', fontsize=14)

    ax.legend(fontsize=11)
    ax.grid(True, alpha=0.3)

    if show:
        plt.tight_layout()
        plt.show()

    return ax


def heatmap(df: pd.DataFrame, x: str, y: str, value: str,
            ax: Optional[Axes] = None, title: Optional[str] = None) -> Axes:
    """Heatmap of a summary metric from grid_sweep (e.g., final_size, peak_prevalence)"""
    X, Y, Z = pivot_for_plot(df, x=x, y=y, value=value)
    if ax is None:
        fig, ax = plt.subplots()
    # imshow expects [rows, cols] -> (y, x)
    extent = [X.min(), X.max(), Y.min(), Y.max()]
    image = ax.imshow(Z, origin='lower', aspect='auto', extent=extent)
    cbar = ax.figure.colorbar(image, ax=ax)
    cbar.set_label(value.replace("_", " ").title())
    ax.set_xlabel(x)
    ax.set_ylabel(y)
    if title:
        ax.set_title(title)
    return ax


def save_figure(fig: Figure, path: Union[str, Path], dpi: int = 150) -> Path:
    """Write fig as an image (PNG unless the suffix says otherwise), creating parent dirs"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    return path


def format_metrics(metrics: Metrics, precision: int = 2) -> str:
    return "\n".join([
        f"Peak infected:            {metrics.peak_infected:.0f}",
        f"Time of peak:             {metrics.time_of_peak:g}",
        f"Peak prevalence:          {metrics.peak_prevalence:.{precision}%}",
        f"Final recovered fraction: {metrics.final_recovered_fraction:.{precision}f}",
        f"Epidemic duration:        {metrics.epidemic_duration:g}",
    ])
