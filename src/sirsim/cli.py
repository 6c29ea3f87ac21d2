"""
===========================================================
cli.py
Last Updated: 2026-10-19
===========================================================

Description:
    Command-line entry point: run one SIR outbreak, print its
    metrics and optionally write the chart as a PNG.

Example Usage:
    sirsim --beta 0.3 --gamma 0.1 --output figures/sir.png
    python -m sirsim --solver RK4 -v
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .config import SimulationConfig
from .errors import SIRError
from .solvers import Tolerances, available_solvers
from .simulate import run

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    defaults = SimulationConfig()
    parser = argparse.ArgumentParser(
        prog="sirsim",
        description="Simulate a deterministic SIR outbreak and report its metrics.",
    )
    parser.add_argument("--N", type=float, help=f"total population (default {defaults.N:g})")
    parser.add_argument("--I0", type=float, help=f"initially infected (default {defaults.I0:g})")
    parser.add_argument("--R0", type=float, help=f"initially recovered (default {defaults.R0:g})")
    parser.add_argument("--beta", type=float, help=f"transmission rate (default {defaults.beta:g})")
    parser.add_argument("--gamma", type=float, help=f"recovery rate (default {defaults.gamma:g})")
    parser.add_argument("--t-start", dest="t_start", type=float, help="first report time")
    parser.add_argument("--t-end", dest="t_end", type=float, help="last report time (inclusive)")
    parser.add_argument("--dt", type=float, help="report spacing")
    parser.add_argument("--solver", default="RK45", choices=sorted(available_solvers()),
                        help="numerical method (default RK45)")
    parser.add_argument("--rtol", type=float, default=Tolerances.rtol)
    parser.add_argument("--atol", type=float, default=Tolerances.atol)
    parser.add_argument("--precision", type=int, default=2,
                        help="decimal places for the final recovered fraction")
    parser.add_argument("--output", type=str, default=None, help="write the chart to this PNG path")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SimulationConfig().with_updates(
        N=args.N, I0=args.I0, R0=args.R0, beta=args.beta, gamma=args.gamma,
        t_start=args.t_start, t_end=args.t_end, dt=args.dt,
    )
    try:
        traj, metrics = run(
            config,
            tolerances=Tolerances(rtol=args.rtol, atol=args.atol),
            solver=args.solver,
            precision=args.precision,
        )
    except SIRError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1

    # imported late so the engine runs without a plotting backend
    from .utils.plotting import format_metrics, plot_trajectory, save_figure

    print(f"R0 = {config.parameters().R0:.2f}")
    print(format_metrics(metrics, precision=args.precision))

    if args.output:
        ax = plot_trajectory(traj, metrics)
        path = save_figure(ax.figure, args.output)
        logger.info("chart written to %s", path)
    return 0
