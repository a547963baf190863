"""
Reduce a batch of simulated paths to headline distribution statistics.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import numpy as np

from models import SimulationParams, SimulationSummary
from percentiles import percentile_at

if TYPE_CHECKING:
    from monte_carlo import SimulationPath


def summarize_paths(
    paths: Sequence["SimulationPath"], params: SimulationParams
) -> SimulationSummary:
    """
    Compute SimulationSummary for a batch of paths.

    Percentiles use linear interpolation between the two bracketing order
    statistics at rank ``p/100 × (n−1)``; best/worst are the raw extremes.

    Raises:
        ValueError: If ``paths`` is empty.
    """
    n = len(paths)
    if n == 0:
        raise ValueError("Cannot summarize an empty batch of paths.")

    final_balances = np.sort(np.fromiter((p.final_balance for p in paths), dtype=np.float64, count=n))
    drawdowns = np.fromiter((p.max_drawdown_pct for p in paths), dtype=np.float64, count=n)
    fees = np.fromiter((p.total_fees for p in paths), dtype=np.float64, count=n)
    ruined_count = sum(1 for p in paths if p.ruined)

    mean_final = float(np.mean(final_balances))

    return SimulationSummary(
        mean_final_balance=mean_final,
        median_final_balance=percentile_at(final_balances, 50),
        p5_final_balance=percentile_at(final_balances, 5),
        p95_final_balance=percentile_at(final_balances, 95),
        mean_max_drawdown_pct=float(np.mean(drawdowns)),
        ruin_probability_pct=100 * ruined_count / n,
        best_final_balance=float(final_balances[-1]),
        worst_final_balance=float(final_balances[0]),
        total_trades_per_sim=params.total_trades_per_sim,
        avg_fee_paid=float(np.mean(fees)),
        avg_pnl=mean_final - params.starting_balance,
    )
