"""
Performance metrics for a sequence of realised trade P&L values.

All functions operate on NumPy arrays for efficiency.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Sequence

import numpy as np
from scipy import stats


def profit_factor(gross_profit: float, gross_loss: float) -> float:
    """
    Gross profit over gross loss.

    With no losing trades the ratio is unbounded: ``math.inf`` when there was
    any profit, 0 when there was none.
    """
    if gross_loss > 0:
        return gross_profit / gross_loss
    return math.inf if gross_profit > 0 else 0.0


def compute_trade_metrics(pnls: Sequence[float]) -> Dict[str, Any]:
    """
    Compute standard performance metrics from per-trade P&L.

    Args:
        pnls: Per-trade P&L in currency, in execution order.

    Returns:
        Dictionary compatible with the TradeMetrics Pydantic model.
    """
    pnl_series = np.asarray(pnls, dtype=np.float64)
    n = int(len(pnl_series))
    if n == 0:
        raise ValueError("pnl series is empty – cannot compute metrics.")

    wins = pnl_series[pnl_series > 0]
    losses = pnl_series[pnl_series < 0]
    gross_profit = float(np.sum(wins))
    gross_loss = float(abs(np.sum(losses)))
    pf = profit_factor(gross_profit, gross_loss)

    # ── Max drawdown ─────────────────────────────────────────────────────────────
    # Absolute peak-to-trough decline of cumulative P&L, peak starting at 0.
    cumulative: np.ndarray = np.cumsum(pnl_series)
    running_max: np.ndarray = np.maximum.accumulate(np.maximum(cumulative, 0.0))
    max_drawdown = float(np.max(running_max - cumulative))

    # ── Per-trade Sharpe ratio ────────────────────────────────────────────────────
    # Annualisation is not applied; this is the signal-to-noise ratio per trade.
    mean_pnl = float(np.mean(pnl_series))
    std_pnl = float(np.std(pnl_series, ddof=1)) if n > 1 else 0.0
    sharpe = mean_pnl / std_pnl if std_pnl > 0.0 else 0.0

    # ── Distribution shape ────────────────────────────────────────────────────────
    skewness = float(stats.skew(pnl_series)) if n > 2 and std_pnl > 0.0 else 0.0

    return {
        "total_trades": n,
        "wins": int(len(wins)),
        "losses": int(len(losses)),
        "win_rate": len(wins) / n * 100,
        "net_pnl": float(np.sum(pnl_series)),
        "gross_profit": gross_profit,
        "gross_loss": gross_loss,
        "profit_factor": None if math.isinf(pf) else pf,
        "profit_factor_unbounded": math.isinf(pf),
        "expectancy": mean_pnl,
        "best_trade": float(np.max(pnl_series)),
        "worst_trade": float(np.min(pnl_series)),
        "max_drawdown": max(0.0, max_drawdown),
        "sharpe_ratio": float(sharpe),
        "skewness": skewness,
    }
