"""
Percentile bands across simulated paths, per day index (fan-chart data).
"""
from __future__ import annotations

import math
from typing import Iterable, List, Sequence

import numpy as np

from models import FanSeries, FanSeriesMulti

DEFAULT_FAN_PERCENTILES = (1, 5, 10, 20, 30, 40, 50, 60, 70, 80, 90, 95, 99)


def percentile_at(sorted_values: Sequence[float], p: float) -> float:
    """
    Interpolated ``p``-th percentile of an ascending sequence.

    rank = p/100 × (n−1); between the bracketing indices lo and hi the value
    is ``sorted[lo] + (rank−lo) × (sorted[hi]−sorted[lo])``. Empty input
    gives 0.
    """
    n = len(sorted_values)
    if n == 0:
        return 0.0
    rank = (p / 100) * (n - 1)
    lo = math.floor(rank)
    hi = math.ceil(rank)
    if lo == hi:
        return float(sorted_values[lo])
    low = float(sorted_values[lo])
    return low + (rank - lo) * (float(sorted_values[hi]) - low)


def resample_daily(paths: Iterable, days: int, trades_per_day: int) -> List[List[float]]:
    """
    Reduce per-trade balance series to one balance per day boundary.

    For day ``d`` in ``0..days`` the balance at trade index
    ``min(d × trades_per_day, len − 1)`` is taken. Accepts SimulationPath
    objects or plain balance sequences.
    """
    daily: List[List[float]] = []
    for path in paths:
        balances = getattr(path, "balances", path)
        if len(balances) == 0:
            raise ValueError("Cannot resample an empty balance series.")
        last = len(balances) - 1
        daily.append([float(balances[min(d * trades_per_day, last)]) for d in range(days + 1)])
    return daily


def compute_fan_series(
    series: Sequence[Sequence[float]],
    percentiles: Sequence[float] = DEFAULT_FAN_PERCENTILES,
) -> FanSeriesMulti:
    """
    Per-day percentile bands plus the per-day mean.

    Args:
        series:      Equal-length balance series, one per path (usually the
                     output of :func:`resample_daily`).
        percentiles: Percentiles to compute, 0-100.

    Returns:
        FanSeriesMulti; ``center_line`` is the 50th band when requested,
        otherwise zeros.

    Raises:
        ValueError: If a percentile lies outside 0-100 or the series are
                    not all the same length.
    """
    keys = [float(p) for p in percentiles]
    if not all(0.0 <= p <= 100.0 for p in keys):
        raise ValueError("Percentiles must lie within 0-100.")
    if len(series) == 0:
        return FanSeriesMulti(x=[], bands={p: [] for p in keys}, center_line=[], mean_series=[])

    try:
        matrix = np.array(series, dtype=np.float64)
    except ValueError as exc:
        raise ValueError("All series must have the same length.") from exc
    if matrix.ndim != 2:
        raise ValueError("All series must have the same length.")

    n_paths, n_days = matrix.shape
    # A private copy, sorted in place: columns are per-day order statistics.
    matrix.sort(axis=0)

    bands = {}
    for p in keys:
        rank = (p / 100) * (n_paths - 1)
        lo = math.floor(rank)
        hi = math.ceil(rank)
        if lo == hi:
            band = matrix[lo]
        else:
            band = matrix[lo] + (rank - lo) * (matrix[hi] - matrix[lo])
        bands[p] = band.tolist()

    mean_series = matrix.mean(axis=0).tolist()
    center_line = bands[50.0] if 50.0 in bands else [0.0] * n_days

    return FanSeriesMulti(
        x=list(range(n_days)),
        bands=bands,
        center_line=center_line,
        mean_series=mean_series,
    )


def compute_fan_series_legacy(series: Sequence[Sequence[float]]) -> FanSeries:
    """Five-band (5/25/50/75/95) form of :func:`compute_fan_series`."""
    multi = compute_fan_series(series, (5, 25, 50, 75, 95))
    return FanSeries(
        x=multi.x,
        p5=multi.bands[5.0],
        p25=multi.bands[25.0],
        p50=multi.center_line,
        p75=multi.bands[75.0],
        p95=multi.bands[95.0],
    )
