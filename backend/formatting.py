"""
Display helpers: absolute-currency vs multiple-of-start scaling and labels.

`/simulate` uses the scaling helpers and :func:`summary_labels`;
:func:`format_axis_label` is exported for chart front-ends that render their
own Y-axis ticks in the same notation.
"""
from __future__ import annotations

import math
from typing import Dict, List, Sequence

from models import DisplayMode, FanSeriesMulti, SimulationSummary

_LABELLED_BALANCES = (
    "mean_final_balance",
    "median_final_balance",
    "p5_final_balance",
    "p95_final_balance",
    "best_final_balance",
    "worst_final_balance",
)


def round2(value: float) -> float:
    """Round half up to 2 decimals."""
    return math.floor(value * 100 + 0.5) / 100


def _grouped(value: float) -> str:
    # Thousands separators, between 0 and 2 fraction digits.
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def _check_mode(mode: str) -> None:
    if mode not in ("absolute", "multiple"):
        raise ValueError(f"Unknown display mode: {mode!r}")


def format_balance(value: float, mode: DisplayMode) -> str:
    """Tooltip text: ``$1,234.56`` or ``1.25×``."""
    _check_mode(mode)
    v = round2(value)
    if mode == "absolute":
        return "$" + _grouped(v)
    return f"{v:.2f}×"


def format_axis_label(value: float, mode: DisplayMode) -> str:
    """Y-axis tick text: ``1,234.56`` or ``1.25×``."""
    _check_mode(mode)
    v = round2(value)
    if mode == "absolute":
        return _grouped(v)
    return f"{v:.2f}×"


def scale_series(values: Sequence[float], mode: DisplayMode, starting_balance: float) -> List[float]:
    """Express a balance series in the requested display mode."""
    _check_mode(mode)
    if mode == "absolute":
        return list(values)
    return [v / starting_balance for v in values]


def scale_fan_series(
    fan: FanSeriesMulti, mode: DisplayMode, starting_balance: float
) -> FanSeriesMulti:
    """Apply :func:`scale_series` to every band, the center line and the mean."""
    _check_mode(mode)
    if mode == "absolute":
        return fan
    return FanSeriesMulti(
        x=fan.x,
        bands={p: scale_series(band, mode, starting_balance) for p, band in fan.bands.items()},
        center_line=scale_series(fan.center_line, mode, starting_balance),
        mean_series=scale_series(fan.mean_series, mode, starting_balance),
    )


def summary_labels(
    summary: SimulationSummary, mode: DisplayMode, starting_balance: float
) -> Dict[str, str]:
    """Headline final balances as display text in the requested mode."""
    _check_mode(mode)
    labels = {}
    for name in _LABELLED_BALANCES:
        value = getattr(summary, name)
        if mode == "multiple":
            value = value / starting_balance
        labels[name] = format_balance(value, mode)
    return labels
