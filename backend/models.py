"""
Pydantic data models for the Monte Carlo simulator and its API.
"""
from __future__ import annotations

import math
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from config import MAX_DAYS, MAX_SIMULATIONS, MAX_TRADES_PER_DAY

DisplayMode = Literal["absolute", "multiple"]
CenterLineMode = Literal["median", "mean"]


class SimulationParams(BaseModel):
    """
    Trader profile and run configuration.

    All ``*_pct`` fields and ``win_rate`` are human percentages (``1.5``
    means 1.5%); the simulator divides them by 100 itself.
    """
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    starting_balance: float = Field(1000.0, gt=0)
    days: int = Field(30, ge=1, le=MAX_DAYS)
    simulations: int = Field(1000, ge=1, le=MAX_SIMULATIONS)
    trades_per_day: int = Field(3, ge=1, le=MAX_TRADES_PER_DAY)
    win_rate: float = Field(50.0, ge=0, le=100)
    risk_per_trade_pct: float = Field(1.0, gt=0)
    leverage: float = Field(10.0, ge=1)
    win_r_min: float = Field(1.0, ge=0)
    win_r_max: float = Field(3.0, ge=0)
    loss_r_min: float = Field(1.0, ge=0)
    loss_r_max: float = Field(2.0, ge=0)
    fee_rate_per_side_pct: float = Field(0.05, ge=0)
    extremes_enabled: bool = False
    extreme_prob_pct: float = Field(0.1, ge=0, le=100)
    extreme_win_r: float = Field(10.0, ge=0)
    extreme_loss_r: float = Field(10.0, ge=0)
    ruin_threshold_pct: float = Field(20.0, ge=0, le=100)
    use_seed: bool = False
    seed_value: Union[int, float, str] = 12345

    @model_validator(mode="after")
    def _check_r_ranges(self) -> "SimulationParams":
        if self.win_r_min > self.win_r_max:
            raise ValueError("win_r_min must not exceed win_r_max")
        if self.loss_r_min > self.loss_r_max:
            raise ValueError("loss_r_min must not exceed loss_r_max")
        return self

    @property
    def total_trades_per_sim(self) -> int:
        return self.days * self.trades_per_day

    @property
    def ruin_threshold(self) -> float:
        """Absolute balance at or below which a path is ruined."""
        return self.starting_balance * (self.ruin_threshold_pct / 100)


def _number(value: Any, fallback: float = 0.0) -> float:
    """Loose numeric coercion: missing, unparsable, NaN and 0 give ``fallback``."""
    try:
        n = float(value)
    except (TypeError, ValueError):
        return fallback
    if math.isnan(n) or n == 0:
        return fallback
    return n


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def clamp_params(raw: Mapping[str, Any]) -> SimulationParams:
    """
    Coerce loosely-typed form input into a valid :class:`SimulationParams`.

    Missing keys take the model defaults; numeric fields are clamped to safe
    bounds instead of being rejected, and inverted R ranges are swapped.
    """
    values: Dict[str, Any] = {**SimulationParams().model_dump(), **dict(raw)}

    win_r = sorted((_number(values["win_r_min"]), _number(values["win_r_max"])))
    loss_r = sorted((_number(values["loss_r_min"]), _number(values["loss_r_max"])))

    use_seed = bool(values["use_seed"])
    seed_value = values["seed_value"]
    if not use_seed:
        seed_value = 12345
    elif not isinstance(seed_value, (int, float)) or isinstance(seed_value, bool):
        seed_value = str(seed_value or "12345")

    return SimulationParams(
        starting_balance=max(1.0, _number(values["starting_balance"], 1.0)),
        days=int(_clamp(_number(values["days"], 1.0), 1, MAX_DAYS)),
        simulations=int(_clamp(_number(values["simulations"], 1.0), 1, MAX_SIMULATIONS)),
        trades_per_day=int(_clamp(_number(values["trades_per_day"], 1.0), 1, MAX_TRADES_PER_DAY)),
        win_rate=_clamp(_number(values["win_rate"]), 0, 100),
        risk_per_trade_pct=max(0.01, _number(values["risk_per_trade_pct"])),
        leverage=max(1.0, _number(values["leverage"], 1.0)),
        win_r_min=max(0.0, win_r[0]),
        win_r_max=max(0.0, win_r[1]),
        loss_r_min=max(0.0, loss_r[0]),
        loss_r_max=max(0.0, loss_r[1]),
        fee_rate_per_side_pct=max(0.0, _number(values["fee_rate_per_side_pct"])),
        extremes_enabled=bool(values["extremes_enabled"]),
        extreme_prob_pct=_clamp(_number(values["extreme_prob_pct"]), 0, 100),
        extreme_win_r=max(0.0, _number(values["extreme_win_r"])),
        extreme_loss_r=max(0.0, _number(values["extreme_loss_r"])),
        ruin_threshold_pct=_clamp(_number(values["ruin_threshold_pct"]), 0, 100),
        use_seed=use_seed,
        seed_value=seed_value,
    )


class SimulationSummary(BaseModel):
    """Distribution statistics over a batch of simulated paths."""
    mean_final_balance: float
    median_final_balance: float
    p5_final_balance: float
    p95_final_balance: float
    mean_max_drawdown_pct: float
    ruin_probability_pct: float
    best_final_balance: float
    worst_final_balance: float
    total_trades_per_sim: int
    avg_fee_paid: float
    avg_pnl: float


class FanSeriesMulti(BaseModel):
    """Per-day percentile bands across paths (fan-chart data)."""
    x: List[int]
    bands: Dict[float, List[float]]
    center_line: List[float]     # 50th band, zeros when 50 was not requested
    mean_series: List[float]

    def center(self, mode: CenterLineMode = "median") -> List[float]:
        return self.mean_series if mode == "mean" else self.center_line


class FanSeries(BaseModel):
    """Fixed five-band fan-chart data."""
    x: List[int]
    p5: List[float]
    p25: List[float]
    p50: List[float]
    p75: List[float]
    p95: List[float]


# ── API payloads ──────────────────────────────────────────────────────────────

class SimulateRequest(BaseModel):
    # Raw so that ``clamp=True`` can repair values the strict model would reject.
    params: Dict[str, Any] = Field(default_factory=dict)
    clamp: bool = False
    display_mode: DisplayMode = "absolute"
    center_line: CenterLineMode = "median"
    percentiles: List[float] = Field(
        default_factory=lambda: [1, 5, 10, 20, 30, 40, 50, 60, 70, 80, 90, 95, 99]
    )
    sample_size: int = Field(300, ge=50, le=1000)
    highlight: bool = True
    sample_seed: Optional[Union[int, str]] = None

    @field_validator("percentiles")
    @classmethod
    def _check_percentiles(cls, value: List[float]) -> List[float]:
        if not all(0 <= p <= 100 for p in value):
            raise ValueError("percentiles must lie within 0-100")
        return value


class FanChart(BaseModel):
    x: List[int]
    bands: Dict[str, List[float]]
    center_line: List[float]
    center_line_label: str
    mean_series: List[float]


class SimulateResponse(BaseModel):
    params: SimulationParams
    summary: SimulationSummary
    fan: FanChart
    summary_labels: Dict[str, str]   # headline balances as display text
    sample_paths: List[List[float]]
    display_mode: DisplayMode


class MetricsRequest(BaseModel):
    pnls: List[float]


class TradeMetrics(BaseModel):
    total_trades: int
    wins: int
    losses: int
    win_rate: float              # percent
    net_pnl: float
    gross_profit: float
    gross_loss: float
    profit_factor: Optional[float]   # None when there are no losses but some profit
    profit_factor_unbounded: bool
    expectancy: float
    best_trade: float
    worst_trade: float
    max_drawdown: float          # absolute, on cumulative P&L
    sharpe_ratio: float          # per-trade Sharpe (mean/std of PnL)
    skewness: float
