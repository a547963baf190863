"""
Monte Carlo Trading Simulator API: FastAPI backend.

Endpoints
---------
GET  /health          Health check.
POST /simulate        Run the risk-based Monte Carlo simulation and return
                      summary stats, fan-chart bands and sampled paths.
POST /metrics         Performance metrics for a list of realised trade P&L.
"""
from __future__ import annotations

import logging
from typing import Dict, List

from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from aggregation import summarize_paths
from analytics import compute_trade_metrics
from config import ALLOWED_ORIGINS, LOG_LEVEL, MAX_WORKERS
from formatting import scale_fan_series, scale_series, summary_labels
from models import (
    FanChart,
    MetricsRequest,
    SimulateRequest,
    SimulateResponse,
    SimulationParams,
    TradeMetrics,
    clamp_params,
)
from monte_carlo import run_simulations_async, run_simulations_parallel
from percentiles import compute_fan_series, resample_daily
from prng import make_rng
from sampling import sample_paths

logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s  %(name)s  %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Monte Carlo Trading Simulator API",
    description="Simulates risk-based trading equity paths and summarizes their distribution.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _resolve_params(request: SimulateRequest) -> SimulationParams:
    """Validate (or clamp) the raw parameter mapping."""
    try:
        if request.clamp:
            return clamp_params(request.params)
        return SimulationParams(**request.params)
    except ValidationError as exc:
        detail = [
            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in exc.errors()
        ]
        raise HTTPException(status_code=422, detail=detail)


# ── Routes ─────────────────────────────────────────────────────────────────────────

@app.get("/health")
def health() -> Dict[str, str]:
    """Simple liveness probe."""
    return {"status": "ok"}


@app.post("/simulate", response_model=SimulateResponse)
async def simulate(request: SimulateRequest) -> SimulateResponse:
    """
    Run the Monte Carlo simulation described by ``request.params``.

    Raw per-trade paths are resampled to one balance per day before the fan
    bands and the spaghetti sample are built; the summary uses the raw paths.
    """
    params = _resolve_params(request)

    if MAX_WORKERS > 0:
        paths = await run_in_threadpool(run_simulations_parallel, params, MAX_WORKERS)
    else:
        paths = await run_simulations_async(params)

    summary = summarize_paths(paths, params)

    # ── Per-day series for charting ──────────────────────────────────────────────
    daily = resample_daily(paths, params.days, params.trades_per_day)
    fan = compute_fan_series(daily, request.percentiles)
    center_line = fan.center(request.center_line)

    rng = make_rng(request.sample_seed) if request.sample_seed is not None else None
    sampled: List[List[float]] = sample_paths(
        daily,
        request.sample_size,
        highlight=center_line if request.highlight else None,
        rng=rng,
    )

    # ── Display scaling ──────────────────────────────────────────────────────────
    mode = request.display_mode
    scaled_fan = scale_fan_series(fan, mode, params.starting_balance)

    logger.info(
        "Simulation served: %d paths, ruin=%.2f%%, median_final=%.2f",
        len(paths),
        summary.ruin_probability_pct,
        summary.median_final_balance,
    )

    return SimulateResponse(
        params=params,
        summary=summary,
        fan=FanChart(
            x=scaled_fan.x,
            bands={f"{p:g}": band for p, band in scaled_fan.bands.items()},
            center_line=scaled_fan.center(request.center_line),
            center_line_label="Mean" if request.center_line == "mean" else "Median",
            mean_series=scaled_fan.mean_series,
        ),
        summary_labels=summary_labels(summary, mode, params.starting_balance),
        sample_paths=[scale_series(path, mode, params.starting_balance) for path in sampled],
        display_mode=mode,
    )


@app.post("/metrics", response_model=TradeMetrics)
def metrics(request: MetricsRequest) -> TradeMetrics:
    """Win rate, profit factor, expectancy, drawdown and distribution shape."""
    try:
        return TradeMetrics(**compute_trade_metrics(request.pnls))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
