"""
Risk-based Monte Carlo simulation of trading equity paths.

Methodology
-----------
For each simulation, every one of the ``days × trades_per_day`` trades:
    1. Risks a fixed percentage of the *current* balance.
    2. Pays a proportional fee on the leveraged notional, entry and exit.
    3. Wins with probability ``win_rate``; the reward multiple R is either a
       fixed fat-tail value (with probability ``extreme_prob_pct``, when
       enabled) or drawn uniformly from the win/loss R range.
    4. Stops early once the balance falls to the ruin threshold; the rest of
       the path is padded with that frozen balance so all paths have the
       same length.

Reproducibility
---------------
With ``use_seed`` every simulation index gets its own mulberry32 generator
seeded from ``derive_seed(seed_value, index)``. Paths therefore share no
state, and a seeded batch yields identical paths whether it runs serially,
in chunks, or across a process pool.
"""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Tuple

import numpy as np

from aggregation import summarize_paths
from config import CHUNK_SIZE
from models import SimulationParams, SimulationSummary
from prng import derive_seed, make_rng

logger = logging.getLogger(__name__)

Rng = Callable[[], float]
CancelCheck = Callable[[], bool]


class SimulationCancelled(Exception):
    """Raised when a cooperative cancellation check asks a batch to stop."""


@dataclass(frozen=True)
class SimulationPath:
    """One simulated equity trajectory, one balance per trade."""
    balances: Tuple[float, ...]
    final_balance: float
    total_fees: float
    max_drawdown_pct: float
    ruined: bool


def max_drawdown_pct(balances: np.ndarray) -> float:
    """Largest peak-to-trough decline, in percent of the running peak."""
    running_max: np.ndarray = np.maximum.accumulate(balances)
    with np.errstate(divide="ignore", invalid="ignore"):
        drawdowns = np.where(
            running_max > 0, (running_max - balances) / running_max * 100.0, 0.0
        )
    return max(0.0, float(np.max(drawdowns)))


def path_rng(params: SimulationParams, index: int) -> Rng:
    """Uniform source for simulation ``index`` of a batch."""
    if params.use_seed:
        return make_rng(derive_seed(params.seed_value, index))
    return np.random.default_rng().random


def simulate_path(params: SimulationParams, rng: Rng) -> SimulationPath:
    """
    Simulate one equity path trade by trade.

    Args:
        params: Validated simulation parameters.
        rng:    Uniform [0, 1) source owned by this path alone.

    Returns:
        A SimulationPath whose ``balances`` has ``total_trades_per_sim + 1``
        entries.
    """
    total_trades = params.total_trades_per_sim
    ruin_threshold = params.ruin_threshold
    risk_frac = params.risk_per_trade_pct / 100
    fee_frac = params.fee_rate_per_side_pct / 100
    win_prob = params.win_rate / 100
    extreme_prob = params.extreme_prob_pct / 100

    balance = float(params.starting_balance)
    balances: List[float] = [balance]
    total_fees = 0.0
    ruined = False

    for _ in range(total_trades):
        risk_amount = balance * risk_frac
        notional = risk_amount * params.leverage
        fee = 2 * notional * fee_frac

        is_win = rng() < win_prob

        if params.extremes_enabled and rng() < extreme_prob:
            r_multiple = params.extreme_win_r if is_win else params.extreme_loss_r
        elif is_win:
            r_multiple = params.win_r_min + rng() * (params.win_r_max - params.win_r_min)
        else:
            r_multiple = params.loss_r_min + rng() * (params.loss_r_max - params.loss_r_min)

        gross_pnl = risk_amount * r_multiple if is_win else -risk_amount * r_multiple
        balance += gross_pnl - fee
        total_fees += fee
        balances.append(balance)

        if balance <= ruin_threshold:
            ruined = True
            balances.extend([balance] * (total_trades + 1 - len(balances)))
            break

    return SimulationPath(
        balances=tuple(balances),
        final_balance=balance,
        total_fees=total_fees,
        max_drawdown_pct=max_drawdown_pct(np.asarray(balances, dtype=np.float64)),
        ruined=ruined,
    )


def _simulate_range(
    params: SimulationParams,
    start: int,
    stop: int,
    should_cancel: Optional[CancelCheck] = None,
) -> List[SimulationPath]:
    paths: List[SimulationPath] = []
    for index in range(start, stop):
        if should_cancel is not None and should_cancel():
            logger.warning("Simulation cancelled at index %d of %d", index, params.simulations)
            raise SimulationCancelled(f"cancelled after {index} simulations")
        paths.append(simulate_path(params, path_rng(params, index)))
    return paths


def iter_simulation_chunks(
    params: SimulationParams,
    chunk_size: int = CHUNK_SIZE,
    should_cancel: Optional[CancelCheck] = None,
) -> Iterator[List[SimulationPath]]:
    """Yield the batch in consecutive chunks of at most ``chunk_size`` paths."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be at least 1")
    for start in range(0, params.simulations, chunk_size):
        stop = min(start + chunk_size, params.simulations)
        chunk = _simulate_range(params, start, stop, should_cancel)
        logger.debug("Simulated paths %d-%d of %d", start, stop - 1, params.simulations)
        yield chunk


def run_simulations(
    params: SimulationParams,
    chunk_size: int = CHUNK_SIZE,
    should_cancel: Optional[CancelCheck] = None,
) -> List[SimulationPath]:
    """
    Run the full batch in-process.

    Args:
        params:        Validated simulation parameters.
        chunk_size:    Paths simulated between progress log lines.
        should_cancel: Optional check polled before every simulation.

    Returns:
        Exactly ``params.simulations`` paths, in index order.

    Raises:
        SimulationCancelled: If ``should_cancel`` returns True.
    """
    logger.info(
        "Starting MC: %d simulations, %d trades each, starting_balance=%.2f, seeded=%s",
        params.simulations,
        params.total_trades_per_sim,
        params.starting_balance,
        params.use_seed,
    )
    paths: List[SimulationPath] = []
    for chunk in iter_simulation_chunks(params, chunk_size, should_cancel):
        paths.extend(chunk)
    logger.info("MC complete: %d paths", len(paths))
    return paths


async def run_simulations_async(
    params: SimulationParams,
    chunk_size: int = CHUNK_SIZE,
    should_cancel: Optional[CancelCheck] = None,
) -> List[SimulationPath]:
    """Like :func:`run_simulations`, yielding to the event loop between chunks."""
    logger.info(
        "Starting MC (async): %d simulations, %d trades each",
        params.simulations,
        params.total_trades_per_sim,
    )
    paths: List[SimulationPath] = []
    for chunk in iter_simulation_chunks(params, chunk_size, should_cancel):
        paths.extend(chunk)
        await asyncio.sleep(0)
    logger.info("MC complete: %d paths", len(paths))
    return paths


def run_simulations_parallel(
    params: SimulationParams,
    workers: int,
    chunk_size: int = CHUNK_SIZE,
) -> List[SimulationPath]:
    """
    Run the batch across a process pool, one index range per task.

    Seeded batches are identical to :func:`run_simulations`; results are
    reassembled in index order.
    """
    if workers < 1:
        raise ValueError("workers must be at least 1")
    ranges = [
        (start, min(start + chunk_size, params.simulations))
        for start in range(0, params.simulations, chunk_size)
    ]
    logger.info(
        "Starting MC (parallel): %d simulations over %d tasks, %d workers",
        params.simulations,
        len(ranges),
        workers,
    )
    paths: List[SimulationPath] = []
    with ProcessPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_simulate_range, params, start, stop) for start, stop in ranges]
        for future in futures:
            paths.extend(future.result())
    logger.info("MC complete: %d paths", len(paths))
    return paths


def run_monte_carlo(
    params: SimulationParams,
    workers: int = 0,
    should_cancel: Optional[CancelCheck] = None,
) -> Tuple[List[SimulationPath], SimulationSummary]:
    """Simulate the batch and summarize it."""
    if workers > 0:
        paths = run_simulations_parallel(params, workers)
    else:
        paths = run_simulations(params, should_cancel=should_cancel)
    return paths, summarize_paths(paths, params)
