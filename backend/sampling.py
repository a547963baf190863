"""
Bounded, optionally reproducible sampling of paths for spaghetti charts.
"""
from __future__ import annotations

import math
from typing import Callable, List, Optional, Sequence, TypeVar

import numpy as np

P = TypeVar("P", bound=Sequence[float])


def _same_values(a: Sequence[float], b: Sequence[float]) -> bool:
    return len(a) == len(b) and all(x == y for x, y in zip(a, b))


def sample_paths(
    paths: Sequence[P],
    sample_size: int,
    highlight: Optional[Sequence[float]] = None,
    rng: Optional[Callable[[], float]] = None,
) -> List:
    """
    Pick up to ``sample_size`` paths uniformly at random.

    A ``highlight`` series is always emitted first, exactly once. If an equal
    series (by value) exists in the batch it is removed from the pool, so it
    cannot be drawn a second time. Selection is a partial Fisher–Yates
    shuffle over the first ``need`` pool slots.

    Args:
        paths:       Balance series to sample from.
        sample_size: Maximum number of series returned, highlight included.
        highlight:   Series to force into the sample.
        rng:         Uniform [0, 1) source; defaults to a fresh numpy Generator.

    Returns:
        ``min(sample_size, pool_size + (1 if highlight else 0))`` series.
    """
    if len(paths) == 0:
        return []
    if len(paths) <= sample_size and highlight is None:
        return list(paths)

    if rng is None:
        rng = np.random.default_rng().random

    exclude = -1
    if highlight is not None:
        exclude = next(
            (i for i, path in enumerate(paths) if _same_values(path, highlight)), -1
        )

    pool = [i for i in range(len(paths)) if i != exclude]
    need = min(sample_size - 1 if highlight is not None else sample_size, len(pool))

    for k in range(max(need, 0)):
        pick = k + math.floor(rng() * (len(pool) - k))
        pool[k], pool[pick] = pool[pick], pool[k]

    result: List = [highlight] if highlight is not None else []
    result.extend(paths[i] for i in pool[:max(need, 0)])
    return result
