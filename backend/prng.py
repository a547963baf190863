"""
Deterministic, seedable uniform random source (mulberry32).

A generator is a plain zero-argument callable returning floats in [0, 1).
Two generators built from the same seed produce the same infinite sequence,
which is what makes seeded Monte Carlo runs bit-for-bit reproducible.
"""
from __future__ import annotations

import math
from typing import Callable, Union

Seed = Union[int, float, str]

_MASK32 = 0xFFFFFFFF
_GOLDEN = 0x6D2B79F5
_TWO_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    """32-bit integer multiply, keeping the low 32 bits."""
    return (a * b) & _MASK32


def hash_seed(s: str) -> int:
    """Fold a string into an unsigned 32-bit seed (``h = h*31 + unit``).

    Iterates UTF-16 code units so that astral characters hash the same way
    a browser-side implementation would; a lone surrogate folds in as its
    own code unit.
    """
    h = 0
    raw = s.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(raw), 2):
        unit = raw[i] | (raw[i + 1] << 8)
        h = (_imul(31, h) + unit) & _MASK32
    return h


def _numeric_seed(seed: Union[int, float]) -> int:
    if isinstance(seed, float):
        if not math.isfinite(seed):
            return 0
        seed = math.trunc(seed)
    return int(seed) & _MASK32


def derive_seed(seed: Seed, index: int) -> Seed:
    """Sub-seed for the ``index``-th simulation of a batch."""
    if isinstance(seed, str):
        return f"{seed}-{index}"
    return seed + index


def make_rng(seed: Seed) -> Callable[[], float]:
    """
    Build a mulberry32 generator.

    Args:
        seed: Integer/float (truncated and masked to uint32) or string
              (hashed with :func:`hash_seed`).

    Returns:
        Callable yielding floats in [0, 1).
    """
    if isinstance(seed, bool):
        raise TypeError("seed must be a number or a string, not bool")
    state = hash_seed(seed) if isinstance(seed, str) else _numeric_seed(seed)

    def next_float() -> float:
        nonlocal state
        state = (state + _GOLDEN) & _MASK32
        t = state
        t = _imul(t ^ (t >> 15), t | 1)
        t = (t ^ ((t + _imul(t ^ (t >> 7), t | 61)) & _MASK32)) & _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / _TWO_32

    return next_float
