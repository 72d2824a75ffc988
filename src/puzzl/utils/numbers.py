"""Numeric helpers."""

from __future__ import annotations


def clamp(val: float, lo: float, hi: float) -> float:
    """Squeeze *val* inside the ``[lo, hi]`` interval."""
    return min(hi, max(val, lo))


def is_between(val: float, lo: float, hi: float) -> bool:
    """Check that *val* is inside the closed ``[lo, hi]`` interval."""
    return lo <= val <= hi


def intersect(i1: tuple[float, float], i2: tuple[float, float]) -> bool:
    """Check whether two closed intervals overlap (touching counts)."""
    return (i1[0] <= i2[0] <= i1[1]) or (i2[0] <= i1[0] <= i2[1])
