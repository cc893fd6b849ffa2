from __future__ import annotations

from dvsim.core.types import Metric

# Largest signed 32-bit value; costs never wrap past it.
INFINITE: Metric = 2**31 - 1


def normalize_infinity(infinity: int | None) -> Metric:
    if infinity is None:
        return INFINITE
    infinity = int(infinity)
    if infinity <= 0:
        raise ValueError(f"infinity metric must be > 0, got {infinity}")
    return min(infinity, INFINITE)


def saturate(cost: int, infinity: Metric = INFINITE) -> Metric:
    """Clamp a cost into ``[0, INFINITE]``; anything at or above ``infinity`` is unreachable."""
    cost = int(cost)
    if cost < 0:
        raise ValueError(f"negative cost: {cost}")
    if cost >= infinity:
        return INFINITE
    return cost


def saturating_add(a: Metric, b: Metric, infinity: Metric = INFINITE) -> Metric:
    if is_infinite(a) or is_infinite(b):
        return INFINITE
    return saturate(a + b, infinity)


def is_infinite(cost: Metric) -> bool:
    return cost >= INFINITE
