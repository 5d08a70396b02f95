"""Distances, order statistics and neighbourhood bandwidths.

These helpers measure distances between a data point and a fitting
point, find order statistics of such distances, and turn them into a
nearest-neighbour bandwidth. They also give a robust median and the
sort order of a set of fit points.
"""

from __future__ import annotations

import heapq
import math
from enum import IntEnum
from typing import Optional, Sequence

__all__ = [
    "Metric",
    "Style",
    "rho",
    "kordstat",
    "median",
    "compbandwid",
    "lforder",
]


class Metric(IntEnum):
    """How per-dimension distances combine into one distance."""

    SPHERICAL = 1
    PRODUCT = 2


class Style(IntEnum):
    """How a variable is treated when measuring distance and fitting."""

    NONE = 0
    LEFT = 1
    RIGHT = 2
    ANGULAR = 3
    CONDITIONAL = 4


def rho(
    x: Sequence[float],
    scales: Sequence[float],
    metric: int = Metric.SPHERICAL,
    styles: Optional[Sequence[int]] = None,
) -> float:
    """Length of the difference vector x under the given metric.

    Each component is divided by its scale. An angular component is
    measured along the chord, and a conditional component counts as zero.
    """
    comps = []
    for i, (xi, sc) in enumerate(zip(x, scales)):
        style = styles[i] if styles is not None else Style.NONE
        if style == Style.ANGULAR:
            comps.append(2 * math.sin(xi / (2 * sc)))
        elif style == Style.CONDITIONAL:
            comps.append(0.0)
        else:
            comps.append(xi / sc)

    if len(comps) == 1:
        return abs(comps[0])
    if metric == Metric.PRODUCT:
        return max((abs(c) for c in comps), default=0.0)
    if metric == Metric.SPHERICAL:
        return math.sqrt(sum(c * c for c in comps))
    raise ValueError("rho: invalid kernel type")


def kordstat(x: Sequence[float], k: int) -> float:
    """The k-th smallest value of x, counting from 1; 0 when k < 1."""
    if k < 1:
        return 0.0
    if k > len(x):
        raise ValueError(f"kordstat: k={k} exceeds the number of values {len(x)}")
    return heapq.nsmallest(k, x)[-1]


def median(x: Sequence[float]) -> float:
    """Median of x, found by successive bracketing of the candidates."""
    if not x:
        raise ValueError("median of an empty sequence")
    n = len(x)
    lo = min(x)
    hi = max(x)
    if lo == hi:
        return lo
    lo -= hi - lo
    hi += hi - lo
    for s in x:
        if lo < s < hi:
            lt = sum(1 for v in x if v < s)
            eq = sum(1 for v in x if v == s)
            gt = sum(1 for v in x if v > s)
            if 2 * (lt + eq) > n and 2 * (gt + eq) > n:
                return s
            if 2 * (lt + eq) <= n:
                lo = s
            if 2 * (gt + eq) <= n:
                hi = s
    return (hi + lo) / 2


def compbandwid(
    distances: Sequence[float],
    d: int,
    nn: int,
    fixed_h: float,
) -> float:
    """Bandwidth covering nn nearest neighbours, at least fixed_h.

    When nn is at least the number of points, the largest distance is
    inflated by (nn/n)**(1/d).
    """
    if nn == 0:
        return fixed_h
    n = len(distances)
    if nn < n:
        nnh = kordstat(distances, nn)
    else:
        nnh = max(0.0, max(distances, default=0.0))
        nnh = nnh * math.exp(math.log(nn / n) / d)
    return max(fixed_h, nnh)


def lforder(x: Sequence[float]) -> list[int]:
    """Indices that put x in nondecreasing order."""
    return sorted(range(len(x)), key=x.__getitem__)