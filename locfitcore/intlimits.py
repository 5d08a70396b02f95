"""Integration limits for local density estimation.

About a fitting point, each variable is integrated over the kernel's
support, cut back by one-sided styles and by user limits on the data.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from locfitcore.orderstats import Style

__all__ = ["EmptyIntegrationError", "inre", "set_int_limits"]


class EmptyIntegrationError(ValueError):
    """Raised when the integration region for some variable is empty."""


def inre(x: Sequence[float], bound: Sequence[float]) -> bool:
    """Whether x lies within the limits.

    ``bound`` holds the d lower limits followed by the d upper limits; a
    variable whose lower limit is not below its upper limit is unbounded.
    """
    d = len(x)
    return all(
        bound[i] <= x[i] <= bound[i + d]
        for i in range(d)
        if bound[i] < bound[i + d]
    )


def set_int_limits(
    x: Sequence[float],
    h: float,
    scales: Sequence[float],
    styles: Optional[Sequence[int]] = None,
    xlim: Optional[Sequence[float]] = None,
) -> tuple[list[float], list[float], bool, bool]:
    """Integration limits relative to the fitting point x.

    Returns ``(lower, upper, angular, limited)``: the limits for each
    variable, whether any variable is angular, and whether any limit was
    cut by a one-sided style or by ``xlim``. ``xlim`` holds d lower
    limits followed by d upper limits. Raises
    :class:`EmptyIntegrationError` when a region is empty.
    """
    d = len(x)
    lower = [0.0] * d
    upper = [0.0] * d
    angular = False
    limited = False
    for i in range(d):
        style = styles[i] if styles is not None else Style.NONE
        if style == Style.ANGULAR:
            hi = (2 * math.asin(h / 2) if h < 2 else math.pi) * scales[i]
            lo = -hi
            angular = True
        else:
            hi = h * scales[i]
            lo = -hi
            if style == Style.LEFT:
                hi = 0.0
                limited = True
            if style == Style.RIGHT:
                lo = 0.0
                limited = True
            if xlim is not None and xlim[i] < xlim[i + d]:
                if xlim[i] - x[i] > lo:
                    lo = xlim[i] - x[i]
                    limited = True
                if xlim[i + d] - x[i] < hi:
                    hi = xlim[i + d] - x[i]
                    limited = True
        if lo == hi:
            raise EmptyIntegrationError(f"empty integration region for variable {i}")
        lower[i] = lo
        upper[i] = hi
    return lower, upper, angular, limited