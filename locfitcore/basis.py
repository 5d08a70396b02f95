"""Local polynomial fitting functions and design matrices.

The basis at a data point x about a fitting point t holds 1, the
differences x - t, and their products up to the requested degree,
each divided by the matching factorial. Derivatives of the basis with
respect to chosen variables are available too, as are angular
(periodic) variables, which use sine and cosine terms.
"""

from __future__ import annotations

import math
import warnings
from enum import IntEnum
from typing import Optional, Sequence

from locfitcore.orderstats import Style

__all__ = [
    "KernelType",
    "calcp",
    "coefnumber",
    "coef_numbers",
    "fitfun_angular",
    "fitfun",
    "design_matrix",
]


class KernelType(IntEnum):
    """Form of the kernel, which also fixes the polynomial basis."""

    SPHERICAL = 1
    PRODUCT = 2
    CE = 3
    LM = 4
    ZEON = 5


def calcp(degree: int, d: int, kernel_type: int = KernelType.SPHERICAL) -> int:
    """Number of fitting functions for the given degree and dimension."""
    if kernel_type in (KernelType.SPHERICAL, KernelType.CE):
        k = 1
        for i in range(1, degree + 1):
            k = k * (d + i) // i
        return k
    if kernel_type == KernelType.PRODUCT:
        return d * degree + 1
    if kernel_type == KernelType.LM:
        return d
    if kernel_type == KernelType.ZEON:
        return 1
    raise ValueError(f"calcp: invalid kernel type {kernel_type}")


def coefnumber(
    derivs: Sequence[int],
    kernel_type: int,
    d: int,
    degree: int,
) -> int:
    """Index of the coefficient estimating the given derivative, or -1.

    ``derivs`` lists the variables differentiated with respect to.
    """
    nd = len(derivs)
    if d == 1:
        return nd if nd <= degree else -1
    if nd == 0:
        return 0
    if degree == 0:
        return -1
    if nd == 1:
        return 1 + derivs[0]
    if degree == 1:
        return -1
    if kernel_type == KernelType.PRODUCT:
        return -1
    if nd == 2:
        d0, d1 = max(derivs), min(derivs)
        return (d + 1) * (d0 + 1) - d0 * (d0 + 3) // 2 + d1
    if degree == 2:
        return -1
    raise ValueError("coefnumber not available for three or more derivatives")


def coef_numbers(
    derivs: Sequence[int],
    kernel_type: int,
    d: int,
    degree: int,
) -> list[int]:
    """Coefficient numbers for a derivative and, where available, its gradient.

    The first entry is for ``derivs`` itself; when the next derivative
    in each variable can also be read off the fit, d more entries follow.
    """
    nd = len(derivs)
    first = coefnumber(derivs, kernel_type, d, degree)
    if nd >= degree or kernel_type == KernelType.ZEON:
        return [first]
    if d > 1:
        if nd >= 2:
            return [first]
        if nd >= 1 and kernel_type == KernelType.PRODUCT:
            return [first]
    return [first] + [
        coefnumber(list(derivs) + [i], kernel_type, d, degree) for i in range(d)
    ]


def fitfun_angular(
    dx: float, scale: float, nderiv: int, degree: int
) -> tuple[float, float, float]:
    """Angular basis (1, sin, 1 - cos) terms, or their derivatives."""
    if degree >= 3:
        warnings.warn("Can't handle angular model with deg>=3", stacklevel=2)
    u = dx / scale
    if nderiv == 0:
        return (1.0, math.sin(u) * scale, (1 - math.cos(u)) * scale * scale)
    if nderiv == 1:
        return (0.0, math.cos(u), math.sin(u) * scale)
    if nderiv == 2:
        return (0.0, -math.sin(u) / scale, math.cos(u))
    raise ValueError("Can't handle angular model with >2 derivs")


def _component_terms(
    dx: float, degree: int, nderiv: int, style: int, scale: float
) -> list[float]:
    if style == Style.ANGULAR:
        row = list(fitfun_angular(dx, scale, nderiv, degree))
        return row + [0.0] * max(0, degree + 1 - len(row))
    row = [0.0] * (degree + 1)
    if nderiv <= degree:
        row[nderiv] = 1.0
        for j in range(nderiv + 1, degree + 1):
            row[j] = row[j - 1] * dx / (j - nderiv)
    return row


def fitfun(
    x: Sequence[float],
    t: Optional[Sequence[float]] = None,
    degree: int = 1,
    kernel_type: int = KernelType.SPHERICAL,
    styles: Optional[Sequence[int]] = None,
    scales: Optional[Sequence[float]] = None,
    derivs: Sequence[int] = (),
) -> list[float]:
    """Fitting functions at x about fitting point t.

    With ``derivs`` the functions are differentiated with respect to the
    listed variables. Spherical kernels support degree up to 3.
    """
    d = len(x)
    nd = len(derivs)

    if kernel_type == KernelType.ZEON:
        return [1.0]
    if kernel_type == KernelType.LM:
        return [float(v) for v in x]

    f = [1.0 if nd == 0 else 0.0]
    if degree == 0:
        return f

    dx = list(x) if t is None else [xi - ti for xi, ti in zip(x, t)]
    ct = [0] * d
    for j in derivs:
        ct[j] += 1
    styles = list(styles) if styles is not None else [Style.NONE] * d
    scales = list(scales) if scales is not None else [1.0] * d
    ff = [
        _component_terms(dx[i], degree, ct[i], styles[i], scales[i]) for i in range(d)
    ]

    if d == 1 or kernel_type == KernelType.PRODUCT:
        for j in range(1, degree + 1):
            for i in range(d):
                f.append(ff[i][j] if ct[i] == nd else 0.0)
        return f

    if degree > 3:
        raise ValueError(f"fitfun: can't handle deg={degree} for spherical kernels")

    for i in range(d):
        f.append(ff[i][1] if ct[i] == nd else 0.0)
    if degree == 1:
        return f

    for i in range(d):
        f.append(ff[i][2] if ct[i] == nd else 0.0)
        for j in range(i + 1, d):
            f.append(ff[i][1] * ff[j][1] if ct[i] + ct[j] == nd else 0.0)
    if degree == 2:
        return f

    for i in range(d):
        f.append(ff[i][3] if ct[i] == nd else 0.0)
        for k in range(i + 1, d):
            f.append(ff[i][2] * ff[k][1] if ct[i] + ct[k] == nd else 0.0)
        for j in range(i + 1, d):
            f.append(ff[i][1] * ff[j][2] if ct[i] + ct[j] == nd else 0.0)
            for k in range(j + 1, d):
                f.append(
                    ff[i][1] * ff[j][1] * ff[k][1]
                    if ct[i] + ct[j] + ct[k] == nd
                    else 0.0
                )
    return f


def design_matrix(
    points: Sequence[Sequence[float]],
    center: Sequence[float],
    degree: int = 1,
    kernel_type: int = KernelType.SPHERICAL,
    styles: Optional[Sequence[int]] = None,
    scales: Optional[Sequence[float]] = None,
) -> list[list[float]]:
    """One row of fitting functions per data point, about ``center``."""
    return [
        fitfun(p, center, degree, kernel_type, styles, scales) for p in points
    ]