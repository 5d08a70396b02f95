"""Residuals of several kinds computed from likelihood values."""

from __future__ import annotations

import math
from enum import IntEnum

from locfitcore.family import Family, LinkValues

__all__ = ["ResidualType", "resid", "studentize"]


class ResidualType(IntEnum):
    """Kinds of residual or fitted quantity."""

    DEVIANCE = 1
    PEARSON = 2
    RAW = 3
    LDOT = 4
    DEVIANCE2 = 5
    LDDOT = 6
    FIT = 7
    MEAN = 8


def _divide(num: float, den: float) -> float:
    if den != 0:
        return num / den
    if num == 0 or math.isnan(num):
        return math.nan
    return math.copysign(math.inf, num)


def resid(
    y: float,
    weight: float,
    theta: float,
    family: int,
    kind: int,
    values: LinkValues,
) -> float:
    """Residual of the requested kind for one observation.

    A Pearson residual with zero variance and nonzero score is ``nan``.
    """
    kind = ResidualType(kind)
    base = int(family) & 63
    if base in (Family.GAUSSIAN, Family.ROBUST, Family.CAUCHY):
        raw = y - values.mean
    else:
        raw = y - weight * values.mean
    if kind == ResidualType.DEVIANCE:
        dev = math.sqrt(-2 * values.lik)
        return dev if values.dll > 0 else -dev
    if kind == ResidualType.PEARSON:
        if values.ddll <= 0:
            return 0.0 if values.dll == 0 else math.nan
        return values.dll / math.sqrt(values.ddll)
    if kind == ResidualType.RAW:
        return raw
    if kind == ResidualType.LDOT:
        return values.dll
    if kind == ResidualType.DEVIANCE2:
        return -2 * values.lik
    if kind == ResidualType.LDDOT:
        return values.ddll
    if kind == ResidualType.FIT:
        return theta
    return values.mean


def studentize(
    residual: float,
    influence: float,
    variance: float,
    kind: int,
    values: LinkValues,
) -> float:
    """Studentize a residual using the influence and variance of the fit.

    Returns 0 when the estimated residual variance is negative.
    """
    kind = ResidualType(kind)
    inl = influence * values.ddll
    var = variance * variance * values.ddll
    if inl > 1:
        inl = 1.0
    if var > inl:
        var = inl
    den = 1 - 2 * inl + var
    if den < 0:
        return 0.0
    if kind in (
        ResidualType.DEVIANCE,
        ResidualType.PEARSON,
        ResidualType.RAW,
        ResidualType.LDOT,
    ):
        return _divide(residual, math.sqrt(den))
    if kind == ResidualType.DEVIANCE2:
        return _divide(residual, den)
    return residual