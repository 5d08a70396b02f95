"""Likelihood families and link functions for local likelihood fitting.

For an observation ``y`` with prior weight ``w`` and a fitted value on
the link scale ``theta``, :func:`evaluate` returns the mean, the
log-likelihood contribution and its first and second derivatives with
respect to ``theta``. The second derivative is the one used for
scoring, so it may be the expected rather than the observed value.

A family may carry two extra bits: :data:`QUASI` asks for a
quasi-likelihood variance estimate, and :data:`ROBUST` asks for the
likelihood to be robustified by :func:`robustify`.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass, replace
from enum import IntEnum

from scipy import special

__all__ = [
    "HUBER_C",
    "QUASI",
    "ROBUST",
    "Family",
    "Link",
    "LinkValues",
    "FamilyError",
    "BadParameterError",
    "default_link",
    "valid_link",
    "link_transform",
    "inverse_link",
    "evaluate",
    "robustify",
    "b2",
    "b3",
    "b4",
]

HUBER_C = 2.0
QUASI = 64
ROBUST = 128

_SQRT_2PI = 2.5066283


class Family(IntEnum):
    """Base likelihood families."""

    DENSITY = 1
    RATE = 2
    HAZARD = 3
    GAUSSIAN = 4
    BINOMIAL = 5
    POISSON = 6
    GAMMA = 7
    GEOMETRIC = 8
    CIRCULAR = 9
    ROBUST = 10
    ROBUST_BINOMIAL = 11
    WEIBULL = 12
    CAUCHY = 13
    PROBABILITY = 14


class Link(IntEnum):
    """Link functions, plus the placeholders INIT, DEFAULT and CANONICAL."""

    INIT = 0
    DEFAULT = 1
    CANONICAL = 2
    IDENTITY = 3
    LOG = 4
    LOGIT = 5
    INVERSE = 6
    SQRT = 7
    ASIN = 8


class FamilyError(ValueError):
    """Raised for an unknown family or a link the family cannot use."""


class BadParameterError(ValueError):
    """Raised when the fitted value lies outside the family's parameter space."""


@dataclass(frozen=True)
class LinkValues:
    """Mean, log-likelihood and its derivatives for one observation."""

    mean: float = 0.0
    lik: float = 0.0
    dll: float = 0.0
    ddll: float = 0.0


def _lf_exp(x: float) -> float:
    return math.exp(min(x, 700.0))


def _expit(t: float) -> float:
    if t >= 0:
        return 1.0 / (1.0 + math.exp(-t))
    e = math.exp(t)
    return e / (1.0 + e)


def _logit(y: float) -> float:
    return math.log(y / (1.0 - y))


def _pow(x: float, y: float) -> float:
    try:
        return math.pow(x, y)
    except (ValueError, OverflowError):
        return math.nan


def _base_family(family: int) -> Family:
    try:
        return Family(int(family) & 63)
    except ValueError:
        raise FamilyError(f"unknown family {family}") from None


def _as_link(link: int) -> Link:
    try:
        return Link(int(link))
    except ValueError:
        raise FamilyError(f"unknown link {link}") from None


_DEFAULT_LINKS = {
    Family.DENSITY: Link.LOG,
    Family.RATE: Link.LOG,
    Family.HAZARD: Link.LOG,
    Family.GAMMA: Link.LOG,
    Family.GEOMETRIC: Link.LOG,
    Family.PROBABILITY: Link.LOG,
    Family.POISSON: Link.LOG,
    Family.CIRCULAR: Link.IDENTITY,
    Family.GAUSSIAN: Link.IDENTITY,
    Family.CAUCHY: Link.IDENTITY,
    Family.ROBUST: Link.IDENTITY,
    Family.ROBUST_BINOMIAL: Link.LOGIT,
    Family.BINOMIAL: Link.LOGIT,
}

_CANONICAL_LINKS = {
    **_DEFAULT_LINKS,
    Family.GAMMA: Link.INVERSE,
    Family.GEOMETRIC: Link.INVERSE,
}

_VALID_LINKS = {
    Family.DENSITY: {Link.LOG, Link.IDENTITY},
    Family.RATE: {Link.LOG, Link.IDENTITY},
    Family.HAZARD: {Link.LOG, Link.IDENTITY},
    Family.GAUSSIAN: {Link.IDENTITY, Link.LOG, Link.LOGIT},
    Family.ROBUST: {Link.IDENTITY},
    Family.CAUCHY: {Link.IDENTITY},
    Family.CIRCULAR: {Link.IDENTITY},
    Family.BINOMIAL: {Link.LOGIT, Link.IDENTITY, Link.ASIN},
    Family.ROBUST_BINOMIAL: {Link.LOGIT},
    Family.GAMMA: {Link.LOG, Link.INVERSE, Link.IDENTITY},
    Family.GEOMETRIC: {Link.LOG, Link.IDENTITY},
    Family.POISSON: {Link.LOG, Link.SQRT, Link.IDENTITY},
    Family.PROBABILITY: {Link.LOG, Link.SQRT, Link.IDENTITY},
}


def default_link(link: int, family: int) -> int:
    """Resolve DEFAULT or CANONICAL to the family's actual link."""
    code = int(family) & 63
    if link == Link.DEFAULT:
        for fam, resolved in _DEFAULT_LINKS.items():
            if fam == code:
                return resolved
    if link == Link.CANONICAL:
        for fam, resolved in _CANONICAL_LINKS.items():
            if fam == code:
                if fam == Family.GEOMETRIC:
                    warnings.warn(
                        "Canonical link unavailable for geometric family; using inverse",
                        stacklevel=2,
                    )
                return resolved
    return link


def valid_link(link: int, family: int) -> bool:
    """Whether ``link`` may be used with ``family``."""
    base = _base_family(family)
    allowed = _VALID_LINKS.get(base)
    if allowed is None:
        raise FamilyError(f"Unknown family {family} in valid_link")
    return link in allowed


def link_transform(y: float, link: int) -> float:
    """Map a mean value to the link scale."""
    lk = _as_link(link)
    if lk == Link.IDENTITY:
        return y
    if lk == Link.LOG:
        return math.log(y)
    if lk == Link.LOGIT:
        return _logit(y)
    if lk == Link.INVERSE:
        return 1 / y
    if lk == Link.SQRT:
        return math.sqrt(abs(y))
    if lk == Link.ASIN:
        return math.asin(math.sqrt(y))
    raise FamilyError(f"link: unknown link {link}")


def inverse_link(theta: float, link: int) -> float:
    """Map a value on the link scale back to the mean."""
    lk = _as_link(link)
    if lk == Link.IDENTITY:
        return theta
    if lk == Link.LOG:
        return _lf_exp(theta)
    if lk == Link.LOGIT:
        return _expit(theta)
    if lk == Link.INVERSE:
        return 1 / theta
    if lk == Link.SQRT:
        return theta * abs(theta)
    if lk == Link.ASIN:
        return math.sin(theta) ** 2
    if lk == Link.INIT:
        return 0.0
    raise FamilyError(f"invlink: unknown link {link}")


_Triple = tuple[float, float, float]
_ZERO: _Triple = (0.0, 0.0, 0.0)


def _fam_density(th: float, cens: bool, w: float) -> _Triple:
    if cens:
        return _ZERO
    return (w * th, w, w)


def _fam_gaussian(y: float, mean: float, link: Link, cens: bool, w: float) -> _Triple:
    if link == Link.INIT:
        return (0.0, w * y, 0.0)
    z = y - mean
    if cens:
        if link != Link.IDENTITY:
            raise FamilyError("Link invalid for censored Gaussian family")
        log_pz = float(special.log_ndtr(-z))
        dp = math.exp(-z * z / 2 - log_pz) / _SQRT_2PI
        return (w * log_pz, w * dp, w * dp * (dp - z))
    lik = -w * z * z / 2
    if link == Link.IDENTITY:
        return (lik, w * z, w)
    if link == Link.LOG:
        return (lik, w * z * mean, w * mean * mean)
    if link == Link.LOGIT:
        return (lik, w * z * mean * (1 - mean), w * (mean * (1 - mean)) ** 2)
    raise FamilyError("Invalid link for Gaussian family")


def _fam_robust(y: float, mean: float, link: Link, w: float, rs: float) -> _Triple:
    if link == Link.INIT:
        return (0.0, w * y, 0.0)
    sw = 1.0 if w == 1.0 else math.sqrt(w)
    z = sw * (y - mean) / rs
    lik = -z * z / 2 if abs(z) < HUBER_C else HUBER_C * (HUBER_C / 2.0 - abs(z))
    if z < -HUBER_C:
        return (lik, -sw * HUBER_C / rs, 0.0)
    if z > HUBER_C:
        return (lik, sw * HUBER_C / rs, 0.0)
    return (lik, sw * z / rs, w / (rs * rs))


def _fam_cauchy(y: float, th: float, link: Link, w: float, rs: float) -> _Triple:
    if link != Link.IDENTITY:
        raise FamilyError("Invalid link in Cauchy family")
    z = w * (y - th) / rs
    lik = -math.log(1 + z * z)
    dll = 2 * w * z / (rs * (1 + z * z))
    ddll = 2 * w * w * (1 - z * z) / (rs * rs * (1 + z * z) ** 2)
    return (lik, dll, ddll)


def _logistic_lik(y: float, th: float, w: float) -> float:
    if th < 0:
        lik = th * y - w * math.log(1 + math.exp(th))
    else:
        lik = th * (y - w) - w * math.log(1 + math.exp(-th))
    if y > 0:
        lik -= y * math.log(y / w)
    if y < w:
        lik -= (w - y) * math.log(1 - y / w)
    return lik


def _fam_robust_binomial(y: float, p: float, th: float, link: Link, w: float) -> _Triple:
    if link == Link.INIT:
        return (0.0, y, 0.0)
    if y < 0 or y > w:
        return _ZERO
    lik = _logistic_lik(y, th, w)
    dll = y - w * p
    ddll = w * p * (1 - p)
    if -lik > HUBER_C * HUBER_C / 2.0:
        s2y = math.sqrt(-2 * lik)
        lik = HUBER_C * (HUBER_C / 2.0 - s2y)
        dll *= HUBER_C / s2y
        ddll = HUBER_C / s2y * (ddll - 1 / (s2y * s2y) * w * p * (1 - p))
    return (lik, dll, ddll)


def _fam_binomial(y: float, p: float, th: float, link: Link, w: float) -> _Triple:
    if link == Link.INIT:
        return (0.0, min(max(y, 0.0), w), 0.0)
    wp = w * p
    if link == Link.IDENTITY:
        if (p <= 0 and y > 0) or (p >= 1 and y < w):
            raise BadParameterError("binomial mean outside (0, 1)")
        lik = dll = ddll = 0.0
        if y > 0:
            lik += y * math.log(wp / y)
            dll += y / p
            ddll += y / (p * p)
        if y < w:
            lik += (w - y) * math.log((w - wp) / (w - y))
            dll -= (w - y) / (1 - p)
            ddll += (w - y) / (1 - p) ** 2
        return (lik, dll, ddll)
    if link == Link.LOGIT:
        if y < 0 or y > w:
            return _ZERO
        return (_logistic_lik(y, th, w), y - wp, wp * (1 - p))
    if link == Link.ASIN:
        if (p <= 0 and y > 0) or (p >= 1 and y < w):
            raise BadParameterError("binomial mean outside (0, 1)")
        if th < 0 or th > math.pi / 2:
            raise BadParameterError("arcsine link value outside [0, pi/2]")
        lik = dll = 0.0
        if y > 0:
            dll += 2 * y * math.sqrt((1 - p) / p)
            lik += y * math.log(wp / y)
        if y < w:
            dll -= 2 * (w - y) * math.sqrt(p / (1 - p))
            lik += (w - y) * math.log((w - wp) / (w - y))
        return (lik, dll, 4 * w)
    raise FamilyError(f"link {link} invalid for binomial family")


def _fam_poisson(y: float, mean: float, th: float, link: Link, cens: bool, w: float) -> _Triple:
    if link == Link.INIT:
        return (0.0, max(y, 0.0), 0.0)
    wmu = w * mean
    if cens:
        if y <= 0:
            return _ZERO
        pt = float(special.gammainc(y, wmu))
        dp = math.exp((y - 1) * math.log(wmu) - wmu - math.lgamma(y)) / pt
        dq = dp * ((y - 1) / wmu - 1)
        lik = math.log(pt)
        if link == Link.LOG:
            return (lik, dp * wmu, -(dq - dp * dp) * wmu * wmu - dp * wmu)
        if link == Link.IDENTITY:
            return (lik, dp * w, -(dq - dp * dp) * w * w)
        if link == Link.SQRT:
            return (lik, dp * 2 * w * th, -(dq - dp * dp) * (4 * w * w * mean) - 2 * dp * w)
    if link == Link.LOG:
        if y < 0:
            return _ZERO
        lik = dll = y - wmu
        if y > 0:
            lik += y * (th - math.log(y / w))
        return (lik, dll, wmu)
    if link == Link.IDENTITY:
        if mean <= 0 and y > 0:
            raise BadParameterError("Poisson mean must be positive")
        lik, dll, ddll = y - wmu, -w, 0.0
        if y > 0:
            lik += y * math.log(wmu / y)
            dll += y / mean
            ddll = y / (mean * mean)
        return (lik, dll, ddll)
    if link == Link.SQRT:
        if mean <= 0 and y > 0:
            raise BadParameterError("Poisson mean must be positive")
        lik, dll, ddll = y - wmu, -2 * w * th, 2 * w
        if y > 0:
            lik += y * math.log(wmu / y)
            dll += 2 * y / th
            ddll += 2 * y / mean
        return (lik, dll, ddll)
    raise FamilyError(f"link {link} invalid for Poisson family")


def _fam_gamma(y: float, mean: float, th: float, link: Link, cens: bool, w: float) -> _Triple:
    if link == Link.INIT:
        return (0.0, max(y, 0.0), 0.0)
    if mean <= 0 and y > 0:
        raise BadParameterError("Gamma mean must be positive")
    if cens:
        if y <= 0:
            return _ZERO
        if link == Link.LOG:
            pt = float(special.gammaincc(w, y / mean))
            dg = math.exp((w - 1) * math.log(y / mean) - y / mean - math.lgamma(w))
            dll = y * dg / (mean * pt)
            ddll = dg * (w * y / mean - y * y / (mean * mean)) / pt + dll * dll
            return (math.log(pt), dll, ddll)
        if link == Link.INVERSE:
            pt = float(special.gammaincc(w, th * y))
            dg = math.exp((w - 1) * math.log(th * y) - th * y - math.lgamma(w))
            dll = -y * dg / pt
            ddll = dg * y * ((w - 1) * mean - y) / pt + dll * dll
            return (math.log(pt), dll, ddll)
    else:
        if y < 0:
            warnings.warn("Negative Gamma observation", stacklevel=3)
        if link == Link.LOG:
            lik = -y / mean + w * (1 - th)
            if y > 0:
                lik += w * math.log(y / w)
            return (lik, y / mean - w, y / mean)
        if link == Link.INVERSE:
            lik = -y / mean + w - w * math.log(mean)
            if y > 0:
                lik += w * math.log(y / w)
            return (lik, -y + w * mean, w * mean * mean)
        if link == Link.IDENTITY:
            lik = -y / mean + w - w * math.log(mean)
            if y > 0:
                lik += w * math.log(y / w)
            return (lik, (y - mean) / (mean * mean), w / (mean * mean))
    raise FamilyError(f"link {link} invalid for Gamma family")


def _fam_geometric(y: float, mean: float, th: float, link: Link, cens: bool, w: float) -> _Triple:
    if link == Link.INIT:
        return (0.0, max(y, 0.0), 0.0)
    p = 1 / (1 + mean)
    if cens:
        if y <= 0:
            return _ZERO
        pt = 1 - float(special.betainc(w, y, p))
        dp = -math.exp(
            math.lgamma(w + y) - math.lgamma(w) - math.lgamma(y)
            + (y - 1) * th + (w + y - 2) * math.log(p)
        ) / pt
        dq = ((w - 1) / p - (y - 1) / (1 - p)) * dp
        dll = -dp * p * (1 - p)
        ddll = (dq - dp * dp) * p * p * (1 - p) * (1 - p) + dp * (1 - 2 * p) * p * (1 - p)
        return (math.log(pt), dll, -ddll)
    lik = (y + w) * math.log((y / w + 1) / (mean + 1))
    if y > 0:
        lik += y * math.log(w * mean / y)
    if link == Link.LOG:
        return (lik, (y - w * mean) * p, (y + w) * p * (1 - p))
    if link == Link.IDENTITY:
        return (lik, (y - w * mean) / (mean * (1 + mean)), w / (mean * (1 + mean)))
    raise FamilyError(f"link {link} invalid for geometric family")


def _fam_weibull(y: float, mean: float, th: float, link: Link, cens: bool, w: float) -> _Triple:
    yy = _pow(y, w)
    if link == Link.INIT:
        return (0.0, max(yy, 0.0), 0.0)
    if cens:
        return (-yy / mean, yy / mean, yy / mean)
    lik = 1 - yy / mean - th
    if yy > 0:
        lik += math.log(w * yy)
    return (lik, -1 + yy / mean, yy / mean)


def _fam_circular(y: float, mean: float, link: Link, w: float) -> _Triple:
    if link == Link.INIT:
        return (w * math.cos(y), w * math.sin(y), 0.0)
    ddll = w * math.cos(y - mean)
    return (ddll - w, w * math.sin(y - mean), ddll)


def robustify(values: LinkValues, scale: float) -> LinkValues:
    """Apply a Huber-type robustification to a likelihood contribution."""
    sc = scale * HUBER_C
    s2 = sc * sc
    if values.lik > -s2 / 2:
        return replace(values, lik=values.lik / s2, dll=values.dll / s2, ddll=values.ddll / s2)
    z = math.sqrt(-2 * values.lik)
    ddll = (-sc * values.dll * values.dll / (z * z * z) + sc * values.ddll / z) / s2
    dll = values.dll / (z * sc)
    return replace(values, lik=0.5 - z / sc, dll=dll, ddll=ddll)


def evaluate(
    theta: float,
    y: float,
    family: int,
    link: int,
    censored: bool = False,
    weight: float = 1.0,
    scale: float = 1.0,
) -> LinkValues:
    """Mean, log-likelihood and derivatives for one observation.

    Raises :class:`FamilyError` for an invalid family or link and
    :class:`BadParameterError` when ``theta`` is outside the family's
    parameter space.
    """
    lk = _as_link(link)
    mean = inverse_link(theta, lk)
    base = _base_family(family)
    w = weight
    direct = True
    if base in (Family.HAZARD, Family.DENSITY, Family.RATE):
        triple = _fam_density(theta, censored, w)
    elif base == Family.GAUSSIAN:
        triple = _fam_gaussian(y, mean, lk, censored, w)
        direct = False
    elif base == Family.BINOMIAL:
        triple = _fam_binomial(y, mean, theta, lk, w)
        direct = False
    elif base == Family.ROBUST_BINOMIAL:
        triple = _fam_robust_binomial(y, mean, theta, lk, w)
    elif base in (Family.PROBABILITY, Family.POISSON):
        triple = _fam_poisson(y, mean, theta, lk, censored, w)
        direct = False
    elif base == Family.GAMMA:
        triple = _fam_gamma(y, mean, theta, lk, censored, w)
        direct = False
    elif base == Family.GEOMETRIC:
        triple = _fam_geometric(y, mean, theta, lk, censored, w)
        direct = False
    elif base == Family.WEIBULL:
        triple = _fam_weibull(y, mean, theta, lk, censored, w)
    elif base == Family.CIRCULAR:
        triple = _fam_circular(y, mean, lk, w)
        direct = False
    elif base == Family.ROBUST:
        triple = _fam_robust(y, mean, lk, w, scale)
    elif base == Family.CAUCHY:
        triple = _fam_cauchy(y, theta, lk, w, scale)
    else:
        raise FamilyError(f"links: invalid family {family}")
    values = LinkValues(mean, *triple)
    if direct or lk == Link.INIT:
        return values
    if int(family) & ROBUST:
        return robustify(values, scale)
    return values


def b2(theta: float, family: int, weight: float) -> float:
    """Variance function on the link scale (second cumulant)."""
    base = _base_family(family)
    if base == Family.GAUSSIAN:
        return weight
    if base == Family.POISSON:
        return weight * _lf_exp(theta)
    if base == Family.BINOMIAL:
        y = _expit(theta)
        return weight * y * (1 - y)
    raise FamilyError(f"b2: invalid family {family}")


def b3(theta: float, family: int, weight: float) -> float:
    """Third cumulant on the link scale."""
    base = _base_family(family)
    if base == Family.GAUSSIAN:
        return 0.0
    if base == Family.POISSON:
        return weight * _lf_exp(theta)
    if base == Family.BINOMIAL:
        y = _expit(theta)
        return weight * y * (1 - y) * (1 - 2 * y)
    raise FamilyError(f"b3: invalid family {family}")


def b4(theta: float, family: int, weight: float) -> float:
    """Fourth cumulant on the link scale."""
    base = _base_family(family)
    if base == Family.GAUSSIAN:
        return 0.0
    if base == Family.POISSON:
        return weight * _lf_exp(theta)
    if base == Family.BINOMIAL:
        y = _expit(theta)
        y = y * (1 - y)
        return weight * y * (1 - 6 * y)
    raise FamilyError(f"b4: invalid family {family}")