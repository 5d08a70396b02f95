"""One-dimensional integrals used in local density estimation.

The central quantities are integrals of the form

    I[j] = int_{l0}^{l1} x**j * exp(a + b*x + c*x**2) dx,   j = 0..p-1,

where ``cf = (a, b, c)``. Different recursions are stable in different
parts of the (b, c) parameter space, so several evaluators are provided.
Closed forms for the exponential and Gaussian kernels, and the assembly
of product-kernel integrals into a response matrix, are included as well.
"""

from __future__ import annotations

import math
import warnings
from typing import Sequence

from scipy import special

from locfitcore.family import BadParameterError

__all__ = [
    "GFACT",
    "EFACT",
    "S2PI",
    "FACTORIALS",
    "exbctay",
    "explint1",
    "explintyl",
    "solvetrid",
    "initi0i1",
    "explinsid",
    "explinbkr",
    "explinfbk0",
    "explinfbk",
    "recent",
    "onedexpl",
    "onedgaus",
    "prodintresp",
]

GFACT = 2.5
EFACT = 3.0
S2PI = math.sqrt(2 * math.pi)
FACTORIALS = (1, 1, 2, 6, 24, 120, 720, 5040, 40320, 362880, 3628800)


def _lf_exp(x: float) -> float:
    return math.exp(min(x, 700.0))


def _pnorm(x: float) -> float:
    return float(special.ndtr(x))


def _ptail(x: float) -> float:
    """exp(x**2/2) * int_{-inf}^x exp(-u**2/2) du, stable for very negative x."""
    return S2PI * math.exp(x * x / 2 + float(special.log_ndtr(x)))


def _daws(x: float) -> float:
    """exp(-x**2/2) * int_0^x exp(t**2/2) dt."""
    return math.sqrt(2.0) * float(special.dawsn(x / math.sqrt(2.0)))


def exbctay(b: float, c: float, n: int) -> list[float]:
    """Taylor coefficients of exp(b*x + c*x**2) up to x**n.

    With nonzero ``c`` the expansion is limited to n < 40.
    """
    z = [0.0] * (n + 1)
    z[0] = 1.0
    for i in range(1, n + 1):
        z[i] = z[i - 1] * b / i
    if c == 0.0:
        return z
    if n >= 40:
        warnings.warn("exbctay limit to n<40", stacklevel=2)
        n = 39
        z = z[: n + 1]
    ec = [1.0]
    i = 1
    while 2 * i <= n:
        ec.append(ec[i - 1] * c / i)
        i += 1
    for i in range(n, 1, -1):
        j = 1
        while 2 * j <= i:
            z[i] += ec[j] * z[i - 2 * j]
            j += 1
    return z


def explint1(l0: float, l1: float, cf: Sequence[float], p: int) -> list[float]:
    """int x**j exp(a + b*x) over [l0, l1] for j = 0..p-1; cf[2] is ignored."""
    b = cf[1]
    integrals = [0.0] * (max(p, 51) + 2)
    y0 = _lf_exp(cf[0] + l0 * b)
    y1 = _lf_exp(cf[0] + l1 * b)
    k = p if p < 2 * abs(b) else int(abs(b))

    if k > 0:
        integrals[0] = (y1 - y0) / b
        for j in range(1, k):
            y1 *= l1
            y0 *= l0
            integrals[j] = (y1 - y0 - j * integrals[j - 1]) / b
        if k == p:
            return integrals[:p]
        y1 *= l1
        y0 *= l0

    f = 1.0
    k1 = k
    while k < 50 and f > 1.0e-8:
        y1 *= l1
        y0 *= l0
        integrals[k] = y1 - y0
        if k >= p:
            f *= abs(b) / (k + 1)
        k += 1
    if k == 50:
        warnings.warn("explint1: want k>50", stacklevel=2)
    integrals[k] = 0.0
    for j in range(k - 1, k1 - 1, -1):
        integrals[j] = (integrals[j] - b * integrals[j + 1]) / (j + 1)
    return integrals[:p]


def explintyl(l0: float, l1: float, cf: Sequence[float], p: int) -> list[float]:
    """Integrals for small c, from a Taylor series in c around explint1."""
    base = explint1(l0, l1, cf, p + 8)
    c = cf[2]
    return [
        (((base[i + 8] * c / 4 + base[i + 6]) * c / 3 + base[i + 4]) * c / 2 + base[i + 2]) * c
        + base[i]
        for i in range(p)
    ]


def solvetrid(x: Sequence[float], y: Sequence[float]) -> list[float]:
    """Solve a tridiagonal system without pivoting.

    ``x`` holds three entries per row: the coefficient of the previous
    unknown, the diagonal, and the coefficient of the next unknown.
    """
    m = len(y)
    if len(x) < 3 * m:
        raise ValueError("solvetrid: need three coefficients per row")
    a = list(x[: 3 * m])
    r = list(y)
    for i in range(1, m):
        s = a[3 * i] / a[3 * i - 2]
        a[3 * i] = 0.0
        a[3 * i + 1] -= s * a[3 * i - 1]
        r[i] -= s * r[i - 1]
    for i in range(m - 2, -1, -1):
        s = a[3 * i + 2] / a[3 * i + 4]
        a[3 * i + 2] = 0.0
        r[i] -= s * r[i + 1]
    return [r[i] / a[3 * i + 1] for i in range(m)]


def initi0i1(
    cf: Sequence[float], y0: float, y1: float, l0: float, l1: float
) -> tuple[float, float]:
    """The first two integrals I[0], I[1] for nonzero c.

    ``y0`` and ``y1`` are exp(a + b*x + c*x**2) at l0 and l1.
    """
    d = -cf[1] / (2 * cf[2])
    c = math.sqrt(2 * abs(cf[2]))
    a0 = c * (l0 - d)
    a1 = c * (l1 - d)
    if cf[2] < 0:
        bi = _lf_exp(cf[0] + cf[1] * d + cf[2] * d * d) / c
        if a0 > 0:
            if a0 > 6:
                i0 = (y0 * _ptail(-a0) - y1 * _ptail(-a1)) / c
            else:
                i0 = S2PI * (_pnorm(-a0) - _pnorm(-a1)) * bi
        else:
            if a1 < -6:
                i0 = (y1 * _ptail(a1) - y0 * _ptail(a0)) / c
            else:
                i0 = S2PI * (_pnorm(a1) - _pnorm(a0)) * bi
    else:
        i0 = (y1 * _daws(a1) - y0 * _daws(a0)) / c
    i1 = (y1 - y0) / (2 * cf[2]) + d * i0
    return i0, i1


def explinsid(l0: float, l1: float, cf: Sequence[float], p: int) -> list[float]:
    """Integrals for large b, using a tridiagonal solve and back recursion."""
    b, c2 = cf[1], cf[2]
    k0 = 2
    k1 = int(abs(b) + abs(2 * c2))
    if k1 < 2:
        k1 = 2
    if k1 > p + 20:
        k1 = p + 20
    k2 = p + 20

    integrals = [0.0] * (k2 + 2)
    z = [0.0] * (3 * k1 + 3)

    y0 = _lf_exp(cf[0] + l0 * (b + l0 * c2))
    y1 = _lf_exp(cf[0] + l1 * (b + l1 * c2))
    integrals[0], integrals[1] = initi0i1(cf, y0, y1, l0, l1)

    y1 *= l1
    y0 *= l0
    if k0 < k1:
        for k in range(k0, k1):
            y1 *= l1
            y0 *= l0
            integrals[k] = y1 - y0
            z[3 * k] = float(k)
            z[3 * k + 1] = b
            z[3 * k + 2] = 2 * c2

    y1 *= l1
    y0 *= l0
    for k in range(k1, k2):
        y1 *= l1
        y0 *= l0
        integrals[k] = y1 - y0
    integrals[k2] = integrals[k2 + 1] = 0.0
    for k in range(k2 - 1, k1 - 1, -1):
        integrals[k] = (
            integrals[k] - b * integrals[k + 1] - 2 * c2 * integrals[k + 2]
        ) / (k + 1)

    if k0 < k1:
        integrals[k0] -= k0 * integrals[k0 - 1]
        integrals[k1 - 1] -= 2 * c2 * integrals[k1]
        z[3 * k0] = 0.0
        z[3 * k1 - 1] = 0.0
        integrals[k0:k1] = solvetrid(z[3 * k0 : 3 * k1], integrals[k0:k1])
    return integrals[:p]


def explinbkr(l0: float, l1: float, cf: Sequence[float], p: int) -> list[float]:
    """Integrals for small b and c, by back recursion."""
    b, c2 = cf[1], cf[2]
    y0 = _lf_exp(cf[0] + l0 * (b + c2 * l0))
    y1 = _lf_exp(cf[0] + l1 * (b + c2 * l1))
    km = p + 10
    integrals = [0.0] * (km + 3)
    for k in range(km + 1):
        y1 *= l1
        y0 *= l0
        integrals[k] = y1 - y0
    for k in range(km, -1, -1):
        integrals[k] = (
            integrals[k] - b * integrals[k + 1] - 2 * c2 * integrals[k + 2]
        ) / (k + 1)
    return integrals[:p]


def explinfbk0(l0: float, l1: float, cf: Sequence[float], p: int) -> list[float]:
    """Integrals for b = 0 and c < 0, by forward and backward recursion."""
    c2 = cf[2]
    integrals = [0.0] * (max(p, 2) + 1)
    y0 = _lf_exp(cf[0] + l0 * l0 * c2)
    y1 = _lf_exp(cf[0] + l1 * l1 * c2)
    integrals[0], integrals[1] = initi0i1(cf, y0, y1, l0, l1)

    ml2 = max(l0 * l0, l1 * l1)
    ks = 1 + int(2 * abs(c2) * ml2)
    if ks < 2:
        ks = 2
    if ks > p - 3:
        ks = p

    for k in range(2, ks):
        y1 *= l1
        y0 *= l0
        integrals[k] = (y1 - y0 - (k - 1) * integrals[k - 2]) / (2 * c2)
    if ks == p:
        return integrals[:p]

    y1 *= l1 * l1
    y0 *= l0 * l0
    for k in range(ks, p):
        y1 *= l1
        y0 *= l0
        integrals[k] = y1 - y0

    f1 = 1.0 / p
    f2 = 1.0 / (p - 1)
    integrals[p - 1] *= f1
    integrals[p - 2] *= f2
    k = p
    f = 1.0
    while f > 1.0e-8:
        y1 *= l1
        y0 *= l0
        if (k - p) % 2 == 0:
            f2 *= -2 * c2 / (k + 1)
            integrals[p - 2] += (y1 - y0) * f2
        else:
            f1 *= -2 * c2 / (k + 1)
            integrals[p - 1] += (y1 - y0) * f1
            f *= 2 * abs(c2) * ml2 / (k + 1)
        k += 1

    for k in range(p - 3, ks - 1, -1):
        integrals[k] = (integrals[k] - 2 * c2 * integrals[k + 2]) / (k + 1)
    return integrals[:p]


def explinfbk(l0: float, l1: float, cf: Sequence[float], p: int) -> list[float]:
    """Integrals for moderate b, by forward and backward recursion."""
    b, c2 = cf[1], cf[2]
    km = p + 15
    integrals = [0.0] * (max(km + 3, 3))
    y0 = _lf_exp(cf[0] + l0 * (b + l0 * c2))
    y1 = _lf_exp(cf[0] + l1 * (b + l1 * c2))
    integrals[0], integrals[1] = initi0i1(cf, y0, y1, l0, l1)

    ks = int(3 * abs(c2))
    if ks < 3:
        ks = 3
    if ks > 0.75 * p:
        ks = p
    for k in range(2, ks):
        y1 *= l1
        y0 *= l0
        integrals[k] = (
            y1 - y0 - b * integrals[k - 1] - (k - 1) * integrals[k - 2]
        ) / (2 * c2)
    if ks == p:
        return integrals[:p]

    y1 *= l1 * l1
    y0 *= l0 * l0
    for k in range(ks, km + 1):
        y1 *= l1
        y0 *= l0
        integrals[k] = y1 - y0
    integrals[km + 1] = integrals[km + 2] = 0.0
    for k in range(km, ks - 1, -1):
        integrals[k] = (
            integrals[k] - b * integrals[k + 1] - 2 * c2 * integrals[k + 2]
        ) / (k + 1)
    return integrals[:p]


def recent(
    integrals: Sequence[float], wt: Sequence[float], p: int, x: float
) -> list[float]:
    """Combine integrals with weight Taylor coefficients and recentre at x.

    Returns p + 1 values: sum_j wt[j] * integrals[i + j], then shifted so
    that the moments are taken about -x instead of 0.
    """
    s = len(wt)
    resp = [sum(wt[j] * integrals[i + j] for j in range(s)) for i in range(p + 1)]
    if x == 0:
        return resp
    for j in range(p + 1):
        for i in range(p, j, -1):
            resp[i] += x * resp[i - 1]
    return resp


def onedexpl(cf: Sequence[float], deg: int) -> list[float]:
    """Closed-form integrals for the exponential kernel, degree 0 or 1."""
    if deg >= 2:
        raise ValueError("onedexpl only valid for deg=0,1")
    if abs(cf[1]) >= EFACT:
        raise BadParameterError("onedexpl: slope too large for the exponential kernel")
    f0 = math.exp(cf[0])
    fl = fr = 1.0
    resp = []
    for i in range(2 * deg + 1):
        f0 *= i + 1
        fl /= -(EFACT + cf[1])
        fr /= EFACT - cf[1]
        resp.append(f0 * (fr - fl))
    return resp


def onedgaus(cf: Sequence[float], deg: int) -> list[float]:
    """Closed-form integrals for the Gaussian kernel, degree 0, 1 or 2."""
    if deg not in (0, 1, 2):
        raise ValueError("onedgaus only valid for deg=0,1,2")
    if 2 * cf[2] >= GFACT * GFACT:
        raise BadParameterError("onedgaus: quadratic term too large")
    s2 = 1 / (GFACT * GFACT - 2 * cf[2])
    mu = cf[1] * s2
    resp = [0.0] * (2 * deg + 1)
    resp[0] = 1.0
    if deg >= 1:
        resp[1] = mu
        resp[2] = s2 + mu * mu
        if deg == 2:
            resp[3] = mu * (3 * s2 + mu * mu)
            resp[4] = 3 * s2 * s2 + mu * mu * (6 * s2 + mu * mu)
    f0 = S2PI * math.exp(cf[0] + mu * mu / (2 * s2)) * math.sqrt(s2)
    return [r * f0 for r in resp]


def prodintresp(
    prod_wk: Sequence[Sequence[float]], dim: int, deg: int, p: int
) -> list[float]:
    """Assemble the p x p response matrix (row-major) for a product kernel.

    ``prod_wk[i][j]`` is the j-th one-dimensional moment in variable i.
    Only the upper triangle of the higher-order block is filled.
    """
    if len(prod_wk) < dim or any(len(row) < 2 * deg + 1 for row in prod_wk[:dim]):
        raise ValueError("prodintresp: prod_wk too small for dim and deg")
    resp = [0.0] * (p * p)
    resp[0] += math.prod(prod_wk[i][0] for i in range(dim))
    if deg == 0:
        return resp

    for j1 in range(1, deg + 1):
        for j in range(dim):
            prod = math.prod(prod_wk[i][j1 if j == i else 0] for i in range(dim))
            resp[1 + (j1 - 1) * dim + j] += prod / FACTORIALS[j1]

    for k1 in range(1, deg + 1):
        for j1 in range(k1, deg + 1):
            for k in range(dim):
                for j in range(dim):
                    prod = math.prod(
                        prod_wk[i][k1 * (k == i) + j1 * (j == i)] for i in range(dim)
                    )
                    prod /= FACTORIALS[k1] * FACTORIALS[j1]
                    row = 1 + (k1 - 1) * dim + k
                    col = 1 + (j1 - 1) * dim + j
                    resp[row * p + col] += prod
    return resp