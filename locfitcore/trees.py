"""Tree, grid and sphere evaluation structures.

These helpers size the storage for an evaluation structure, place its
vertices, and carry out the splitting steps used when a k-d tree is
built over the data.
"""

from __future__ import annotations

import math
import warnings
from enum import IntEnum
from typing import MutableSequence, Sequence

__all__ = [
    "EvalStructure",
    "kdtre_guessnv",
    "ksmall",
    "newcell",
    "atree_guessnv",
    "lfit_reqd",
    "lfit_reqi",
    "grid_points",
    "sphere_guessnv",
    "sphere_points",
]

_UNSET = 1 << 30


class EvalStructure(IntEnum):
    """Kinds of evaluation structure."""

    TREE = 1
    PHULL = 2
    DATA = 3
    GRID = 4
    KDTREE = 5
    KDCENTER = 6
    CROSS = 7
    PRESET = 8
    XBAR = 9
    NONE = 10
    SPHERE = 11
    FITPOINTS = 12


def kdtre_guessnv(
    structure: int, cut: float, n: int, d: int, alpha: float
) -> tuple[int, int, int]:
    """Storage for a k-d tree: (vertices, cells, vertices per cell).

    Structures other than the k-d tree and the cell-centre k-d tree need
    no storage and give zeros.
    """
    if structure == EvalStructure.KDTREE:
        nterm = int(cut / 4 * n * min(alpha, 1.0))
        if nterm <= 0:
            raise ValueError("kdtre_guessnv: cells would hold no points")
        k = 2 * n // nterm
        vc = 1 << d
        return ((k + 2) * vc // 2, 2 * k + 1, vc)
    if structure == EvalStructure.KDCENTER:
        nterm = int(n * alpha)
        if nterm <= 0:
            raise ValueError("kdtre_guessnv: cells would hold no points")
        nvm = 1 + 2 * n // nterm
        return (nvm, 2 * nvm + 1, 1)
    return (0, 0, 0)


def ksmall(
    l: int, r: int, m: int, x: Sequence[float], pi: MutableSequence[int]
) -> int:
    """Partially sort ``pi[l..r]`` by ``x`` about position m.

    On return ``x[pi[l..s]] <= x[pi[m]] < x[pi[s+1..r]]`` where s is the
    returned index, and ``x[pi[m]]`` is the value of that rank. Ties with
    the pivot all go in the low set. ``pi`` is permuted in place.
    """
    while l < r:
        t = x[pi[m]]

        ir, il = l, r
        while ir < il:
            while ir <= r and x[pi[ir]] < t:
                ir += 1
            while il >= l and x[pi[il]] >= t:
                il -= 1
            if ir < il:
                pi[ir], pi[il] = pi[il], pi[ir]

        jl, jr = ir, r
        while ir < jr:
            while ir <= r and x[pi[ir]] == t:
                ir += 1
            while jr >= jl and x[pi[jr]] > t:
                jr -= 1
            if ir < jr:
                pi[ir], pi[jr] = pi[jr], pi[ir]

        if jl <= m <= jr:
            return jr

        if m >= ir:
            l = ir
        if m <= il:
            r = il
    if l == r:
        return l
    raise ValueError("ksmall failure")


def newcell(
    nv: int,
    xev: MutableSequence[list[float]],
    d: int,
    k: int,
    split_val: float,
    cpar: Sequence[int],
) -> tuple[int, list[int], list[int]]:
    """Split a rectangular cell on variable k at ``split_val``.

    ``xev`` holds vertex coordinates, of which the first nv are in use;
    new vertices are stored from index nv on, and existing vertices
    (beyond the initial corners) are reused where they match. Returns the
    new vertex count and the vertex lists of the low and high cells.
    """
    vc = len(cpar)
    tk = 1 << k
    clef = [0] * vc
    crig = [0] * vc
    for i in range(vc):
        if i & tk:
            continue
        point = list(xev[cpar[i]][:d])
        point[k] = split_val
        j = next(
            (idx for idx in range(vc, nv) if list(xev[idx][:d]) == point),
            nv,
        )
        clef[i] = cpar[i]
        clef[i + tk] = crig[i] = j
        crig[i + tk] = cpar[i + tk]
        if j == nv:
            if nv < len(xev):
                xev[nv] = point
            else:
                xev.append(point)
            nv += 1
    return nv, clef, crig


def atree_guessnv(
    cut: float, mk: float, d: int, alpha: float
) -> tuple[int, int, int]:
    """Storage for an adaptive tree: (vertices, cells, vertices per cell).

    A cut below 0.01 is raised to 0.01 with a warning. The result is
    scaled by ``mk / 100``.
    """
    ncm = nvm = _UNSET
    vc = 1 << d
    if alpha > 0:
        a0 = 1.0 if alpha > 1 else 1 / alpha
        if cut < 0.01:
            warnings.warn("guessnv: cut too small.", stacklevel=2)
            cut = 0.01
        cu = math.prod(min(1.0, cut) for _ in range(d))
        nv = int((5 * a0 / cu + 1) * vc)
        nc = int(10 * a0 / cu + 1)
        nvm = min(nvm, nv)
        ncm = min(ncm, nc)
    if nvm == _UNSET:
        nvm = 102 * vc
        ncm = 201
    ifl = mk / 100.0
    return (int(ifl * nvm), int(ifl * ncm), vc)


def lfit_reqd(d: int, nvm: int, ncm: int, simple: bool) -> int:
    """Floating point storage for a fit with nvm vertices and ncm cells."""
    z = d + 3 if simple else 3 * d + 8
    return nvm * z + ncm


def lfit_reqi(nvm: int, ncm: int, vc: int) -> int:
    """Integer storage for a structure with nvm vertices and ncm cells."""
    return ncm * vc + 3 * max(ncm, nvm)


def grid_points(
    lower: Sequence[float], upper: Sequence[float], mg: Sequence[int]
) -> list[list[float]]:
    """Vertices of a regular grid with mg[j] points along variable j.

    The first variable varies fastest. A variable with one grid point
    sits at its lower limit.
    """
    if any(m < 1 for m in mg):
        raise ValueError("grid_points: each dimension needs at least one point")
    d = len(mg)
    points = []
    for i in range(math.prod(mg)):
        z = i
        point = []
        for j in range(d):
            u0 = z % mg[j]
            u1 = mg[j] - 1 - u0
            if mg[j] == 1:
                point.append(lower[j])
            else:
                point.append((u1 * lower[j] + u0 * upper[j]) / (mg[j] - 1))
            z //= mg[j]
        points.append(point)
    return points


def sphere_guessnv(mg: Sequence[int]) -> tuple[int, int, int]:
    """Storage for a polar grid: (vertices, cells, vertices per cell)."""
    return (mg[1] * (mg[0] + 1), 0, 0)


def sphere_points(mg: Sequence[int]) -> list[list[float]]:
    """Vertices of a polar grid on the unit disc.

    ``mg[0]`` radial steps and ``mg[1]`` angles; for each angle the radii
    run from 0 to 1.
    """
    if mg[0] < 1 or mg[1] < 1:
        raise ValueError("sphere_points: need at least one radial step and angle")
    rmin, rmax = 0.0, 1.0
    points = []
    for i in range(mg[1]):
        th = 2 * math.pi * i / mg[1]
        c, s = math.cos(th), math.sin(th)
        for j in range(mg[0] + 1):
            r = rmin + (rmax - rmin) * j / mg[0]
            points.append([r * c, r * s])
    return points