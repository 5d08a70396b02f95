import math
import warnings

import pytest
from hypothesis import given, strategies as st

from locfitcore.basis import (
    KernelType,
    calcp,
    coef_numbers,
    coefnumber,
    design_matrix,
    fitfun,
    fitfun_angular,
)
from locfitcore.orderstats import Style

coord = st.floats(min_value=-5, max_value=5, allow_nan=False)


def test_fitfun_one_dimension_quadratic():
    assert fitfun([3.0], [1.0], degree=2) == pytest.approx([1.0, 2.0, 2.0])


@pytest.mark.parametrize("kt", [KernelType.SPHERICAL, KernelType.PRODUCT])
@pytest.mark.parametrize("d", [1, 2, 3])
@pytest.mark.parametrize("degree", [0, 1, 2, 3])
def test_length_matches_calcp(kt, d, degree):
    x = [0.3 * (i + 1) for i in range(d)]
    assert len(fitfun(x, None, degree, kt)) == calcp(degree, d, kt)


def test_calcp_other_types():
    assert calcp(2, 4, KernelType.LM) == 4
    assert calcp(3, 4, KernelType.ZEON) == 1
    with pytest.raises(ValueError):
        calcp(1, 2, 42)


def test_fitfun_zeon_and_lm():
    assert fitfun([2.0, 5.0], [1.0, 1.0], 2, KernelType.ZEON) == [1.0]
    assert fitfun([2.0, 5.0], [1.0, 1.0], 2, KernelType.LM) == [2.0, 5.0]


@pytest.mark.parametrize("derivs", [[], [0], [1], [0, 0], [0, 1], [1, 1], [1, 0]])
def test_derivative_at_center_is_unit_vector(derivs):
    t = [0.4, -0.2]
    f = fitfun(t, t, 2, KernelType.SPHERICAL, derivs=derivs)
    idx = coefnumber(derivs, KernelType.SPHERICAL, 2, 2)
    assert f[idx] == pytest.approx(1.0)
    assert sum(abs(v) for v in f) == pytest.approx(1.0)


@pytest.mark.parametrize("kt", [KernelType.SPHERICAL, KernelType.PRODUCT])
@given(x0=coord, x1=coord)
def test_first_derivative_matches_finite_difference(kt, x0, x1):
    t = [0.1, 0.2]
    eps = 1e-6
    base = fitfun([x0, x1], t, 3, kt)
    bumped = fitfun([x0 + eps, x1], t, 3, kt)
    deriv = fitfun([x0, x1], t, 3, kt, derivs=[0])
    for a, b, g in zip(base, bumped, deriv):
        assert (b - a) / eps == pytest.approx(g, abs=1e-3)


def test_coefnumber_limits():
    assert coefnumber([0, 0], KernelType.SPHERICAL, 1, 1) == -1
    assert coefnumber([0], KernelType.SPHERICAL, 2, 0) == -1
    assert coefnumber([0, 1], KernelType.PRODUCT, 2, 2) == -1
    assert coefnumber([0, 1], KernelType.SPHERICAL, 2, 1) == -1
    with pytest.raises(ValueError):
        coefnumber([0, 1, 1], KernelType.SPHERICAL, 2, 3)


def test_coef_numbers_value_and_gradient():
    assert coef_numbers([], KernelType.SPHERICAL, 2, 2) == [0, 1, 2]
    assert coef_numbers([], KernelType.SPHERICAL, 1, 1) == [0, 1]
    assert coef_numbers([0], KernelType.PRODUCT, 2, 2) == [1]
    assert coef_numbers([], KernelType.SPHERICAL, 2, 0) == [0]


def test_angular_basis_derivative():
    eps = 1e-6
    for dx in (-1.0, 0.3, 2.0):
        f0 = fitfun_angular(dx, 1.5, 0, 2)
        f1 = fitfun_angular(dx + eps, 1.5, 0, 2)
        g = fitfun_angular(dx, 1.5, 1, 2)
        for a, b, c in zip(f0, f1, g):
            assert (b - a) / eps == pytest.approx(c, abs=1e-4)


def test_angular_too_many_derivatives():
    with pytest.raises(ValueError):
        fitfun_angular(0.1, 1.0, 3, 2)


def test_angular_high_degree_warns():
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        f = fitfun([0.5], [0.0], 3, styles=[Style.ANGULAR], scales=[1.0])
    assert caught
    assert len(f) == 4
    assert f[1] == pytest.approx(math.sin(0.5))


def test_spherical_degree_four_rejected():
    with pytest.raises(ValueError):
        fitfun([0.1, 0.2], None, 4, KernelType.SPHERICAL)


def test_design_matrix_rows():
    pts = [[1.0, 2.0], [0.0, -1.0], [3.0, 3.0]]
    center = [1.0, 1.0]
    rows = design_matrix(pts, center, 2)
    assert len(rows) == 3
    for p, row in zip(pts, rows):
        assert row == fitfun(p, center, 2)
        assert row[0] == 1.0
        assert row[1] == pytest.approx(p[0] - center[0])
        assert row[2] == pytest.approx(p[1] - center[1])