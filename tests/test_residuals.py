import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from locfitcore.family import Family, Link, LinkValues, evaluate
from locfitcore.residuals import ResidualType, resid, studentize


def _gauss(theta, y, w=1.0):
    return evaluate(theta, y, Family.GAUSSIAN, Link.IDENTITY, False, w, 1.0)


def _pois(theta, y, w=1.0):
    return evaluate(theta, y, Family.POISSON, Link.LOG, False, w, 1.0)


def test_raw_residual_gaussian_ignores_weight():
    values = _gauss(0.4, 1.5, w=3.0)
    assert resid(1.5, 3.0, 0.4, Family.GAUSSIAN, ResidualType.RAW, values) == pytest.approx(1.1)


def test_raw_residual_poisson_uses_weight():
    values = _pois(0.2, 4.0, w=2.0)
    expected = 4.0 - 2.0 * values.mean
    assert resid(4.0, 2.0, 0.2, Family.POISSON, ResidualType.RAW, values) == pytest.approx(expected)


@pytest.mark.parametrize("theta, y", [(0.2, 4.0), (1.5, 1.0), (0.0, 0.0), (0.7, 2.0)])
def test_deviance_squares_to_deviance2(theta, y):
    values = _pois(theta, y)
    dev = resid(y, 1.0, theta, Family.POISSON, ResidualType.DEVIANCE, values)
    dev2 = resid(y, 1.0, theta, Family.POISSON, ResidualType.DEVIANCE2, values)
    assert dev * dev == pytest.approx(dev2, abs=1e-12)


@given(st.floats(min_value=-3, max_value=3), st.floats(min_value=0, max_value=20))
def test_deviance_sign_follows_score(theta, y):
    values = _pois(theta, y)
    dev = resid(y, 1.0, theta, Family.POISSON, ResidualType.DEVIANCE, values)
    if values.dll > 0:
        assert dev >= 0
    else:
        assert dev <= 0


def test_pearson_residual_gaussian_equals_raw():
    values = _gauss(0.3, 2.0)
    pear = resid(2.0, 1.0, 0.3, Family.GAUSSIAN, ResidualType.PEARSON, values)
    raw = resid(2.0, 1.0, 0.3, Family.GAUSSIAN, ResidualType.RAW, values)
    assert pear == pytest.approx(raw)


def test_pearson_with_zero_variance():
    zero = LinkValues(mean=1.0, lik=0.0, dll=0.0, ddll=0.0)
    assert resid(1.0, 1.0, 1.0, Family.GAUSSIAN, ResidualType.PEARSON, zero) == 0.0
    bad = LinkValues(mean=1.0, lik=0.0, dll=0.5, ddll=0.0)
    assert math.isnan(resid(1.0, 1.0, 1.0, Family.GAUSSIAN, ResidualType.PEARSON, bad))


def test_other_kinds_return_stored_values():
    values = _pois(0.6, 3.0)
    assert resid(3.0, 1.0, 0.6, Family.POISSON, ResidualType.FIT, values) == 0.6
    assert resid(3.0, 1.0, 0.6, Family.POISSON, ResidualType.MEAN, values) == values.mean
    assert resid(3.0, 1.0, 0.6, Family.POISSON, ResidualType.LDOT, values) == values.dll
    assert resid(3.0, 1.0, 0.6, Family.POISSON, ResidualType.LDDOT, values) == values.ddll


def test_unknown_kind_raises():
    with pytest.raises(ValueError):
        resid(1.0, 1.0, 0.0, Family.GAUSSIAN, 99, _gauss(0.0, 1.0))


def test_studentize_without_influence_is_identity():
    values = _gauss(0.0, 1.0)
    assert studentize(2.5, 0.0, 0.0, ResidualType.DEVIANCE, values) == 2.5
    assert studentize(2.5, 0.0, 0.0, ResidualType.DEVIANCE2, values) == 2.5


@given(
    st.floats(min_value=-5, max_value=5),
    st.floats(min_value=0.0, max_value=0.45),
)
def test_studentize_inflates_residual(r, inl):
    values = _gauss(0.0, 1.0)
    out = studentize(r, inl, 0.0, ResidualType.RAW, values)
    assert abs(out) >= abs(r)
    assert out * out * (1 - 2 * inl) == pytest.approx(r * r, abs=1e-9)


def test_studentize_negative_denominator_returns_zero():
    values = _gauss(0.0, 1.0)
    assert studentize(3.0, 5.0, 0.5, ResidualType.DEVIANCE, values) == 0.0


def test_studentize_fit_kind_unchanged():
    values = _gauss(0.0, 1.0)
    assert studentize(1.7, 0.3, 0.2, ResidualType.FIT, values) == 1.7