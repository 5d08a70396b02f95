import math

import pytest
from hypothesis import given, strategies as st
from scipy import stats

from locfitcore import densities as dn


def test_stirlerr_table_value():
    assert dn.stirlerr(1.0) == pytest.approx(0.0810614667953272582196702, rel=1e-15)


@pytest.mark.parametrize("n", [0.7, 3.3, 20.0, 50.0, 100.0, 1000.0])
def test_stirlerr_matches_lgamma(n):
    expected = math.lgamma(n + 1) - (n + 0.5) * math.log(n) + n - dn.HF_LG_PIx2
    assert dn.stirlerr(n) == pytest.approx(expected, rel=1e-6, abs=1e-12)


@given(st.floats(min_value=0.01, max_value=1000.0))
def test_bd0_zero_on_diagonal_and_nonnegative(x):
    assert dn.bd0(x, x) == 0.0
    assert dn.bd0(x, 1.3 * x) >= 0.0


@pytest.mark.parametrize("n,p", [(10, 0.3), (25, 0.05), (7, 0.97)])
def test_dbinom_sums_to_one(n, p):
    assert sum(dn.dbinom(x, n, p) for x in range(n + 1)) == pytest.approx(1.0, rel=1e-12)


@pytest.mark.parametrize("x,n,p", [(3, 10, 0.3), (0, 10, 0.05), (10, 10, 0.95), (40, 100, 0.42)])
def test_dbinom_matches_scipy_and_log(x, n, p):
    value = dn.dbinom(x, n, p)
    assert value == pytest.approx(stats.binom.pmf(x, n, p), rel=1e-10)
    assert dn.dbinom(x, n, p, True) == pytest.approx(math.log(value), rel=1e-10)


def test_dbinom_degenerate_and_out_of_range():
    assert dn.dbinom(0, 5, 0.0) == 1.0
    assert dn.dbinom(5, 5, 1.0) == 1.0
    assert dn.dbinom(-1, 5, 0.5) == 0.0
    assert dn.dbinom(-1, 5, 0.5, True) == dn.LOG_ZERO
    assert dn.dbinom(6, 5, 0.5) == 0.0


def test_invalid_parameters_raise():
    with pytest.raises(ValueError):
        dn.dbinom(1, 5, 1.5)
    with pytest.raises(ValueError):
        dn.dpois(1, -1.0)
    with pytest.raises(ValueError):
        dn.dbeta(0.5, 0.0, 1.0)
    with pytest.raises(ValueError):
        dn.df(1.0, 0.0, 3.0)
    with pytest.raises(ValueError):
        dn.dgamma(1.0, -1.0, 1.0)
    with pytest.raises(ValueError):
        dn.dhyper(1, 2, 2, 5)
    with pytest.raises(ValueError):
        dn.dnbinom(1, 0.0, 0.5)
    with pytest.raises(ValueError):
        dn.dt(0.0, 0.0)


@pytest.mark.parametrize("x,lam", [(0, 2.5), (3, 2.5), (17, 12.0), (2, 0.01)])
def test_dpois_matches_scipy(x, lam):
    assert dn.dpois(x, lam) == pytest.approx(stats.poisson.pmf(x, lam), rel=1e-10)


def test_dpois_zero_mean():
    assert dn.dpois(0, 0.0) == 1.0
    assert dn.dpois(2, 0.0) == 0.0


@pytest.mark.parametrize("a,b", [(0.5, 0.7), (0.5, 3.0), (2.0, 0.4), (2.5, 4.0)])
def test_dbeta_matches_scipy(a, b):
    for x in (0.1, 0.45, 0.9):
        assert dn.dbeta(x, a, b) == pytest.approx(stats.beta.pdf(x, a, b), rel=1e-9)
        assert dn.dbeta(x, a, b, True) == pytest.approx(stats.beta.logpdf(x, a, b), rel=1e-9)
    assert dn.dbeta(0.0, a, b) == 0.0


@pytest.mark.parametrize("m,n", [(1.0, 5.0), (3.0, 7.0), (10.0, 2.5)])
def test_df_matches_scipy(m, n):
    for x in (0.2, 1.0, 4.0):
        assert dn.df(x, m, n) == pytest.approx(stats.f.pdf(x, m, n), rel=1e-9)
    assert dn.df(-1.0, m, n) == 0.0


@pytest.mark.parametrize("r,lam", [(0.5, 2.0), (1.0, 1.0), (3.5, 0.7)])
def test_dgamma_matches_scipy(r, lam):
    for x in (0.3, 1.7, 6.0):
        assert dn.dgamma(x, r, lam) == pytest.approx(stats.gamma.pdf(x, r, scale=1 / lam), rel=1e-9)


def test_dchisq_matches_scipy():
    for dof in (1.0, 4.0, 9.0):
        assert dn.dchisq(2.2, dof) == pytest.approx(stats.chi2.pdf(2.2, dof), rel=1e-9)


def test_dhyper_matches_scipy_and_sums():
    r, b, n = 6, 9, 5
    for x in range(n + 1):
        assert dn.dhyper(x, r, b, n) == pytest.approx(stats.hypergeom.pmf(x, r + b, r, n), rel=1e-9)
    assert sum(dn.dhyper(x, r, b, n) for x in range(n + 1)) == pytest.approx(1.0, rel=1e-12)
    assert dn.dhyper(0, 3, 3, 0) == 1.0


def test_dnbinom_matches_scipy():
    for x in (0, 2, 7):
        assert dn.dnbinom(x, 3.0, 0.4) == pytest.approx(stats.nbinom.pmf(x, 3, 0.4), rel=1e-9)


@pytest.mark.parametrize("dof", [0.5, 3.0, 30.0])
def test_dt_matches_scipy_and_symmetric(dof):
    for x in (0.0, 0.4, 2.0, 8.0):
        assert dn.dt(x, dof) == pytest.approx(stats.t.pdf(x, dof), rel=1e-9)
        assert dn.dt(-x, dof) == dn.dt(x, dof)