import math
import statistics

import pytest
from hypothesis import given, strategies as st

from locfitcore.orderstats import (
    Metric,
    Style,
    compbandwid,
    kordstat,
    lforder,
    median,
    rho,
)

finite = st.floats(min_value=-1e6, max_value=1e6, allow_nan=False)


def test_rho_one_dimension_is_scaled_absolute_value():
    assert rho([-3.0], [2.0]) == pytest.approx(1.5)


def test_rho_spherical_and_product():
    x = [3.0, -4.0]
    assert rho(x, [1.0, 1.0], Metric.SPHERICAL) == pytest.approx(5.0)
    assert rho(x, [1.0, 1.0], Metric.PRODUCT) == pytest.approx(4.0)


@given(st.lists(finite, min_size=2, max_size=5))
def test_rho_product_never_exceeds_spherical(x):
    scales = [1.0] * len(x)
    assert rho(x, scales, Metric.PRODUCT) <= rho(x, scales, Metric.SPHERICAL) + 1e-9


def test_rho_conditional_component_is_ignored():
    styles = [Style.NONE, Style.CONDITIONAL]
    assert rho([2.0, 100.0], [1.0, 1.0], Metric.SPHERICAL, styles) == pytest.approx(2.0)


def test_rho_angular_full_turn_is_zero():
    assert rho([2 * math.pi], [1.0], Metric.SPHERICAL, [Style.ANGULAR]) == pytest.approx(
        0.0, abs=1e-12
    )


def test_rho_invalid_metric():
    with pytest.raises(ValueError):
        rho([1.0, 2.0], [1.0, 1.0], 99)


@given(st.lists(finite, min_size=1, max_size=30), st.data())
def test_kordstat_matches_sorted(x, data):
    k = data.draw(st.integers(min_value=1, max_value=len(x)))
    assert kordstat(x, k) == sorted(x)[k - 1]


def test_kordstat_k_below_one_is_zero():
    assert kordstat([5.0, 6.0], 0) == 0.0


def test_kordstat_k_too_large():
    with pytest.raises(ValueError):
        kordstat([1.0], 3)


@given(st.lists(finite, min_size=1, max_size=25).filter(lambda v: len(v) % 2 == 1))
def test_median_odd_length(x):
    assert median(x) == statistics.median(x)


def test_median_even_length_midpoint():
    assert median([4.0, 1.0, 3.0, 2.0]) == pytest.approx(2.5)


def test_median_constant():
    assert median([7.0, 7.0, 7.0]) == 7.0


def test_median_empty():
    with pytest.raises(ValueError):
        median([])


def test_compbandwid_fixed_only():
    assert compbandwid([1.0, 2.0, 3.0], 1, 0, 0.7) == 0.7


def test_compbandwid_nearest_neighbour():
    dist = [0.5, 0.1, 0.9, 0.3]
    assert compbandwid(dist, 1, 2, 0.0) == 0.3
    assert compbandwid(dist, 1, 2, 0.4) == 0.4


def test_compbandwid_inflates_beyond_n():
    dist = [0.5, 0.1, 0.9, 0.3]
    assert compbandwid(dist, 1, 8, 0.0) == pytest.approx(0.9 * 2)
    assert compbandwid(dist, 2, 8, 0.0) == pytest.approx(0.9 * math.sqrt(2))


@given(st.lists(finite, max_size=40))
def test_lforder_sorts(x):
    order = lforder(x)
    assert sorted(order) == list(range(len(x)))
    assert [x[i] for i in order] == sorted(x)