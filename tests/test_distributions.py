import pytest
from scipy.stats import kstwobign

from npstat.stats.methods.common.distributions import (
    binomial_cdf,
    binomial_sf,
    chi_square_sf,
    clamp_probability,
    continuity_corrected,
    kolmogorov_sf,
    normal_cdf,
    two_sided_normal_p,
)


def test_two_sided_normal_p():
    assert two_sided_normal_p(0.0) == 1.0
    assert two_sided_normal_p(1.959963985) == pytest.approx(0.05, abs=1e-9)
    assert two_sided_normal_p(-2.5) == two_sided_normal_p(2.5)
    assert two_sided_normal_p(40.0) == 0.0
    assert normal_cdf(0.0) == 0.5


def test_chi_square_sf():
    assert chi_square_sf(0.0, 2) == 1.0
    # df = 2 has survival exp(-x/2)
    assert chi_square_sf(1.0, 2) == pytest.approx(0.6065306597)


def test_binomial_tails():
    assert binomial_cdf(0, 5) == pytest.approx(1 / 32)
    assert binomial_sf(5, 5) == pytest.approx(1 / 32)
    assert binomial_sf(0, 5) == 1.0
    assert binomial_cdf(5, 5) == 1.0


@pytest.mark.parametrize("d", [0.05, 0.2, 0.5, 0.8, 1.0, 1.17, 1.18, 1.36, 1.63, 2.0, 3.0])
def test_kolmogorov_sf_matches_limiting_distribution(d):
    assert kolmogorov_sf(d) == pytest.approx(float(kstwobign.sf(d)), abs=1e-7)


def test_kolmogorov_sf_is_monotone_and_bounded():
    grid = [i / 20 for i in range(0, 80)]
    values = [kolmogorov_sf(d) for d in grid]
    assert values[0] == 1.0
    assert all(0.0 <= p <= 1.0 for p in values)
    assert all(a >= b for a, b in zip(values, values[1:]))
    assert kolmogorov_sf(-0.5) == 1.0


def test_continuity_corrected_and_clamp():
    assert continuity_corrected(3.0) == 2.5
    assert continuity_corrected(-3.0) == -2.5
    assert continuity_corrected(0.3) == 0.0
    assert continuity_corrected(-0.3) == 0.0
    assert clamp_probability(1.0000001) == 1.0
    assert clamp_probability(-1e-12) == 0.0
