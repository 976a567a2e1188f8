import math

import pytest

from npstat.core.names import DATA_EMPTY, DIFF_ZERO
from npstat.stats.schemes.two_related import TwoRelatedSamplesCalculator, sign_test_p


@pytest.fixture
def make_calc(scale):
    def make(first, second, **options):
        return TwoRelatedSamplesCalculator(
            variable1=scale("pre"),
            data1=first,
            variable2=scale("post"),
            data2=second,
            options=options,
        )

    return make


def test_all_differences_zero(make_calc):
    calc = make_calc([3, 4, 5], [3, 4, 5], testType={"wilcoxon": True, "sign": True})
    w = calc.wilcoxon()
    assert (w.z_value, w.p_value) == (0.0, 1.0)
    assert w.message
    sign = calc.sign_test()
    assert (sign.z_value, sign.p_value, sign.ties) == (0.0, 1.0, 3)
    assert calc.metadata().insufficient_reasons == (DIFF_ZERO,)


def test_signed_rank_statistics(make_calc):
    calc = make_calc([1, 2, 3, 4, 5], [2, 4, 6, 8, 10])
    freq = calc.ranks_frequencies()
    assert (freq.positive.n, freq.positive.sum_ranks, freq.positive.mean_rank) == (5, 15.0, 3.0)
    assert (freq.negative.n, freq.negative.sum_ranks, freq.negative.mean_rank) == (0, 0.0, None)
    assert (freq.ties, freq.total) == (0, 5)

    w = calc.wilcoxon()
    assert w.t == 0.0
    assert w.n == 5
    assert w.z_value == pytest.approx(-7.0 / math.sqrt(13.75))
    assert w.p_value == pytest.approx(0.059, abs=1e-3)


def test_zero_differences_are_ties(make_calc):
    freq = make_calc([1, 1, 1, 1], [1, 2, 0, 3]).ranks_frequencies()
    assert freq.ties == 1
    assert freq.total == 4
    assert (freq.positive.n, freq.positive.sum_ranks) == (2, 4.5)
    assert (freq.negative.n, freq.negative.sum_ranks) == (1, 1.5)


def test_difference_direction_is_second_minus_first(make_calc):
    freq = make_calc([5, 6, 7], [1, 2, 3]).ranks_frequencies()
    assert freq.negative.n == 3
    assert freq.positive.n == 0


def test_sign_test_exact(make_calc):
    calc = make_calc([1, 2, 3, 4, 5], [2, 4, 6, 8, 10], testType={"sign": True})
    sign = calc.sign_test()
    assert (sign.positive, sign.negative, sign.n) == (5, 0, 5)
    assert sign.exact is True
    assert sign.z_value is None
    assert sign.p_value == pytest.approx(0.0625)


def test_sign_test_normal_approximation():
    z, p, exact = sign_test_p(20, 10, 25)
    assert exact is False
    assert z == pytest.approx(-4.5 / (0.5 * math.sqrt(30)))
    assert p == pytest.approx(0.1003, abs=1e-3)


def test_sign_test_exact_is_symmetric():
    assert sign_test_p(2, 8, 25)[1] == pytest.approx(sign_test_p(8, 2, 25)[1])
    assert sign_test_p(2, 8, 25)[1] == pytest.approx(2 * 56 / 1024)
    assert sign_test_p(5, 5, 25)[1] == 1.0


def test_incomplete_pairs_are_dropped(make_calc):
    calc = make_calc([1, None, 3, 4], [2, 5, "", 8, 9])
    assert calc.pairs() == ((1.0, 4.0), (2.0, 8.0))
    assert calc.differences() == (1.0, 4.0)


def test_no_valid_pairs(make_calc):
    calc = make_calc([None], [None])
    w = calc.wilcoxon()
    assert w.z_value is None and w.p_value is None
    assert calc.metadata().insufficient_reasons == (DATA_EMPTY,)


def test_output_facets(make_calc):
    out = make_calc([1, 2, 3], [2, 3, 5], testType={"wilcoxon": True, "sign": True}).output()
    assert set(out["ranksFrequencies"]) == {"negative", "positive", "ties", "total"}
    assert set(out["testStatisticsWilcoxon"]) >= {"zValue", "pValue"}
    assert out["testStatisticsSign"]["positive"] == 3
    assert out["metadata"]["variable2Name"] == "post"
