import math

import pytest
from scipy.stats import kstwobign

from npstat.core.names import DATA_EMPTY, GROUP_EMPTY, TIES_ALL
from npstat.stats.schemes.two_independent import TwoIndependentSamplesCalculator, ks_differences


@pytest.fixture
def make_calc(scale, nominal):
    def make(values, groups, group1=1, group2=2, **options):
        return TwoIndependentSamplesCalculator(
            variable1=scale("score"),
            data1=values,
            variable2=nominal("group", values=((1, "Control"), (2, "Treatment"))),
            data2=groups,
            options={"group1": group1, "group2": group2, **options},
        )

    return make


def test_complete_separation(make_calc):
    calc = make_calc([1, 2, 3, 4, 5, 6], [1, 1, 1, 2, 2, 2])
    ranks = calc.ranks()
    assert (ranks.group1.label, ranks.group1.n, ranks.group1.sum_ranks) == ("Control", 3, 6.0)
    assert (ranks.group2.label, ranks.group2.mean_rank) == ("Treatment", 5.0)

    mw = calc.mann_whitney_u()
    assert mw.u == 0.0
    assert mw.w == 6.0
    assert mw.show_exact is True
    assert mw.p_exact == pytest.approx(0.1)
    assert mw.z == pytest.approx(-4.5 / math.sqrt(5.25))
    assert 0.0 < mw.p_value < 1.0


def test_tie_corrected_variance(make_calc):
    calc = make_calc([1, 2, 2, 2, 3, 4], [1, 1, 1, 2, 2, 2])
    ranks = calc.ranks()
    assert ranks.group1.sum_ranks + ranks.group2.sum_ranks == pytest.approx(21.0)
    mw = calc.mann_whitney_u()
    assert mw.u == 1.0
    assert mw.w == 7.0
    assert mw.z == pytest.approx((1.0 - 4.5) / math.sqrt(5.25 - 0.6))


def test_only_designated_groups_are_ranked(make_calc):
    base = make_calc([1, 2, 3, 4, 5, 6], [1, 1, 1, 2, 2, 2])
    extra = make_calc([1, 2, 3, 4, 5, 6, 100, 0], [1, 1, 1, 2, 2, 2, 3, 3])
    assert extra.ranks() == base.ranks()
    assert extra.mann_whitney_u() == base.mann_whitney_u()


def test_string_group_codes_and_missing_cases(make_calc):
    calc = make_calc([1, None, 3, 4, 5, 6], ["1", "1", "1", "2", None, "2"], group1="1", group2="2")
    first, second = calc.groups()
    assert first == (1.0, 3.0)
    assert second == (4.0, 6.0)


def test_empty_group(make_calc):
    calc = make_calc([1, 2, 3], [1, 1, 1], group2=9)
    mw = calc.mann_whitney_u()
    assert mw.u is None and mw.z is None
    assert calc.metadata().insufficient_reasons == (GROUP_EMPTY,)


def test_no_data(make_calc):
    calc = make_calc([None, None], [1, 2])
    assert calc.mann_whitney_u().u is None
    assert calc.metadata().insufficient_reasons == (DATA_EMPTY,)


def test_all_values_tied(make_calc):
    calc = make_calc([5, 5, 5, 5], [1, 1, 2, 2])
    mw = calc.mann_whitney_u()
    assert mw.u == 2.0
    assert mw.z is None and mw.p_value is None
    assert mw.p_exact == 1.0
    assert TIES_ALL in calc.metadata().insufficient_reasons


def test_large_groups_skip_exact(make_calc):
    values = list(range(50))
    groups = [1] * 25 + [2] * 25
    mw = make_calc(values, groups).mann_whitney_u()
    assert mw.show_exact is False
    assert mw.p_exact is None
    assert mw.p_value < 1e-6


def test_kolmogorov_smirnov(make_calc):
    calc = make_calc(
        [1, 2, 3, 4, 5, 6],
        [1, 1, 1, 2, 2, 2],
        testType={"kolmogorovSmirnovZ": True},
    )
    ks = calc.kolmogorov_smirnov_z()
    assert (ks.d_absolute, ks.d_positive, ks.d_negative) == (1.0, 1.0, 0.0)
    assert ks.d_stat == pytest.approx(math.sqrt(1.5))
    assert ks.p_value == pytest.approx(float(kstwobign.sf(math.sqrt(1.5))), abs=1e-7)

    out = calc.output()
    assert out["testStatisticsMannWhitneyU"] is None
    assert out["testStatisticsKolmogorovSmirnovZ"]["dAbsolute"] == 1.0


def test_ks_differences_signs():
    d_abs, d_pos, d_neg = ks_differences([4.0, 5.0, 6.0], [1.0, 2.0, 3.0])
    assert (d_abs, d_pos, d_neg) == (1.0, 0.0, -1.0)


def test_output_defaults_to_mann_whitney(make_calc):
    out = make_calc([1, 2, 3, 4, 5, 6], [1, 1, 1, 2, 2, 2]).output()
    assert out["testStatisticsMannWhitneyU"]["pExact"] == pytest.approx(0.1)
    assert out["testStatisticsKolmogorovSmirnovZ"] is None
    assert out["ranks"]["total"] == 6
    assert out["metadata"]["hasInsufficientData"] is False
