import pytest
from scipy.stats import kruskal

from npstat.core.names import DATA_EMPTY, GROUP_SINGLE, TIES_ALL
from npstat.core.variables import MissingSpec
from npstat.stats.schemes.k_independent import KIndependentSamplesCalculator


@pytest.fixture
def make_calc(scale, nominal):
    def make(values, groups, **options):
        return KIndependentSamplesCalculator(
            variable1=scale("y"),
            data1=values,
            variable2=nominal("g", values=((1, "Low"), (2, "Mid"), (3, "High"))),
            data2=groups,
            options=options,
        )

    return make


def test_kruskal_wallis_without_ties(make_calc):
    kw = make_calc([1, 2, 3, 4, 5, 6], [1, 1, 2, 2, 3, 3]).kruskal_wallis_h()
    assert kw.h == pytest.approx(32 / 7)
    assert kw.df == 2
    assert kw.p_value == pytest.approx(0.1017, abs=1e-4)


def test_kruskal_wallis_with_ties_matches_reference(make_calc):
    values = [1, 2, 2, 3, 4, 4, 5, 6, 6, 2]
    groups = [1, 1, 1, 2, 2, 2, 3, 3, 3, 3]
    kw = make_calc(values, groups).kruskal_wallis_h()
    reference = kruskal([1, 2, 2], [3, 4, 4], [5, 6, 6, 2])
    assert kw.h == pytest.approx(reference.statistic)
    assert kw.p_value == pytest.approx(reference.pvalue)


def test_rank_rows_with_total(make_calc):
    rows = make_calc([1, 2, 3, 4, 5, 6], [2, 2, 1, 1, 3, 3]).ranks()
    assert [r.label for r in rows] == ["Low", "Mid", "High", "Total"]
    assert [r.n for r in rows] == [2, 2, 2, 6]
    assert sum(r.sum_ranks for r in rows[:-1]) == pytest.approx(21.0)
    assert rows[-1].mean_rank is None and rows[-1].sum_ranks is None


def test_group_range_applies_when_both_bounds_given(make_calc):
    values, groups = [1, 2, 3, 4, 5, 6], [1, 1, 2, 2, 3, 3]
    assert make_calc(values, groups, minimum=1, maximum=2).kruskal_wallis_h().df == 1
    assert make_calc(values, groups, minimum=1).kruskal_wallis_h().df == 2


def test_single_group_is_insufficient(make_calc):
    calc = make_calc([1, 2, 3], [2, 2, 2])
    kw = calc.kruskal_wallis_h()
    assert (kw.h, kw.df, kw.p_value) == (None, None, None)
    assert calc.metadata().insufficient_reasons == (GROUP_SINGLE,)


def test_empty_data(make_calc):
    calc = make_calc([None, "a"], [1, 2])
    assert calc.kruskal_wallis_h().h is None
    assert calc.metadata().insufficient_reasons == (DATA_EMPTY,)


def test_all_tied(make_calc):
    calc = make_calc([5, 5, 5, 5], [1, 1, 2, 2])
    assert calc.kruskal_wallis_h().h is None
    assert TIES_ALL in calc.metadata().insufficient_reasons


def test_output(make_calc):
    out = make_calc([1, 2, 3, 4], [1, 1, 2, 2]).output()
    assert out["testStatisticsKruskalWallisH"]["df"] == 1
    assert out["ranks"]["groups"][-1]["label"] == "Total"
    assert out["ranks"]["groups"][0]["meanRank"] == 1.5


def test_float_group_codes_match_user_missing_codes(scale, nominal):
    calc = KIndependentSamplesCalculator(
        variable1=scale("y"),
        data1=[1, 2, 3, 4, 5, 6],
        variable2=nominal("g", missing=MissingSpec(discrete=frozenset({9}))),
        data2=[1.0, 1.0, 2.0, 2.0, 9.0, 9.0],
    )
    assert list(calc.grouped()) == [1.0, 2.0]
    assert calc.kruskal_wallis_h().df == 1
