import pytest
from scipy.stats import friedmanchisquare

from npstat.core.names import BINARY_CONSTANT, DATA_SINGLE, ROWS_TIED
from npstat.stats.schemes.k_related import (
    KRelatedSamplesCalculator,
    cochran_q,
    friedman_kendall,
)


@pytest.fixture
def make_calc(scale):
    def make(columns, variables=None, **options):
        variables = variables or [scale(f"c{i + 1}") for i in range(len(columns))]
        return KRelatedSamplesCalculator(variables=variables, data=columns, options=options)

    return make


def test_friedman_hand_computed():
    rows = [[1, 2, 3], [2, 3, 1], [1, 3, 2], [1, 2, 3]]
    fk = friedman_kendall(rows)
    # R = (5, 10, 9): 12·206 / (4·3·4) − 3·4·4
    assert fk.chi_square == pytest.approx(3.5)
    assert fk.df == 2
    assert fk.p_value == pytest.approx(0.1737739435)
    assert fk.w == pytest.approx(3.5 / 8)


def test_friedman_tie_correction_matches_reference():
    a = [1, 2, 3, 4, 5, 2]
    b = [2, 2, 4, 3, 6, 2]
    c = [3, 1, 4, 5, 6, 1]
    fk = friedman_kendall(list(zip(a, b, c)))
    reference = friedmanchisquare(a, b, c)
    assert fk.chi_square == pytest.approx(reference.statistic, rel=1e-12)
    assert fk.p_value == pytest.approx(reference.pvalue, rel=1e-9)


def test_kendall_w_agrees_with_friedman(make_calc):
    columns = [[1, 2, 3, 4, 5, 2], [2, 2, 4, 3, 6, 2], [3, 1, 4, 5, 6, 1]]
    out = make_calc(columns, testType={"friedman": True, "kendallsW": True}).output()
    friedman = out["testStatisticsFriedman"]
    kendall = out["testStatisticsKendallsW"]
    assert kendall["chiSquare"] == friedman["chiSquare"]
    assert kendall["pValue"] == friedman["pValue"]
    assert kendall["w"] * 6 * 2 == pytest.approx(friedman["chiSquare"])


def test_perfect_concordance():
    fk = friedman_kendall([[1.0, 2.0, 3.0]] * 5)
    assert fk.w == pytest.approx(1.0)


def test_fully_tied_rows(make_calc):
    calc = make_calc([[1, 2, 3], [1, 2, 3]])
    assert calc.friedman().chi_square is None
    assert calc.metadata().insufficient_reasons == (ROWS_TIED,)


def test_condition_ranks(make_calc):
    ranks = make_calc([[1, 2, 1], [2, 3, 3], [3, 1, 2]]).ranks()
    assert [r.label for r in ranks] == ["c1", "c2", "c3"]
    assert sum(r.sum_ranks for r in ranks) == pytest.approx(3 * 6)
    # rows (1, 2, 3), (2, 3, 1), (1, 3, 2) have no ties
    assert [r.sum_ranks for r in ranks] == [4.0, 8.0, 6.0]
    assert ranks[1].mean_rank == pytest.approx(8 / 3)


def test_cochran_q_formula():
    rows = [(1, 1, 0), (1, 0, 0), (1, 1, 1), (0, 0, 0), (1, 0, 1)]
    q, df = cochran_q(rows)
    assert q == pytest.approx(8 / 3)
    assert df == 2


def test_cochran_q_with_threshold(make_calc):
    columns = [[6, 7, 9, 1, 8], [8, 2, 6, 0, 3], [1, 3, 9, 2, 7]]
    calc = make_calc(columns, testType={"cochransQ": True}, successThreshold=5)
    result = calc.cochrans_q()
    assert result.q == pytest.approx(8 / 3)
    assert result.df == 2
    assert [(c.failures, c.successes) for c in calc.frequencies()] == [(1, 4), (3, 2), (3, 2)]


def test_cochran_q_default_threshold_is_zero(make_calc):
    columns = [[1, 1, 1, 0, 1], [1, 0, 1, 0, 0], [0, 0, 1, 0, 1]]
    assert make_calc(columns, testType={"cochransQ": True}).cochrans_q().q == pytest.approx(8 / 3)


def test_cochran_q_constant_responses(make_calc):
    calc = make_calc([[1, 2, 3], [4, 5, 6]], testType={"cochransQ": True})
    assert calc.cochrans_q().q is None
    assert BINARY_CONSTANT in calc.metadata().insufficient_reasons


def test_missing_values_per_variable(make_calc, scale):
    variables = [scale("a", discrete=[99]), scale("b"), scale("c")]
    calc = make_calc([[1, 99, 3, 4], [2, 3, 1, 5], [3, 1, 2, None]], variables=variables)
    assert calc.rows() == [(1.0, 2.0, 3.0), (3.0, 1.0, 2.0)]


def test_single_case_is_insufficient(make_calc):
    calc = make_calc([[1], [2], [3]], testType={"friedman": True, "cochransQ": True})
    assert calc.friedman().chi_square is None
    assert calc.cochrans_q().q is None
    assert calc.metadata().insufficient_reasons == (DATA_SINGLE,)


def test_output_shape(make_calc):
    out = make_calc([[1, 2], [2, 1], [3, 3]], testType={"cochransQ": True}).output()
    assert out["ranks"] is None
    assert out["testStatisticsFriedman"] is None
    assert len(out["frequencies"]["groups"]) == 3
    assert out["metadata"]["variableName"] == "c1, c2, c3"
