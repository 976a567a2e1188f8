import pytest

from npstat.core.names import CATEGORY_SINGLE, DATA_EMPTY
from npstat.stats.schemes.goodness_of_fit import ChiSquareCalculator


def test_equal_expected_frequencies(nominal):
    calc = ChiSquareCalculator(variable=nominal("q1"), data=[1, 1, 1, 2, 2, 3])
    freq = calc.frequencies()
    assert freq.category_list == (1.0, 2.0, 3.0)
    assert freq.observed_n == (3, 2, 1)
    assert freq.expected_n == (2.0, 2.0, 2.0)
    assert freq.residual == (1.0, 0.0, -1.0)

    stats = calc.test_statistics()
    assert stats.chi_square == 1.0
    assert stats.df == 2
    assert stats.p_value == pytest.approx(0.6065306597)
    assert not calc.metadata().has_insufficient_data


def test_specified_range_truncates_and_drops_outside_values(nominal):
    calc = ChiSquareCalculator(
        variable=nominal(),
        data=[1, 1, 2, 2.7, 5, 0],
        options={
            "expectedRange": {"getFromData": False, "useSpecifiedRange": True},
            "rangeValue": {"lowerValue": 1, "upperValue": 4},
        },
    )
    freq = calc.frequencies()
    assert freq.category_list == (1.0, 2.0, 3.0, 4.0)
    assert freq.observed_n == (2, 2, 0, 0)
    assert freq.n == 4
    stats = calc.test_statistics()
    assert stats.chi_square == pytest.approx(4.0)
    assert stats.df == 3


def test_expected_value_list_weights(nominal):
    calc = ChiSquareCalculator(
        variable=nominal(),
        data=[1, 1, 1, 2, 2, 3],
        options={
            "expectedValue": {"allCategoriesEqual": False, "values": True},
            "expectedValueList": [{"value": 1}, 2, "3"],
        },
    )
    assert calc.expected_list_error() is None
    assert calc.frequencies().expected_n == pytest.approx((1.0, 2.0, 3.0))
    assert calc.test_statistics().chi_square == pytest.approx(4.0 + 4.0 / 3.0)


def test_expected_value_list_length_mismatch(nominal):
    calc = ChiSquareCalculator(
        variable=nominal(),
        data=[1, 2, 3],
        options={"expectedValue": {"values": True}, "expectedValueList": [1, 1]},
    )
    assert "2 entries" in calc.expected_list_error()
    assert calc.frequencies().expected_n is None
    assert calc.test_statistics().chi_square is None


def test_single_category_is_insufficient(nominal):
    calc = ChiSquareCalculator(variable=nominal(), data=[2, 2, 2])
    stats = calc.test_statistics()
    assert stats.chi_square is None and stats.df is None and stats.p_value is None
    assert calc.metadata().insufficient_reasons == (CATEGORY_SINGLE,)


def test_empty_data_is_insufficient(nominal):
    calc = ChiSquareCalculator(variable=nominal(), data=[None, "", "x"])
    out = calc.output()
    assert out["testStatistics"] == {"chiSquare": None, "df": None, "pValue": None}
    assert out["metadata"]["hasInsufficientData"] is True
    assert DATA_EMPTY in out["metadata"]["insufficientReasons"]


def test_output_wire_shape(nominal):
    out = ChiSquareCalculator(variable=nominal("q1", label="Question 1"), data=[1, 2]).output()
    assert out["variable1"] == {"name": "q1", "label": "Question 1", "measure": "nominal"}
    assert out["frequencies"]["categoryList"] == [1.0, 2.0]
    assert out["frequencies"]["observedN"] == [1, 1]
    assert out["metadata"]["variableLabel"] == "Question 1"
