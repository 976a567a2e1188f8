import math

import pytest

from npstat.core.names import DATA_EMPTY
from npstat.stats.methods.common import descriptive
from npstat.stats.schemes.descriptive import DescriptiveStatisticsCalculator


def test_summary_values(scale):
    calc = DescriptiveStatisticsCalculator(variables=[scale("x", discrete=[99])], data=[[4, 1, 99, 3, 2, None]])
    s = calc.summaries()[0]
    assert (s.n, s.valid_n, s.missing) == (6, 4, 2)
    assert s.mean == 2.5
    assert s.std_dev == pytest.approx(math.sqrt(5 / 3))
    assert s.std_error == pytest.approx(math.sqrt(5 / 3) / 2)
    assert (s.min, s.max) == (1.0, 4.0)
    assert (s.percentile25, s.percentile50, s.percentile75) == (1.25, 2.5, 3.75)


def test_series_are_summarised_independently(scale):
    calc = DescriptiveStatisticsCalculator(
        variables=[scale("a"), scale("b")],
        data=[[1, 2, 3], [10, None]],
    )
    a, b = calc.summaries()
    assert a.valid_n == 3
    assert b.valid_n == 1
    assert b.std_dev is None and b.std_error is None
    assert b.percentile75 == 10.0


def test_empty_series(scale):
    calc = DescriptiveStatisticsCalculator(variables=[scale()], data=[[None, ""]])
    s = calc.summaries()[0]
    assert s.mean is None and s.min is None and s.percentile50 is None
    assert calc.metadata().insufficient_reasons == (DATA_EMPTY,)


def test_output_keys(scale):
    out = DescriptiveStatisticsCalculator(variables=[scale("x")], data=[[1, 2]]).output()
    row = out["descriptiveStatistics"][0]
    assert {"n", "validN", "mean", "stdDev", "stdError", "percentile25", "percentile75"} <= set(row)
    assert row["variable"] == "x"


def test_percentile_positions():
    values = [15.0, 20.0, 35.0, 40.0, 50.0]
    # positions 1.5, 3 and 4.5
    assert descriptive.percentile(values, 25) == 17.5
    assert descriptive.percentile(values, 50) == 35.0
    assert descriptive.percentile(values, 75) == 45.0
    assert descriptive.percentile(values, 1) == 15.0
    assert descriptive.percentile(values, 99) == 50.0


def test_median_and_mode():
    assert descriptive.median([3.0, 1.0, 2.0]) == 2.0
    assert descriptive.median([4.0, 1.0, 2.0, 3.0]) == 2.5
    assert descriptive.mode([2.0, 2.0, 1.0, 1.0]) == 1.0
    assert descriptive.mode([]) is None
