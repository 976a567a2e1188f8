"""
npstat.api.nonparametric
========================

Nonparametric tests on plain sequences.

Each function builds a request for one analysis family, runs it through a
fresh `Dispatcher` and returns the merged result facets. Configuration
problems raise `ConfigurationError`; insufficient data is reported in the
``metadata`` facet.

Examples
--------
>>> from npstat.api.nonparametric import chi_square_test, two_related_samples_test
>>> chi_square_test([1, 1, 1, 2, 2, 3])["testStatistics"]["df"]
2
>>> res = two_related_samples_test([1, 2, 3], [1, 2, 3])
>>> res["testStatisticsWilcoxon"]["pValue"], res["metadata"]["insufficientReasons"]
(1.0, ['diff:zero'])
"""

from __future__ import annotations
from typing import Any, Dict, Optional, Sequence, Union

from npstat.core.names import AnalysisType, Measure
from npstat.core.variables import Variable
from npstat.runtime.dispatcher import Dispatcher
from npstat.runtime.requests import AnalysisRequest

VariableLike = Union[str, Variable, None]


def _as_variable(variable: VariableLike, default_name: str, measure: Measure = Measure.SCALE) -> Variable:
    if isinstance(variable, Variable):
        return variable
    return Variable(name=variable or default_name, measure=measure)


def _run(analysis_type: AnalysisType, describe: bool, **fields: Any) -> Dict[str, Any]:
    types = [analysis_type.value]
    if describe:
        types.insert(0, AnalysisType.DESCRIPTIVE_STATISTICS.value)
    message = {"analysisType": types, **fields}
    return Dispatcher().run(AnalysisRequest.from_message(message))


def chi_square_test(
    data: Sequence[Any],
    variable: VariableLike = None,
    *,
    lower: Optional[int] = None,
    upper: Optional[int] = None,
    expected: Optional[Sequence[float]] = None,
    describe: bool = False,
) -> Dict[str, Any]:
    """
    Chi-square goodness-of-fit test.

    Args:
        data: Raw values
        variable: Variable definition or name
        lower, upper: Category range; categories come from the data when omitted
        expected: Expected-value weights, one per category; equal when omitted
        describe: Also attach descriptive statistics

    Returns:
        Result facets: ``frequencies``, ``testStatistics``, ``metadata``
    """
    options: Dict[str, Any] = {}
    if lower is not None and upper is not None:
        options["expectedRange"] = {"getFromData": False, "useSpecifiedRange": True}
        options["rangeValue"] = {"lowerValue": lower, "upperValue": upper}
    if expected is not None:
        options["expectedValue"] = {"allCategoriesEqual": False, "values": True}
        options["expectedValueList"] = list(expected)
    return _run(
        AnalysisType.CHI_SQUARE,
        describe,
        variable=_as_variable(variable, "variable", Measure.NOMINAL),
        data=data,
        options=options,
    )


def runs_test(
    data: Sequence[Any],
    variable: VariableLike = None,
    *,
    cut_points: Sequence[str] = ("median",),
    custom_value: Optional[float] = None,
    describe: bool = False,
) -> Dict[str, Any]:
    """Runs test for randomness at each of ``cut_points`` (median, mean, mode, custom)."""
    options: Dict[str, Any] = {"cutPoint": {cut: True for cut in cut_points}}
    if custom_value is not None:
        options["customValue"] = custom_value
    return _run(AnalysisType.RUNS, describe, variable=_as_variable(variable, "variable"), data=data, options=options)


def two_independent_samples_test(
    data: Sequence[Any],
    groups: Sequence[Any],
    group1: Any,
    group2: Any,
    variable: VariableLike = None,
    grouping_variable: VariableLike = None,
    *,
    mann_whitney_u: bool = True,
    kolmogorov_smirnov_z: bool = False,
    describe: bool = False,
) -> Dict[str, Any]:
    """Mann-Whitney U and/or Kolmogorov-Smirnov Z between two group codes."""
    options = {
        "group1": group1,
        "group2": group2,
        "testType": {"mannWhitneyU": mann_whitney_u, "kolmogorovSmirnovZ": kolmogorov_smirnov_z},
    }
    return _run(
        AnalysisType.TWO_INDEPENDENT_SAMPLES,
        describe,
        variable1=_as_variable(variable, "variable"),
        data1=data,
        variable2=_as_variable(grouping_variable, "group", Measure.NOMINAL),
        data2=groups,
        options=options,
    )


def two_related_samples_test(
    first: Sequence[Any],
    second: Sequence[Any],
    variable1: VariableLike = None,
    variable2: VariableLike = None,
    *,
    wilcoxon: bool = True,
    sign: bool = False,
    describe: bool = False,
) -> Dict[str, Any]:
    """Wilcoxon signed-rank and/or sign test on ``second − first``."""
    return _run(
        AnalysisType.TWO_RELATED_SAMPLES,
        describe,
        variable1=_as_variable(variable1, "variable1"),
        data1=first,
        variable2=_as_variable(variable2, "variable2"),
        data2=second,
        options={"testType": {"wilcoxon": wilcoxon, "sign": sign}},
    )


def k_independent_samples_test(
    data: Sequence[Any],
    groups: Sequence[Any],
    variable: VariableLike = None,
    grouping_variable: VariableLike = None,
    *,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
    describe: bool = False,
) -> Dict[str, Any]:
    """Kruskal-Wallis H across the groups, optionally restricted to [minimum, maximum]."""
    options: Dict[str, Any] = {"testType": {"kruskalWallisH": True}}
    if minimum is not None and maximum is not None:
        options.update(minimum=minimum, maximum=maximum)
    return _run(
        AnalysisType.K_INDEPENDENT_SAMPLES,
        describe,
        variable1=_as_variable(variable, "variable"),
        data1=data,
        variable2=_as_variable(grouping_variable, "group", Measure.NOMINAL),
        data2=groups,
        options=options,
    )


def k_related_samples_test(
    data: Sequence[Sequence[Any]],
    variables: Optional[Sequence[VariableLike]] = None,
    *,
    friedman: bool = True,
    kendalls_w: bool = False,
    cochrans_q: bool = False,
    success_threshold: float = 0.0,
    describe: bool = False,
) -> Dict[str, Any]:
    """Friedman, Kendall's W and/or Cochran's Q over k aligned series."""
    names = list(variables) if variables is not None else [None] * len(data)
    batch = [_as_variable(v, f"variable{i + 1}") for i, v in enumerate(names)]
    options = {
        "testType": {"friedman": friedman, "kendallsW": kendalls_w, "cochransQ": cochrans_q},
        "successThreshold": success_threshold,
    }
    return _run(
        AnalysisType.K_RELATED_SAMPLES,
        describe,
        batchVariable=batch,
        batchData=list(data),
        options=options,
    )


def describe(*series: Sequence[Any], variables: Optional[Sequence[VariableLike]] = None) -> Dict[str, Any]:
    """Descriptive statistics for each series independently."""
    names = list(variables) if variables is not None else [None] * len(series)
    batch = [_as_variable(v, f"variable{i + 1}") for i, v in enumerate(names)]
    return _run(
        AnalysisType.DESCRIPTIVE_STATISTICS,
        False,
        batchVariable=batch,
        batchData=list(series),
    )
