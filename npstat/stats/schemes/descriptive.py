"""
npstat.stats.schemes.descriptive
================================

Descriptive statistics attached to the hypothesis tests.

Each series is summarised on its own valid values: N, missing count, mean,
sample standard deviation, standard error of the mean, extremes and the
quartiles (weighted-average percentiles at (n + 1)·p).

Examples
--------
>>> from npstat.core.variables import Variable
>>> calc = DescriptiveStatisticsCalculator(
...     variables=[Variable("x")], data=[[1, 2, 3, 4, None]])
>>> s = calc.summaries()[0]
>>> s.n, s.valid_n, s.missing, s.mean, s.percentile25
(5, 4, 1, 2.5, 1.25)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from npstat.core.components import Calculator, TestResult
from npstat.core.names import DATA_EMPTY
from npstat.core.validity import valid_sample
from npstat.core.variables import Variable
from npstat.stats.methods.common import descriptive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeriesSummary(TestResult):
    variable: str
    label: str
    n: int
    valid_n: int
    missing: int
    mean: Optional[float]
    std_dev: Optional[float]
    std_error: Optional[float]
    min: Optional[float]
    max: Optional[float]
    percentile25: Optional[float]
    percentile50: Optional[float]
    percentile75: Optional[float]


def summarise(variable: Variable, series: Sequence[Any]) -> SeriesSummary:
    values = valid_sample(series, variable)
    return SeriesSummary(
        variable=variable.name,
        label=variable.label,
        n=len(series),
        valid_n=len(values),
        missing=len(series) - len(values),
        mean=descriptive.mean(values),
        std_dev=descriptive.sample_std(values),
        std_error=descriptive.standard_error(values),
        min=min(values) if values else None,
        max=max(values) if values else None,
        percentile25=descriptive.percentile(values, 25),
        percentile50=descriptive.percentile(values, 50),
        percentile75=descriptive.percentile(values, 75),
    )


@dataclass(kw_only=True)
class DescriptiveStatisticsCalculator(Calculator):
    """Summaries for one or more variables, each over its own valid values."""

    variables: Sequence[Variable]
    data: Sequence[Sequence[Any]]

    def summaries(self) -> Tuple[SeriesSummary, ...]:
        return self._cached("summaries", self._compute_summaries)

    def _compute_summaries(self) -> Tuple[SeriesSummary, ...]:
        out = []
        for variable, series in zip(self.variables, self.data):
            summary = summarise(variable, series)
            logger.debug("descriptives %s: valid N=%d", variable.name, summary.valid_n)
            if summary.valid_n == 0:
                self._flag(DATA_EMPTY)
            out.append(summary)
        return tuple(out)

    def output(self) -> Dict[str, Any]:
        return {
            "descriptiveStatistics": [s.to_payload() for s in self.summaries()],
            "metadata": {
                **self.metadata().to_payload(),
                "variableName": ", ".join(v.name for v in self.variables),
            },
        }
