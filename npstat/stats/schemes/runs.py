"""
npstat.stats.schemes.runs
=========================

One-sample runs test for randomness.

Each valid value is classified as below (x < c) or at-or-above (x ≥ c) a cut
value c taken from the sample median, mean, mode, or a custom number. The
number of runs R is compared against its null expectation:

    μ = 1 + 2·n₁·n₂ / N
    σ² = 2·n₁·n₂·(2·n₁·n₂ − N) / (N²·(N − 1))
    Z = (R ± 0.5 − μ) / σ        (correction applied toward μ)

A sequence forming a single run has no variation and is reported as
insufficient data without Z or p-value.

Examples
--------
>>> from npstat.core.variables import Variable
>>> calc = RunsCalculator(variable=Variable("x"), data=list(range(1, 11)))
>>> result = calc.runs_test()["median"]
>>> result.test_value, result.cases_below, result.cases_above, result.runs
(5.5, 5, 5, 2)
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from npstat.core.components import Calculator, TestResult, option_flags
from npstat.core.names import CutPoint, DATA_EMPTY, DATA_SINGLE, runs_constant_tag, runs_no_variance_tag
from npstat.core.validity import coerce_numeric, valid_sample
from npstat.core.variables import Variable
from npstat.stats.methods.common import descriptive
from npstat.stats.methods.common.distributions import two_sided_normal_p

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunsResult(TestResult):
    """Runs test outcome for one cut point."""

    test_value: Optional[float]
    cases_below: int
    cases_above: int
    total: int
    runs: int
    expected_runs: Optional[float] = None
    variance_runs: Optional[float] = None
    z: Optional[float] = None
    p_value: Optional[float] = None


def count_runs(values: Sequence[float], cut: float) -> int:
    """Number of maximal blocks of consecutive values on one side of ``cut``."""
    if not values:
        return 0
    runs = 1
    for prev, cur in zip(values, values[1:]):
        if (cur < cut) != (prev < cut):
            runs += 1
    return runs


def runs_z(runs: int, n_below: int, n_above: int) -> Tuple[float, float, Optional[float]]:
    """Return (μ, σ², Z) with continuity correction; Z is None when σ = 0."""
    n = n_below + n_above
    product = 2.0 * n_below * n_above
    expected = 1.0 + product / n
    variance = product * (product - n) / (n * n * (n - 1))
    if variance <= 0:
        return expected, variance, None
    corrected = float(runs)
    if runs < expected:
        corrected += 0.5
    elif runs > expected:
        corrected -= 0.5
    return expected, variance, (corrected - expected) / math.sqrt(variance)


@dataclass(kw_only=True)
class RunsCalculator(Calculator):
    """
    Compute runs tests for every selected cut point.

    Options:
        cutPoint: {"median", "mean", "mode", "custom"} flags (median by default)
        customValue: cut value used when ``custom`` is selected
    """

    variable: Variable
    data: Sequence[Any]

    @property
    def cut_points(self) -> Dict[str, bool]:
        return option_flags(
            self.options.get("cutPoint"),
            {cp.value: cp is CutPoint.MEDIAN for cp in CutPoint},
        )

    @property
    def custom_value(self) -> float:
        value = coerce_numeric(self.options.get("customValue"))
        return 0.0 if value is None else value

    def valid_data(self) -> Tuple[float, ...]:
        return self._cached("valid_data", self._compute_valid)

    def _compute_valid(self) -> Tuple[float, ...]:
        values = valid_sample(self.data, self.variable)
        if not values:
            self._flag(DATA_EMPTY)
        elif len(values) == 1:
            self._flag(DATA_SINGLE)
        return values

    def total_n(self) -> int:
        return len(self.data)

    def valid_n(self) -> int:
        return len(self.valid_data())

    def cut_value(self, cut: str) -> Optional[float]:
        values = self.valid_data()
        if cut == CutPoint.MEDIAN.value:
            return self._cached("median", lambda: descriptive.median(values))
        if cut == CutPoint.MEAN.value:
            return self._cached("mean", lambda: descriptive.mean(values))
        if cut == CutPoint.MODE.value:
            return self._cached("mode", lambda: descriptive.mode(values))
        return self.custom_value

    def runs_for(self, cut: str) -> RunsResult:
        return self._cached(f"runs:{cut}", lambda: self._compute_runs(cut))

    def _compute_runs(self, cut: str) -> RunsResult:
        values = self.valid_data()
        n = len(values)
        if n <= 1:
            return RunsResult(None, 0, 0, n, 0)

        test_value = self.cut_value(cut)
        below = sum(1 for v in values if v < test_value)
        above = n - below
        runs = count_runs(values, test_value)

        if runs == 1:
            logger.warning("runs test on %s: single run at %s cut", self.variable.name, cut)
            self._flag(runs_constant_tag(cut))
            return RunsResult(test_value, below, above, n, runs)

        expected, variance, z = runs_z(runs, below, above)
        if z is None:
            self._flag(runs_no_variance_tag(cut))
        p_value = None if z is None else two_sided_normal_p(z)
        return RunsResult(test_value, below, above, n, runs, expected, variance, z, p_value)

    def runs_test(self) -> Dict[str, RunsResult]:
        """Results keyed by the selected cut point names."""
        return {cut: self.runs_for(cut) for cut, on in self.cut_points.items() if on}

    def output(self) -> Dict[str, Any]:
        runs_test = {cut: result.to_payload() for cut, result in self.runs_test().items()}
        return {
            "variable1": self.variable.to_dict(),
            "runsTest": runs_test,
            "metadata": {
                **self.metadata().to_payload(),
                "variableName": self.variable.name,
                "variableLabel": self.variable.label,
            },
        }
