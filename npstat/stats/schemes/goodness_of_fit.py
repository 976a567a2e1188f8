"""
npstat.stats.schemes.goodness_of_fit
====================================

Chi-square goodness-of-fit test for one variable.

Categories come either from the data (sorted distinct values) or from a
specified integer range. Expected frequencies are equal across categories by
default, or proportional to a user-supplied list of values:

    E_i = N · v_i / Σv
    χ² = Σ (O_i − E_i)² / E_i,   df = k − 1

Options (wire names):
    expectedRange:     {"getFromData": bool, "useSpecifiedRange": bool}
    rangeValue:        {"lowerValue": int, "upperValue": int}
    expectedValue:     {"allCategoriesEqual": bool, "values": bool}
    expectedValueList: list of positive numbers, one per category

Examples
--------
>>> from npstat.core.variables import Variable
>>> calc = ChiSquareCalculator(variable=Variable("q1"), data=[1, 1, 1, 2, 2, 3])
>>> stats = calc.test_statistics()
>>> stats.chi_square, stats.df
(1.0, 2)
>>> calc.frequencies().expected_n
(2.0, 2.0, 2.0)
"""

from __future__ import annotations
import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from npstat.core.components import Calculator, TestResult
from npstat.core.names import CATEGORY_SINGLE, DATA_EMPTY
from npstat.core.validity import coerce_numeric, valid_sample
from npstat.core.variables import Variable
from npstat.stats.methods.common.distributions import chi_square_sf

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChiSquareFrequencies(TestResult):
    """Observed and expected counts per category."""

    category_list: Tuple[float, ...]
    observed_n: Tuple[int, ...]
    expected_n: Optional[Tuple[float, ...]]
    residual: Optional[Tuple[float, ...]]
    n: int


@dataclass(frozen=True)
class ChiSquareStatistics(TestResult):
    """χ² statistic, degrees of freedom and asymptotic p-value."""

    chi_square: Optional[float]
    df: Optional[int]
    p_value: Optional[float]


@dataclass(kw_only=True)
class ChiSquareCalculator(Calculator):
    """
    Compute a chi-square goodness-of-fit test.

    Attributes:
        variable: The test variable
        data: Raw values of the test variable
    """

    variable: Variable
    data: Sequence[Any]

    # ---- options ----

    @property
    def uses_specified_range(self) -> bool:
        expected_range = self.options.get("expectedRange") or {}
        return bool(expected_range.get("useSpecifiedRange"))

    @property
    def range_bounds(self) -> Optional[Tuple[int, int]]:
        rng = self.options.get("rangeValue") or {}
        lower = coerce_numeric(rng.get("lowerValue"))
        upper = coerce_numeric(rng.get("upperValue"))
        if lower is None or upper is None:
            return None
        return int(lower), int(upper)

    @property
    def uses_expected_values(self) -> bool:
        expected = self.options.get("expectedValue") or {}
        return bool(expected.get("values")) and not expected.get("allCategoriesEqual")

    def _expected_weights(self) -> List[Optional[float]]:
        raw = self.options.get("expectedValueList") or []
        weights = []
        for item in raw:
            if isinstance(item, dict):
                item = item.get("value")
            weights.append(coerce_numeric(item))
        return weights

    # ---- data ----

    def valid_data(self) -> Tuple[float, ...]:
        return self._cached("valid_data", lambda: valid_sample(self.data, self.variable))

    def _categorised(self) -> Tuple[Tuple[float, ...], List[float]]:
        """Category list and the values that fall in one of them."""
        values = self.valid_data()
        if not self.uses_specified_range:
            return tuple(sorted(set(values))), list(values)

        bounds = self.range_bounds
        if bounds is None or bounds[0] >= bounds[1]:
            return (), []
        lower, upper = bounds
        kept = []
        for v in values:
            code = float(math.trunc(v))
            if lower <= code <= upper:
                kept.append(code)
        return tuple(float(c) for c in range(lower, upper + 1)), kept

    def expected_list_error(self) -> Optional[str]:
        """Describe why the expected-value list cannot be used, if it cannot."""
        if not self.uses_expected_values:
            return None
        categories, _ = self._categorised()
        weights = self._expected_weights()
        if len(weights) != len(categories):
            return (
                f"Expected value list has {len(weights)} entries but variable "
                f"{self.variable.name!r} has {len(categories)} categories"
            )
        if any(w is None or w <= 0 for w in weights):
            return "Expected values must be positive numbers"
        return None

    # ---- facets ----

    def frequencies(self) -> ChiSquareFrequencies:
        return self._cached("frequencies", self._compute_frequencies)

    def _compute_frequencies(self) -> ChiSquareFrequencies:
        categories, kept = self._categorised()
        counts = Counter(kept)
        observed = tuple(counts.get(c, 0) for c in categories)
        n = len(kept)
        logger.debug("chi-square %s: N=%d, categories=%d", self.variable.name, n, len(categories))

        if n == 0:
            self._flag(DATA_EMPTY)
        if len(categories) <= 1:
            self._flag(CATEGORY_SINGLE)
        if n == 0 or not categories:
            return ChiSquareFrequencies(categories, observed, None, None, n)

        if self.uses_expected_values:
            if self.expected_list_error() is not None:
                return ChiSquareFrequencies(categories, observed, None, None, n)
            weights = [float(w) for w in self._expected_weights()]
            total = math.fsum(weights)
            expected = tuple(n * w / total for w in weights)
        else:
            expected = tuple(n / len(categories) for _ in categories)

        residual = tuple(o - e for o, e in zip(observed, expected))
        return ChiSquareFrequencies(categories, observed, expected, residual, n)

    def test_statistics(self) -> ChiSquareStatistics:
        return self._cached("test_statistics", self._compute_statistics)

    def _compute_statistics(self) -> ChiSquareStatistics:
        freq = self.frequencies()
        if freq.n == 0 or len(freq.category_list) <= 1 or freq.expected_n is None:
            return ChiSquareStatistics(None, None, None)

        chi_square = 0.0
        for o, e in zip(freq.observed_n, freq.expected_n):
            if e > 0:
                chi_square += (o - e) ** 2 / e
        df = len(freq.category_list) - 1
        return ChiSquareStatistics(chi_square, df, chi_square_sf(chi_square, df))

    def output(self) -> Dict[str, Any]:
        frequencies = self.frequencies()
        statistics = self.test_statistics()
        return {
            "variable1": self.variable.to_dict(),
            "frequencies": frequencies.to_payload(),
            "testStatistics": statistics.to_payload(),
            "metadata": {
                **self.metadata().to_payload(),
                "variableName": self.variable.name,
                "variableLabel": self.variable.label,
            },
        }
