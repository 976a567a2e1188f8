"""
npstat.stats.schemes.k_related
==============================

Tests for k related samples: Friedman, Kendall's W and Cochran's Q.

Cases are complete-case rows across the k variables. For Friedman each row
is ranked on its own (average ties within the row) and the rank sums R_j per
condition give

    χ² = 12 / (n·k·(k + 1)) · Σ R_j² − 3n(k + 1)
    χ²' = χ² / (1 − Σ_rows Σ(t³ − t) / (n·k·(k² − 1))),   df = k − 1

Kendall's coefficient of concordance is W = χ²' / (n(k − 1)); both come out
of one `friedman_kendall()` call so they always agree.

Cochran's Q binarises each value as ``value > threshold`` and uses column
sums C_j and row sums R_i:

    Q = (k − 1)·(k·ΣC_j² − (ΣC_j)²) / (k·ΣC_j − ΣR_i²)

Examples
--------
>>> fk = friedman_kendall([[1.0, 2.0, 3.0], [1.0, 2.0, 3.0], [1.0, 2.0, 3.0]])
>>> fk.chi_square, fk.df, fk.w
(6.0, 2, 1.0)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from npstat.core.components import Calculator, TestResult, option_flags
from npstat.core.names import BINARY_CONSTANT, DATA_EMPTY, DATA_SINGLE, ROWS_TIED
from npstat.core.validity import coerce_numeric, valid_rows
from npstat.core.variables import Variable
from npstat.stats.methods.common.distributions import chi_square_sf
from npstat.stats.methods.common.ranks import rank_values, tie_correction, tie_sizes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConditionRanks(TestResult):
    label: str
    mean_rank: Optional[float]
    sum_ranks: float


@dataclass(frozen=True)
class FriedmanKendall(TestResult):
    """Friedman χ² and Kendall's W from one set of row ranks."""

    n: int
    chi_square: Optional[float]
    df: Optional[int]
    p_value: Optional[float]
    w: Optional[float]


@dataclass(frozen=True)
class BinaryCounts(TestResult):
    label: str
    failures: int
    successes: int


@dataclass(frozen=True)
class CochranResult(TestResult):
    n: int
    q: Optional[float]
    df: Optional[int]
    p_value: Optional[float]


def friedman_kendall(rows: Sequence[Sequence[float]]) -> FriedmanKendall:
    """Friedman's test and Kendall's W over raw (unranked) rows.

    Args:
        rows: One sequence of k values per case

    Returns:
        FriedmanKendall with None statistics when every row is fully tied
    """
    n = len(rows)
    k = len(rows[0]) if rows else 0
    if n == 0 or k < 2:
        return FriedmanKendall(n, None, None, None, None)

    sums = [0.0] * k
    row_ties = 0.0
    for row in rows:
        for j, rank in enumerate(rank_values(row)):
            sums[j] += rank
        row_ties += tie_correction(tie_sizes(row))

    chi_square = 12.0 * sum(r * r for r in sums) / (n * k * (k + 1)) - 3.0 * n * (k + 1)
    correction = 1.0 - row_ties / (n * k * (k * k - 1))
    if correction <= 0:
        return FriedmanKendall(n, None, None, None, None)
    chi_square /= correction

    df = k - 1
    return FriedmanKendall(n, chi_square, df, chi_square_sf(chi_square, df), chi_square / (n * (k - 1)))


def cochran_q(binary_rows: Sequence[Sequence[int]]) -> Tuple[Optional[float], Optional[int]]:
    """Return (Q, df) for 0/1 rows, or (None, None) when Q is undefined."""
    n = len(binary_rows)
    k = len(binary_rows[0]) if binary_rows else 0
    if n == 0 or k < 2:
        return None, None
    columns = [sum(row[j] for row in binary_rows) for j in range(k)]
    row_totals = [sum(row) for row in binary_rows]
    total = sum(columns)
    denominator = k * total - sum(r * r for r in row_totals)
    if denominator == 0:
        return None, None
    numerator = (k - 1) * (k * sum(c * c for c in columns) - total * total)
    return numerator / denominator, k - 1


@dataclass(kw_only=True)
class KRelatedSamplesCalculator(Calculator):
    """
    Compare k related variables measured on the same cases.

    Options:
        testType: {"friedman", "kendallsW", "cochransQ"} flags
        successThreshold: Cochran's Q counts values above it as successes (default 0)
    """

    variables: Sequence[Variable]
    data: Sequence[Sequence[Any]]

    @property
    def test_type(self) -> Dict[str, bool]:
        return option_flags(
            self.options.get("testType"),
            {"friedman": True, "kendallsW": False, "cochransQ": False},
        )

    @property
    def success_threshold(self) -> float:
        value = coerce_numeric(self.options.get("successThreshold"))
        return 0.0 if value is None else value

    @property
    def k(self) -> int:
        return len(self.variables)

    def rows(self) -> List[Tuple[float, ...]]:
        return self._cached("rows", self._compute_rows)

    def _compute_rows(self) -> List[Tuple[float, ...]]:
        rows = valid_rows(self.data, self.variables)
        logger.debug("k related samples: k=%d, N=%d", self.k, len(rows))
        if not rows:
            self._flag(DATA_EMPTY)
        elif len(rows) == 1:
            self._flag(DATA_SINGLE)
        return rows

    def _sufficient(self) -> bool:
        return len(self.rows()) >= 2 and self.k >= 2

    def ranks(self) -> Tuple[ConditionRanks, ...]:
        return self._cached("ranks", self._compute_ranks)

    def _compute_ranks(self) -> Tuple[ConditionRanks, ...]:
        rows = self.rows()
        sums = [0.0] * self.k
        for row in rows:
            for j, rank in enumerate(rank_values(row)):
                sums[j] += rank
        return tuple(
            ConditionRanks(v.display_label, s / len(rows) if rows else None, s)
            for v, s in zip(self.variables, sums)
        )

    def friedman(self) -> FriedmanKendall:
        """Friedman χ² and Kendall's W; the two facets share this result."""
        return self._cached("friedman", self._compute_friedman)

    def _compute_friedman(self) -> FriedmanKendall:
        rows = self.rows()
        if not self._sufficient():
            return FriedmanKendall(len(rows), None, None, None, None)
        result = friedman_kendall(rows)
        if result.chi_square is None:
            logger.warning("friedman: every row is fully tied")
            self._flag(ROWS_TIED)
        return result

    def binary_rows(self) -> List[Tuple[int, ...]]:
        threshold = self.success_threshold
        return self._cached(
            "binary_rows",
            lambda: [tuple(int(v > threshold) for v in row) for row in self.rows()],
        )

    def frequencies(self) -> Tuple[BinaryCounts, ...]:
        return self._cached("frequencies", self._compute_frequencies)

    def _compute_frequencies(self) -> Tuple[BinaryCounts, ...]:
        binary = self.binary_rows()
        counts = []
        for j, variable in enumerate(self.variables):
            successes = sum(row[j] for row in binary)
            counts.append(BinaryCounts(variable.display_label, len(binary) - successes, successes))
        return tuple(counts)

    def cochrans_q(self) -> CochranResult:
        return self._cached("cochrans_q", self._compute_cochran)

    def _compute_cochran(self) -> CochranResult:
        binary = self.binary_rows()
        if not self._sufficient():
            return CochranResult(len(binary), None, None, None)
        q, df = cochran_q(binary)
        if q is None:
            logger.warning("cochran's q: binarised responses do not vary within cases")
            self._flag(BINARY_CONSTANT)
            return CochranResult(len(binary), None, None, None)
        return CochranResult(len(binary), q, df, chi_square_sf(q, df))

    def output(self) -> Dict[str, Any]:
        test_type = self.test_type
        ranked = test_type.get("friedman") or test_type.get("kendallsW")
        out: Dict[str, Any] = {
            "variables": [v.to_dict() for v in self.variables],
            "ranks": {"groups": [r.to_payload() for r in self.ranks()]} if ranked else None,
            "frequencies": None,
            "testStatisticsFriedman": None,
            "testStatisticsKendallsW": None,
            "testStatisticsCochransQ": None,
        }
        if test_type.get("friedman"):
            fk = self.friedman()
            out["testStatisticsFriedman"] = {
                "n": fk.n, "chiSquare": fk.chi_square, "df": fk.df, "pValue": fk.p_value,
            }
        if test_type.get("kendallsW"):
            fk = self.friedman()
            out["testStatisticsKendallsW"] = {
                "n": fk.n, "w": fk.w, "chiSquare": fk.chi_square, "df": fk.df, "pValue": fk.p_value,
            }
        if test_type.get("cochransQ"):
            out["frequencies"] = {"groups": [c.to_payload() for c in self.frequencies()]}
            out["testStatisticsCochransQ"] = self.cochrans_q().to_payload()
        out["metadata"] = {
            **self.metadata().to_payload(),
            "variableName": ", ".join(v.name for v in self.variables),
        }
        return out
