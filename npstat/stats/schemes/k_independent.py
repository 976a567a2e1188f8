"""
npstat.stats.schemes.k_independent
==================================

Kruskal-Wallis H test for k independent samples.

All valid cases whose group code lies in the optional [minimum, maximum]
range are pooled and ranked with average ties. With R_g the rank sum and
n_g the size of group g:

    H = 12 / (N(N + 1)) · Σ R_g² / n_g − 3(N + 1)
    H' = H / (1 − Σ(t³ − t) / (N³ − N))
    df = (number of groups) − 1

Examples
--------
>>> from npstat.core.variables import Variable
>>> calc = KIndependentSamplesCalculator(
...     variable1=Variable("y"), data1=[1, 2, 3, 4, 5, 6],
...     variable2=Variable("g"), data2=[1, 1, 2, 2, 3, 3],
... )
>>> kw = calc.kruskal_wallis_h()
>>> round(kw.h, 6), kw.df
(4.571429, 2)
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from npstat.core.components import Calculator, TestResult, option_flags
from npstat.core.names import DATA_EMPTY, GROUP_SINGLE, TIES_ALL
from npstat.core.validity import coerce_numeric, valid_pairs
from npstat.core.variables import Variable
from npstat.stats.methods.common.distributions import chi_square_sf
from npstat.stats.methods.common.ranks import rank_table, tie_correction

logger = logging.getLogger(__name__)

TOTAL_LABEL = "Total"


@dataclass(frozen=True)
class GroupRankRow(TestResult):
    value: Any
    label: str
    n: int
    mean_rank: Optional[float]
    sum_ranks: Optional[float]


@dataclass(frozen=True)
class KruskalWallisResult(TestResult):
    h: Optional[float]
    df: Optional[int]
    p_value: Optional[float]


@dataclass(kw_only=True)
class KIndependentSamplesCalculator(Calculator):
    """
    Compare a test variable across the groups of a grouping variable.

    Options:
        minimum, maximum: Inclusive group-code range, used only when both are given
        testType: {"kruskalWallisH"} flags
    """

    variable1: Variable
    data1: Sequence[Any]
    variable2: Variable
    data2: Sequence[Any]

    @property
    def test_type(self) -> Dict[str, bool]:
        return option_flags(self.options.get("testType"), {"kruskalWallisH": True})

    @property
    def group_range(self) -> Optional[Tuple[float, float]]:
        low = coerce_numeric(self.options.get("minimum"))
        high = coerce_numeric(self.options.get("maximum"))
        if low is None or high is None:
            return None
        return low, high

    def grouped(self) -> Dict[float, Tuple[float, ...]]:
        """Valid values per group code, ordered by code."""
        return self._cached("grouped", self._compute_grouped)

    def _compute_grouped(self) -> Dict[float, Tuple[float, ...]]:
        values, codes = valid_pairs(self.data1, self.variable1, self.data2, self.variable2)
        bounds = self.group_range
        buckets: Dict[float, list] = {}
        for value, code in zip(values, codes):
            if bounds is not None and not bounds[0] <= code <= bounds[1]:
                continue
            buckets.setdefault(code, []).append(value)
        grouped = {code: tuple(buckets[code]) for code in sorted(buckets)}

        n = sum(len(g) for g in grouped.values())
        logger.debug("k independent samples %s: N=%d, groups=%d", self.variable1.name, n, len(grouped))
        if n == 0:
            self._flag(DATA_EMPTY)
        elif len(grouped) == 1:
            self._flag(GROUP_SINGLE)
        return grouped

    def pooled(self) -> Tuple[float, ...]:
        return tuple(v for group in self.grouped().values() for v in group)

    def ranks(self) -> Tuple[GroupRankRow, ...]:
        return self._cached("ranks", self._compute_ranks)

    def _compute_ranks(self) -> Tuple[GroupRankRow, ...]:
        grouped = self.grouped()
        table = rank_table(self.pooled())
        rows = []
        for code, values in grouped.items():
            total = table.rank_sum(values)
            rows.append(
                GroupRankRow(code, self.variable2.value_label(code), len(values), total / len(values), total)
            )
        rows.append(GroupRankRow(TOTAL_LABEL, TOTAL_LABEL, table.n, None, None))
        return tuple(rows)

    def kruskal_wallis_h(self) -> KruskalWallisResult:
        return self._cached("kruskal_wallis_h", self._compute_h)

    def _compute_h(self) -> KruskalWallisResult:
        grouped = self.grouped()
        pooled = self.pooled()
        n = len(pooled)
        if n == 0 or len(grouped) <= 1:
            return KruskalWallisResult(None, None, None)

        group_rows = [row for row in self.ranks() if row.value != TOTAL_LABEL]
        spread = sum(row.sum_ranks**2 / row.n for row in group_rows)
        h = 12.0 / (n * (n + 1)) * spread - 3 * (n + 1)

        ties = tie_correction(rank_table(pooled).tie_sizes)
        if ties > 0:
            denominator = 1 - ties / (n**3 - n)
            if denominator <= 0:
                logger.warning("kruskal-wallis %s: every value is tied", self.variable1.name)
                self._flag(TIES_ALL)
                return KruskalWallisResult(None, None, None)
            h /= denominator

        df = len(grouped) - 1
        return KruskalWallisResult(h, df, chi_square_sf(h, df))

    def output(self) -> Dict[str, Any]:
        statistics = self.kruskal_wallis_h() if self.test_type.get("kruskalWallisH") else None
        return {
            "variable1": self.variable1.to_dict(),
            "variable2": self.variable2.to_dict(),
            "ranks": {"groups": [row.to_payload() for row in self.ranks()]},
            "testStatisticsKruskalWallisH": statistics.to_payload() if statistics else None,
            "metadata": {
                **self.metadata().to_payload(),
                "variableName": self.variable1.name,
                "variableLabel": self.variable1.label,
            },
        }
