"""
npstat.stats.schemes.two_independent
====================================

Tests for two independent samples defined by a grouping variable.

**Mann-Whitney U:**
The two designated groups are pooled and ranked with average ties:
    U₁ = R₁ − n₁(n₁ + 1)/2,   U = min(U₁, n₁n₂ − U₁)
    Var(U) = n₁n₂(N + 1)/12 − n₁n₂·Σ(t³ − t) / (12N(N − 1))
    Z = (U − n₁n₂/2) / √Var(U)
The exact two-sided p-value is added when the group sizes are small enough
for the exact distribution to be tractable.

**Kolmogorov-Smirnov Z:**
Empirical CDFs of both groups are compared over the union of observed values:
    Z = D · √(n₁n₂ / (n₁ + n₂))
with the asymptotic Kolmogorov tail probability as p-value.

Examples
--------
>>> from npstat.core.variables import Variable
>>> calc = TwoIndependentSamplesCalculator(
...     variable1=Variable("score"), data1=[1, 2, 3, 4, 5, 6],
...     variable2=Variable("group"), data2=[1, 1, 1, 2, 2, 2],
...     options={"group1": 1, "group2": 2},
... )
>>> mw = calc.mann_whitney_u()
>>> mw.u, mw.p_exact
(0.0, 0.1)
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from npstat.core.components import Calculator, TestResult, option_flags
from npstat.core.names import DATA_EMPTY, GROUP_EMPTY, TIES_ALL
from npstat.core.validity import coerce_numeric, valid_pairs
from npstat.core.variables import Variable
from npstat.stats.methods.common.distributions import kolmogorov_sf, two_sided_normal_p
from npstat.stats.methods.common.ranks import rank_table, tie_correction
from npstat.stats.methods.exact.mann_whitney import (
    exact_is_feasible,
    exact_u_distribution,
    exact_u_p_value,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupRanks(TestResult):
    label: str
    n: int
    mean_rank: Optional[float]
    sum_ranks: float


@dataclass(frozen=True)
class TwoGroupRanks(TestResult):
    group1: GroupRanks
    group2: GroupRanks
    total: int


@dataclass(frozen=True)
class MannWhitneyResult(TestResult):
    u: Optional[float]
    w: Optional[float]
    z: Optional[float]
    p_value: Optional[float]
    p_exact: Optional[float] = None
    show_exact: bool = False


@dataclass(frozen=True)
class KolmogorovSmirnovResult(TestResult):
    d_absolute: Optional[float]
    d_positive: Optional[float]
    d_negative: Optional[float]
    d_stat: Optional[float]
    p_value: Optional[float]


def ks_differences(first: Sequence[float], second: Sequence[float]) -> Tuple[float, float, float]:
    """Largest absolute, positive and negative differences F₁(x) − F₂(x)."""
    a = sorted(first)
    b = sorted(second)
    n1, n2 = len(a), len(b)
    d_abs = d_pos = d_neg = 0.0
    i = j = 0
    for x in sorted(set(a) | set(b)):
        while i < n1 and a[i] <= x:
            i += 1
        while j < n2 and b[j] <= x:
            j += 1
        diff = i / n1 - j / n2
        d_abs = max(d_abs, abs(diff))
        d_pos = max(d_pos, diff)
        d_neg = min(d_neg, diff)
    return d_abs, d_pos, d_neg


@dataclass(kw_only=True)
class TwoIndependentSamplesCalculator(Calculator):
    """
    Compare a test variable between two groups of a grouping variable.

    Options:
        group1, group2: Codes of the two groups in the grouping variable
        testType: {"mannWhitneyU", "kolmogorovSmirnovZ"} flags
    """

    variable1: Variable
    data1: Sequence[Any]
    variable2: Variable
    data2: Sequence[Any]

    @property
    def test_type(self) -> Dict[str, bool]:
        return option_flags(
            self.options.get("testType"),
            {"mannWhitneyU": True, "kolmogorovSmirnovZ": False},
        )

    @property
    def group_codes(self) -> Tuple[Optional[float], Optional[float]]:
        return (
            coerce_numeric(self.options.get("group1")),
            coerce_numeric(self.options.get("group2")),
        )

    # ---- data ----

    def groups(self) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
        return self._cached("groups", self._split_groups)

    def _split_groups(self) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
        values, codes = valid_pairs(self.data1, self.variable1, self.data2, self.variable2)
        g1, g2 = self.group_codes
        first = tuple(v for v, c in zip(values, codes) if c == g1)
        second = tuple(v for v, c in zip(values, codes) if c == g2)
        logger.debug(
            "two independent samples %s: n1=%d, n2=%d",
            self.variable1.name, len(first), len(second),
        )
        if not first and not second:
            self._flag(DATA_EMPTY)
        elif not first or not second:
            self._flag(GROUP_EMPTY)
        return first, second

    def pooled(self) -> Tuple[float, ...]:
        first, second = self.groups()
        return first + second

    # ---- facets ----

    def ranks(self) -> TwoGroupRanks:
        return self._cached("ranks", self._compute_ranks)

    def _compute_ranks(self) -> TwoGroupRanks:
        first, second = self.groups()
        table = rank_table(self.pooled())
        r1 = table.rank_sum(first)
        r2 = table.rank_sum(second)
        g1, g2 = self.group_codes
        return TwoGroupRanks(
            group1=GroupRanks(
                self.variable2.value_label(g1), len(first), r1 / len(first) if first else None, r1
            ),
            group2=GroupRanks(
                self.variable2.value_label(g2), len(second), r2 / len(second) if second else None, r2
            ),
            total=len(first) + len(second),
        )

    def exact_distribution(self) -> List[int]:
        first, second = self.groups()
        return self._cached(
            "exact_distribution", lambda: exact_u_distribution(len(first), len(second))
        )

    def mann_whitney_u(self) -> MannWhitneyResult:
        return self._cached("mann_whitney_u", self._compute_mann_whitney)

    def _compute_mann_whitney(self) -> MannWhitneyResult:
        first, second = self.groups()
        n1, n2 = len(first), len(second)
        if n1 == 0 or n2 == 0:
            return MannWhitneyResult(None, None, None, None)

        ranks = self.ranks()
        r1, r2 = ranks.group1.sum_ranks, ranks.group2.sum_ranks
        u1 = r1 - n1 * (n1 + 1) / 2
        u2 = n1 * n2 - u1
        u, w = (u1, r1) if u1 < u2 else (u2, r2)

        n = n1 + n2
        ties = tie_correction(rank_table(self.pooled()).tie_sizes)
        variance = n1 * n2 * (n + 1) / 12
        if ties > 0:
            variance -= n1 * n2 * ties / (12 * n * (n - 1))

        show_exact = exact_is_feasible(n1, n2)
        p_exact = exact_u_p_value(u, n1, n2, self.exact_distribution()) if show_exact else None
        logger.debug("mann-whitney %s: U=%s, exact=%s", self.variable1.name, u, show_exact)

        if variance <= 0:
            self._flag(TIES_ALL)
            return MannWhitneyResult(u, w, None, None, p_exact, show_exact)

        z = (u - n1 * n2 / 2) / math.sqrt(variance)
        return MannWhitneyResult(u, w, z, two_sided_normal_p(z), p_exact, show_exact)

    def kolmogorov_smirnov_z(self) -> KolmogorovSmirnovResult:
        return self._cached("kolmogorov_smirnov_z", self._compute_ks)

    def _compute_ks(self) -> KolmogorovSmirnovResult:
        first, second = self.groups()
        n1, n2 = len(first), len(second)
        if n1 == 0 or n2 == 0:
            return KolmogorovSmirnovResult(None, None, None, None, None)
        d_abs, d_pos, d_neg = ks_differences(first, second)
        d_stat = d_abs * math.sqrt(n1 * n2 / (n1 + n2))
        return KolmogorovSmirnovResult(d_abs, d_pos, d_neg, d_stat, kolmogorov_sf(d_stat))

    def output(self) -> Dict[str, Any]:
        test_type = self.test_type
        ranks = self.ranks()
        mann_whitney = self.mann_whitney_u() if test_type.get("mannWhitneyU") else None
        ks = self.kolmogorov_smirnov_z() if test_type.get("kolmogorovSmirnovZ") else None
        return {
            "variable1": self.variable1.to_dict(),
            "variable2": self.variable2.to_dict(),
            "ranks": ranks.to_payload(),
            "testStatisticsMannWhitneyU": mann_whitney.to_payload() if mann_whitney else None,
            "testStatisticsKolmogorovSmirnovZ": ks.to_payload() if ks else None,
            "metadata": {
                **self.metadata().to_payload(),
                "variableName": self.variable1.name,
                "variableLabel": self.variable1.label,
            },
        }
