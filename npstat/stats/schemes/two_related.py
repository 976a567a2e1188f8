"""
npstat.stats.schemes.two_related
================================

Tests for two related samples (paired observations).

Differences are taken as second − first over complete cases. Zero
differences are ties: they are counted but excluded from ranking.

**Wilcoxon signed-rank:**
    T = min(ΣR⁺, ΣR⁻),  E[T] = n(n + 1)/4
    Var(T) = n(n + 1)(2n + 1)/24 − Σt(t² − 1)/48
with a 0.5 continuity correction toward E[T].

**Sign test:**
Exact two-sided binomial p-value for up to 25 non-zero differences,
otherwise a continuity-corrected normal approximation.

Examples
--------
>>> from npstat.core.variables import Variable
>>> calc = TwoRelatedSamplesCalculator(
...     variable1=Variable("pre"), data1=[3, 4, 5],
...     variable2=Variable("post"), data2=[3, 4, 5],
... )
>>> w = calc.wilcoxon()
>>> w.z_value, w.p_value
(0.0, 1.0)
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from npstat.config import settings
from npstat.core.components import Calculator, TestResult, option_flags
from npstat.core.names import DATA_EMPTY, DIFF_ZERO
from npstat.core.validity import valid_pairs
from npstat.core.variables import Variable
from npstat.stats.methods.common.distributions import (
    binomial_cdf,
    binomial_sf,
    clamp_probability,
    continuity_corrected,
    normal_cdf,
    two_sided_normal_p,
)
from npstat.stats.methods.common.ranks import (
    rank_table,
    signed_rank_tie_correction,
)

logger = logging.getLogger(__name__)

NO_DIFFERENCES_MESSAGE = (
    "There are no differences between the paired values; the test cannot be performed."
)


@dataclass(frozen=True)
class SignedRanks(TestResult):
    n: int
    mean_rank: Optional[float]
    sum_ranks: float


@dataclass(frozen=True)
class RanksFrequencies(TestResult):
    negative: SignedRanks
    positive: SignedRanks
    ties: int
    total: int


@dataclass(frozen=True)
class WilcoxonResult(TestResult):
    t: Optional[float]
    z_value: Optional[float]
    p_value: Optional[float]
    n: int
    message: Optional[str] = None


@dataclass(frozen=True)
class SignTestResult(TestResult):
    negative: int
    positive: int
    ties: int
    n: int
    z_value: Optional[float]
    p_value: Optional[float]
    exact: bool
    message: Optional[str] = None


def sign_test_p(positive: int, negative: int, exact_max_n: int) -> Tuple[Optional[float], float, bool]:
    """Return (z, two-sided p, exact) for the sign counts.

    Examples:
        >>> sign_test_p(0, 5, 25)
        (None, 0.0625, True)
    """
    n = positive + negative
    if n <= exact_max_n:
        p = 2.0 * min(binomial_cdf(positive, n), binomial_sf(positive, n))
        return None, clamp_probability(p), True
    smaller = min(positive, negative)
    z = (smaller + 0.5 - n / 2.0) / (0.5 * math.sqrt(n))
    return z, clamp_probability(2.0 * normal_cdf(z)), False


@dataclass(kw_only=True)
class TwoRelatedSamplesCalculator(Calculator):
    """
    Compare two paired variables.

    Options:
        testType: {"wilcoxon", "sign"} flags
    """

    variable1: Variable
    data1: Sequence[Any]
    variable2: Variable
    data2: Sequence[Any]

    @property
    def test_type(self) -> Dict[str, bool]:
        return option_flags(self.options.get("testType"), {"wilcoxon": True, "sign": False})

    def pairs(self) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
        return self._cached("pairs", self._compute_pairs)

    def _compute_pairs(self) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
        first, second = valid_pairs(self.data1, self.variable1, self.data2, self.variable2)
        logger.debug("two related samples %s/%s: N=%d", self.variable1.name, self.variable2.name, len(first))
        if not first:
            self._flag(DATA_EMPTY)
        return first, second

    def differences(self) -> Tuple[float, ...]:
        first, second = self.pairs()
        return self._cached("differences", lambda: tuple(b - a for a, b in zip(first, second)))

    def ranks_frequencies(self) -> RanksFrequencies:
        return self._cached("ranks_frequencies", self._compute_ranks)

    def _compute_ranks(self) -> RanksFrequencies:
        diffs = self.differences()
        nonzero = [d for d in diffs if d != 0]
        table = rank_table([abs(d) for d in nonzero])
        pos = [table.rank_of(abs(d)) for d in nonzero if d > 0]
        neg = [table.rank_of(abs(d)) for d in nonzero if d < 0]

        def summary(ranks):
            total = float(sum(ranks))
            return SignedRanks(len(ranks), total / len(ranks) if ranks else None, total)

        if diffs and not nonzero:
            self._flag(DIFF_ZERO)
        return RanksFrequencies(
            negative=summary(neg),
            positive=summary(pos),
            ties=len(diffs) - len(nonzero),
            total=len(diffs),
        )

    def wilcoxon(self) -> WilcoxonResult:
        return self._cached("wilcoxon", self._compute_wilcoxon)

    def _compute_wilcoxon(self) -> WilcoxonResult:
        freq = self.ranks_frequencies()
        n = freq.positive.n + freq.negative.n
        if freq.total == 0:
            return WilcoxonResult(None, None, None, 0)
        if n == 0:
            return WilcoxonResult(None, 0.0, 1.0, 0, NO_DIFFERENCES_MESSAGE)

        t = min(freq.positive.sum_ranks, freq.negative.sum_ranks)
        expected = n * (n + 1) / 4
        abs_diffs = [abs(d) for d in self.differences() if d != 0]
        ties = signed_rank_tie_correction(rank_table(abs_diffs).tie_sizes)
        variance = n * (n + 1) * (2 * n + 1) / 24 - ties / 48
        if variance <= 0:
            return WilcoxonResult(t, None, None, n)

        z = continuity_corrected(t - expected) / math.sqrt(variance)
        return WilcoxonResult(t, z, two_sided_normal_p(z), n)

    def sign_test(self) -> SignTestResult:
        return self._cached("sign_test", self._compute_sign)

    def _compute_sign(self) -> SignTestResult:
        diffs = self.differences()
        positive = sum(1 for d in diffs if d > 0)
        negative = sum(1 for d in diffs if d < 0)
        ties = len(diffs) - positive - negative
        n = positive + negative
        if not diffs:
            return SignTestResult(0, 0, 0, 0, None, None, False)
        if n == 0:
            self._flag(DIFF_ZERO)
            return SignTestResult(0, 0, ties, 0, 0.0, 1.0, False, NO_DIFFERENCES_MESSAGE)

        z, p, exact = sign_test_p(positive, negative, settings.SIGN_EXACT_MAX_N)
        return SignTestResult(negative, positive, ties, n, z, p, exact)

    def output(self) -> Dict[str, Any]:
        test_type = self.test_type
        out: Dict[str, Any] = {
            "variable1": self.variable1.to_dict(),
            "variable2": self.variable2.to_dict(),
            "ranksFrequencies": None,
            "testStatisticsWilcoxon": None,
            "testStatisticsSign": None,
        }
        if test_type.get("wilcoxon"):
            out["ranksFrequencies"] = self.ranks_frequencies().to_payload()
            out["testStatisticsWilcoxon"] = self.wilcoxon().to_payload()
        if test_type.get("sign"):
            out["testStatisticsSign"] = self.sign_test().to_payload()
        out["metadata"] = {
            **self.metadata().to_payload(),
            "variableName": self.variable1.name,
            "variableLabel": self.variable1.label,
            "variable2Name": self.variable2.name,
        }
        return out
