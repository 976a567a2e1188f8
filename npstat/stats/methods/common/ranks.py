"""
npstat.stats.methods.common.ranks
=================================

Rank engine shared by every rank-based test.

Values are sorted ascending and each run of equal values receives the mean of
the 1-based positions it spans. The multiset of tie-group sizes is returned
alongside the ranks for the variance corrections downstream.

Examples
--------
>>> table = rank_table([3.0, 1.0, 3.0, 2.0])
>>> table.ranks
{1.0: 1.0, 2.0: 2.0, 3.0: 3.5}
>>> table.tie_sizes
(2,)
>>> rank_values([10.0, 20.0, 10.0])
[1.5, 3.0, 1.5]
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple


@dataclass(frozen=True)
class RankTable:
    """Average ranks per distinct value plus tie-group sizes."""

    ranks: Dict[float, float]
    tie_sizes: Tuple[int, ...]
    n: int

    def rank_of(self, value: float) -> float:
        return self.ranks[value]

    def rank_sum(self, values: Iterable[float]) -> float:
        return sum(self.ranks[v] for v in values)


def rank_table(values: Sequence[float]) -> RankTable:
    """Assign average ranks to a sample.

    Args:
        values: Unordered numeric sample

    Returns:
        RankTable mapping each distinct value to its rank
    """
    ordered = sorted(values)
    n = len(ordered)
    ranks: Dict[float, float] = {}
    ties: List[int] = []
    i = 0
    while i < n:
        j = i + 1
        while j < n and ordered[j] == ordered[i]:
            j += 1
        # positions i+1 .. j
        ranks[ordered[i]] = (i + 1 + j) / 2
        if j - i > 1:
            ties.append(j - i)
        i = j
    return RankTable(ranks=ranks, tie_sizes=tuple(ties), n=n)


def rank_values(values: Sequence[float]) -> List[float]:
    """Positional average ranks for ``values``."""
    table = rank_table(values)
    return [table.ranks[v] for v in values]


def tie_sizes(values: Iterable[float]) -> Tuple[int, ...]:
    """Sizes of the groups of equal values with more than one member."""
    return tuple(c for c in Counter(values).values() if c > 1)


def tie_correction(sizes: Iterable[int]) -> float:
    """Σ(t³ − t) over tie groups."""
    return float(sum(t**3 - t for t in sizes))


def signed_rank_tie_correction(sizes: Iterable[int]) -> float:
    """Σ t(t² − 1) over tie groups (Wilcoxon form)."""
    return float(sum(t * (t * t - 1) for t in sizes))
