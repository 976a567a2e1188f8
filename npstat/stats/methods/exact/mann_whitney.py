"""
npstat.stats.methods.exact.mann_whitney
=======================================

Exact null distribution of the Mann-Whitney U statistic.

``dp[i][j]`` holds the number of arrangements of ``i`` items from the first
group and ``j`` from the second that produce each value of U. It is built by
convolving ``dp[i][j-1]`` with ``dp[i-1][j]`` shifted by ``j``; rows and columns
with a zero index hold the single arrangement ``[1]``. Counts are exact Python
integers, so the distribution always sums to C(n1 + n2, n1).

Examples
--------
>>> exact_u_distribution(2, 2)
[1, 1, 2, 1, 1]
>>> exact_u_p_value(0, 3, 3)
0.1
"""

from __future__ import annotations
import math
from typing import List, Optional

from npstat.config import settings


def exact_u_distribution(n1: int, n2: int) -> List[int]:
    """Counts of U = 0 .. n1·n2 under the null hypothesis.

    Args:
        n1: Size of the first group
        n2: Size of the second group

    Returns:
        List where entry ``u`` counts the rank arrangements giving U = u
    """
    if n1 <= 0 or n2 <= 0:
        return [1]

    # Only the previous row is needed: prev[j] == dp[i-1][j].
    prev: List[List[int]] = [[1] for _ in range(n2 + 1)]
    for i in range(1, n1 + 1):
        row: List[List[int]] = [[1]]
        for j in range(1, n2 + 1):
            counts = [0] * (i * j + 1)
            for u, c in enumerate(row[j - 1]):
                counts[u] += c
            for u, c in enumerate(prev[j]):
                counts[u + j] += c
            row.append(counts)
        prev = row
    return prev[n2]


def exact_is_feasible(
    n1: int,
    n2: int,
    max_product: Optional[int] = None,
    max_span: Optional[float] = None,
) -> bool:
    """Whether the exact p-value is attempted for these group sizes."""
    max_product = settings.EXACT_MAX_PRODUCT if max_product is None else max_product
    max_span = settings.EXACT_MAX_SPAN if max_span is None else max_span
    product = n1 * n2
    return product < max_product and product / 2 + min(n1, n2) <= max_span


def exact_u_p_value(
    u_observed: float,
    n1: int,
    n2: int,
    distribution: Optional[List[int]] = None,
) -> float:
    """Two-sided exact p-value min(2·P(U ≤ U_obs), 1).

    ``distribution`` may be passed when the caller already holds it.
    """
    if n1 <= 0 or n2 <= 0:
        return 1.0
    counts = distribution if distribution is not None else exact_u_distribution(n1, n2)
    total = math.comb(n1 + n2, n1)
    upper = int(math.floor(u_observed + 1e-9))
    cumulative = sum(counts[: max(upper, -1) + 1])
    return min(2.0 * cumulative / total, 1.0)
