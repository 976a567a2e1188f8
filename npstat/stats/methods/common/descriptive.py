"""
npstat.stats.methods.common.descriptive
=======================================

Summary statistics used by the descriptive helper and by the runs test cut
points. These functions return None rather than raising when a quantity is
undefined for the sample size at hand.
"""

from __future__ import annotations
import math
from collections import Counter
from typing import Optional, Sequence


def mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return math.fsum(values) / len(values)


def sample_std(values: Sequence[float]) -> Optional[float]:
    """Sample standard deviation with an n − 1 denominator."""
    n = len(values)
    if n < 2:
        return None
    m = math.fsum(values) / n
    return math.sqrt(math.fsum((x - m) ** 2 for x in values) / (n - 1))


def standard_error(values: Sequence[float]) -> Optional[float]:
    sd = sample_std(values)
    if sd is None:
        return None
    return sd / math.sqrt(len(values))


def median(values: Sequence[float]) -> Optional[float]:
    """Middle value, or the mean of the two middle values."""
    if not values:
        return None
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def mode(values: Sequence[float]) -> Optional[float]:
    """Most frequent value; the smallest one when several share the count.

    Examples:
        >>> mode([3.0, 1.0, 3.0, 1.0, 2.0])
        1.0
    """
    if not values:
        return None
    counts = Counter(values)
    top = max(counts.values())
    return min(v for v, c in counts.items() if c == top)


def percentile(values: Sequence[float], p: float) -> Optional[float]:
    """Weighted-average percentile at position (n + 1)·p / 100.

    The two order statistics around the position are interpolated linearly;
    positions outside [1, n] are clamped to the extremes.

    Examples:
        >>> percentile([1.0, 2.0, 3.0, 4.0], 25)
        1.25
        >>> percentile([1.0, 2.0, 3.0, 4.0], 50)
        2.5
        >>> percentile([5.0], 75)
        5.0
    """
    if not values:
        return None
    ordered = sorted(values)
    n = len(ordered)
    position = (n + 1) * p / 100.0
    if position <= 1:
        return ordered[0]
    if position >= n:
        return ordered[-1]
    lower = int(math.floor(position))
    fraction = position - lower
    return ordered[lower - 1] + fraction * (ordered[lower] - ordered[lower - 1])
