"""
npstat.stats.methods.common.distributions
=========================================

Distribution functions used for p-values.

Thin wrappers over ``scipy.stats`` and ``scipy.special``, including the
Kolmogorov limiting distribution used by the two-sample Kolmogorov-Smirnov
Z. Every returned probability is clamped to [0, 1].
"""

from __future__ import annotations

from scipy.special import kolmogorov
from scipy.stats import binom, chi2, norm


def clamp_probability(p: float) -> float:
    """Clamp ``p`` to the unit interval."""
    return min(1.0, max(0.0, float(p)))


def normal_cdf(z: float) -> float:
    """Standard normal CDF Φ(z)."""
    return float(norm.cdf(z))


def two_sided_normal_p(z: float) -> float:
    """Two-sided p-value 2(1 − Φ(|z|))."""
    # sf avoids cancellation for large |z|
    return clamp_probability(2.0 * float(norm.sf(abs(z))))


def chi_square_sf(statistic: float, df: int) -> float:
    """Upper-tail probability of the chi-square distribution."""
    return clamp_probability(float(chi2.sf(statistic, df)))


def binomial_cdf(k: int, n: int, p: float = 0.5) -> float:
    """P(X ≤ k) for X ~ Binomial(n, p)."""
    return clamp_probability(float(binom.cdf(k, n, p)))


def binomial_sf(k: int, n: int, p: float = 0.5) -> float:
    """P(X ≥ k) for X ~ Binomial(n, p)."""
    return clamp_probability(float(binom.sf(k - 1, n, p)))


def continuity_corrected(deviation: float, correction: float = 0.5) -> float:
    """Shrink a deviation from its expectation by ``correction`` toward zero.

    Examples:
        >>> continuity_corrected(2.0), continuity_corrected(-2.0), continuity_corrected(0.25)
        (1.5, -1.5, 0.0)
    """
    if deviation > 0:
        return max(deviation - correction, 0.0)
    if deviation < 0:
        return min(deviation + correction, 0.0)
    return 0.0


def kolmogorov_sf(d: float) -> float:
    """Asymptotic Kolmogorov tail probability 2Σ(−1)^(i−1) exp(−2i²d²).

    Examples:
        >>> kolmogorov_sf(0.0)
        1.0
        >>> round(kolmogorov_sf(1.36), 3)
        0.049
        >>> round(kolmogorov_sf(1.0), 3)
        0.27
    """
    if d <= 0:
        return 1.0
    return clamp_probability(float(kolmogorov(d)))
