"""
Test calculators, one module per test family.

Each calculator takes variables, raw series and an options record, filters
the series to valid values, and exposes one accessor per result facet plus an
`output()` that renders every requested facet with its metadata.

Available schemes:
- `goodness_of_fit`: Chi-square goodness-of-fit
- `runs`: One-sample runs test
- `two_independent`: Mann-Whitney U and Kolmogorov-Smirnov Z
- `two_related`: Wilcoxon signed-rank and sign test
- `k_independent`: Kruskal-Wallis H
- `k_related`: Friedman, Kendall's W and Cochran's Q
- `descriptive`: Descriptive statistics
"""

from npstat.stats.schemes.descriptive import DescriptiveStatisticsCalculator
from npstat.stats.schemes.goodness_of_fit import ChiSquareCalculator
from npstat.stats.schemes.k_independent import KIndependentSamplesCalculator
from npstat.stats.schemes.k_related import KRelatedSamplesCalculator
from npstat.stats.schemes.runs import RunsCalculator
from npstat.stats.schemes.two_independent import TwoIndependentSamplesCalculator
from npstat.stats.schemes.two_related import TwoRelatedSamplesCalculator

__all__ = [
    "ChiSquareCalculator",
    "RunsCalculator",
    "TwoIndependentSamplesCalculator",
    "TwoRelatedSamplesCalculator",
    "KIndependentSamplesCalculator",
    "KRelatedSamplesCalculator",
    "DescriptiveStatisticsCalculator",
]
