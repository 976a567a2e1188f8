"""
npstat.api - User-Friendly Facade
=================================

Function-per-test interface over the request/dispatcher machinery, for
callers holding plain Python sequences rather than wire messages.

Examples
--------
>>> from npstat.api import runs_test
>>> runs_test([1, 5, 1, 5, 1, 5])["runsTest"]["median"]["runs"]
6

Available functions (all in `npstat.api.nonparametric`):
- `chi_square_test()`
- `runs_test()`
- `two_independent_samples_test()`
- `two_related_samples_test()`
- `k_independent_samples_test()`
- `k_related_samples_test()`
- `describe()`
"""

from npstat.api.nonparametric import (
    chi_square_test,
    describe,
    k_independent_samples_test,
    k_related_samples_test,
    runs_test,
    two_independent_samples_test,
    two_related_samples_test,
)

__all__ = [
    "chi_square_test",
    "describe",
    "k_independent_samples_test",
    "k_related_samples_test",
    "runs_test",
    "two_independent_samples_test",
    "two_related_samples_test",
]
