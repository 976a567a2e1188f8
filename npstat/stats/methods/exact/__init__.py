"""
Exact (combinatorial) null distributions.
"""

from npstat.stats.methods.exact.mann_whitney import (
    exact_u_distribution,
    exact_u_p_value,
    exact_is_feasible,
)

__all__ = ["exact_u_distribution", "exact_u_p_value", "exact_is_feasible"]
