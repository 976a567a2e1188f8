"""
npstat.stats.methods.common
===========================

Ranks, distribution functions and summary statistics shared by all schemes.
"""
