"""
npstat — a nonparametric test engine.

Classical rank and count based tests share most of their machinery: values
are filtered for validity against each variable's missing-value definition,
ranked with average ties, and turned into a statistic whose null
distribution is known exactly or asymptotically. npstat keeps that shared
machinery in one place and builds one calculator per test family on top.

A request names one or more analysis families and carries the variables and
raw series they need. The dispatcher builds the matching calculators, merges
their result facets into one report and answers with a success or error
response. Too little data is never an error: it is reported in each
report's metadata so the caller can render a notice instead of a failure.

Example
-------
>>> import npstat
>>> assert hasattr(npstat, "core")
>>> assert hasattr(npstat, "stats")
>>> assert hasattr(npstat, "runtime")
"""

from npstat import core, stats, runtime  # noqa: F401
