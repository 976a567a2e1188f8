"""
npstat.core.errors
==================

Exceptions raised for configuration problems.

Data insufficiency is never an exception: calculators report it through
result metadata. Only request configuration errors are raised, and only the
dispatcher layer raises them.
"""

from __future__ import annotations


class NpstatError(Exception):
    """Base class for all npstat errors."""


class ConfigurationError(NpstatError, ValueError):
    """The request cannot be computed as configured."""


class UnknownAnalysisTypeError(ConfigurationError):
    """A request named an analysis family that does not exist."""

    def __init__(self, analysis_type: object) -> None:
        self.analysis_type = analysis_type
        super().__init__(f"Unknown analysis type: {analysis_type!r}")


class InvalidRequestError(ConfigurationError):
    """A request is missing the variables or data an analysis needs."""
