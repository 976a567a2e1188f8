"""
npstat.core.names
=================

Typed names shared across the package.

- `Measure`: an Enum for variable measurement levels.
- `AnalysisType`: the closed set of analysis families a request can name.
- `VariableName`: NewType wrapper for clarity.
- Common `Literal` tags for insufficient-data reasons (extend per calculator).

Examples
--------
>>> from npstat.core.names import Measure, AnalysisType
>>> Measure.SCALE.value
'scale'
>>> AnalysisType("runs") is AnalysisType.RUNS
True
"""

from __future__ import annotations
from enum import Enum
from typing import Literal, NewType


class Measure(str, Enum):
    """Measurement levels of a variable.

    - NOMINAL / ORDINAL: coded categories
    - SCALE: continuous numeric values
    - DATE: numeric date serials
    """

    NOMINAL = "nominal"
    ORDINAL = "ordinal"
    SCALE = "scale"
    DATE = "date"

    @property
    def is_numeric(self) -> bool:
        return self in (Measure.SCALE, Measure.DATE)


class AnalysisType(str, Enum):
    """Analysis families understood by the dispatcher."""

    CHI_SQUARE = "chiSquare"
    RUNS = "runs"
    TWO_INDEPENDENT_SAMPLES = "twoIndependentSamples"
    TWO_RELATED_SAMPLES = "twoRelatedSamples"
    K_INDEPENDENT_SAMPLES = "kIndependentSamples"
    K_RELATED_SAMPLES = "kRelatedSamples"
    DESCRIPTIVE_STATISTICS = "descriptiveStatistics"


class CutPoint(str, Enum):
    """Cut points available to the runs test."""

    MEDIAN = "median"
    MEAN = "mean"
    MODE = "mode"
    CUSTOM = "custom"


VariableName = NewType("VariableName", str)

# Insufficient-data tags.
EmptyTag = Literal["data:empty"]
SingleCaseTag = Literal["data:single"]
EmptyGroupTag = Literal["group:empty"]
SingleGroupTag = Literal["group:single"]
SingleCategoryTag = Literal["category:single"]
AllTiedTag = Literal["ties:all"]
ZeroDifferenceTag = Literal["diff:zero"]
TiedRowsTag = Literal["rows:tied"]
ConstantBinaryTag = Literal["binary:constant"]

DATA_EMPTY = "data:empty"
DATA_SINGLE = "data:single"
GROUP_EMPTY = "group:empty"
GROUP_SINGLE = "group:single"
CATEGORY_SINGLE = "category:single"
TIES_ALL = "ties:all"
DIFF_ZERO = "diff:zero"
ROWS_TIED = "rows:tied"
BINARY_CONSTANT = "binary:constant"


def runs_constant_tag(cut: str) -> str:
    """Tag for a runs test whose dichotomised sequence forms a single run."""
    return f"runs:constant:{cut}"


def runs_no_variance_tag(cut: str) -> str:
    """Tag for a runs test whose run count has zero null variance."""
    return f"runs:novariance:{cut}"
