"""
npstat.core.validity
====================

Validity filtering of raw series.

A raw value is kept when it is numeric-parseable and not user-missing for its
variable. Series that are analysed together (pairs, groups, k conditions) are
filtered case-wise: an index survives only when every series is valid there.

All functions are pure and never raise for empty results.

Examples
--------
>>> from npstat.core.variables import Variable
>>> v = Variable.from_dict({"name": "x", "measure": "scale",
...                         "missing": {"discrete": ["9"]}})
>>> valid_sample([1, " 2 ", "abc", None, "", 9], v)
(1.0, 2.0)
>>> valid_pairs([1, 2, 3], v, [4, None, 6], v)
((1.0, 3.0), (4.0, 6.0))
"""

from __future__ import annotations
import math
from numbers import Real
from typing import Any, List, Optional, Sequence, Tuple

from npstat.core.variables import Variable

ValidSample = Tuple[float, ...]


def coerce_numeric(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Real):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def is_missing(value: Any, variable: Optional[Variable]) -> bool:
    """Check whether ``value`` is system- or user-missing for ``variable``."""
    numeric_type = variable is not None and variable.measure.is_numeric
    if value is None:
        return True
    if numeric_type and isinstance(value, str) and not value.strip():
        return True
    if variable is None or variable.missing is None:
        return False

    spec = variable.missing
    number = coerce_numeric(value)
    for missing_value in spec.discrete:
        if str(value) == str(missing_value):
            return True
        if number is not None:
            if number == coerce_numeric(missing_value):
                return True

    if numeric_type and spec.range is not None and number is not None:
        if number in spec.range:
            return True
    return False


def valid_value(value: Any, variable: Optional[Variable]) -> Optional[float]:
    """Return the numeric value when valid, otherwise None."""
    if is_missing(value, variable):
        return None
    return coerce_numeric(value)


def valid_mask(series: Sequence[Any], variable: Optional[Variable]) -> List[bool]:
    """Per-index validity flags for one series."""
    return [valid_value(value, variable) is not None for value in series]


def valid_sample(series: Sequence[Any], variable: Optional[Variable]) -> ValidSample:
    """Filter a single series down to its valid numeric values."""
    out = []
    for value in series:
        number = valid_value(value, variable)
        if number is not None:
            out.append(number)
    return tuple(out)


def valid_rows(
    series: Sequence[Sequence[Any]],
    variables: Sequence[Optional[Variable]],
) -> List[Tuple[float, ...]]:
    """Complete-case rows across any number of aligned series.

    Indices beyond the shortest series are dropped.

    Args:
        series: Aligned raw series, one per variable
        variables: Variable definitions, positionally matching ``series``

    Returns:
        One tuple per retained case, holding the k valid values
    """
    if not series:
        return []
    if len(variables) != len(series):
        raise ValueError("series and variables must have the same length")

    length = min(len(s) for s in series)
    rows = []
    for i in range(length):
        row = []
        for values, variable in zip(series, variables):
            number = valid_value(values[i], variable)
            if number is None:
                break
            row.append(number)
        else:
            rows.append(tuple(row))
    return rows


def valid_pairs(
    first: Sequence[Any],
    first_variable: Optional[Variable],
    second: Sequence[Any],
    second_variable: Optional[Variable],
) -> Tuple[ValidSample, ValidSample]:
    """Complete-case filtering of two aligned series."""
    rows = valid_rows([first, second], [first_variable, second_variable])
    return tuple(r[0] for r in rows), tuple(r[1] for r in rows)
