"""
npstat.core.variables
=====================

Variable definitions carried by every request.

A `Variable` is immutable for the lifetime of a request. Its `MissingSpec`
describes which raw values count as user-missing, and its `measure` decides
whether blank cells and numeric ranges are treated as missing.

Examples
--------
>>> from npstat.core.variables import Variable
>>> v = Variable.from_dict({"name": "score", "measure": "scale",
...                         "missing": {"discrete": [99], "range": None}})
>>> v.measure.is_numeric, v.missing.discrete
(True, frozenset({99}))
>>> v.display_label
'score'
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from npstat.core.names import Measure


@dataclass(frozen=True)
class ValueRange:
    """Inclusive numeric range of user-missing values."""

    min: float
    max: float

    def __contains__(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True)
class MissingSpec:
    """User-missing value definition: discrete values and/or one range."""

    discrete: frozenset = field(default_factory=frozenset)
    range: Optional[ValueRange] = None

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> Optional["MissingSpec"]:
        if not raw:
            return None
        discrete = frozenset(v for v in (raw.get("discrete") or ()) if v is not None)
        rng = raw.get("range")
        value_range = None
        if rng:
            try:
                value_range = ValueRange(float(rng["min"]), float(rng["max"]))
            except (KeyError, TypeError, ValueError):
                value_range = None
        return cls(discrete=discrete, range=value_range)


@dataclass(frozen=True)
class Variable:
    """A variable descriptor.

    Attributes:
        name: Column name
        label: Optional display label
        measure: Measurement level
        missing: User-missing definition (None if no user-missing values)
        values: Value labels as (code, label) pairs
    """

    name: str
    label: str = ""
    measure: Measure = Measure.SCALE
    missing: Optional[MissingSpec] = None
    values: Tuple[Tuple[Any, str], ...] = ()

    @property
    def display_label(self) -> str:
        return self.label or self.name

    def value_label(self, code: Any) -> str:
        """Return the label attached to ``code`` or its string form."""
        for value, label in self.values:
            if value == code:
                return label
            try:
                if float(value) == float(code):
                    return label
            except (TypeError, ValueError):
                continue
        if isinstance(code, float) and code.is_integer():
            return str(int(code))
        return str(code)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Variable":
        """Build a variable from its wire representation."""
        measure = raw.get("measure") or Measure.SCALE
        values = tuple(
            (item.get("value"), str(item.get("label", "")))
            for item in (raw.get("values") or ())
            if isinstance(item, Mapping)
        )
        return cls(
            name=str(raw.get("name", "")),
            label=str(raw.get("label") or ""),
            measure=Measure(measure),
            missing=MissingSpec.from_dict(raw.get("missing")),
            values=values,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "measure": self.measure.value,
        }
