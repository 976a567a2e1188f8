"""
npstat.core.components
======================

Base classes for calculators and the metadata they report.

Every calculator owns its constructor inputs (variables, raw series, options)
and a private memo keyed by computation name. Quantities are computed on the
first accessor call and reused for the lifetime of the instance, which is one
request.

Component Types:
- `Calculator`: lazily computes one test family from its inputs
- `Metadata`: insufficient-data flags attached to every output
- `TestResult`: base for frozen result records with a wire representation

Examples
--------
>>> from dataclasses import dataclass
>>> @dataclass(kw_only=True)
... class CountCalculator(Calculator):
...     values: tuple = ()
...     def count(self):
...         return self._cached("count", lambda: len(self.values))
...     def output(self):
...         return {"count": self.count(), "metadata": self.metadata().to_payload()}
>>> calc = CountCalculator(values=(1, 2, 3))
>>> calc.output()
{'count': 3, 'metadata': {'hasInsufficientData': False, 'insufficientReasons': []}}
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

T = TypeVar("T")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


@dataclass(frozen=True)
class TestResult:
    """Base class for immutable result records.

    Subclasses declare snake_case fields; `to_payload()` renders them with
    camelCase keys for the formatting layer. Nested results are rendered
    recursively.
    """

    __test__ = False  # not a pytest test class

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for f in fields(self):
            payload[_camel(f.name)] = _render(getattr(self, f.name))
        return payload


def _render(value: Any) -> Any:
    if isinstance(value, TestResult):
        return value.to_payload()
    if isinstance(value, Metadata):
        return value.to_payload()
    if isinstance(value, dict):
        return {k: _render(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_render(v) for v in value]
    return value


@dataclass(frozen=True)
class Metadata:
    """Insufficient-data flags reported alongside results."""

    has_insufficient_data: bool = False
    insufficient_reasons: Tuple[str, ...] = ()

    @classmethod
    def from_reasons(cls, reasons: List[str]) -> "Metadata":
        unique = tuple(dict.fromkeys(reasons))
        return cls(has_insufficient_data=bool(unique), insufficient_reasons=unique)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "hasInsufficientData": self.has_insufficient_data,
            "insufficientReasons": list(self.insufficient_reasons),
        }


@dataclass(kw_only=True)
class Calculator(ABC):
    """
    Base class for test calculators.

    Subclasses add their inputs as dataclass fields, derive their valid
    samples lazily, and expose one accessor per result facet. Insufficient
    data is recorded with `_flag()` and never raised.
    """

    options: Dict[str, Any] = field(default_factory=dict)
    _memo: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    _reasons: List[str] = field(default_factory=list, init=False, repr=False)

    def _cached(self, key: str, compute: Callable[[], T]) -> T:
        """Return the memoised value for ``key``, computing it once."""
        if key not in self._memo:
            self._memo[key] = compute()
        return self._memo[key]

    def _flag(self, reason: str) -> None:
        if reason not in self._reasons:
            self._reasons.append(reason)

    def metadata(self) -> Metadata:
        """Insufficient-data metadata gathered so far."""
        return Metadata.from_reasons(self._reasons)

    @abstractmethod
    def output(self) -> Dict[str, Any]:
        """Return every requested facet keyed by its wire name."""
        raise NotImplementedError("Subclasses must implement output()")


def option_flags(raw: Optional[Dict[str, Any]], defaults: Dict[str, bool]) -> Dict[str, bool]:
    """Resolve a ``{name: bool}`` option record against its defaults.

    A provided record replaces the defaults; names it omits are off.

    Examples:
        >>> option_flags({"mean": True}, {"median": True, "mean": False})
        {'median': False, 'mean': True}
        >>> option_flags(None, {"median": True})
        {'median': True}
    """
    if not raw:
        return dict(defaults)
    merged = {name: False for name in defaults}
    merged.update({k: bool(v) for k, v in raw.items()})
    return merged
