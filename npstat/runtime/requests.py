"""
npstat.runtime.requests
=======================

Request model: the wire message parsed into analysis types and typed inputs.

A message names one or more analysis types and carries the variables and raw
series they need. Each analysis type consumes one input shape:

- `SingleSeriesInput`: one variable (chi-square, runs)
- `PairedSeriesInput`: two aligned variables (two related samples)
- `GroupedSeriesInput`: a test variable and a grouping variable
  (two and k independent samples)
- `BatchSeriesInput`: k aligned variables (k related samples, descriptives)

Examples
--------
>>> request = AnalysisRequest.from_message({
...     "analysisType": ["runs"],
...     "variable": {"name": "x", "measure": "scale"},
...     "data": [1, 2, 3],
... })
>>> request.analysis_types
(<AnalysisType.RUNS: 'runs'>,)
>>> request.input_for(AnalysisType.RUNS).variable.name
'x'
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from npstat.core.errors import InvalidRequestError, UnknownAnalysisTypeError
from npstat.core.names import AnalysisType
from npstat.core.variables import Variable


@dataclass(frozen=True)
class SingleSeriesInput:
    variable: Variable
    data: Sequence[Any]


@dataclass(frozen=True)
class PairedSeriesInput:
    variable1: Variable
    data1: Sequence[Any]
    variable2: Variable
    data2: Sequence[Any]


@dataclass(frozen=True)
class GroupedSeriesInput:
    variable: Variable
    data: Sequence[Any]
    grouping_variable: Variable
    grouping_data: Sequence[Any]


@dataclass(frozen=True)
class BatchSeriesInput:
    variables: Tuple[Variable, ...]
    data: Tuple[Sequence[Any], ...]


AnalysisInput = Union[SingleSeriesInput, PairedSeriesInput, GroupedSeriesInput, BatchSeriesInput]

GROUPED_TYPES = (AnalysisType.TWO_INDEPENDENT_SAMPLES, AnalysisType.K_INDEPENDENT_SAMPLES)


def parse_analysis_types(raw: Any) -> Tuple[AnalysisType, ...]:
    """Parse one identifier or a list of them, rejecting unknown names.

    Examples:
        >>> parse_analysis_types("chiSquare")
        (<AnalysisType.CHI_SQUARE: 'chiSquare'>,)
        >>> parse_analysis_types(["median"])
        Traceback (most recent call last):
        ...
        npstat.core.errors.UnknownAnalysisTypeError: Unknown analysis type: 'median'
    """
    if raw is None:
        raise InvalidRequestError("Request does not name any analysis type")
    items = [raw] if isinstance(raw, (str, AnalysisType)) else list(raw)
    if not items:
        raise InvalidRequestError("Request does not name any analysis type")
    parsed = []
    for item in items:
        try:
            parsed.append(AnalysisType(item))
        except ValueError:
            raise UnknownAnalysisTypeError(item) from None
    return tuple(dict.fromkeys(parsed))


def _variable(raw: Any) -> Optional[Variable]:
    if raw is None or isinstance(raw, Variable):
        return raw
    if isinstance(raw, Mapping):
        return Variable.from_dict(raw)
    raise InvalidRequestError(f"Invalid variable definition: {raw!r}")


@dataclass(frozen=True)
class AnalysisRequest:
    """
    A parsed request.

    Attributes:
        analysis_types: Requested analysis families, in request order
        variable1, data1: Primary variable and series (``variable``/``data`` on the wire)
        variable2, data2: Second variable (paired or grouping) and series
        batch_variables, batch_data: k aligned variables and series
        options: Options record shared by every calculator of the request
    """

    analysis_types: Tuple[AnalysisType, ...]
    variable1: Optional[Variable] = None
    data1: Optional[Sequence[Any]] = None
    variable2: Optional[Variable] = None
    data2: Optional[Sequence[Any]] = None
    batch_variables: Tuple[Variable, ...] = ()
    batch_data: Tuple[Sequence[Any], ...] = ()
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_message(cls, message: Mapping[str, Any]) -> "AnalysisRequest":
        """Parse a wire message.

        Raises:
            UnknownAnalysisTypeError: If an analysis type is not recognised
            InvalidRequestError: If the message is malformed
        """
        raw_types = message.get("analysisType", message.get("analysisTypes"))
        analysis_types = parse_analysis_types(raw_types)

        variable1 = _variable(message.get("variable1", message.get("variable")))
        data1 = message.get("data1", message.get("data"))

        batch_variables = tuple(_variable(v) for v in message.get("batchVariable") or ())
        batch_data = tuple(message.get("batchData") or ())
        if len(batch_variables) != len(batch_data):
            raise InvalidRequestError(
                f"batchVariable has {len(batch_variables)} entries but batchData has {len(batch_data)}"
            )

        return cls(
            analysis_types=analysis_types,
            variable1=variable1,
            data1=data1,
            variable2=_variable(message.get("variable2")),
            data2=message.get("data2"),
            batch_variables=batch_variables,
            batch_data=batch_data,
            options=dict(message.get("options") or {}),
        )

    @property
    def variable_name(self) -> str:
        if self.variable1 is not None:
            return self.variable1.name
        return ", ".join(v.name for v in self.batch_variables)

    def _require_first(self, analysis_type: AnalysisType) -> Tuple[Variable, Sequence[Any]]:
        if self.variable1 is None or self.data1 is None:
            raise InvalidRequestError(f"{analysis_type.value} requires a variable and its data")
        return self.variable1, self.data1

    def _require_second(self, analysis_type: AnalysisType) -> Tuple[Variable, Sequence[Any]]:
        if self.variable2 is None or self.data2 is None:
            raise InvalidRequestError(f"{analysis_type.value} requires variable2 and data2")
        return self.variable2, self.data2

    def input_for(self, analysis_type: AnalysisType) -> AnalysisInput:
        """Build the typed input consumed by ``analysis_type``."""
        match analysis_type:
            case AnalysisType.CHI_SQUARE | AnalysisType.RUNS:
                variable, data = self._require_first(analysis_type)
                return SingleSeriesInput(variable, data)
            case AnalysisType.TWO_RELATED_SAMPLES:
                v1, d1 = self._require_first(analysis_type)
                v2, d2 = self._require_second(analysis_type)
                return PairedSeriesInput(v1, d1, v2, d2)
            case AnalysisType.TWO_INDEPENDENT_SAMPLES | AnalysisType.K_INDEPENDENT_SAMPLES:
                v1, d1 = self._require_first(analysis_type)
                v2, d2 = self._require_second(analysis_type)
                return GroupedSeriesInput(v1, d1, v2, d2)
            case AnalysisType.K_RELATED_SAMPLES:
                if len(self.batch_variables) < 2:
                    raise InvalidRequestError("kRelatedSamples requires at least two batch variables")
                return BatchSeriesInput(self.batch_variables, self.batch_data)
            case AnalysisType.DESCRIPTIVE_STATISTICS:
                return self._descriptive_input()
        raise UnknownAnalysisTypeError(analysis_type)

    def _descriptive_input(self) -> BatchSeriesInput:
        """Every test variable of the request; grouping variables are left out."""
        if self.batch_variables:
            return BatchSeriesInput(self.batch_variables, self.batch_data)
        variable, data = self._require_first(AnalysisType.DESCRIPTIVE_STATISTICS)
        variables, series = [variable], [data]
        grouped = any(t in GROUPED_TYPES for t in self.analysis_types)
        if self.variable2 is not None and self.data2 is not None and not grouped:
            variables.append(self.variable2)
            series.append(self.data2)
        return BatchSeriesInput(tuple(variables), tuple(series))
