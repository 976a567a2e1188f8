"""
npstat.runtime.dispatcher
=========================

Routes a request to its calculators and produces one response.

The dispatcher is a two-state machine. It leaves IDLE when a request
arrives, runs every requested analysis in order, and returns to IDLE when
the response is built. The first error aborts the whole request: the
response then carries the error message and no partial results.

Responses:
    {"status": "success", "variableName": ..., "results": {...}}
    {"status": "error", "variableName": ..., "error": "..."}

Examples
--------
>>> dispatcher = Dispatcher()
>>> response = dispatcher.handle({
...     "analysisType": ["chiSquare"],
...     "variable": {"name": "q1", "measure": "nominal"},
...     "data": [1, 1, 1, 2, 2, 3],
... })
>>> response["status"], response["results"]["testStatistics"]["chiSquare"]
('success', 1.0)
>>> dispatcher.handle({"analysisType": "median", "variable": {"name": "q1"}, "data": []})["error"]
"Unknown analysis type: 'median'"
>>> dispatcher.state
<DispatcherState.IDLE: 'idle'>
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import Any, Dict, Mapping

from npstat.core.components import Calculator
from npstat.core.errors import ConfigurationError, InvalidRequestError
from npstat.core.names import AnalysisType
from npstat.runtime.requests import (
    AnalysisInput,
    AnalysisRequest,
    BatchSeriesInput,
    GroupedSeriesInput,
    PairedSeriesInput,
    SingleSeriesInput,
)
from npstat.stats.schemes import (
    ChiSquareCalculator,
    DescriptiveStatisticsCalculator,
    KIndependentSamplesCalculator,
    KRelatedSamplesCalculator,
    RunsCalculator,
    TwoIndependentSamplesCalculator,
    TwoRelatedSamplesCalculator,
)

logger = logging.getLogger(__name__)


class DispatcherState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"


def build_calculator(
    analysis_type: AnalysisType,
    analysis_input: AnalysisInput,
    options: Dict[str, Any],
) -> Calculator:
    """Construct the calculator for one analysis type.

    Raises:
        InvalidRequestError: If the input shape does not fit the analysis type
    """
    match analysis_type, analysis_input:
        case AnalysisType.CHI_SQUARE, SingleSeriesInput(variable=v, data=d):
            return ChiSquareCalculator(variable=v, data=d, options=options)
        case AnalysisType.RUNS, SingleSeriesInput(variable=v, data=d):
            return RunsCalculator(variable=v, data=d, options=options)
        case AnalysisType.TWO_INDEPENDENT_SAMPLES, GroupedSeriesInput():
            if options.get("group1") is None or options.get("group2") is None:
                raise InvalidRequestError("twoIndependentSamples requires group1 and group2 options")
            return TwoIndependentSamplesCalculator(
                variable1=analysis_input.variable,
                data1=analysis_input.data,
                variable2=analysis_input.grouping_variable,
                data2=analysis_input.grouping_data,
                options=options,
            )
        case AnalysisType.TWO_RELATED_SAMPLES, PairedSeriesInput(variable1=v1, data1=d1, variable2=v2, data2=d2):
            return TwoRelatedSamplesCalculator(variable1=v1, data1=d1, variable2=v2, data2=d2, options=options)
        case AnalysisType.K_INDEPENDENT_SAMPLES, GroupedSeriesInput():
            return KIndependentSamplesCalculator(
                variable1=analysis_input.variable,
                data1=analysis_input.data,
                variable2=analysis_input.grouping_variable,
                data2=analysis_input.grouping_data,
                options=options,
            )
        case AnalysisType.K_RELATED_SAMPLES, BatchSeriesInput(variables=vs, data=ds):
            return KRelatedSamplesCalculator(variables=vs, data=ds, options=options)
        case AnalysisType.DESCRIPTIVE_STATISTICS, BatchSeriesInput(variables=vs, data=ds):
            return DescriptiveStatisticsCalculator(variables=vs, data=ds, options=options)
    raise InvalidRequestError(
        f"{analysis_type.value} cannot run on {type(analysis_input).__name__}"
    )


def merge_output(results: Dict[str, Any], output: Mapping[str, Any]) -> None:
    """Merge one calculator output into the request results.

    Facets are keyed by name. Metadata from several calculators is combined:
    the request has insufficient data if any calculator reported it.

    Raises:
        ConfigurationError: If two calculators produce different values for the same facet
    """
    for key, value in output.items():
        if key != "metadata":
            if key in results and results[key] != value:
                raise ConfigurationError(
                    f"Facet '{key}' is produced by more than one requested analysis; request them separately"
                )
            results[key] = value
            continue
        if "metadata" not in results:
            results[key] = value
            continue
        merged = dict(results["metadata"])
        reasons = list(merged.get("insufficientReasons", []))
        reasons += [r for r in value.get("insufficientReasons", []) if r not in reasons]
        merged["insufficientReasons"] = reasons
        merged["hasInsufficientData"] = bool(merged.get("hasInsufficientData")) or bool(
            value.get("hasInsufficientData")
        )
        results["metadata"] = merged


class Dispatcher:
    """
    Runs one request at a time.

    A dispatcher instance must not be shared between threads; use a
    `BatchDispatcher` to fan requests out.
    """

    def __init__(self) -> None:
        self.state = DispatcherState.IDLE

    def run(self, request: AnalysisRequest) -> Dict[str, Any]:
        """Compute every requested analysis and merge their facets.

        Raises:
            ConfigurationError: If the request cannot be computed as configured
        """
        results: Dict[str, Any] = {}
        for analysis_type in request.analysis_types:
            analysis_input = request.input_for(analysis_type)
            calculator = build_calculator(analysis_type, analysis_input, request.options)
            if isinstance(calculator, ChiSquareCalculator):
                problem = calculator.expected_list_error()
                if problem is not None:
                    raise ConfigurationError(problem)

            output = calculator.output()
            metadata = output.get("metadata", {})
            if metadata.get("hasInsufficientData"):
                logger.warning(
                    "%s on %s: insufficient data (%s)",
                    analysis_type.value,
                    request.variable_name,
                    ", ".join(metadata.get("insufficientReasons", [])),
                )
            merge_output(results, output)
        return results

    def handle(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        """Process one wire message and return its response."""
        if self.state is DispatcherState.PROCESSING:
            raise RuntimeError("Dispatcher is already processing a request")

        self.state = DispatcherState.PROCESSING
        variable_name = _message_variable_name(message)
        try:
            request = AnalysisRequest.from_message(message)
            logger.info(
                "Dispatching %s for %s",
                ", ".join(t.value for t in request.analysis_types),
                request.variable_name,
            )
            results = self.run(request)
        except Exception as exc:
            logger.exception("Request for %s failed", variable_name)
            return {"status": "error", "variableName": variable_name, "error": str(exc)}
        finally:
            self.state = DispatcherState.IDLE

        logger.info("Finished request for %s", variable_name)
        return {"status": "success", "variableName": variable_name, "results": results}


def _message_variable_name(message: Mapping[str, Any]) -> str:
    variable = message.get("variable1", message.get("variable"))
    if isinstance(variable, Mapping):
        return str(variable.get("name", ""))
    if variable is not None:
        return str(getattr(variable, "name", variable))
    names = []
    for item in message.get("batchVariable") or ():
        names.append(str(item.get("name", "")) if isinstance(item, Mapping) else str(getattr(item, "name", item)))
    return ", ".join(names)
