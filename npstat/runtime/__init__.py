"""
npstat.runtime
==============

Request handling for npstat analyses.

Key Components
--------------
- `AnalysisRequest`: Parsed wire message with typed inputs per analysis
- `Dispatcher`: Two-state (idle/processing) request handler, fail-fast
- `BatchDispatcher`: One dispatcher per message, optionally concurrent

Examples
--------
>>> from npstat.runtime import Dispatcher
>>> response = Dispatcher().handle({
...     "analysisType": ["descriptiveStatistics"],
...     "variable": {"name": "x"},
...     "data": [1, 2, 3, 4],
... })
>>> response["results"]["descriptiveStatistics"][0]["mean"]
2.5
"""

from npstat.runtime.batch import BatchDispatcher
from npstat.runtime.dispatcher import Dispatcher, DispatcherState, build_calculator
from npstat.runtime.requests import (
    AnalysisRequest,
    BatchSeriesInput,
    GroupedSeriesInput,
    PairedSeriesInput,
    SingleSeriesInput,
)

__all__ = [
    "AnalysisRequest",
    "BatchDispatcher",
    "BatchSeriesInput",
    "Dispatcher",
    "DispatcherState",
    "GroupedSeriesInput",
    "PairedSeriesInput",
    "SingleSeriesInput",
    "build_calculator",
]
