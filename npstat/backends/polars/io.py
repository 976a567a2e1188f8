"""
npstat.backends.polars.io
=========================

Tabular input for analyses via **sources**.

- CSV file, Parquet file, in-memory DataFrame
- Column -> raw series and variable definitions
- DataFrame columns -> wire message for the dispatcher

This module contains no statistics, just I/O and message assembly.

Doctest (smoke):
>>> import polars as pl
>>> from npstat.backends.polars.io import message_from_frame
>>> df = pl.DataFrame({"pre": [3, 4, None], "post": [5, 4, 6]})
>>> msg = message_from_frame(df, ["twoRelatedSamples"], columns=["pre", "post"])
>>> msg["variable1"]["name"], msg["data1"], msg["data2"]
('pre', [3, 4, None], [5, 4, 6])
>>> CsvFileSource("_tmp.csv").read()  # doctest: +SKIP
"""

from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union

import polars as pl

from npstat.core.errors import InvalidRequestError
from npstat.core.names import AnalysisType, Measure
from npstat.core.variables import Variable


class FrameSource(Protocol):
    """A read-only source: storage -> DataFrame."""
    def read(self) -> pl.DataFrame: ...


class CsvFileSource:
    def __init__(self, path: str, separator: str = ",") -> None:
        self.path = path
        self.separator = separator
    def read(self) -> pl.DataFrame:
        return pl.read_csv(self.path, separator=self.separator)


class ParquetFileSource:
    def __init__(self, path: str) -> None:
        self.path = path
    def read(self) -> pl.DataFrame:
        return pl.read_parquet(self.path)


class DataFrameSource:
    """Wraps a DataFrame that is already in memory."""
    def __init__(self, df: pl.DataFrame) -> None:
        self.df = df
    def read(self) -> pl.DataFrame:
        return self.df


def _column(df: pl.DataFrame, name: str) -> pl.Series:
    if name not in df.columns:
        raise InvalidRequestError(f"Column {name!r} not found in frame")
    return df.get_column(name)


def series_from_frame(df: pl.DataFrame, name: str) -> List[Any]:
    """Raw values of one column; nulls become None, temporal values their physical integers."""
    series = _column(df, name)
    if series.dtype.is_temporal():
        series = series.to_physical()
    return series.to_list()


def variable_from_column(df: pl.DataFrame, name: str) -> Variable:
    """Variable definition inferred from a column's dtype."""
    dtype = _column(df, name).dtype
    if dtype.is_temporal():
        measure = Measure.DATE
    elif dtype.is_numeric():
        measure = Measure.SCALE
    else:
        measure = Measure.NOMINAL
    return Variable(name=name, measure=measure)


def message_from_frame(
    df: Union[pl.DataFrame, FrameSource],
    analysis_types: Sequence[Union[str, AnalysisType]],
    *,
    columns: Sequence[str],
    options: Optional[Dict[str, Any]] = None,
    definitions: Optional[Mapping[str, Variable]] = None,
) -> Dict[str, Any]:
    """
    Build a wire message from DataFrame columns.

    k related samples take every column as a batch. Otherwise the first
    column is the test variable and the second, if given, is the paired or
    grouping variable.

    Args:
        df: DataFrame or a source to read one from
        analysis_types: Analysis identifiers for the message
        columns: Column names in role order
        options: Options record for the calculators
        definitions: Variable definitions by column name; missing ones are inferred

    Returns:
        Message accepted by `Dispatcher.handle`
    """
    frame = df if isinstance(df, pl.DataFrame) else df.read()
    if not columns:
        raise InvalidRequestError("At least one column is required")
    definitions = definitions or {}

    def describe(name: str) -> Dict[str, Any]:
        variable = definitions.get(name) or variable_from_column(frame, name)
        return _variable_payload(variable)

    types = [AnalysisType(t).value for t in analysis_types]
    message: Dict[str, Any] = {"analysisType": types, "options": dict(options or {})}
    if AnalysisType.K_RELATED_SAMPLES.value in types:
        message["batchVariable"] = [describe(c) for c in columns]
        message["batchData"] = [series_from_frame(frame, c) for c in columns]
        return message

    message["variable1"] = describe(columns[0])
    message["data1"] = series_from_frame(frame, columns[0])
    if len(columns) > 1:
        message["variable2"] = describe(columns[1])
        message["data2"] = series_from_frame(frame, columns[1])
    return message


def _variable_payload(variable: Variable) -> Dict[str, Any]:
    payload = variable.to_dict()
    if variable.missing is not None:
        rng = variable.missing.range
        payload["missing"] = {
            "discrete": sorted(variable.missing.discrete, key=str),
            "range": {"min": rng.min, "max": rng.max} if rng is not None else None,
        }
    if variable.values:
        payload["values"] = [{"value": v, "label": label} for v, label in variable.values]
    return payload
