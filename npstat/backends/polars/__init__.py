"""
Polars-backed tabular input.
"""

from npstat.backends.polars.io import (
    CsvFileSource,
    DataFrameSource,
    FrameSource,
    ParquetFileSource,
    message_from_frame,
    series_from_frame,
    variable_from_column,
)

__all__ = [
    "CsvFileSource",
    "DataFrameSource",
    "FrameSource",
    "ParquetFileSource",
    "message_from_frame",
    "series_from_frame",
    "variable_from_column",
]
