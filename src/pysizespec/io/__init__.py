"""
I/O module for PySizeSpec.

Contains functions for saving and loading simulation output.
Parameter files are handled by ``pysizespec.core.params``.
"""

from pysizespec.io.timeseries import (
    write_timeseries,
    read_timeseries,
    TimeSeriesFormatError,
)

__all__ = [
    "write_timeseries",
    "read_timeseries",
    "TimeSeriesFormatError",
]
