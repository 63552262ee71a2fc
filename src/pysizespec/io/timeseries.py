"""
Reading and writing simulation output.

A TimeSeries named ``name`` is stored as three files in one directory:

- ``<name>_consumer.csv``: one row per snapshot, column ``time`` then one
  column per consumer size class
- ``<name>_resource.csv``: same layout over the full grid
- ``<name>_meta.json``: size grids, time step and the forcing state
  (including the random generator state)

Floats are written with 17 significant digits and parsed with pandas'
round-trip parser, so a run resumed from a file continues exactly as the
original run would have.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

from pysizespec.core.forcing import forcing_from_dict
from pysizespec.core.simulation import TimeSeries
from pysizespec.logger import get_logger

logger = get_logger(__name__)

FORMAT_VERSION = 1
FLOAT_FORMAT = "%.17g"


class TimeSeriesFormatError(Exception):
    """Stored TimeSeries files are missing or inconsistent."""


def _paths(name: str, path: Union[str, Path]):
    path = Path(path)
    return (
        path / f"{name}_consumer.csv",
        path / f"{name}_resource.csv",
        path / f"{name}_meta.json",
    )


def _snapshot_frame(times: np.ndarray, values: np.ndarray) -> pd.DataFrame:
    frame = pd.DataFrame(values, columns=[f"w{i}" for i in range(values.shape[1])])
    frame.insert(0, "time", times)
    return frame


def write_timeseries(series: TimeSeries, name: str, path: Union[str, Path] = "") -> None:
    """Write a TimeSeries to CSV and JSON files.

    Parameters
    ----------
    series : TimeSeries
        Simulation output
    name : str
        Base name of the files
    path : str or Path
        Output directory (created if needed)
    """
    consumer_file, resource_file, meta_file = _paths(name, path)
    consumer_file.parent.mkdir(parents=True, exist_ok=True)

    _snapshot_frame(series.times, series.n).to_csv(
        consumer_file, index=False, float_format=FLOAT_FORMAT
    )
    _snapshot_frame(series.times, series.n_pp).to_csv(
        resource_file, index=False, float_format=FLOAT_FORMAT
    )

    meta = {
        "format_version": FORMAT_VERSION,
        "dt": float(series.dt),
        "w": [float(x) for x in series.w],
        "w_full": [float(x) for x in series.w_full],
        "forcing": series.forcing.to_dict() if series.forcing is not None else None,
    }
    with open(meta_file, "w") as f:
        json.dump(meta, f, indent=2)

    logger.info("Wrote %d snapshots to %s", series.n_snapshots, consumer_file.parent)


def read_timeseries(name: str, path: Union[str, Path] = "") -> TimeSeries:
    """Read a TimeSeries written by ``write_timeseries``.

    Parameters
    ----------
    name : str
        Base name of the files
    path : str or Path
        Directory holding the files

    Returns
    -------
    TimeSeries

    Raises
    ------
    TimeSeriesFormatError
        If a file is missing or the stored shapes disagree
    """
    consumer_file, resource_file, meta_file = _paths(name, path)
    for file in (consumer_file, resource_file, meta_file):
        if not file.exists():
            raise TimeSeriesFormatError(f"Missing TimeSeries file: {file}")

    with open(meta_file) as f:
        meta = json.load(f)
    if meta.get("format_version") != FORMAT_VERSION:
        raise TimeSeriesFormatError(
            f"Unsupported format version {meta.get('format_version')}, expected {FORMAT_VERSION}"
        )

    consumer = pd.read_csv(consumer_file, float_precision="round_trip")
    resource = pd.read_csv(resource_file, float_precision="round_trip")

    w = np.array(meta["w"], dtype=float)
    w_full = np.array(meta["w_full"], dtype=float)
    times = consumer["time"].to_numpy(dtype=float)
    n = consumer.drop(columns="time").to_numpy(dtype=float)
    n_pp = resource.drop(columns="time").to_numpy(dtype=float)

    if n.shape[1] != len(w) or n_pp.shape[1] != len(w_full):
        raise TimeSeriesFormatError("Snapshot columns do not match the stored size grids")
    if not np.array_equal(times, resource["time"].to_numpy(dtype=float)):
        raise TimeSeriesFormatError("Consumer and resource snapshot times differ")

    forcing = forcing_from_dict(meta["forcing"]) if meta.get("forcing") else None

    return TimeSeries(
        times=times,
        n=n,
        n_pp=n_pp,
        w=w,
        w_full=w_full,
        dt=float(meta["dt"]),
        forcing=forcing,
    )
