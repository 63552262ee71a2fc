"""
Analysis and diagnostics module for PySizeSpec.

This module provides functions for analyzing model states and simulation
results, including:
- Mortality breakdown per size class
- Biomass over a size range, for a single state or a whole TimeSeries
- Growth and feeding level curves
- Oscillation diagnostics of biomass time series
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from scipy.signal import find_peaks

from pysizespec.core.encounter import get_encounter_rates
from pysizespec.core.grid import size_mask
from pysizespec.core.model import SizeSpectrumModel
from pysizespec.core.mortality import mortality_breakdown
from pysizespec.core.simulation import TimeSeries

# =============================================================================
# PER-SIZE DIAGNOSTICS
# =============================================================================


def get_mortality_breakdown(
    model: SizeSpectrumModel, n: np.ndarray, n_pp: np.ndarray
) -> pd.DataFrame:
    """Consumer mortality split by source.

    Parameters
    ----------
    model : SizeSpectrumModel
        Model
    n : np.ndarray
        Consumer density
    n_pp : np.ndarray
        Resource density

    Returns
    -------
    pd.DataFrame
        Indexed by size ``w`` with columns background, senescent, larval,
        predation and total (rates per year)
    """
    rates = get_encounter_rates(model, n, n_pp)
    breakdown = mortality_breakdown(model, n, rates)
    frame = pd.DataFrame(
        {
            "background": breakdown.background,
            "senescent": breakdown.senescent,
            "larval": breakdown.larval,
            "predation": breakdown.predation,
            "total": breakdown.total,
        },
        index=pd.Index(model.grid.w, name="w"),
    )
    return frame


def get_growth_curve(model: SizeSpectrumModel, n: np.ndarray, n_pp: np.ndarray) -> pd.Series:
    """Somatic growth rate per size class."""
    rates = get_encounter_rates(model, n, n_pp)
    return pd.Series(rates.growth, index=pd.Index(model.grid.w, name="w"), name="growth")


def get_feeding_level(model: SizeSpectrumModel, n: np.ndarray, n_pp: np.ndarray) -> pd.Series:
    """Feeding level (consumption / maximum intake) per size class."""
    rates = get_encounter_rates(model, n, n_pp)
    return pd.Series(
        rates.feeding_level, index=pd.Index(model.grid.w, name="w"), name="feeding_level"
    )


# =============================================================================
# BIOMASS
# =============================================================================


def get_biomass(
    model: SizeSpectrumModel,
    n: np.ndarray,
    min_w: Optional[float] = None,
    max_w: Optional[float] = None,
) -> float:
    """Consumer biomass ``sum(n * w * dw)`` over ``[min_w, max_w]``.

    Parameters
    ----------
    model : SizeSpectrumModel
        Model
    n : np.ndarray
        Consumer density
    min_w, max_w : float, optional
        Size range (inclusive); open when omitted

    Returns
    -------
    float
        Biomass
    """
    grid = model.grid
    mask = size_mask(grid.w, min_w, max_w)
    return float(np.sum((n * grid.w * grid.dw)[mask]))


def get_resource_biomass(
    model: SizeSpectrumModel,
    n_pp: np.ndarray,
    min_w: Optional[float] = None,
    max_w: Optional[float] = None,
) -> float:
    """Resource biomass over ``[min_w, max_w]`` on the full grid."""
    grid = model.grid
    mask = size_mask(grid.w_full, min_w, max_w)
    return float(np.sum((n_pp * grid.w_full * grid.dw_full)[mask]))


def biomass_timeseries(
    model: SizeSpectrumModel,
    series: TimeSeries,
    min_w: Optional[float] = None,
    max_w: Optional[float] = None,
) -> pd.Series:
    """Consumer biomass of every snapshot.

    Returns
    -------
    pd.Series
        Biomass indexed by time
    """
    grid = model.grid
    mask = size_mask(grid.w, min_w, max_w)
    values = (series.n[:, mask] * (grid.w * grid.dw)[mask]).sum(axis=1)
    return pd.Series(values, index=pd.Index(series.times, name="time"), name="biomass")


def spectrum_frame(series: TimeSeries, which: str = "consumer") -> pd.DataFrame:
    """Snapshots as a table with one row per time and one column per size.

    Parameters
    ----------
    series : TimeSeries
        Simulation output
    which : str
        "consumer" or "resource"
    """
    if which == "consumer":
        values, sizes = series.n, series.w
    elif which == "resource":
        values, sizes = series.n_pp, series.w_full
    else:
        raise ValueError(f"Unknown spectrum: {which}. Choose 'consumer' or 'resource'")
    return pd.DataFrame(
        values,
        index=pd.Index(series.times, name="time"),
        columns=pd.Index(sizes, name="w"),
    )


# =============================================================================
# OSCILLATIONS
# =============================================================================


def oscillation_summary(
    biomass: pd.Series,
    window: Optional[float] = None,
    prominence: float = 0.0,
) -> Dict[str, Any]:
    """Characterize oscillations of a biomass time series.

    Parameters
    ----------
    biomass : pd.Series
        Biomass indexed by time (e.g. from ``biomass_timeseries``)
    window : float, optional
        Only analyse the trailing ``window`` years
    prominence : float
        Minimum relative peak prominence (fraction of the mean)

    Returns
    -------
    dict
        n_peaks, mean_period (NaN with fewer than two peaks),
        relative_amplitude ((max - min) / mean), monotonic (bool),
        peak_times. A series with fewer than two points has no peaks and
        NaN period and amplitude
    """
    if window is not None and len(biomass):
        biomass = biomass[biomass.index >= biomass.index[-1] - window]

    values = biomass.to_numpy(dtype=float)
    times = biomass.index.to_numpy(dtype=float)
    if len(values) < 2:
        return {
            "n_peaks": 0,
            "mean_period": np.nan,
            "relative_amplitude": np.nan,
            "monotonic": True,
            "peak_times": times[:0],
        }
    mean = float(np.mean(values))

    peaks, _ = find_peaks(values, prominence=prominence * abs(mean) if mean else None)
    peak_times = times[peaks]
    mean_period = float(np.mean(np.diff(peak_times))) if len(peaks) > 1 else np.nan

    diffs = np.diff(values)
    monotonic = bool(np.all(diffs >= 0) or np.all(diffs <= 0))

    return {
        "n_peaks": int(len(peaks)),
        "mean_period": mean_period,
        "relative_amplitude": float((values.max() - values.min()) / mean) if mean else np.nan,
        "monotonic": monotonic,
        "peak_times": peak_times,
    }
