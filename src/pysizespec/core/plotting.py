"""
Plotting module for PySizeSpec.

This module provides matplotlib visualization of simulation results:
- Consumer and resource size spectra at a snapshot
- Biomass time series
- Mortality breakdown by size
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

import matplotlib.pyplot as plt

from pysizespec.core.analysis import biomass_timeseries, get_mortality_breakdown
from pysizespec.core.model import SizeSpectrumModel
from pysizespec.core.simulation import TimeSeries


def _figure(ax: Optional[plt.Axes], figsize: Tuple[int, int]):
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure
    return fig, ax


def plot_spectrum(
    series: TimeSeries,
    index: int = -1,
    show_resource: bool = True,
    power: int = 0,
    title: Optional[str] = None,
    figsize: Tuple[int, int] = (10, 6),
    ax: Optional[plt.Axes] = None,
) -> plt.Figure:
    """Plot the size spectra of one snapshot on log-log axes.

    Parameters
    ----------
    series : TimeSeries
        Simulation results
    index : int
        Snapshot to plot (default: last)
    show_resource : bool
        Also plot the resource spectrum
    power : int
        Plot ``n * w**power`` (0 = number density, 1 = biomass density)
    title : str, optional
        Plot title (default: the snapshot time)
    figsize : tuple
        Figure size
    ax : Axes, optional
        Matplotlib axes

    Returns
    -------
    matplotlib.Figure
    """
    fig, ax = _figure(ax, figsize)
    t, n, n_pp = series.snapshot(index)

    # Zero densities cannot be drawn on log axes
    consumer = np.where(n > 0, n * series.w**power, np.nan)
    ax.plot(series.w, consumer, color='steelblue', linewidth=1.8, label='Consumer')

    if show_resource:
        resource = np.where(n_pp > 0, n_pp * series.w_full**power, np.nan)
        ax.plot(series.w_full, resource, color='seagreen', linestyle='--',
                linewidth=1.5, label='Resource')

    ax.set_xscale('log')
    ax.set_yscale('log')
    ax.set_xlabel('Body mass w (g)', fontsize=11)
    ax.set_ylabel('Number density' if power == 0 else f'n · w^{power}', fontsize=11)
    ax.set_title(title or f'Size spectrum at t = {t:.2f} yr', fontsize=12)
    ax.legend(fontsize=9)
    ax.grid(True, which='both', alpha=0.3)

    plt.tight_layout()
    return fig


def plot_biomass(
    model: SizeSpectrumModel,
    series: TimeSeries,
    min_w: Optional[float] = None,
    max_w: Optional[float] = None,
    relative: bool = False,
    log_scale: bool = True,
    title: str = "Consumer Biomass",
    figsize: Tuple[int, int] = (12, 6),
    ax: Optional[plt.Axes] = None,
) -> plt.Figure:
    """Plot the consumer biomass time series.

    Parameters
    ----------
    model : SizeSpectrumModel
        Model the series was produced with
    series : TimeSeries
        Simulation results
    min_w, max_w : float, optional
        Size range to sum over
    relative : bool
        If True, plot relative to the initial biomass
    log_scale : bool
        Logarithmic y axis
    title : str
        Plot title
    figsize : tuple
        Figure size
    ax : Axes, optional
        Matplotlib axes

    Returns
    -------
    matplotlib.Figure
    """
    fig, ax = _figure(ax, figsize)
    biomass = biomass_timeseries(model, series, min_w, max_w)

    y = biomass.to_numpy()
    if relative and y[0] > 0:
        y = y / y[0]
        ax.axhline(y=1, color='k', linestyle='--', alpha=0.5)

    ax.plot(biomass.index, y, color='steelblue', linewidth=1.5)
    if log_scale and np.all(y > 0):
        ax.set_yscale('log')

    ax.set_xlabel('Time (years)', fontsize=11)
    ax.set_ylabel('Relative Biomass (B/B₀)' if relative else 'Biomass', fontsize=11)
    ax.set_title(title, fontsize=12)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig


def plot_mortality(
    model: SizeSpectrumModel,
    n: np.ndarray,
    n_pp: np.ndarray,
    title: str = "Mortality by Size",
    figsize: Tuple[int, int] = (10, 6),
    ax: Optional[plt.Axes] = None,
) -> plt.Figure:
    """Plot each mortality term against body size."""
    fig, ax = _figure(ax, figsize)
    frame = get_mortality_breakdown(model, n, n_pp)

    styles = {
        'background': dict(color='tab:blue'),
        'senescent': dict(color='tab:red'),
        'larval': dict(color='tab:orange'),
        'predation': dict(color='tab:purple'),
        'total': dict(color='k', linewidth=2.2),
    }
    for column, style in styles.items():
        values = frame[column].to_numpy()
        if np.any(values > 0):
            ax.plot(frame.index, values, label=column.capitalize(), **style)

    ax.set_xscale('log')
    ax.set_xlabel('Body mass w (g)', fontsize=11)
    ax.set_ylabel('Mortality rate (1/yr)', fontsize=11)
    ax.set_title(title, fontsize=12)
    ax.legend(fontsize=9)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    return fig
