"""
Discretized body-size axis.

Body mass is sampled log-uniformly: every grid point is
``10 ** (log10(w_min) + k * dx)`` for an integer ``k``. The consumer grid
runs from ``w_min`` up to ``w_max``; the full grid prepends the resource
sizes down to ``w_pp_min`` so that the consumer grid is its suffix.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from pysizespec.core.constants import GRID_LOG_TOLERANCE
from pysizespec.core.errors import ConfigurationError


@dataclass(frozen=True)
class SizeGrid:
    """Log-uniform size grid shared by the consumer and the resource.

    Attributes
    ----------
    dx : float
        Grid step in log10 units
    w : np.ndarray
        Consumer size classes (g)
    dw : np.ndarray
        Width of each consumer size class (g)
    w_full : np.ndarray
        Resource plus consumer size classes (g)
    dw_full : np.ndarray
        Width of each class of the full grid (g)
    idx_start : int
        Index of ``w[0]`` in ``w_full``
    """

    dx: float
    w: np.ndarray
    dw: np.ndarray
    w_full: np.ndarray
    dw_full: np.ndarray
    idx_start: int

    @property
    def n_consumer(self) -> int:
        return len(self.w)

    @property
    def n_full(self) -> int:
        return len(self.w_full)

    def pad(self, n: np.ndarray) -> np.ndarray:
        """Embed a consumer-grid array into the full grid (zeros below w_min)."""
        padded = np.zeros(self.n_full)
        padded[self.idx_start:] = n
        return padded

    def __repr__(self) -> str:
        return (
            f"SizeGrid(dx={self.dx}, consumer=[{self.w[0]:.3g}, {self.w[-1]:.3g}] "
            f"({self.n_consumer} classes), full from {self.w_full[0]:.3g} "
            f"({self.n_full} classes))"
        )


def make_grid(w_min: float, w_max: float, w_pp_min: float, dx: float) -> SizeGrid:
    """Build the consumer and full size grids.

    Parameters
    ----------
    w_min : float
        Smallest consumer size (egg size)
    w_max : float
        Largest consumer size
    w_pp_min : float
        Smallest resource size
    dx : float
        Step in log10 units

    Returns
    -------
    SizeGrid
        The discretized size axis

    Raises
    ------
    ConfigurationError
        If the bounds are not ordered or the step is not positive
    """
    if dx <= 0:
        raise ConfigurationError(f"Grid step dx must be positive, got {dx}")
    if not 0 < w_min < w_max:
        raise ConfigurationError(f"Need 0 < w_min < w_max, got w_min={w_min}, w_max={w_max}")
    if not 0 < w_pp_min <= w_min:
        raise ConfigurationError(
            f"Resource lower bound must satisfy 0 < w_pp_min <= w_min, got {w_pp_min}"
        )

    x_min = np.log10(w_min)
    n_consumer = int(np.floor((np.log10(w_max) - x_min) / dx + GRID_LOG_TOLERANCE)) + 1
    n_resource = int(np.floor((x_min - np.log10(w_pp_min)) / dx + GRID_LOG_TOLERANCE))

    k = np.arange(-n_resource, n_consumer)
    w_full = 10.0 ** (x_min + k * dx)
    dw_full = w_full * (10.0**dx - 1.0)

    return SizeGrid(
        dx=float(dx),
        w=w_full[n_resource:].copy(),
        dw=dw_full[n_resource:].copy(),
        w_full=w_full,
        dw_full=dw_full,
        idx_start=n_resource,
    )


def at_or_above(w: np.ndarray, threshold: float) -> np.ndarray:
    """Classes with ``w >= threshold``, compared in log10 space.

    Grid points are computed as powers of 10 and can miss a threshold on the
    same lattice point by an ulp; ``GRID_LOG_TOLERANCE`` absorbs that.
    """
    w = np.asarray(w, dtype=float)
    return np.log10(w) >= np.log10(threshold) - GRID_LOG_TOLERANCE


def size_mask(
    w: np.ndarray, min_w: Optional[float] = None, max_w: Optional[float] = None
) -> np.ndarray:
    """Boolean mask of the classes inside ``[min_w, max_w]`` (open ends allowed)."""
    mask = np.ones(len(w), dtype=bool)
    if min_w is not None:
        mask &= w >= min_w
    if max_w is not None:
        mask &= w <= max_w
    return mask
