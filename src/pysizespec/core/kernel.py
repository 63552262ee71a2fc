"""
Feeding kernels over the predator:prey mass ratio axis.

A kernel assigns a non-negative weight to each ratio ``w_pred / w_prey`` on
the log-uniform grid. Index 0 of the ratio axis is the predator's own size
and always has weight 0. Kernels are normalized so that their integral over
log10-ratio is 1 (``sum(phi) * dx == 1``), which makes the encounter rate
independent of grid resolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from pysizespec.core.constants import GRID_LOG_TOLERANCE
from pysizespec.core.errors import ConfigurationError

if TYPE_CHECKING:
    from pysizespec.core.grid import SizeGrid
    from pysizespec.core.params import SpeciesParams


class KernelShape(Enum):
    """Shape of the feeding kernel."""

    BOX = "box"  # Uniform preference between ppmr_min and ppmr_max
    LOGNORMAL = "lognormal"  # Gaussian in log ratio around beta


def ratio_axis(n_points: int, dx: float) -> np.ndarray:
    """Predator:prey mass ratios ``10**(k * dx)`` for ``k = 0..n_points-1``."""
    return 10.0 ** (np.arange(n_points) * dx)


def box_kernel(ratios: np.ndarray, ppmr_min: float, ppmr_max: float) -> np.ndarray:
    """Unnormalized box kernel.

    Parameters
    ----------
    ratios : np.ndarray
        Predator:prey mass ratio axis, ``ratios[0] == 1``
    ppmr_min, ppmr_max : float
        Closed bounds of the preferred ratio window, compared in log10
        space so that bounds on the ratio lattice are included

    Returns
    -------
    np.ndarray
        1 inside the window, 0 outside, 0 at index 0
    """
    log_ratios = np.log10(np.asarray(ratios, dtype=float))
    inside = (log_ratios >= np.log10(ppmr_min) - GRID_LOG_TOLERANCE) & (
        log_ratios <= np.log10(ppmr_max) + GRID_LOG_TOLERANCE
    )
    weights = inside.astype(float)
    if len(weights) > 0:
        weights[0] = 0.0
    return weights


def lognormal_kernel(ratios: np.ndarray, beta: float, sigma: float) -> np.ndarray:
    """Unnormalized lognormal kernel centred on the preferred ratio ``beta``."""
    ratios = np.asarray(ratios, dtype=float)
    weights = np.exp(-np.log(ratios / beta) ** 2 / (2.0 * sigma**2))
    if len(weights) > 0:
        weights[0] = 0.0
    return weights


def normalize_kernel(weights: np.ndarray, dx: float) -> np.ndarray:
    """Scale a kernel so that ``sum(weights) * dx == 1``.

    Raises
    ------
    ConfigurationError
        If the kernel has no positive weight (its bounds exclude every
        ratio on the grid)
    """
    total = float(np.sum(weights)) * dx
    if not total > 0 or not np.isfinite(total):
        raise ConfigurationError(
            "Feeding kernel has empty support on this grid; check the "
            "predator:prey mass ratio bounds against the grid extent"
        )
    return np.asarray(weights, dtype=float) / total


@dataclass(frozen=True)
class FeedingKernel:
    """Normalized feeding kernel laid out on a size grid.

    Attributes
    ----------
    phi : np.ndarray
        Normalized weights over ratio offsets ``0..n_full-1``
    matrix : np.ndarray
        ``(n_consumer, n_full)`` array; row ``j`` is the kernel of a predator
        of size ``w[j]`` evaluated at every prey size of the full grid
    """

    phi: np.ndarray
    matrix: np.ndarray


def feeding_kernel(grid: SizeGrid, species: SpeciesParams) -> FeedingKernel:
    """Build the normalized kernel and its predator x prey matrix.

    Parameters
    ----------
    grid : SizeGrid
        Size grid
    species : SpeciesParams
        Consumer traits (kernel shape and its parameters)

    Returns
    -------
    FeedingKernel
    """
    ratios = ratio_axis(grid.n_full, grid.dx)
    shape = KernelShape(species.kernel)
    if shape is KernelShape.LOGNORMAL:
        raw = lognormal_kernel(ratios, species.beta, species.sigma)
    else:
        raw = box_kernel(ratios, species.ppmr_min, species.ppmr_max)
    phi = normalize_kernel(raw, grid.dx)

    # offset[j, i] = position of prey i relative to predator j on the full grid
    pred_idx = grid.idx_start + np.arange(grid.n_consumer)
    offset = pred_idx[:, None] - np.arange(grid.n_full)[None, :]
    matrix = np.where(offset >= 0, phi[np.clip(offset, 0, None)], 0.0)

    return FeedingKernel(phi=phi, matrix=matrix)
