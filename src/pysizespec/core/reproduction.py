"""
Reproduction: surplus energy of mature individuals turned into recruits.

Eggs produced across all mature size classes enter the smallest consumer
class as a boundary flux of the advection step.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from pysizespec.core.grid import at_or_above

if TYPE_CHECKING:
    from pysizespec.core.encounter import EncounterRates
    from pysizespec.core.model import SizeSpectrumModel


def reproductive_allocation(
    w: np.ndarray, w_mat: float, w_inf: float, repro_fraction: float
) -> np.ndarray:
    """Share of surplus energy put into reproduction per size class.

    0 below ``w_mat``, ``repro_fraction`` from ``w_mat`` up to ``w_inf``,
    and 1 at or above ``w_inf`` so the largest class stops growing.
    """
    w = np.asarray(w, dtype=float)
    psi = np.where(at_or_above(w, w_mat), repro_fraction, 0.0)
    return np.where(at_or_above(w, w_inf), 1.0, psi)


def get_recruitment(model: SizeSpectrumModel, n: np.ndarray, rates: EncounterRates) -> float:
    """Number flux of recruits into the first size class.

    ``R = erepro * sum(repro * n * dw) / w_egg``, never negative.

    Parameters
    ----------
    model : SizeSpectrumModel
        Model
    n : np.ndarray
        Consumer density
    rates : EncounterRates
        Rates for the current state

    Returns
    -------
    float
        Recruits per unit time
    """
    grid = model.grid
    egg_production = float(np.sum(rates.repro * n * grid.dw))
    flux = model.params.species.erepro * egg_production / grid.w[0]
    return max(flux, 0.0)
