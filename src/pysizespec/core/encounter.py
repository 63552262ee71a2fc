"""
Food encounter, assimilation and somatic growth.

For predator size ``w[j]`` the encounter rate is the kernel-weighted prey
biomass on the full grid scaled by the search volume:

    E[j] = gamma * w[j]**q * sum_i phi(w[j] / w_full[i]) * N[i] * w_full[i] * dw_full[i]

with ``N = theta_pp * n_pp + theta * n`` (the consumer padded onto the
full grid, each weighted by its interaction coefficient). Consumption is
capped by the maximum intake rate, assimilated energy pays for metabolism
first, and the remaining surplus is split between reproduction and growth.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from pysizespec.core.model import SizeSpectrumModel


@dataclass
class EncounterRates:
    """Per-size rates derived from the current state.

    Attributes
    ----------
    encounter : np.ndarray
        Food encounter rate (mass / time)
    consumption : np.ndarray
        Encounter capped by the maximum intake rate
    feeding_level : np.ndarray
        ``consumption / intake_max``, between 0 and 1
    assimilation : np.ndarray
        Assimilated energy rate
    surplus : np.ndarray
        Assimilation minus metabolism, floored at 0
    repro : np.ndarray
        Energy rate put into reproduction
    growth : np.ndarray
        Somatic growth rate (mass / time), never negative
    """

    encounter: np.ndarray
    consumption: np.ndarray
    feeding_level: np.ndarray
    assimilation: np.ndarray
    surplus: np.ndarray
    repro: np.ndarray
    growth: np.ndarray


def prey_density(model: SizeSpectrumModel, n: np.ndarray, n_pp: np.ndarray) -> np.ndarray:
    """Density of available prey on the full grid."""
    params = model.params
    return params.resource.interaction * n_pp + params.species.interaction * model.grid.pad(n)


def get_encounter(model: SizeSpectrumModel, n: np.ndarray, n_pp: np.ndarray) -> np.ndarray:
    """Food encounter rate per consumer size class."""
    grid = model.grid
    prey_biomass = prey_density(model, n, n_pp) * grid.w_full * grid.dw_full
    return model.search_vol * (model.kernel.matrix @ prey_biomass)


def get_encounter_rates(
    model: SizeSpectrumModel, n: np.ndarray, n_pp: np.ndarray
) -> EncounterRates:
    """Encounter, assimilation and growth for the current state.

    Parameters
    ----------
    model : SizeSpectrumModel
        Model
    n : np.ndarray
        Consumer density
    n_pp : np.ndarray
        Resource density (full grid)

    Returns
    -------
    EncounterRates
    """
    sp = model.params.species

    encounter = get_encounter(model, n, n_pp)
    consumption = np.minimum(encounter, model.intake_max)
    with np.errstate(divide="ignore", invalid="ignore"):
        feeding_level = np.where(model.intake_max > 0, consumption / model.intake_max, 0.0)

    assimilation = sp.alpha * consumption
    # Individuals do not shrink: an energy deficit stops growth and reproduction
    surplus = np.maximum(assimilation - model.metab, 0.0)
    repro = model.psi * surplus
    growth = surplus - repro

    return EncounterRates(
        encounter=encounter,
        consumption=consumption,
        feeding_level=feeding_level,
        assimilation=assimilation,
        surplus=surplus,
        repro=repro,
        growth=growth,
    )
