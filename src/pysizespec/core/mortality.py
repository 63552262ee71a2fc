"""
Mortality rates of the consumer and predation pressure on the resource.

Total consumer mortality is the sum of

- background mortality ``mu_0 * (w / w_min)**rho_b`` for ``w < w_s``
- senescent mortality ``mu_s * (w / w_s)**rho_s`` for ``w >= w_s``
- larval mortality ``mu_l / (1 + (w / w_l)**rho_l)``
- predation mortality from the encounter rates of all predators

The background and senescent terms meet at ``w_s``; the point ``w == w_s``
belongs to the senescent term.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

import numpy as np

from pysizespec.core.grid import at_or_above

if TYPE_CHECKING:
    from pysizespec.core.encounter import EncounterRates
    from pysizespec.core.model import SizeSpectrumModel


def background_mortality(
    w: np.ndarray, w_min: float, mu_0: float, rho_b: float, w_s: float
) -> np.ndarray:
    """Power-law background mortality, zero at and above ``w_s``."""
    w = np.asarray(w, dtype=float)
    return np.where(~at_or_above(w, w_s), mu_0 * (w / w_min) ** rho_b, 0.0)


def senescent_base_rate(
    w: np.ndarray,
    w_min: float,
    mu_0: float,
    rho_b: float,
    w_s: float,
    mu_s_floor: float,
) -> float:
    """Base rate ``mu_s`` of senescent mortality.

    The smallest value the background term takes on the grid below ``w_s``,
    or ``mu_s_floor`` when background mortality is disabled or no grid
    point lies below ``w_s``.
    """
    w = np.asarray(w, dtype=float)
    below = w[~at_or_above(w, w_s)]
    if mu_0 == 0 or len(below) == 0:
        return float(mu_s_floor)
    return float(np.min(mu_0 * (below / w_min) ** rho_b))


def senescent_mortality(w: np.ndarray, mu_s: float, w_s: float, rho_s: float) -> np.ndarray:
    """Senescent mortality, zero below ``w_s``."""
    w = np.asarray(w, dtype=float)
    return np.where(at_or_above(w, w_s), mu_s * (w / w_s) ** rho_s, 0.0)


def larval_mortality(w: np.ndarray, mu_l: float, w_l: float, rho_l: float) -> np.ndarray:
    """Hill-function mortality concentrated on the smallest individuals."""
    w = np.asarray(w, dtype=float)
    if mu_l == 0:
        return np.zeros_like(w)
    return mu_l / (1.0 + (w / w_l) ** rho_l)


def get_predation_rate(
    model: SizeSpectrumModel, n: np.ndarray, rates: EncounterRates
) -> Tuple[np.ndarray, np.ndarray]:
    """Predation mortality rate on the consumer and on the resource.

    Each predator eats a share ``consumption / encounter`` of what it
    encounters, spread over prey sizes by the feeding kernel, so the prey
    mass removed equals the mass consumed.

    Parameters
    ----------
    model : SizeSpectrumModel
        Model
    n : np.ndarray
        Consumer density (the predators)
    rates : EncounterRates
        Rates for the current state

    Returns
    -------
    tuple of np.ndarray
        ``(consumer_rate, resource_rate)``; the first on the consumer grid,
        the second on the full grid
    """
    grid = model.grid
    with np.errstate(divide="ignore", invalid="ignore"):
        eaten_share = np.where(rates.encounter > 0, rates.consumption / rates.encounter, 0.0)

    pred_weight = model.search_vol * eaten_share * n * grid.dw
    pred_rate = model.kernel.matrix.T @ pred_weight

    consumer_rate = model.params.species.interaction * pred_rate[grid.idx_start:]
    resource_rate = model.params.resource.interaction * pred_rate
    return consumer_rate, resource_rate


@dataclass
class MortalityBreakdown:
    """Consumer mortality split by source.

    ``resource_predation`` is the predation rate on the resource over the
    full grid; every other field is per consumer size class.
    """

    background: np.ndarray
    senescent: np.ndarray
    larval: np.ndarray
    predation: np.ndarray
    resource_predation: np.ndarray

    @property
    def total(self) -> np.ndarray:
        return self.background + self.senescent + self.larval + self.predation


def mortality_breakdown(
    model: SizeSpectrumModel, n: np.ndarray, rates: EncounterRates
) -> MortalityBreakdown:
    """All mortality terms for the current state."""
    predation, resource_predation = get_predation_rate(model, n, rates)
    return MortalityBreakdown(
        background=model.mu_background.copy(),
        senescent=model.mu_senescent.copy(),
        larval=model.mu_larval.copy(),
        predation=predation,
        resource_predation=resource_predation,
    )


def get_mortality(
    model: SizeSpectrumModel, n: np.ndarray, rates: EncounterRates
) -> np.ndarray:
    """Total consumer mortality rate per size class, recomputed each call."""
    return mortality_breakdown(model, n, rates).total
