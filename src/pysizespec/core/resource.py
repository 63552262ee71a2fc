"""
Resource (plankton) spectrum dynamics.

Explicit update over one time step:

    n_pp(t+dt) = n_pp + dt * [r * n_pp * (1 - n_pp / (K * factor)) + I - mu_pred * n_pp]

where ``factor`` is the carrying-capacity multiplier of the run's forcing.
Where ``K == 0`` (above the resource cutoff) the logistic term is not
finite and counts as zero. Negative results are clamped to zero.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

import numpy as np

from pysizespec.logger import get_logger

if TYPE_CHECKING:
    from pysizespec.core.forcing import PlanktonForcing
    from pysizespec.core.model import SizeSpectrumModel

logger = get_logger(__name__)


def resource_step(
    n_pp: np.ndarray,
    predation: np.ndarray,
    rr_pp: np.ndarray,
    cc_pp: np.ndarray,
    immigration: np.ndarray,
    factor: float,
    dt: float,
) -> Tuple[np.ndarray, int]:
    """Advance the resource density by one step.

    Parameters
    ----------
    n_pp : np.ndarray
        Resource density
    predation : np.ndarray
        Predation mortality rate on the resource
    rr_pp : np.ndarray
        Intrinsic renewal rate
    cc_pp : np.ndarray
        Baseline carrying capacity
    immigration : np.ndarray
        Constant immigration
    factor : float
        Carrying-capacity multiplier
    dt : float
        Time step

    Returns
    -------
    tuple
        ``(new_density, n_clamped)`` where ``n_clamped`` counts entries that
        were negative before clamping
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        logistic = rr_pp * n_pp * (1.0 - n_pp / (cc_pp * factor))
    logistic = np.where(np.isfinite(logistic), logistic, 0.0)

    new = n_pp + dt * (logistic + immigration - predation * n_pp)

    negative = new < 0
    n_clamped = int(np.count_nonzero(negative))
    if n_clamped:
        new = np.where(negative, 0.0, new)
    return new, n_clamped


class ResourceDynamics:
    """Resource renewal bound to one run's forcing state.

    Parameters
    ----------
    model : SizeSpectrumModel
        Supplies the static renewal, capacity and immigration arrays
    forcing : PlanktonForcing
        Carrying-capacity forcing; stepped once per call to ``advance``
    """

    def __init__(self, model: SizeSpectrumModel, forcing: PlanktonForcing):
        self.model = model
        self.forcing = forcing
        self.n_clamped_steps = 0

    @property
    def factor(self) -> float:
        return self.forcing.factor

    def advance(self, n_pp: np.ndarray, predation: np.ndarray, dt: float) -> np.ndarray:
        """Step the forcing, then the resource density.

        Parameters
        ----------
        n_pp : np.ndarray
            Resource density at time t
        predation : np.ndarray
            Predation mortality rate on the resource at time t
        dt : float
            Time step

        Returns
        -------
        np.ndarray
            Resource density at time t + dt
        """
        factor = self.forcing.step(dt)
        new, n_clamped = resource_step(
            n_pp,
            predation,
            self.model.rr_pp,
            self.model.cc_pp,
            self.model.immigration,
            factor,
            dt,
        )
        if n_clamped:
            self.n_clamped_steps += 1
            logger.debug("Clamped %d negative resource densities to zero", n_clamped)
        return new
