"""
Model assembly: size grid, static rate arrays and feeding kernel.

``set_model`` turns a validated ``ModelParams`` into an immutable
``SizeSpectrumModel`` that the integrator can run. Everything computed here
is fixed for the lifetime of the model; only the densities and the forcing
state change during a simulation.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from pysizespec.core.constants import DEFAULT_INITIAL_COEFFICIENT, DEFAULT_INITIAL_EXPONENT
from pysizespec.core.grid import SizeGrid, make_grid
from pysizespec.core.kernel import FeedingKernel, feeding_kernel
from pysizespec.core.mortality import (
    background_mortality,
    larval_mortality,
    senescent_base_rate,
    senescent_mortality,
)
from pysizespec.core.params import ModelParams, check_model_params
from pysizespec.core.reproduction import reproductive_allocation


@dataclass(frozen=True)
class SizeSpectrumModel:
    """Ready-to-run size-spectrum model.

    Attributes
    ----------
    params : ModelParams
        Parameters the model was built from
    grid : SizeGrid
        Consumer and full size grids
    kernel : FeedingKernel
        Normalized feeding kernel and its predator x prey matrix
    intake_max : np.ndarray
        Maximum intake rate per consumer class
    search_vol : np.ndarray
        Search volume per consumer class
    metab : np.ndarray
        Standard metabolism per consumer class
    psi : np.ndarray
        Share of surplus energy allocated to reproduction
    mu_background, mu_senescent, mu_larval : np.ndarray
        External mortality terms per consumer class
    rr_pp : np.ndarray
        Intrinsic renewal rate of the resource (full grid)
    cc_pp : np.ndarray
        Baseline carrying capacity of the resource (full grid, 0 above
        the cutoff)
    immigration : np.ndarray
        Constant resource immigration (full grid)
    """

    params: ModelParams
    grid: SizeGrid
    kernel: FeedingKernel
    intake_max: np.ndarray
    search_vol: np.ndarray
    metab: np.ndarray
    psi: np.ndarray
    mu_background: np.ndarray
    mu_senescent: np.ndarray
    mu_larval: np.ndarray
    rr_pp: np.ndarray
    cc_pp: np.ndarray
    immigration: np.ndarray

    @property
    def mu_external(self) -> np.ndarray:
        """Background + senescent + larval mortality."""
        return self.mu_background + self.mu_senescent + self.mu_larval

    @property
    def dt(self) -> float:
        return self.params.dt

    def __repr__(self) -> str:
        return f"SizeSpectrumModel({self.grid!r}, forcing={self.params.forcing.mode.value})"


def set_model(params: ModelParams) -> SizeSpectrumModel:
    """Assemble a model from parameters.

    Parameters
    ----------
    params : ModelParams
        Parameter set (validated here)

    Returns
    -------
    SizeSpectrumModel
        Model with grid, kernel and static rate arrays

    Raises
    ------
    ConfigurationError
        If the parameters are invalid or the kernel has empty support
    """
    check_model_params(params)
    sp = params.species
    mort = params.mortality
    res = params.resource

    grid = make_grid(sp.w_min, sp.w_inf, res.w_pp_min, params.dx)
    w = grid.w
    w_full = grid.w_full

    mu_b = background_mortality(w, sp.w_min, mort.mu_0, mort.rho_b, mort.w_s)
    mu_s = senescent_base_rate(w, sp.w_min, mort.mu_0, mort.rho_b, mort.w_s, mort.mu_s_floor)

    resource_range = w_full <= res.w_pp_cutoff

    return SizeSpectrumModel(
        params=params,
        grid=grid,
        kernel=feeding_kernel(grid, sp),
        intake_max=sp.h * w**sp.n,
        search_vol=sp.gamma * w**sp.q,
        metab=sp.ks * w**sp.p,
        psi=reproductive_allocation(w, sp.w_mat, sp.w_inf, sp.repro_fraction),
        mu_background=mu_b,
        mu_senescent=senescent_mortality(w, mu_s, mort.w_s, mort.rho_s),
        mu_larval=larval_mortality(w, mort.mu_l, mort.w_l, mort.rho_l),
        rr_pp=np.where(resource_range, res.r_pp * w_full**res.r_exponent, 0.0),
        cc_pp=np.where(resource_range, res.kappa * w_full ** (-res.lambda_), 0.0),
        immigration=np.where(resource_range, res.immigration * w_full ** (-res.lambda_), 0.0),
    )


def initial_consumer_density(
    model: SizeSpectrumModel,
    coefficient: float = DEFAULT_INITIAL_COEFFICIENT,
    exponent: float = DEFAULT_INITIAL_EXPONENT,
) -> np.ndarray:
    """Power-law initial consumer spectrum ``coefficient * w**exponent``."""
    return coefficient * model.grid.w**exponent


def initial_resource_density(model: SizeSpectrumModel) -> np.ndarray:
    """Resource spectrum at its baseline carrying capacity."""
    return model.cc_pp.copy()
