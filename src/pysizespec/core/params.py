"""
Parameter data structures for PySizeSpec.

This module contains the ModelParams container and functions for creating,
reading, writing, and validating size-spectrum parameter files.

All parameter objects are immutable. Scenario variants are produced with
``ModelParams.with_changes`` instead of mutating a shared object.
"""

from __future__ import annotations

import dataclasses
import warnings
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Union

import pandas as pd

from pysizespec.core import constants as C
from pysizespec.core.errors import ConfigurationError
from pysizespec.core.forcing import ForcingParams
from pysizespec.core.kernel import KernelShape


@dataclass(frozen=True)
class SpeciesParams:
    """Traits of the consumer species.

    Attributes
    ----------
    w_min : float
        Egg size and smallest consumer size (g)
    w_inf : float
        Asymptotic size and largest consumer size (g)
    w_mat : float
        Size at maturation (g)
    alpha : float
        Assimilation efficiency
    h, n : float
        Maximum intake rate ``h * w**n``
    gamma, q : float
        Search volume ``gamma * w**q``
    ks, p : float
        Standard metabolism ``ks * w**p``
    kernel : KernelShape
        Feeding kernel shape
    ppmr_min, ppmr_max : float
        Predator:prey mass ratio window of the box kernel
    beta, sigma : float
        Preferred ratio and width of the lognormal kernel
    repro_fraction : float
        Share of surplus energy of mature individuals put into eggs
    erepro : float
        Reproductive efficiency (egg survival)
    interaction : float
        Strength of predation on the consumer itself (0 = no cannibalism,
        1 = full cannibalism)
    """

    w_min: float = C.DEFAULT_W_MIN
    w_inf: float = C.DEFAULT_W_INF
    w_mat: float = C.DEFAULT_W_MAT
    alpha: float = C.DEFAULT_ALPHA
    h: float = C.DEFAULT_H
    n: float = C.DEFAULT_N
    gamma: float = C.DEFAULT_GAMMA
    q: float = C.DEFAULT_Q
    ks: float = C.DEFAULT_KS
    p: float = C.DEFAULT_P
    kernel: KernelShape = KernelShape.BOX
    ppmr_min: float = C.DEFAULT_PPMR_MIN
    ppmr_max: float = C.DEFAULT_PPMR_MAX
    beta: float = C.DEFAULT_BETA
    sigma: float = C.DEFAULT_SIGMA
    repro_fraction: float = C.DEFAULT_REPRO_FRACTION
    erepro: float = C.DEFAULT_EREPRO
    interaction: float = 1.0

    def __post_init__(self):
        if not isinstance(self.kernel, KernelShape):
            object.__setattr__(self, "kernel", KernelShape(str(self.kernel).lower()))


@dataclass(frozen=True)
class MortalityParams:
    """Parameters of the external (non-predation) mortality terms.

    Attributes
    ----------
    mu_0, rho_b : float
        Background mortality ``mu_0 * (w / w_min)**rho_b`` below ``w_s``
    w_s, rho_s : float
        Onset and exponent of senescent mortality
    mu_s_floor : float
        Senescent base rate used when background mortality is disabled
    mu_l, w_l, rho_l : float
        Larval mortality ``mu_l / (1 + (w / w_l)**rho_l)``
    """

    mu_0: float = C.DEFAULT_MU_0
    rho_b: float = C.DEFAULT_RHO_B
    w_s: float = C.DEFAULT_W_S
    rho_s: float = C.DEFAULT_RHO_S
    mu_s_floor: float = C.DEFAULT_MU_S_FLOOR
    mu_l: float = C.DEFAULT_MU_L
    w_l: float = C.DEFAULT_W_L
    rho_l: float = C.DEFAULT_RHO_L


@dataclass(frozen=True)
class ResourceParams:
    """Parameters of the resource (plankton) spectrum.

    Attributes
    ----------
    kappa, lambda_ : float
        Baseline carrying capacity ``kappa * w**-lambda_``
    r_pp, r_exponent : float
        Intrinsic renewal rate ``r_pp * w**r_exponent``
    w_pp_min : float
        Smallest resource size (g)
    w_pp_cutoff : float
        Largest size with a positive carrying capacity (g)
    immigration : float
        Constant immigration ``immigration * w**-lambda_`` below the cutoff
    interaction : float
        Strength of consumer predation on the resource
    """

    kappa: float = C.DEFAULT_KAPPA
    lambda_: float = C.DEFAULT_LAMBDA
    r_pp: float = C.DEFAULT_R_PP
    r_exponent: float = C.DEFAULT_R_EXPONENT
    w_pp_min: float = C.DEFAULT_W_PP_MIN
    w_pp_cutoff: float = C.DEFAULT_W_PP_CUTOFF
    immigration: float = C.DEFAULT_IMMIGRATION
    interaction: float = 1.0


_GROUPS = ("species", "mortality", "resource", "forcing")


@dataclass(frozen=True)
class ModelParams:
    """Container for all size-spectrum model parameters.

    Attributes
    ----------
    species : SpeciesParams
        Consumer traits
    mortality : MortalityParams
        External mortality terms
    resource : ResourceParams
        Resource spectrum dynamics
    forcing : ForcingParams
        Carrying-capacity forcing process
    dx : float
        Size grid step (log10 units)
    dt : float
        Time step (years)

    Examples
    --------
    >>> params = create_model_params()
    >>> no_cannibalism = params.with_changes(interaction=0.0)
    >>> params.species.interaction, no_cannibalism.species.interaction
    (1.0, 0.0)
    """

    species: SpeciesParams = field(default_factory=SpeciesParams)
    mortality: MortalityParams = field(default_factory=MortalityParams)
    resource: ResourceParams = field(default_factory=ResourceParams)
    forcing: ForcingParams = field(default_factory=ForcingParams)
    dx: float = C.DEFAULT_DX
    dt: float = C.DEFAULT_DT

    def with_changes(self, **changes) -> "ModelParams":
        """Return a copy with the named fields replaced.

        Field names are looked up in each parameter group, species first, so
        ``interaction`` and ``sigma`` refer to the consumer. A group prefix
        selects another group explicitly (``resource_interaction``,
        ``forcing_sigma``). Group objects themselves (``species=...``) and
        ``dx``/``dt`` may be passed directly.
        """
        top = {}
        grouped: Dict[str, Dict[str, Any]] = {name: {} for name in _GROUPS}

        for key, value in changes.items():
            if key in _GROUPS or key in ("dx", "dt"):
                top[key] = value
                continue
            prefix, _, rest = key.partition("_")
            if prefix in _GROUPS and _owner_of(rest, prefix) == prefix:
                grouped[prefix][rest] = value
                continue
            group = _owner_of(key)
            if group is None:
                raise ConfigurationError(f"Unknown parameter: {key}")
            grouped[group][key] = value

        new = dataclasses.replace(self, **top)
        replacements = {
            name: dataclasses.replace(getattr(new, name), **values)
            for name, values in grouped.items()
            if values
        }
        return dataclasses.replace(new, **replacements)

    def __repr__(self) -> str:
        sp = self.species
        return (
            f"ModelParams(\n"
            f"  w=[{sp.w_min}, {sp.w_inf}], w_mat={sp.w_mat}, "
            f"ppmr=[{sp.ppmr_min}, {sp.ppmr_max}], interaction={sp.interaction}\n"
            f"  dx={self.dx}, dt={self.dt}, forcing={self.forcing.mode.value}\n"
            f")"
        )


_GROUP_CLASSES = (
    ("species", SpeciesParams),
    ("mortality", MortalityParams),
    ("resource", ResourceParams),
    ("forcing", ForcingParams),
)


def _owner_of(name: str, only: str = None):
    # species wins on shared names (interaction, sigma)
    for group, cls in _GROUP_CLASSES:
        if only is not None and group != only:
            continue
        if name in {f.name for f in fields(cls)}:
            return group
    return None


def create_model_params(**overrides) -> ModelParams:
    """Create model parameters with reference defaults.

    Parameters
    ----------
    **overrides
        Any parameter name accepted by ``ModelParams.with_changes``

    Returns
    -------
    ModelParams
        Parameter set for a single consumer species plus resource

    Examples
    --------
    >>> params = create_model_params(dt=0.001, forcing=ForcingParams("red_noise"))
    """
    params = ModelParams()
    if overrides:
        params = params.with_changes(**overrides)
    return params


def check_model_params(params: ModelParams) -> bool:
    """Validate a parameter set.

    Hard errors raise ``ConfigurationError``; questionable but usable
    values are reported with ``warnings.warn``.

    Parameters
    ----------
    params : ModelParams
        Parameter object to validate.

    Returns
    -------
    bool
        True if no warnings were issued.

    Raises
    ------
    ConfigurationError
        For parameter combinations the engine cannot run.
    """
    sp = params.species
    mort = params.mortality
    res = params.resource

    if params.dx <= 0:
        raise ConfigurationError(f"dx must be positive, got {params.dx}")
    if params.dt <= 0:
        raise ConfigurationError(f"dt must be positive, got {params.dt}")
    if not 0 < sp.w_min < sp.w_inf:
        raise ConfigurationError(f"Need 0 < w_min < w_inf, got w_min={sp.w_min}, w_inf={sp.w_inf}")
    if sp.kernel is KernelShape.BOX and not 0 < sp.ppmr_min < sp.ppmr_max:
        raise ConfigurationError(
            f"Need 0 < ppmr_min < ppmr_max, got ppmr_min={sp.ppmr_min}, ppmr_max={sp.ppmr_max}"
        )
    if sp.kernel is KernelShape.LOGNORMAL and (sp.beta <= 0 or sp.sigma <= 0):
        raise ConfigurationError("Lognormal kernel needs positive beta and sigma")
    if not 0 < res.w_pp_min <= sp.w_min:
        raise ConfigurationError(
            f"Resource lower bound must satisfy 0 < w_pp_min <= w_min, got {res.w_pp_min}"
        )
    if mort.w_s <= 0 or mort.w_l <= 0:
        raise ConfigurationError("w_s and w_l must be positive")

    negatives = {
        "alpha": sp.alpha, "h": sp.h, "gamma": sp.gamma, "ks": sp.ks,
        "erepro": sp.erepro, "mu_0": mort.mu_0, "mu_s_floor": mort.mu_s_floor,
        "mu_l": mort.mu_l, "kappa": res.kappa, "r_pp": res.r_pp,
        "immigration": res.immigration,
    }
    bad = [name for name, value in negatives.items() if value < 0]
    if bad:
        raise ConfigurationError(f"Parameters must be non-negative: {bad}")

    n_warnings = 0

    if not sp.w_min <= sp.w_mat <= sp.w_inf:
        warnings.warn(f"w_mat={sp.w_mat} lies outside [w_min, w_inf]; no size class will mature")
        n_warnings += 1

    if not 0 <= sp.repro_fraction <= 1:
        warnings.warn(f"repro_fraction={sp.repro_fraction} is outside [0, 1]")
        n_warnings += 1

    for label, value in (("interaction", sp.interaction), ("resource interaction", res.interaction)):
        if not 0 <= value <= 1:
            warnings.warn(f"{label}={value} is outside [0, 1]")
            n_warnings += 1

    if res.w_pp_cutoff < sp.w_min / max(sp.ppmr_max, 1.0):
        warnings.warn("Resource cutoff is below every prey size of the smallest consumer")
        n_warnings += 1

    return n_warnings == 0


# Column layout of parameter files
_FILE_COLUMNS = ["Group", "Parameter", "Value"]


def _to_cell(value):
    if isinstance(value, Enum):
        return value.value
    return value


def write_model_params(params: ModelParams, path: Union[str, Path]) -> None:
    """Write parameters to a long-format CSV file.

    Parameters
    ----------
    params : ModelParams
        Parameter object to write.
    path : str or Path
        Output file.
    """
    rows = [["model", "dx", params.dx], ["model", "dt", params.dt]]
    for group in _GROUPS:
        obj = getattr(params, group)
        for f in fields(obj):
            rows.append([group, f.name, _to_cell(getattr(obj, f.name))])

    pd.DataFrame(rows, columns=_FILE_COLUMNS).to_csv(Path(path), index=False)


def read_model_params(path: Union[str, Path]) -> ModelParams:
    """Read parameters written by ``write_model_params``.

    Parameters not present in the file keep their defaults.

    Parameters
    ----------
    path : str or Path
        Parameter CSV file.

    Returns
    -------
    ModelParams
    """
    table = pd.read_csv(Path(path), dtype={"Value": str})
    missing = set(_FILE_COLUMNS) - set(table.columns)
    if missing:
        raise ConfigurationError(f"Parameter file is missing columns: {sorted(missing)}")

    defaults = ModelParams()
    top: Dict[str, Any] = {}
    grouped: Dict[str, Dict[str, Any]] = {name: {} for name in _GROUPS}

    for group, name, raw in table[_FILE_COLUMNS].itertuples(index=False):
        if group == "model":
            if name not in ("dx", "dt"):
                raise ConfigurationError(f"Unknown model parameter: {name}")
            top[name] = float(raw)
            continue
        if group not in grouped:
            raise ConfigurationError(f"Unknown parameter group: {group}")
        default_obj = getattr(defaults, group)
        if name not in {f.name for f in fields(default_obj)}:
            raise ConfigurationError(f"Unknown parameter: {group}.{name}")
        default_value = getattr(default_obj, name)
        if isinstance(default_value, Enum):
            grouped[group][name] = raw
        else:
            grouped[group][name] = float(raw)

    groups = {
        name: dataclasses.replace(getattr(defaults, name), **values)
        for name, values in grouped.items()
    }
    return dataclasses.replace(defaults, **groups, **top)


__all__ = [
    "SpeciesParams",
    "MortalityParams",
    "ResourceParams",
    "ModelParams",
    "create_model_params",
    "check_model_params",
    "write_model_params",
    "read_model_params",
]
