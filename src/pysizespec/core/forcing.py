"""
Stochastic forcing of the resource carrying capacity.

This module provides:
1. A closed set of forcing modes (deterministic, biannual jump, red noise)
2. Per-run forcing state objects with an injectable random generator
3. Explicit reset and serialization of the forcing state

A forcing instance belongs to one simulation run. Passing the same instance
to a second run is the only way its clock, multiplier and generator carry
over between runs.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

import numpy as np

from pysizespec.core.constants import (
    DEFAULT_FORCING_PERIOD,
    DEFAULT_JUMP_HIGH,
    DEFAULT_JUMP_LOW,
    DEFAULT_RED_NOISE_PHI,
    DEFAULT_RED_NOISE_SIGMA,
    EPSILON,
)
from pysizespec.core.errors import ConfigurationError
from pysizespec.logger import get_logger

logger = get_logger(__name__)


class ForcingMode(Enum):
    """How the carrying-capacity multiplier evolves."""

    DETERMINISTIC = "deterministic"  # Multiplier fixed at 1
    BIANNUAL_JUMP = "biannual_jump"  # Log-uniform redraw every period
    RED_NOISE = "red_noise"  # Exponential-of-AR(1) noise every step


def _as_generator(
    rng: Optional[np.random.Generator] = None, seed: Optional[int] = None
) -> np.random.Generator:
    if rng is not None:
        return rng
    return np.random.default_rng(seed)


@dataclass
class PlanktonForcing(ABC):
    """Mutable forcing state for one simulation run.

    Attributes
    ----------
    rng : np.random.Generator
        Random source used by the stochastic modes
    factor : float
        Current multiplier applied to the baseline carrying capacity
    clock : float
        Simulated time elapsed since the last redraw
    """

    rng: np.random.Generator = field(default_factory=np.random.default_rng)
    factor: float = 1.0
    clock: float = 0.0

    mode = None

    @abstractmethod
    def step(self, dt: float) -> float:
        """Advance the forcing by one time step.

        Parameters
        ----------
        dt : float
            Time step (years)

        Returns
        -------
        float
            Carrying-capacity multiplier to use for this step
        """

    def reset(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        """Return the forcing to its initial state.

        The multiplier goes back to 1 and the clock to 0. If ``rng`` or
        ``seed`` is given the random source is replaced as well; otherwise
        the generator keeps its current position.
        """
        self.factor = 1.0
        self.clock = 0.0
        if rng is not None or seed is not None:
            self.rng = _as_generator(rng, seed)

    def copy(self) -> "PlanktonForcing":
        """Independent copy, generator state included."""
        return copy.deepcopy(self)

    def parameters(self) -> Dict[str, float]:
        """Mode-specific parameters."""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Serializable snapshot of the forcing state."""
        return {
            "mode": self.mode.value,
            "factor": float(self.factor),
            "clock": float(self.clock),
            "parameters": self.parameters(),
            "rng": {
                "bit_generator": type(self.rng.bit_generator).__name__,
                "state": self.rng.bit_generator.state,
            },
        }


@dataclass
class DeterministicForcing(PlanktonForcing):
    """Carrying capacity stays at its baseline."""

    mode = ForcingMode.DETERMINISTIC

    def step(self, dt: float) -> float:
        self.clock += dt
        return self.factor


@dataclass
class BiannualJumpForcing(PlanktonForcing):
    """Carrying-capacity multiplier redrawn at a fixed period.

    Each redraw is uniform in log space between ``jump_low`` and
    ``jump_high``. Between redraws the multiplier is constant.

    Attributes
    ----------
    period : float
        Time between redraws (years)
    jump_low, jump_high : float
        Bounds of the multiplier
    """

    period: float = DEFAULT_FORCING_PERIOD
    jump_low: float = DEFAULT_JUMP_LOW
    jump_high: float = DEFAULT_JUMP_HIGH

    mode = ForcingMode.BIANNUAL_JUMP

    def __post_init__(self):
        if self.period <= 0:
            raise ConfigurationError(f"Forcing period must be positive, got {self.period}")
        if not 0 < self.jump_low <= self.jump_high:
            raise ConfigurationError(
                f"Jump bounds must satisfy 0 < low <= high, got ({self.jump_low}, {self.jump_high})"
            )

    def step(self, dt: float) -> float:
        self.clock += dt
        # Accumulated steps land on the period only up to rounding
        if self.clock >= self.period - EPSILON:
            exponent = self.rng.uniform(np.log10(self.jump_low), np.log10(self.jump_high))
            self.factor = 10.0**exponent
            self.clock = 0.0
            logger.debug("Carrying capacity multiplier redrawn: %.4f", self.factor)
        return self.factor

    def parameters(self) -> Dict[str, float]:
        return {"period": self.period, "jump_low": self.jump_low, "jump_high": self.jump_high}


@dataclass
class RedNoiseForcing(PlanktonForcing):
    """Temporally correlated multiplicative noise.

    Every step: ``factor = factor**phi * exp(N(0, sigma))``.

    Attributes
    ----------
    phi : float
        Persistence of the AR(1) process in log space
    sigma : float
        Standard deviation of the log innovation
    """

    phi: float = DEFAULT_RED_NOISE_PHI
    sigma: float = DEFAULT_RED_NOISE_SIGMA

    mode = ForcingMode.RED_NOISE

    def __post_init__(self):
        if self.sigma < 0:
            raise ConfigurationError(f"Noise sigma must be non-negative, got {self.sigma}")

    def step(self, dt: float) -> float:
        self.clock += dt
        self.factor = self.factor**self.phi * np.exp(self.rng.normal(0.0, self.sigma))
        return self.factor

    def parameters(self) -> Dict[str, float]:
        return {"phi": self.phi, "sigma": self.sigma}


_FORCING_CLASSES = {
    ForcingMode.DETERMINISTIC: DeterministicForcing,
    ForcingMode.BIANNUAL_JUMP: BiannualJumpForcing,
    ForcingMode.RED_NOISE: RedNoiseForcing,
}


@dataclass(frozen=True)
class ForcingParams:
    """Immutable forcing configuration of a model.

    Attributes
    ----------
    mode : ForcingMode
        Which forcing process to use
    period : float
        Redraw period for the biannual jump mode (years)
    jump_low, jump_high : float
        Multiplier bounds for the biannual jump mode
    phi, sigma : float
        AR(1) persistence and innovation scale for the red noise mode
    """

    mode: ForcingMode = ForcingMode.DETERMINISTIC
    period: float = DEFAULT_FORCING_PERIOD
    jump_low: float = DEFAULT_JUMP_LOW
    jump_high: float = DEFAULT_JUMP_HIGH
    phi: float = DEFAULT_RED_NOISE_PHI
    sigma: float = DEFAULT_RED_NOISE_SIGMA

    def __post_init__(self):
        # Accept the string form when read from a parameter file
        if not isinstance(self.mode, ForcingMode):
            object.__setattr__(self, "mode", _parse_mode(self.mode))

    def create(
        self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None
    ) -> PlanktonForcing:
        """Build a fresh forcing instance in its initial state."""
        generator = _as_generator(rng, seed)
        if self.mode is ForcingMode.BIANNUAL_JUMP:
            return BiannualJumpForcing(
                rng=generator, period=self.period, jump_low=self.jump_low, jump_high=self.jump_high
            )
        if self.mode is ForcingMode.RED_NOISE:
            return RedNoiseForcing(rng=generator, phi=self.phi, sigma=self.sigma)
        return DeterministicForcing(rng=generator)


def _parse_mode(mode: Union[str, ForcingMode]) -> ForcingMode:
    if isinstance(mode, ForcingMode):
        return mode
    key = str(mode).strip()
    try:
        return ForcingMode(key.lower())
    except ValueError:
        pass
    try:
        return ForcingMode[key.upper()]
    except KeyError:
        valid = [m.value for m in ForcingMode]
        raise ConfigurationError(f"Unknown forcing mode '{mode}'. Choose from {valid}") from None


def create_forcing(
    mode: Union[str, ForcingMode] = ForcingMode.DETERMINISTIC,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    **parameters,
) -> PlanktonForcing:
    """Convenience function to create a forcing instance.

    Parameters
    ----------
    mode : str or ForcingMode
        "deterministic", "biannual_jump" or "red_noise"
    rng : np.random.Generator, optional
        Random source (takes precedence over ``seed``)
    seed : int, optional
        Seed for a new generator
    **parameters
        Mode parameters (period, jump_low, jump_high, phi, sigma)

    Returns
    -------
    PlanktonForcing
        Forcing in its initial state

    Examples
    --------
    >>> forcing = create_forcing("red_noise", seed=1, phi=0.9, sigma=0.2)
    >>> forcing.step(0.002) > 0
    True
    """
    return ForcingParams(mode=_parse_mode(mode), **parameters).create(rng=rng, seed=seed)


def forcing_from_dict(data: Dict[str, Any]) -> PlanktonForcing:
    """Restore a forcing instance written by ``PlanktonForcing.to_dict``."""
    mode = _parse_mode(data["mode"])
    rng_info = data.get("rng")
    if rng_info is not None:
        bit_generator = getattr(np.random, rng_info.get("bit_generator", "PCG64"))()
        bit_generator.state = rng_info["state"]
        generator = np.random.Generator(bit_generator)
    else:
        generator = np.random.default_rng()

    forcing = _FORCING_CLASSES[mode](rng=generator, **data.get("parameters", {}))
    forcing.factor = float(data.get("factor", 1.0))
    forcing.clock = float(data.get("clock", 0.0))
    return forcing


__all__ = [
    "ForcingMode",
    "PlanktonForcing",
    "DeterministicForcing",
    "BiannualJumpForcing",
    "RedNoiseForcing",
    "ForcingParams",
    "create_forcing",
    "forcing_from_dict",
]
