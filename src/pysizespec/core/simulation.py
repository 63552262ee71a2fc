"""
Size-spectrum simulation engine.

This module contains the time-stepping integrator that advances the
consumer and resource spectra together:

- step: one time step (encounter, mortality, resource, reproduction,
  consumer advection)
- run: a projection from an initial condition, checkpointed into a
  TimeSeries
- resume: continuation of a TimeSeries from its final snapshot

The consumer update is the upwind finite-volume scheme

    n_i(t+dt) = [n_i + dt * g_{i-1} * n_{i-1} / dw_i] / [1 + dt * (g_i / dw_i + mu_i)]

with the recruitment flux entering the first class in place of the
upstream term. Growth and mortality are never negative, so the update
keeps densities non-negative for any step size; accuracy of the advection
needs ``dt * max(g / dw) <= 1``.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from pysizespec.core.constants import (
    DEFAULT_SAVE_INTERVAL,
    MAX_COURANT_NUMBER,
    STEP_MULTIPLE_RTOL,
)
from pysizespec.core.encounter import EncounterRates, get_encounter_rates
from pysizespec.core.errors import ConfigurationError, StabilityWarning
from pysizespec.core.forcing import PlanktonForcing
from pysizespec.core.model import SizeSpectrumModel
from pysizespec.core.mortality import MortalityBreakdown, mortality_breakdown
from pysizespec.core.reproduction import get_recruitment
from pysizespec.core.resource import ResourceDynamics
from pysizespec.logger import get_logger

logger = get_logger(__name__)

STABILITY_MODES = ("warn", "raise", "ignore")


@dataclass
class TimeSeries:
    """Checkpointed output of a simulation run.

    Attributes
    ----------
    times : np.ndarray
        Simulated time of each snapshot (years)
    n : np.ndarray
        Consumer density snapshots (n_snapshots x n_consumer)
    n_pp : np.ndarray
        Resource density snapshots (n_snapshots x n_full)
    w : np.ndarray
        Consumer size grid
    w_full : np.ndarray
        Full size grid
    dt : float
        Time step used by the run
    forcing : PlanktonForcing, optional
        Copy of the forcing state after the last step
    """

    times: np.ndarray
    n: np.ndarray
    n_pp: np.ndarray
    w: np.ndarray
    w_full: np.ndarray
    dt: float
    forcing: Optional[PlanktonForcing] = None

    @property
    def n_snapshots(self) -> int:
        return len(self.times)

    @property
    def end_time(self) -> float:
        return float(self.times[-1])

    @property
    def final_n(self) -> np.ndarray:
        return self.n[-1].copy()

    @property
    def final_n_pp(self) -> np.ndarray:
        return self.n_pp[-1].copy()

    def snapshot(self, index: int = -1) -> Tuple[float, np.ndarray, np.ndarray]:
        """``(time, consumer density, resource density)`` of one snapshot."""
        return float(self.times[index]), self.n[index].copy(), self.n_pp[index].copy()

    def __repr__(self) -> str:
        return (
            f"TimeSeries(snapshots={self.n_snapshots}, "
            f"t=[{self.times[0]:.4g}, {self.end_time:.4g}], dt={self.dt})"
        )


@dataclass
class StepResult:
    """State after one step plus the rates that produced it.

    Attributes
    ----------
    n : np.ndarray
        Consumer density at t + dt
    n_pp : np.ndarray
        Resource density at t + dt
    rates : EncounterRates
        Encounter and growth rates at t
    mortality : MortalityBreakdown
        Mortality terms at t
    recruitment : float
        Recruitment flux at t
    n_clamped : int
        Consumer densities clamped to zero in this step
    """

    n: np.ndarray
    n_pp: np.ndarray
    rates: EncounterRates
    mortality: MortalityBreakdown
    recruitment: float
    n_clamped: int = 0


def upwind_update(
    n: np.ndarray,
    growth: np.ndarray,
    mortality: np.ndarray,
    recruitment: float,
    dw: np.ndarray,
    dt: float,
) -> np.ndarray:
    """Advection-and-death update of the consumer density.

    Parameters
    ----------
    n : np.ndarray
        Consumer density at t
    growth : np.ndarray
        Growth rate at t
    mortality : np.ndarray
        Total mortality rate at t
    recruitment : float
        Number flux into the first class
    dw : np.ndarray
        Class widths
    dt : float
        Time step

    Returns
    -------
    np.ndarray
        Consumer density at t + dt
    """
    inflow = np.empty_like(n)
    inflow[0] = recruitment
    inflow[1:] = growth[:-1] * n[:-1]
    return (n + dt * inflow / dw) / (1.0 + dt * (growth / dw + mortality))


def courant_number(model: SizeSpectrumModel, rates: EncounterRates) -> float:
    """``dt * max(g / dw)`` for the given growth rates."""
    return float(model.dt * np.max(rates.growth / model.grid.dw))


def step(
    model: SizeSpectrumModel,
    n: np.ndarray,
    n_pp: np.ndarray,
    resource: ResourceDynamics,
    dt: Optional[float] = None,
) -> StepResult:
    """Advance consumer and resource densities by one time step.

    Order: encounter and growth, mortality, resource update, reproduction,
    consumer update. Every rate is evaluated at time t.

    Parameters
    ----------
    model : SizeSpectrumModel
        Model
    n : np.ndarray
        Consumer density at t
    n_pp : np.ndarray
        Resource density at t
    resource : ResourceDynamics
        Resource dynamics bound to the run's forcing
    dt : float, optional
        Time step (default: the model's)

    Returns
    -------
    StepResult
    """
    if dt is None:
        dt = model.dt

    rates = get_encounter_rates(model, n, n_pp)
    mortality = mortality_breakdown(model, n, rates)
    n_pp_new = resource.advance(n_pp, mortality.resource_predation, dt)
    recruitment = get_recruitment(model, n, rates)

    n_new = upwind_update(n, rates.growth, mortality.total, recruitment, model.grid.dw, dt)
    negative = n_new < 0
    n_clamped = int(np.count_nonzero(negative))
    if n_clamped:
        n_new = np.where(negative, 0.0, n_new)
        logger.debug("Clamped %d negative consumer densities to zero", n_clamped)

    return StepResult(
        n=n_new,
        n_pp=n_pp_new,
        rates=rates,
        mortality=mortality,
        recruitment=recruitment,
        n_clamped=n_clamped,
    )


def _steps_in(interval: float, dt: float, name: str) -> int:
    steps = int(round(interval / dt))
    if steps < 1:
        raise ConfigurationError(f"{name}={interval} is shorter than one time step (dt={dt})")
    if abs(steps * dt - interval) > STEP_MULTIPLE_RTOL * max(abs(interval), dt):
        raise ConfigurationError(f"{name}={interval} is not an integer multiple of dt={dt}")
    return steps


def _check_density(density, size: int, name: str) -> np.ndarray:
    density = np.array(density, dtype=float)
    if density.shape != (size,):
        raise ConfigurationError(
            f"Initial {name} density has shape {density.shape}, expected ({size},)"
        )
    if not np.all(np.isfinite(density)):
        raise ConfigurationError(f"Initial {name} density contains non-finite values")
    if np.any(density < 0):
        raise ConfigurationError(f"Initial {name} density contains negative values")
    return density


def _check_stability(courant: float, stability: str):
    if courant <= MAX_COURANT_NUMBER or stability == "ignore":
        return
    message = (
        f"Courant number {courant:.3f} exceeds {MAX_COURANT_NUMBER}; "
        "reduce dt or increase dx"
    )
    if stability == "raise":
        raise ConfigurationError(message)
    warnings.warn(message, StabilityWarning)


def run(
    model: SizeSpectrumModel,
    n: np.ndarray,
    n_pp: np.ndarray,
    duration: float,
    save_interval: float = DEFAULT_SAVE_INTERVAL,
    t0: float = 0.0,
    forcing: Optional[PlanktonForcing] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    stability: str = "warn",
) -> TimeSeries:
    """Project the model forward in time.

    Parameters
    ----------
    model : SizeSpectrumModel
        Model to run
    n : np.ndarray
        Initial consumer density
    n_pp : np.ndarray
        Initial resource density (full grid)
    duration : float
        Simulated time to run (years); integer multiple of dt
    save_interval : float
        Time between snapshots (years); integer multiple of dt
    t0 : float
        Simulated time of the initial condition
    forcing : PlanktonForcing, optional
        Forcing state to use and mutate. If None, a fresh instance is
        built from ``model.params.forcing`` so independent runs do not
        share state. Pass the same instance to several runs to carry the
        forcing over on purpose.
    rng : np.random.Generator, optional
        Random source for a fresh forcing instance
    seed : int, optional
        Seed for a fresh forcing instance (ignored if ``rng`` is given)
    stability : str
        What to do when the initial Courant number exceeds 1:
        "warn" (StabilityWarning), "raise" (ConfigurationError) or "ignore"

    Returns
    -------
    TimeSeries
        Snapshots at ``t0``, every ``save_interval``, and at the end

    Raises
    ------
    ConfigurationError
        If the intervals or initial densities are invalid
    """
    if stability not in STABILITY_MODES:
        raise ConfigurationError(f"stability must be one of {STABILITY_MODES}, got '{stability}'")

    dt = model.dt
    grid = model.grid
    n = _check_density(n, grid.n_consumer, "consumer")
    n_pp = _check_density(n_pp, grid.n_full, "resource")
    n_steps = _steps_in(duration, dt, "duration")
    steps_per_save = _steps_in(save_interval, dt, "save_interval")

    if forcing is None:
        forcing = model.params.forcing.create(rng=rng, seed=seed)
    resource = ResourceDynamics(model, forcing)

    _check_stability(courant_number(model, get_encounter_rates(model, n, n_pp)), stability)

    logger.info(
        "Running %d steps (dt=%g, t0=%g, save every %d steps, forcing=%s)",
        n_steps, dt, t0, steps_per_save, forcing.mode.value,
    )

    times = [t0]
    out_n = [n.copy()]
    out_n_pp = [n_pp.copy()]
    consumer_clamped_steps = 0
    courant_reported = stability == "ignore"

    for i in range(1, n_steps + 1):
        result = step(model, n, n_pp, resource, dt)
        n = result.n
        n_pp = result.n_pp
        if result.n_clamped:
            consumer_clamped_steps += 1

        if not courant_reported:
            courant = courant_number(model, result.rates)
            if courant > MAX_COURANT_NUMBER:
                logger.warning("Courant number reached %.3f at t=%g", courant, t0 + i * dt)
                courant_reported = True

        # Time from the step count avoids drift from repeated addition
        if i % steps_per_save == 0 or i == n_steps:
            times.append(t0 + i * dt)
            out_n.append(n.copy())
            out_n_pp.append(n_pp.copy())

    if consumer_clamped_steps or resource.n_clamped_steps:
        logger.warning(
            "Densities clamped to zero in %d consumer steps and %d resource steps",
            consumer_clamped_steps, resource.n_clamped_steps,
        )
    logger.info("Run finished at t=%g with %d snapshots", times[-1], len(times))

    return TimeSeries(
        times=np.array(times),
        n=np.array(out_n),
        n_pp=np.array(out_n_pp),
        w=grid.w.copy(),
        w_full=grid.w_full.copy(),
        dt=dt,
        forcing=forcing.copy(),
    )


def resume(
    model: SizeSpectrumModel,
    series: TimeSeries,
    duration: float,
    save_interval: float = DEFAULT_SAVE_INTERVAL,
    scale: float = 1.0,
    resource_scale: float = 1.0,
    carry_forcing: bool = True,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    stability: str = "warn",
) -> TimeSeries:
    """Continue a run from the final snapshot of a TimeSeries.

    Parameters
    ----------
    model : SizeSpectrumModel
        Model to run; its grid must match the series
    series : TimeSeries
        Earlier output; its final snapshot is the initial condition
    duration : float
        Additional simulated time (years)
    save_interval : float
        Time between snapshots (years)
    scale : float
        Multiplier applied to the consumer density before continuing
    resource_scale : float
        Multiplier applied to the resource density before continuing
    carry_forcing : bool
        If True, continue from a copy of the forcing state stored on the
        series (clock, multiplier and generator), so the result matches
        an uninterrupted run. If False, start a fresh forcing state from
        ``rng``/``seed``.
    rng, seed, stability
        As for ``run``

    Returns
    -------
    TimeSeries
        New series starting at ``series.end_time``

    Examples
    --------
    >>> first = run(model, n0, n_pp0, duration=10, save_interval=1)
    >>> second = resume(model, first, duration=30, save_interval=1, scale=1e-7)
    """
    if len(series.w) != model.grid.n_consumer or not np.allclose(series.w, model.grid.w):
        raise ConfigurationError("TimeSeries size grid does not match the model grid")

    forcing = None
    if carry_forcing:
        if series.forcing is None:
            logger.warning("TimeSeries carries no forcing state; starting a fresh one")
        else:
            forcing = series.forcing.copy()

    return run(
        model,
        series.final_n * scale,
        series.final_n_pp * resource_scale,
        duration,
        save_interval,
        t0=series.end_time,
        forcing=forcing,
        rng=rng,
        seed=seed,
        stability=stability,
    )


def join_timeseries(first: TimeSeries, second: TimeSeries) -> TimeSeries:
    """Concatenate a run and its continuation.

    The first snapshot of ``second`` is dropped when it repeats the end
    time of ``first``. The forcing state is taken from ``second``.
    """
    start = 1 if np.isclose(second.times[0], first.end_time) else 0
    return TimeSeries(
        times=np.concatenate([first.times, second.times[start:]]),
        n=np.concatenate([first.n, second.n[start:]]),
        n_pp=np.concatenate([first.n_pp, second.n_pp[start:]]),
        w=first.w.copy(),
        w_full=first.w_full.copy(),
        dt=second.dt,
        forcing=second.forcing.copy() if second.forcing is not None else None,
    )
