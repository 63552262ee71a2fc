"""
Unit tests for the analysis module.

Tests for biomass summaries, mortality breakdown and oscillation
diagnostics.
"""

import numpy as np
import pandas as pd
import pytest

from pysizespec.core.analysis import (
    biomass_timeseries,
    get_biomass,
    get_feeding_level,
    get_growth_curve,
    get_mortality_breakdown,
    get_resource_biomass,
    oscillation_summary,
    spectrum_frame,
)
from pysizespec.core.model import (
    initial_consumer_density,
    initial_resource_density,
    set_model,
)
from pysizespec.core.params import create_model_params
from pysizespec.core.simulation import run


@pytest.fixture
def model():
    return set_model(create_model_params())


@pytest.fixture
def state(model):
    return initial_consumer_density(model), initial_resource_density(model)


@pytest.fixture
def series(model, state):
    return run(model, *state, duration=0.2, save_interval=0.1)


class TestBiomass:
    """Tests for biomass summaries."""

    def test_total_biomass(self, model):
        """Biomass should be sum(n * w * dw)."""
        n = np.ones(model.grid.n_consumer)
        expected = np.sum(model.grid.w * model.grid.dw)
        assert get_biomass(model, n) == pytest.approx(expected)

    def test_size_range(self, model):
        """Only classes inside the range should count."""
        n = np.ones(model.grid.n_consumer)
        w, dw = model.grid.w, model.grid.dw
        mask = (w >= 1.0) & (w <= 100.0)
        assert get_biomass(model, n, min_w=1.0, max_w=100.0) == pytest.approx(
            np.sum((w * dw)[mask])
        )
        assert get_biomass(model, n, min_w=1.0) < get_biomass(model, n)

    def test_resource_biomass(self, model, state):
        """Resource biomass should be positive below the cutoff only."""
        _, n_pp = state
        assert get_resource_biomass(model, n_pp) > 0
        assert get_resource_biomass(model, n_pp, min_w=100.0) == 0.0

    def test_timeseries(self, model, series):
        """Biomass series should have one value per snapshot."""
        biomass = biomass_timeseries(model, series)
        assert isinstance(biomass, pd.Series)
        assert len(biomass) == series.n_snapshots
        assert biomass.index.name == "time"
        assert biomass.iloc[-1] == pytest.approx(get_biomass(model, series.final_n))


class TestPerSizeDiagnostics:
    """Tests for per-size tables."""

    def test_mortality_breakdown(self, model, state):
        """Breakdown should have one column per source plus the total."""
        frame = get_mortality_breakdown(model, *state)
        assert list(frame.columns) == ["background", "senescent", "larval", "predation", "total"]
        assert len(frame) == model.grid.n_consumer
        np.testing.assert_allclose(
            frame[["background", "senescent", "larval", "predation"]].sum(axis=1),
            frame["total"],
        )

    def test_growth_and_feeding(self, model, state):
        """Growth should be non-negative and feeding level within [0, 1]."""
        growth = get_growth_curve(model, *state)
        feeding = get_feeding_level(model, *state)
        assert (growth >= 0).all()
        assert feeding.between(0, 1).all()

    def test_spectrum_frame(self, series):
        """Spectrum tables should have one row per snapshot."""
        consumer = spectrum_frame(series, "consumer")
        resource = spectrum_frame(series, "resource")
        assert consumer.shape == series.n.shape
        assert resource.shape == series.n_pp.shape

    def test_spectrum_frame_unknown(self, series):
        """Unknown spectrum names should raise."""
        with pytest.raises(ValueError):
            spectrum_frame(series, "plankton")


class TestOscillationSummary:
    """Tests for oscillation diagnostics."""

    @pytest.fixture
    def sine(self):
        t = np.linspace(0, 20, 401)
        return pd.Series(2.0 + np.sin(2 * np.pi * t / 4.0), index=pd.Index(t, name="time"))

    def test_periodic_series(self, sine):
        """A sine wave should give its period and amplitude."""
        summary = oscillation_summary(sine)
        assert summary["n_peaks"] == 5
        assert summary["mean_period"] == pytest.approx(4.0)
        assert summary["relative_amplitude"] == pytest.approx(1.0, rel=1e-2)
        assert not summary["monotonic"]

    def test_window(self, sine):
        """Only the trailing window should be analysed."""
        summary = oscillation_summary(sine, window=8.0)
        assert summary["n_peaks"] == 2
        np.testing.assert_allclose(summary["peak_times"], [13.0, 17.0])

    def test_monotonic_series(self):
        """A steady decline should be flagged as monotonic."""
        t = np.linspace(0, 10, 101)
        summary = oscillation_summary(pd.Series(np.exp(-t), index=t))
        assert summary["monotonic"]
        assert summary["n_peaks"] == 0
        assert np.isnan(summary["mean_period"])

    @pytest.mark.parametrize(
        "biomass",
        [pd.Series(dtype=float), pd.Series([3.0], index=[1.0])],
        ids=["empty", "single_point"],
    )
    def test_too_short_series(self, biomass):
        """Fewer than two points should give an empty NaN summary."""
        summary = oscillation_summary(biomass, window=5.0)
        assert summary["n_peaks"] == 0
        assert np.isnan(summary["mean_period"])
        assert np.isnan(summary["relative_amplitude"])
        assert len(summary["peak_times"]) == 0

    def test_window_leaves_single_point(self, sine):
        """A window shorter than the save interval should not fail."""
        summary = oscillation_summary(sine, window=0.01)
        assert summary["n_peaks"] == 0
        assert np.isnan(summary["relative_amplitude"])
