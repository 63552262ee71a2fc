"""
Unit tests for the plotting module.

Tests for size spectrum, biomass and mortality plots.
"""

import pytest

import matplotlib

matplotlib.use("Agg")  # Non-interactive backend for testing
import matplotlib.pyplot as plt

from pysizespec.core.model import (
    initial_consumer_density,
    initial_resource_density,
    set_model,
)
from pysizespec.core.params import create_model_params
from pysizespec.core.plotting import plot_biomass, plot_mortality, plot_spectrum
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


class TestPlotSpectrum:
    """Tests for plot_spectrum function."""

    def test_returns_figure(self, series):
        """Should return matplotlib Figure."""
        fig = plot_spectrum(series)
        assert isinstance(fig, plt.Figure)
        plt.close(fig)

    def test_consumer_only(self, series):
        """Without the resource only one line should be drawn."""
        fig = plot_spectrum(series, index=0, show_resource=False, power=1)
        assert len(fig.axes[0].lines) == 1
        plt.close(fig)

    def test_existing_axes(self, series):
        """Should draw into the given axes."""
        fig, ax = plt.subplots()
        result = plot_spectrum(series, ax=ax)
        assert result is fig
        assert len(ax.lines) == 2
        plt.close(fig)


class TestPlotBiomass:
    """Tests for plot_biomass function."""

    def test_returns_figure(self, model, series):
        """Should return matplotlib Figure."""
        fig = plot_biomass(model, series)
        assert isinstance(fig, plt.Figure)
        plt.close(fig)

    def test_relative_biomass(self, model, series):
        """Relative biomass should start at 1."""
        fig = plot_biomass(model, series, min_w=1.0, relative=True)
        line = fig.axes[0].lines[-1]
        assert line.get_ydata()[0] == pytest.approx(1.0)
        plt.close(fig)


class TestPlotMortality:
    """Tests for plot_mortality function."""

    def test_returns_figure(self, model, state):
        """Should return matplotlib Figure with a total line."""
        fig = plot_mortality(model, *state)
        assert isinstance(fig, plt.Figure)
        labels = [line.get_label() for line in fig.axes[0].lines]
        assert "Total" in labels
        plt.close(fig)

    def test_zero_terms_skipped(self, model, state):
        """Terms that are zero everywhere should not be drawn."""
        fig = plot_mortality(model, *state)
        labels = [line.get_label() for line in fig.axes[0].lines]
        assert "Larval" not in labels
        plt.close(fig)
