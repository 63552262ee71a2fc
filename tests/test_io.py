"""
Tests for saving and loading simulation output.
"""

import json

import numpy as np
import pytest

from pysizespec.core.forcing import ForcingMode, ForcingParams
from pysizespec.core.model import (
    initial_consumer_density,
    initial_resource_density,
    set_model,
)
from pysizespec.core.params import create_model_params
from pysizespec.core.simulation import resume, run
from pysizespec.io import TimeSeriesFormatError, read_timeseries, write_timeseries


@pytest.fixture
def model():
    return set_model(create_model_params(forcing=ForcingParams("red_noise", sigma=0.2)))


@pytest.fixture
def series(model):
    n = initial_consumer_density(model)
    n_pp = initial_resource_density(model)
    return run(model, n, n_pp, duration=0.2, save_interval=0.1, seed=17)


class TestTimeSeriesFiles:
    """Test the stored TimeSeries layout."""

    def test_files_written(self, series, tmp_path):
        """Three files should be written under the given name."""
        write_timeseries(series, "baseline", tmp_path)
        assert (tmp_path / "baseline_consumer.csv").exists()
        assert (tmp_path / "baseline_resource.csv").exists()
        assert (tmp_path / "baseline_meta.json").exists()

    def test_creates_directory(self, series, tmp_path):
        """A missing output directory should be created."""
        write_timeseries(series, "run", tmp_path / "nested" / "out")
        assert (tmp_path / "nested" / "out" / "run_meta.json").exists()

    def test_roundtrip_exact(self, series, tmp_path):
        """Densities, grids and times should read back exactly."""
        write_timeseries(series, "baseline", tmp_path)
        loaded = read_timeseries("baseline", tmp_path)

        np.testing.assert_array_equal(loaded.times, series.times)
        np.testing.assert_array_equal(loaded.n, series.n)
        np.testing.assert_array_equal(loaded.n_pp, series.n_pp)
        np.testing.assert_array_equal(loaded.w, series.w)
        np.testing.assert_array_equal(loaded.w_full, series.w_full)
        assert loaded.dt == series.dt

    def test_forcing_restored(self, series, tmp_path):
        """The forcing state should come back with its generator."""
        write_timeseries(series, "baseline", tmp_path)
        loaded = read_timeseries("baseline", tmp_path)

        assert loaded.forcing.mode is ForcingMode.RED_NOISE
        assert loaded.forcing.factor == series.forcing.factor
        expected = series.forcing.copy().step(0.002)
        assert loaded.forcing.step(0.002) == expected

    def test_resume_from_file(self, model, series, tmp_path):
        """Resuming a loaded series should match resuming the original."""
        write_timeseries(series, "baseline", tmp_path)
        loaded = read_timeseries("baseline", tmp_path)

        direct = resume(model, series, duration=0.1, save_interval=0.1)
        from_file = resume(model, loaded, duration=0.1, save_interval=0.1)
        np.testing.assert_array_equal(from_file.final_n, direct.final_n)
        np.testing.assert_array_equal(from_file.final_n_pp, direct.final_n_pp)


class TestTimeSeriesErrors:
    """Test rejection of broken files."""

    def test_missing_file(self, series, tmp_path):
        """A missing file should raise."""
        write_timeseries(series, "baseline", tmp_path)
        (tmp_path / "baseline_resource.csv").unlink()
        with pytest.raises(TimeSeriesFormatError):
            read_timeseries("baseline", tmp_path)

    def test_wrong_version(self, series, tmp_path):
        """An unknown format version should raise."""
        write_timeseries(series, "baseline", tmp_path)
        meta_file = tmp_path / "baseline_meta.json"
        meta = json.loads(meta_file.read_text())
        meta["format_version"] = 99
        meta_file.write_text(json.dumps(meta))
        with pytest.raises(TimeSeriesFormatError):
            read_timeseries("baseline", tmp_path)

    def test_grid_mismatch(self, series, tmp_path):
        """Stored grids that disagree with the snapshots should raise."""
        write_timeseries(series, "baseline", tmp_path)
        meta_file = tmp_path / "baseline_meta.json"
        meta = json.loads(meta_file.read_text())
        meta["w"] = meta["w"][:-1]
        meta_file.write_text(json.dumps(meta))
        with pytest.raises(TimeSeriesFormatError):
            read_timeseries("baseline", tmp_path)
