"""
Tests for the feeding kernels.
"""

import pytest
import numpy as np

from pysizespec.core.errors import ConfigurationError
from pysizespec.core.grid import make_grid
from pysizespec.core.kernel import (
    KernelShape,
    box_kernel,
    feeding_kernel,
    lognormal_kernel,
    normalize_kernel,
    ratio_axis,
)
from pysizespec.core.params import SpeciesParams


class TestBoxKernel:
    """Test the box kernel and its normalization."""

    @pytest.mark.parametrize("dx", [0.05, 0.1, 0.2])
    def test_normalized_integral(self, dx):
        """Normalized kernel should integrate to 1 over log ratio."""
        ratios = ratio_axis(200, dx)
        phi = normalize_kernel(box_kernel(ratios, 100.0, 10000.0), dx)
        assert np.sum(phi) * dx == pytest.approx(1.0)

    def test_self_feeding_excluded(self):
        """Own-size ratio should get zero weight even inside the bounds."""
        ratios = ratio_axis(50, 0.1)
        weights = box_kernel(ratios, 0.5, 100.0)
        assert weights[0] == 0.0
        assert weights[1] == 1.0

    def test_bounds_inclusive(self):
        """Ratios equal to the bounds should be inside the box."""
        ratios = np.array([1.0, 10.0, 100.0, 1000.0, 10000.0])
        weights = box_kernel(ratios, 10.0, 1000.0)
        np.testing.assert_array_equal(weights, [0.0, 1.0, 1.0, 1.0, 0.0])

    def test_bounds_on_ratio_lattice(self):
        """Bounds on non-decade lattice points should be inside the box."""
        weights = box_kernel(ratio_axis(120, 0.1), 10**0.3, 10**1.7)
        expected = np.zeros(120)
        expected[3:18] = 1.0
        np.testing.assert_array_equal(weights, expected)

    @pytest.mark.parametrize("dx, k", [(0.1, 3), (0.1, 17), (0.1, 53), (0.05, 7), (0.2, 11)])
    def test_single_point_window(self, dx, k):
        """A window collapsed onto one lattice ratio should keep that ratio."""
        bound = 10 ** (k * dx)
        weights = box_kernel(ratio_axis(80, dx), bound, bound)
        assert weights[k] == 1.0
        assert weights.sum() == 1.0

    def test_empty_support_raises(self):
        """Bounds outside the ratio axis should be a configuration error."""
        ratios = ratio_axis(50, 0.1)
        weights = box_kernel(ratios, 1e20, 1e21)
        with pytest.raises(ConfigurationError):
            normalize_kernel(weights, 0.1)

    def test_only_self_ratio_raises(self):
        """A box containing only the own-size ratio should be empty."""
        ratios = ratio_axis(50, 0.1)
        with pytest.raises(ConfigurationError):
            normalize_kernel(box_kernel(ratios, 0.5, 1.05), 0.1)


class TestLognormalKernel:
    """Test the lognormal kernel."""

    def test_peak_at_beta(self):
        """Weight should peak at the preferred ratio."""
        ratios = ratio_axis(100, 0.1)
        weights = lognormal_kernel(ratios, beta=1000.0, sigma=1.0)
        assert ratios[np.argmax(weights)] == pytest.approx(1000.0)

    def test_normalized_and_self_excluded(self):
        """Normalized lognormal kernel should integrate to 1 with zero self weight."""
        ratios = ratio_axis(100, 0.1)
        phi = normalize_kernel(lognormal_kernel(ratios, 100.0, 2.0), 0.1)
        assert phi[0] == 0.0
        assert np.sum(phi) * 0.1 == pytest.approx(1.0)


class TestFeedingKernelMatrix:
    """Test the predator x prey layout of the kernel."""

    @pytest.fixture
    def grid(self):
        return make_grid(0.001, 1000.0, 1e-8, 0.1)

    def test_shape(self, grid):
        """Matrix should be consumer classes x full grid."""
        kernel = feeding_kernel(grid, SpeciesParams())
        assert kernel.matrix.shape == (grid.n_consumer, grid.n_full)

    def test_no_prey_larger_than_predator(self, grid):
        """Prey at or above the predator's own size should have zero weight."""
        kernel = feeding_kernel(grid, SpeciesParams())
        for j in range(grid.n_consumer):
            assert np.all(kernel.matrix[j, grid.idx_start + j:] == 0)

    def test_rows_normalized(self, grid):
        """Each predator's kernel should integrate to 1 when its window fits the grid."""
        kernel = feeding_kernel(grid, SpeciesParams(ppmr_min=100.0, ppmr_max=10000.0))
        np.testing.assert_allclose(kernel.matrix.sum(axis=1) * grid.dx, 1.0)

    def test_rows_are_shifted_copies(self, grid):
        """Every row should be the same kernel shifted by one class."""
        kernel = feeding_kernel(grid, SpeciesParams())
        np.testing.assert_array_equal(kernel.matrix[1, 1:], kernel.matrix[0, :-1])

    def test_lognormal_shape_selected(self, grid):
        """Lognormal kernel shape should be used when requested."""
        species = SpeciesParams(kernel=KernelShape.LOGNORMAL, beta=100.0, sigma=1.0)
        kernel = feeding_kernel(grid, species)
        # Box kernels have a single positive value; lognormal kernels do not
        positive = kernel.phi[kernel.phi > 0]
        assert len(np.unique(positive)) > 1

    def test_empty_window_raises(self, grid):
        """A ratio window beyond the grid should raise."""
        with pytest.raises(ConfigurationError):
            feeding_kernel(grid, SpeciesParams(ppmr_min=1e20, ppmr_max=1e21))
