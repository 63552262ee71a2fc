"""
Tests for model parameters: defaults, scenario variants, validation and
parameter files.
"""

import dataclasses
import warnings

import pytest

from pysizespec.core.errors import ConfigurationError
from pysizespec.core.forcing import ForcingMode, ForcingParams
from pysizespec.core.kernel import KernelShape
from pysizespec.core.params import (
    ModelParams,
    check_model_params,
    create_model_params,
    read_model_params,
    write_model_params,
)


class TestDefaults:
    """Test the reference parameter set."""

    def test_defaults_valid(self):
        """Reference parameters should pass validation without warnings."""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            assert check_model_params(create_model_params()) is True

    def test_reference_values(self):
        """Reference parameters should describe the cannibalism scenario."""
        params = create_model_params()
        assert params.species.w_min == 0.001
        assert params.species.w_inf == 1000
        assert params.species.kernel is KernelShape.BOX
        assert params.species.interaction == 1.0
        assert params.forcing.mode is ForcingMode.DETERMINISTIC
        assert params.dx == 0.1


class TestWithChanges:
    """Test immutable scenario variants."""

    def test_original_unchanged(self):
        """with_changes should not modify the original."""
        params = create_model_params()
        variant = params.with_changes(interaction=0.0)
        assert params.species.interaction == 1.0
        assert variant.species.interaction == 0.0

    def test_frozen(self):
        """Parameter objects should be immutable."""
        params = create_model_params()
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.dt = 0.01
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.species.alpha = 0.1

    def test_routing(self):
        """Names should be routed to the group that owns them."""
        params = create_model_params(mu_0=0.5, kappa=0.2, period=1.0, dt=0.001)
        assert params.mortality.mu_0 == 0.5
        assert params.resource.kappa == 0.2
        assert params.forcing.period == 1.0
        assert params.dt == 0.001

    def test_shared_names(self):
        """Shared names should go to the consumer unless prefixed."""
        params = create_model_params(
            sigma=2.0, interaction=0.5, resource_interaction=0.3, forcing_sigma=0.4
        )
        assert params.species.sigma == 2.0
        assert params.species.interaction == 0.5
        assert params.resource.interaction == 0.3
        assert params.forcing.sigma == 0.4

    def test_whole_group(self):
        """A whole group object may be replaced."""
        params = create_model_params(forcing=ForcingParams("red_noise"))
        assert params.forcing.mode is ForcingMode.RED_NOISE

    def test_unknown_name(self):
        """Unknown names should raise."""
        with pytest.raises(ConfigurationError):
            create_model_params(not_a_parameter=1.0)

    def test_kernel_string(self):
        """Kernel shape strings should be parsed."""
        params = create_model_params(kernel="lognormal")
        assert params.species.kernel is KernelShape.LOGNORMAL


class TestValidation:
    """Test parameter validation."""

    @pytest.mark.parametrize(
        "changes",
        [
            {"dt": 0.0},
            {"dx": -0.1},
            {"w_min": 2000.0},
            {"ppmr_min": 1e5},
            {"w_pp_min": 0.01},
            {"kernel": "lognormal", "beta": 0.0},
            {"alpha": -0.1},
            {"kappa": -1.0},
            {"w_s": 0.0},
        ],
    )
    def test_invalid(self, changes):
        """Unrunnable parameter sets should raise."""
        with pytest.raises(ConfigurationError):
            check_model_params(create_model_params(**changes))

    @pytest.mark.parametrize(
        "changes",
        [
            {"w_mat": 5000.0},
            {"repro_fraction": 1.5},
            {"interaction": 1.5},
            {"resource_interaction": -0.5},
        ],
    )
    def test_questionable_warns(self, changes):
        """Questionable values should warn and return False."""
        with pytest.warns(UserWarning):
            assert check_model_params(create_model_params(**changes)) is False


class TestParameterFiles:
    """Test reading and writing parameter files."""

    def test_roundtrip(self, tmp_path):
        """Written parameters should read back equal."""
        params = create_model_params(
            interaction=0.25,
            kernel="lognormal",
            mu_l=0.3,
            forcing=ForcingParams("biannual_jump", period=0.25),
            dt=0.001,
        )
        path = tmp_path / "params.csv"
        write_model_params(params, path)
        assert read_model_params(path) == params

    def test_missing_entries_keep_defaults(self, tmp_path):
        """Parameters missing from the file should keep their defaults."""
        path = tmp_path / "params.csv"
        path.write_text("Group,Parameter,Value\nspecies,alpha,0.4\n")
        params = read_model_params(path)
        assert params.species.alpha == 0.4
        assert params.species.h == ModelParams().species.h

    def test_unknown_entries(self, tmp_path):
        """Unknown groups or parameters should raise."""
        path = tmp_path / "params.csv"
        path.write_text("Group,Parameter,Value\nspecies,eta,0.4\n")
        with pytest.raises(ConfigurationError):
            read_model_params(path)
        path.write_text("Group,Parameter,Value\nfleet,effort,0.4\n")
        with pytest.raises(ConfigurationError):
            read_model_params(path)

    def test_missing_columns(self, tmp_path):
        """Files without the expected columns should raise."""
        path = tmp_path / "params.csv"
        path.write_text("Name,Value\nalpha,0.4\n")
        with pytest.raises(ConfigurationError):
            read_model_params(path)
