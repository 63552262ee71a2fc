"""
PySizeSpec - size-spectrum population dynamics

Numerical integration of a size-structured consumer population coupled to
a dynamic resource spectrum under stochastic carrying-capacity forcing.
"""

__version__ = "0.1.0"
__author__ = "PySizeSpec Development Team"

# Core imports
from pysizespec.core.errors import ConfigurationError, StabilityWarning
from pysizespec.core.params import (
    ModelParams,
    create_model_params,
    check_model_params,
    read_model_params,
    write_model_params,
)
from pysizespec.core.forcing import ForcingMode, ForcingParams, create_forcing
from pysizespec.core.model import (
    SizeSpectrumModel,
    set_model,
    initial_consumer_density,
    initial_resource_density,
)
from pysizespec.core.simulation import TimeSeries, run, resume, join_timeseries
from pysizespec.core.analysis import (
    get_mortality_breakdown,
    get_biomass,
    biomass_timeseries,
)
from pysizespec.logger import configure_logging, get_logger

__all__ = [
    # Version
    "__version__",
    "__author__",
    # Errors
    "ConfigurationError",
    "StabilityWarning",
    # Parameters
    "ModelParams",
    "create_model_params",
    "check_model_params",
    "read_model_params",
    "write_model_params",
    "ForcingMode",
    "ForcingParams",
    "create_forcing",
    # Model
    "SizeSpectrumModel",
    "set_model",
    "initial_consumer_density",
    "initial_resource_density",
    # Simulation
    "TimeSeries",
    "run",
    "resume",
    "join_timeseries",
    # Diagnostics
    "get_mortality_breakdown",
    "get_biomass",
    "biomass_timeseries",
    # Logging
    "configure_logging",
    "get_logger",
]
