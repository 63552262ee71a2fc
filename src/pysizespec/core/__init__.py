"""
Core module for PySizeSpec.

Contains the size grid, the model components and the simulation engine.
"""

from pysizespec.core.errors import ConfigurationError, StabilityWarning
from pysizespec.core.params import (
    SpeciesParams,
    MortalityParams,
    ResourceParams,
    ModelParams,
    create_model_params,
    check_model_params,
    read_model_params,
    write_model_params,
)
from pysizespec.core.forcing import (
    ForcingMode,
    ForcingParams,
    PlanktonForcing,
    DeterministicForcing,
    BiannualJumpForcing,
    RedNoiseForcing,
    create_forcing,
    forcing_from_dict,
)
from pysizespec.core.grid import SizeGrid, make_grid
from pysizespec.core.kernel import KernelShape, FeedingKernel, feeding_kernel
from pysizespec.core.model import (
    SizeSpectrumModel,
    set_model,
    initial_consumer_density,
    initial_resource_density,
)
from pysizespec.core.simulation import (
    TimeSeries,
    StepResult,
    step,
    run,
    resume,
    join_timeseries,
)

__all__ = [
    # Errors
    "ConfigurationError",
    "StabilityWarning",
    # Parameters
    "SpeciesParams",
    "MortalityParams",
    "ResourceParams",
    "ModelParams",
    "create_model_params",
    "check_model_params",
    "read_model_params",
    "write_model_params",
    # Forcing
    "ForcingMode",
    "ForcingParams",
    "PlanktonForcing",
    "DeterministicForcing",
    "BiannualJumpForcing",
    "RedNoiseForcing",
    "create_forcing",
    "forcing_from_dict",
    # Model
    "SizeGrid",
    "make_grid",
    "KernelShape",
    "FeedingKernel",
    "feeding_kernel",
    "SizeSpectrumModel",
    "set_model",
    "initial_consumer_density",
    "initial_resource_density",
    # Simulation
    "TimeSeries",
    "StepResult",
    "step",
    "run",
    "resume",
    "join_timeseries",
]
