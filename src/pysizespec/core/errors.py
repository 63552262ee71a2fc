"""Exception and warning types raised by the simulation engine."""


class ConfigurationError(ValueError):
    """Invalid parameter combination or run request.

    Raised at model assembly or run start; the run does not proceed.
    """


class StabilityWarning(RuntimeWarning):
    """Time step violates the Courant condition of the upwind scheme."""
