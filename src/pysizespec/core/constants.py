"""Numerical and biological constants for size-spectrum modelling.

This module centralizes magic numbers and reference parameter values used
throughout PySizeSpec.
"""

# ============================================================================
# GRID CONSTANTS
# ============================================================================

# Log10 step of the size grid
DEFAULT_DX = 0.1
# Tolerance (log10 units) when deciding whether a bound lies on the lattice
GRID_LOG_TOLERANCE = 1e-9

# ============================================================================
# TIME STEPPING
# ============================================================================

DEFAULT_DT = 0.002  # years
DEFAULT_SAVE_INTERVAL = 0.1  # years
# Relative tolerance when checking that an interval is a multiple of dt
STEP_MULTIPLE_RTOL = 1e-6
# Upper bound for a stable upwind advection step (dt * g / dw)
MAX_COURANT_NUMBER = 1.0

# ============================================================================
# CONSUMER SPECIES (REFERENCE SCENARIO)
# ============================================================================

DEFAULT_W_MIN = 0.001  # egg mass (g)
DEFAULT_W_INF = 1000.0  # asymptotic mass (g)
DEFAULT_W_MAT = 100.0  # maturation mass (g)

DEFAULT_ALPHA = 0.6  # assimilation efficiency
DEFAULT_H = 10.0  # maximum intake coefficient
DEFAULT_N = 0.75  # maximum intake exponent
DEFAULT_GAMMA = 20.0  # search volume coefficient
DEFAULT_Q = 0.8  # search volume exponent
DEFAULT_KS = 1.0  # standard metabolism coefficient
DEFAULT_P = 0.75  # standard metabolism exponent

# Predator:prey mass ratio window
DEFAULT_PPMR_MIN = 100.0
DEFAULT_PPMR_MAX = 10000.0
# Lognormal kernel
DEFAULT_BETA = 1000.0
DEFAULT_SIGMA = 1.0

DEFAULT_REPRO_FRACTION = 0.5  # share of surplus energy put into eggs
DEFAULT_EREPRO = 0.1  # reproductive efficiency

# ============================================================================
# MORTALITY
# ============================================================================

DEFAULT_MU_0 = 1.0  # background mortality at w_min (1/year)
DEFAULT_RHO_B = -0.25
DEFAULT_W_S = 500.0  # onset of senescence (g)
DEFAULT_RHO_S = 0.3
DEFAULT_MU_S_FLOOR = 0.1  # senescent base rate when background is off
DEFAULT_MU_L = 0.0  # larval mortality switched off
DEFAULT_W_L = 0.01
DEFAULT_RHO_L = 2.0

# ============================================================================
# RESOURCE SPECTRUM
# ============================================================================

DEFAULT_KAPPA = 0.1
DEFAULT_LAMBDA = 2.05
DEFAULT_R_PP = 1.0
DEFAULT_R_EXPONENT = -0.25
DEFAULT_W_PP_MIN = 1e-8
DEFAULT_W_PP_CUTOFF = 10.0
DEFAULT_IMMIGRATION = 0.0

# ============================================================================
# PLANKTON FORCING
# ============================================================================

DEFAULT_FORCING_PERIOD = 0.5  # years between carrying-capacity redraws
DEFAULT_JUMP_LOW = 0.5
DEFAULT_JUMP_HIGH = 2.0
DEFAULT_RED_NOISE_PHI = 0.95
DEFAULT_RED_NOISE_SIGMA = 0.1

# ============================================================================
# INITIAL CONDITION (REFERENCE SCENARIO)
# ============================================================================

DEFAULT_INITIAL_COEFFICIENT = 0.001
DEFAULT_INITIAL_EXPONENT = -1.8

# ============================================================================
# CONVERGENCE AND TOLERANCE
# ============================================================================

EPSILON = 1e-10  # Small value for floating point comparisons
