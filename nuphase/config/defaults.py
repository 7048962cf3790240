"""
Default Configuration Constants for nuphase

This module contains the fallback values used when defaults.yaml does not
provide a key. defaults.yaml remains the user-facing source; keep the two in
sync.

IMPORTANT Import Policies:
    1. DO NOT use: from nuphase.config.defaults import *
    2. DO use explicit imports:
       from nuphase.config.defaults import DEFAULT_REL_TOLERANCE
"""

# =============================================================================
# Integration Defaults
# =============================================================================

# Integration back-end (see enums.IntegrationType)
DEFAULT_INTEGRATION_TYPE = "adaptive"

# Relative tolerance passed to the integrator.
# Total cross sections are only needed at the percent level.
DEFAULT_REL_TOLERANCE = 1e-2

# Absolute tolerance in units of 1e-38 cm^2.
# Set large so that the relative tolerance dominates.
DEFAULT_ABS_TOLERANCE = 1.0

# Evaluation caps for the integrand
DEFAULT_MAX_EVAL = 500000
DEFAULT_MIN_EVAL = 10000

# Energy range covered by cached free-nucleon splines (GeV).
# The knot grid spans [E_min/3, E_max*3].
DEFAULT_VALIDITY_E_MIN = 0.01
DEFAULT_VALIDITY_E_MAX = 100.0

# Pre-compute free-nucleon cross sections on a knot grid at first use
DEFAULT_BARE_XSEC_PRECALC = False

# Minimum number of knots in a free-nucleon spline
DEFAULT_MIN_KNOTS = 40

# Minimum number of knots per e-fold of energy
DEFAULT_KNOTS_PER_EFOLD = 10

# Knots reserved below threshold when the threshold lies inside the grid
DEFAULT_KNOTS_BELOW_THRESHOLD = 5

# =============================================================================
# Max Cross Section Cache Defaults
# =============================================================================

# Below this probe energy (GeV) the cache is bypassed
DEFAULT_CACHE_E_MIN = 1.0

# Safety factor applied to cached maxima, one entry per cache sub-key
DEFAULT_SAFETY_FACTORS = (1.25,)

# Interpolation method per cache sub-key
DEFAULT_INTERPOLATION_METHODS = ("cubic",)

# Tolerated excess over the cached maximum, in percent
DEFAULT_MAX_XSEC_DIFF_TOLERANCE = 999999.0

# Number of cached points needed before a branch becomes a spline
DEFAULT_SPLINE_MIN_POINTS = 40

# Relative energy window used to reuse a cached point: min(cap, frac*E)
DEFAULT_REUSE_WINDOW_CAP = 0.25
DEFAULT_REUSE_WINDOW_FRACTION = 0.05

# =============================================================================
# Phase Space Defaults
# =============================================================================

# Upper |t| limit for diffractive pion production (GeV^2)
DEFAULT_DFR_T_MAX = 1.0

# Q2 ceiling applied to MEC interactions (GeV^2)
DEFAULT_MEC_Q2_MAX = 1.44

# Upper |t| limit for coherent production (GeV^2)
DEFAULT_COH_T_MAX = 0.05

# =============================================================================
# Dark Matter Defaults
# =============================================================================

# Mass of the dark matter probe (GeV)
DEFAULT_DARK_MATTER_MASS = 0.1
