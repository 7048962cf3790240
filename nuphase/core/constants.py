"""Physics constants and numerical controls for the phase-space engine.

This module is the Single Source of Truth (SSOT) for particle masses and the
numerical guard values used by the kinematic boundary calculators. Import from
here rather than defining constants locally.

All masses are in GeV (natural units, c = 1).

Import Policy:
    from nuphase.core.constants import NUCLEON_MASS, A_SMALL_NUM

DO NOT use: from nuphase.core.constants import *
"""

import sys

# =============================================================================
# Lepton Masses [GeV]
# =============================================================================

ELECTRON_MASS = 0.000510998950
MUON_MASS = 0.1056583755
TAU_MASS = 1.77686

ELECTRON_MASS2 = ELECTRON_MASS * ELECTRON_MASS
MUON_MASS2 = MUON_MASS * MUON_MASS
TAU_MASS2 = TAU_MASS * TAU_MASS

# =============================================================================
# Hadron Masses [GeV]
# =============================================================================

PROTON_MASS = 0.93827208816
NEUTRON_MASS = 0.93956542052
NUCLEON_MASS = 0.5 * (PROTON_MASS + NEUTRON_MASS)

PION_MASS = 0.13957039  # charged pion
PI0_MASS = 0.1349768

# Lightest charmed hadron (Lambda_c)
LIGHTEST_CHARM_HADRON_MASS = 1.87

# =============================================================================
# Boson Masses [GeV]
# =============================================================================

W_BOSON_MASS = 80.385
Z_BOSON_MASS = 91.1876

# Photon-like hadronic system used as the resonance W floor offset
PHOTON_TEST_MASS = 0.0

# =============================================================================
# Numerical Controls
# =============================================================================

# Generic small number guarding open kinematic boundaries
A_SMALL_NUM = 1e-6

# Lower Q2 cut applied to inelastic Q2 limits [GeV^2]
MIN_Q2_LIMIT = 1e-4

# Lower Q2 cut used for very-low-energy channels (IBD, CEvNS) [GeV^2]
MIN_Q2_LIMIT_VLE = 1e-10

# Machine epsilon used when snapping near-degenerate ranges
MACHINE_EPSILON = sys.float_info.epsilon

# Largest representable float, used as an open upper Q2 bound
FLOAT_MAX = sys.float_info.max

# Number of log-spaced x points scanned when computing W-integrated y limits
Y_LIMIT_X_SCAN_POINTS = 100

# =============================================================================
# Channel Caps
# =============================================================================

# Upper |t| for coherent pion production [GeV^2]
COHERENT_T_MAX = 0.05

# Q2 ceiling for MEC interactions [GeV^2]
MEC_Q2_MAX = 1.44
