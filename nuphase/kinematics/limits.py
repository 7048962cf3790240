"""Closed-form kinematic boundaries.

Pure functions of the probe energy and particle masses returning ``Range1D``
objects. The sentinel ``Range1D.undefined()`` marks a region that does not
exist (probe below threshold, inverted bounds).

Naming:
    inel_*  massless probe (neutrino), inelastic scattering off a nucleon
    dark_*  massive probe whose outgoing mass equals its incoming mass
    em_*    charged-lepton probe (electromagnetic current)
    coh_*   coherent scattering off a nucleus
    cevns_* coherent elastic scattering off a nucleus

All energies in GeV; all Q2 positive.

Import Policy:
    from nuphase.kinematics import limits
    Wl = limits.inel_W_lim(Ev, M, ml)
"""

from __future__ import annotations

import math
from typing import Callable, Tuple

import numpy as np

from nuphase.core.constants import (
    A_SMALL_NUM,
    FLOAT_MAX,
    MACHINE_EPSILON,
    MIN_Q2_LIMIT,
    MIN_Q2_LIMIT_VLE,
    NEUTRON_MASS,
    PHOTON_TEST_MASS,
    PION_MASS,
    Y_LIMIT_X_SCAN_POINTS,
)
from nuphase.core.range import Range1D


# =============================================================================
# Shared helpers
# =============================================================================

def snap_degenerate(lower: float, upper: float) -> Range1D:
    """Guard a two-point window against zero-width numerical noise.

    A window narrower than one machine epsilon relative to its size collapses
    onto the harmonic mean of its ends; otherwise both ends move inwards by
    one relative machine epsilon.
    """
    if (upper - lower) < (upper + lower) * MACHINE_EPSILON:
        snapped = 2.0 * upper * lower / (upper + lower)
        return Range1D(snapped, snapped)
    return Range1D(lower * (1.0 + MACHINE_EPSILON), upper * (1.0 - MACHINE_EPSILON))


def W_Q2_from_x_y(Ev: float, M: float, x: float, y: float) -> Tuple[float, float]:
    """Hadronic invariant mass and Q2 for Bjorken (x, y).

    Args:
        Ev: Probe energy in the hit-nucleon rest frame [GeV]
        M: Hit-nucleon mass [GeV]
        x, y: Bjorken scaling variables

    Returns:
        (W, Q2)
    """
    W2 = M * M + 2.0 * M * Ev * y * (1.0 - x)
    W = math.sqrt(max(0.0, W2))
    Q2 = 2.0 * M * Ev * x * y
    return W, Q2


def x_y_from_W_Q2(Ev: float, M: float, W: float, Q2: float) -> Tuple[float, float]:
    """Inverse of ``W_Q2_from_x_y``.

    Raises:
        ValueError: If the probe energy or nucleon mass is not positive
    """
    if Ev <= 0 or M <= 0:
        raise ValueError(f"Ev and M must be > 0, got Ev={Ev}, M={M}")
    nu_term = W * W - M * M + Q2
    y = nu_term / (2.0 * M * Ev)
    x = Q2 / nu_term if nu_term != 0 else 0.0
    return x, y


def _scan_y_lim(x_range: Range1D, y_lim_X: Callable[[float], Range1D]) -> Range1D:
    """Envelope of y(x) windows over log-spaced x values."""
    if not (x_range.min > 0 and x_range.max > 0):
        return Range1D.undefined()

    y_min, y_max = 999.0, -999.0
    for x in np.logspace(math.log10(x_range.min), math.log10(x_range.max), Y_LIMIT_X_SCAN_POINTS):
        yx = y_lim_X(float(x))
        if 0 <= yx.max <= 1:
            y_max = max(y_max, yx.max)
        if 0 <= yx.min <= 1:
            y_min = min(y_min, yx.min)

    if 0 <= y_max <= 1 and 0 <= y_min <= 1:
        return Range1D(max(y_min, A_SMALL_NUM), min(y_max, 1.0 - A_SMALL_NUM))
    return Range1D.undefined()


# =============================================================================
# Massless probe (neutrino) inelastic kinematics
# =============================================================================

def inel_W_lim(Ev: float, M: float, ml: float) -> Range1D:
    """W range for a massless probe of energy Ev off a nucleon at rest."""
    s = M * M + 2.0 * M * Ev
    if s <= 0:
        return Range1D.undefined()

    W_min = NEUTRON_MASS + PHOTON_TEST_MASS
    W_max = math.sqrt(s) - ml
    if W_max <= W_min:
        return Range1D.undefined()
    return Range1D(W_min + A_SMALL_NUM, W_max - A_SMALL_NUM)


def inel_Q2_lim_W(Ev: float, M: float, ml: float, W: float,
                  Q2min_cut: float = MIN_Q2_LIMIT) -> Range1D:
    """Q2 range at fixed hadronic invariant mass W (centre-of-mass frame)."""
    M2 = M * M
    ml2 = ml * ml
    s = M2 + 2.0 * M * Ev
    if s <= 0:
        return Range1D.undefined()
    sqs = math.sqrt(s)

    E1CM = 0.5 * (s + ml2 - W * W) / sqs
    p1CM = math.sqrt(max(0.0, E1CM * E1CM - ml2))
    E0CM = 0.5 * (s - M2) / sqs

    Q2_min = 2.0 * E0CM * (E1CM - p1CM) - ml2
    Q2_max = 2.0 * E0CM * (E1CM + p1CM) - ml2
    Q2_min = max(Q2_min, Q2min_cut)
    if Q2_max < Q2_min:
        return Range1D.undefined()
    return Range1D(Q2_min, Q2_max)


def inel_Q2_lim(Ev: float, M: float, ml: float, Q2min_cut: float = MIN_Q2_LIMIT) -> Range1D:
    """W-integrated Q2 range: the Q2 window at the smallest W."""
    Wl = inel_W_lim(Ev, M, ml)
    if Wl.min < 0:
        return Range1D.undefined()
    return inel_Q2_lim_W(Ev, M, ml, Wl.min, Q2min_cut)


def inel_x_lim(Ev: float, M: float, ml: float) -> Range1D:
    if Ev <= 0:
        return Range1D.undefined()
    s = M * M + 2.0 * M * Ev
    x_min = ml * ml / (s - M * M) + A_SMALL_NUM
    return Range1D(x_min, 1.0 - A_SMALL_NUM)


def inel_y_lim_X(Ev: float, M: float, ml: float, x: float) -> Range1D:
    """y range at fixed Bjorken x."""
    if Ev <= 0 or x <= 0:
        return Range1D.undefined()
    ml2 = ml * ml
    a = 0.5 * ml2 / (M * Ev * x)
    b = ml2 / (Ev * Ev)
    c = 1.0 + 0.5 * x * M / Ev
    d = max(0.0, (1.0 - a) ** 2 - b)

    A = 0.5 * (1.0 - a - 0.5 * b) / c
    B = 0.5 * math.sqrt(d) / c
    return Range1D(max(0.0, A - B) + A_SMALL_NUM, min(1.0, A + B) - A_SMALL_NUM)


def inel_y_lim(Ev: float, M: float, ml: float) -> Range1D:
    xl = inel_x_lim(Ev, M, ml)
    return _scan_y_lim(xl, lambda x: inel_y_lim_X(Ev, M, ml, x))


# =============================================================================
# Massive probe (outgoing mass == incoming mass)
# =============================================================================

def _massive_W_lim(Ev: float, M: float, ml: float) -> Range1D:
    s = M * M + 2.0 * M * Ev + ml * ml
    W_min = NEUTRON_MASS + PION_MASS
    W_max = math.sqrt(s) - ml
    if W_max <= W_min:
        return Range1D.undefined()
    return Range1D(W_min + A_SMALL_NUM, W_max - A_SMALL_NUM)


def _massive_Q2_lim_W(Ev: float, M: float, ml: float, W: float, Q2min_cut: float) -> Range1D:
    M2 = M * M
    ml2 = ml * ml
    s = M2 + 2.0 * M * Ev + ml2
    sqs = math.sqrt(s)

    E0CM = 0.5 * (s + ml2 - M2) / sqs
    p0CM = math.sqrt(max(0.0, E0CM * E0CM - ml2))
    E1CM = 0.5 * (s + ml2 - W * W) / sqs
    p1CM = math.sqrt(max(0.0, E1CM * E1CM - ml2))

    Q2_min = 2.0 * (E0CM * E1CM - p0CM * p1CM) - 2.0 * ml2
    Q2_max = 2.0 * (E0CM * E1CM + p0CM * p1CM) - 2.0 * ml2
    Q2_min = max(Q2_min, Q2min_cut)
    if Q2_max < Q2_min:
        return Range1D.undefined()
    return Range1D(Q2_min, Q2_max)


def _massive_y_lim_X(Ev: float, M: float, ml: float, x: float) -> Range1D:
    # Elastic scattering off an effective target of mass a = M x
    if Ev <= ml or x <= 0:
        return Range1D.undefined()
    a = M * x
    P2 = Ev * Ev - ml * ml
    y_kin = 2.0 * P2 * a / (Ev * (a * a + 2.0 * a * Ev + ml * ml))
    y_max = min(1.0 - ml / Ev, y_kin) - A_SMALL_NUM
    y_min = A_SMALL_NUM
    if y_max < y_min:
        return Range1D.undefined()
    return Range1D(y_min, y_max)


def _massive_x_lim() -> Range1D:
    return Range1D(A_SMALL_NUM, 1.0 - A_SMALL_NUM)


def dark_W_lim(Ev: float, M: float, ml: float) -> Range1D:
    """W range for a massive dark matter probe of mass ml."""
    return _massive_W_lim(Ev, M, ml)


def dark_Q2_lim_W(Ev: float, M: float, ml: float, W: float,
                  Q2min_cut: float = MIN_Q2_LIMIT) -> Range1D:
    return _massive_Q2_lim_W(Ev, M, ml, W, Q2min_cut)


def dark_Q2_lim(Ev: float, M: float, ml: float, Q2min_cut: float = MIN_Q2_LIMIT) -> Range1D:
    Wl = dark_W_lim(Ev, M, ml)
    if Wl.min < 0:
        return Range1D.undefined()
    return dark_Q2_lim_W(Ev, M, ml, Wl.min, Q2min_cut)


def dark_x_lim(Ev: float, M: float, ml: float) -> Range1D:
    return _massive_x_lim()


def dark_y_lim_X(Ev: float, M: float, ml: float, x: float) -> Range1D:
    return _massive_y_lim_X(Ev, M, ml, x)


def dark_y_lim(Ev: float, M: float, ml: float) -> Range1D:
    return _scan_y_lim(dark_x_lim(Ev, M, ml), lambda x: dark_y_lim_X(Ev, M, ml, x))


def em_W_lim(El: float, M: float, ml: float) -> Range1D:
    """W range for a charged lepton of mass ml scattering electromagnetically."""
    return _massive_W_lim(El, M, ml)


def em_Q2_lim_W(El: float, M: float, ml: float, W: float,
                Q2min_cut: float = MIN_Q2_LIMIT) -> Range1D:
    return _massive_Q2_lim_W(El, M, ml, W, Q2min_cut)


def em_Q2_lim(El: float, M: float, ml: float, Q2min_cut: float = MIN_Q2_LIMIT) -> Range1D:
    Wl = em_W_lim(El, M, ml)
    if Wl.min < 0:
        return Range1D.undefined()
    return em_Q2_lim_W(El, M, ml, Wl.min, Q2min_cut)


def em_x_lim(El: float, M: float, ml: float) -> Range1D:
    return _massive_x_lim()


def em_y_lim_X(El: float, M: float, ml: float, x: float) -> Range1D:
    return _massive_y_lim_X(El, M, ml, x)


def em_y_lim(El: float, M: float, ml: float) -> Range1D:
    return _scan_y_lim(em_x_lim(El, M, ml), lambda x: em_y_lim_X(El, M, ml, x))


# =============================================================================
# Coherent scattering off a nucleus
# =============================================================================

def coh_W2_min(M: float, m_other: float) -> float:
    """Smallest squared invariant mass of the nucleus plus produced meson."""
    return (M + m_other) ** 2


def coh_Q2_lim(M: float, m_other: float, ml: float, Ev: float) -> Range1D:
    """Q2 range for coherent meson production.

    Kartavtsev, Paschos and Gounaris, PRD 74, 054007 (2006). The upper
    bound is left open, and the lower bound is clamped to zero below the
    production threshold where the Kallen function goes negative.
    """
    M2 = M * M
    ml2 = ml * ml
    s = M2 + 2.0 * M * Ev
    W2min = coh_W2_min(M, m_other)

    b = ml2 / s
    c = W2min / s
    lam = 1.0 + b * b + c * c - 2.0 * b - 2.0 * c - 2.0 * b * c
    if lam <= 0:
        return Range1D(0.0, FLOAT_MAX)

    A = 0.5 * (s - M2)
    B = 1.0 - math.sqrt(lam)
    C = 0.5 * (W2min + ml2 - M2 * (W2min - ml2) / s)
    return Range1D(max(0.0, A * B - C), FLOAT_MAX)


def coh_x_lim() -> Range1D:
    return Range1D(A_SMALL_NUM, 1.0 - A_SMALL_NUM)


def coh_y_lim(EvL: float, ml: float) -> Range1D:
    """y range for coherent production from the lab-frame probe energy."""
    if EvL <= 0:
        return Range1D.undefined()
    return Range1D(PION_MASS / EvL + A_SMALL_NUM, 1.0 - ml / EvL - A_SMALL_NUM)


def coh_y_lim_xsi(M: float, m_other: float, ml: float, Ev: float, Q2: float,
                  xsi: float) -> Range1D:
    """y range at fixed Q2 with the Paschos-Schalla xsi parameter.

    Paschos and Schalla, PRD 80, 033005 (2009). The lower bound follows
    from producing the lightest hadronic system at the given Q2; xsi in
    [0, 1] scales how strongly the lepton mass closes the upper bound.
    """
    if Ev <= 0 or M <= 0:
        return Range1D.undefined()
    y_min = (Q2 + coh_W2_min(M, m_other) - M * M) / (2.0 * M * Ev)
    y_max = 1.0 - xsi * ml / Ev
    y_min = max(y_min, A_SMALL_NUM)
    y_max = min(y_max, 1.0 - A_SMALL_NUM)
    if y_max < y_min:
        return Range1D.undefined()
    return Range1D(y_min, y_max)


def cevns_Q2_lim(Ev: float) -> Range1D:
    """Q2 range for coherent elastic scattering from the lab-frame energy."""
    return Range1D(MIN_Q2_LIMIT_VLE, 4.0 * Ev * Ev)
