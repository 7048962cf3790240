"""
Configuration Enums for nuphase

This module defines the enumeration types used by the numerical configuration.

Import Policy:
    from nuphase.config.enums import IntegrationType, InterpolationMethod

DO NOT use: from nuphase.config.enums import *
"""

from enum import Enum


class IntegrationType(Enum):
    """Numerical integration back-end for total cross sections.

    Options:
        ADAPTIVE: Adaptive cubature with the Genz-Malik rule (default).
            Deterministic, honours the relative tolerance and evaluation cap.
        GAUSS_KRONROD: Nested 1D adaptive Gauss-Kronrod quadrature.
            Accurate for smooth integrands, slower in 2D.
        QMC: Randomised quasi-Monte Carlo. Robust for rough integrands,
            the evaluation cap sets the number of sample points.
    """
    ADAPTIVE = "adaptive"
    GAUSS_KRONROD = "gauss_kronrod"
    QMC = "qmc"


class InterpolationMethod(Enum):
    """Interpolation used when a cache branch is promoted to a spline.

    Options:
        CUBIC: Cubic spline with not-a-knot end conditions (default)
        AKIMA: Akima spline, less overshoot near steep thresholds
        PCHIP: Shape preserving piecewise cubic, monotone between knots
        LINEAR: Piecewise linear
    """
    CUBIC = "cubic"
    AKIMA = "akima"
    PCHIP = "pchip"
    LINEAR = "linear"
