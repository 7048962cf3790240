"""Differential cross-section model interface, splines and the integrator.

Import Policy:
    from nuphase.xsec import XSecAlgorithm, Spline, XSecSplineList
    from nuphase.xsec.integrator import XSecIntegrator

The integrator is not re-exported here because it depends on
``nuphase.cache``, which in turn uses ``Spline``.
"""

from nuphase.xsec.model import XSecAlgorithm
from nuphase.xsec.spline import Spline
from nuphase.xsec.spline_list import XSecSplineList

__all__ = [
    "XSecAlgorithm",
    "Spline",
    "XSecSplineList",
]
