"""One-dimensional spline over tabulated (energy, value) knots.

Import Policy:
    from nuphase.xsec.spline import Spline

DO NOT use: from nuphase.xsec.spline import *
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from scipy.interpolate import (
    Akima1DInterpolator,
    CubicSpline,
    PchipInterpolator,
    make_interp_spline,
)

from nuphase.config.enums import InterpolationMethod

logger = logging.getLogger(__name__)


def _build_interpolator(x: np.ndarray, y: np.ndarray, method: InterpolationMethod):
    if method is InterpolationMethod.CUBIC:
        return CubicSpline(x, y)
    if method is InterpolationMethod.AKIMA:
        return Akima1DInterpolator(x, y)
    if method is InterpolationMethod.PCHIP:
        return PchipInterpolator(x, y)
    if method is InterpolationMethod.LINEAR:
        return make_interp_spline(x, y, k=1)
    raise ValueError(f"Unknown interpolation method: {method}")


class Spline:
    """Interpolating spline with an explicit domain.

    Evaluation is only defined inside ``[x_min, x_max]``; callers are
    expected to check ``contains`` before evaluating. Outside the domain
    ``evaluate`` logs a warning and returns 0.

    Args:
        x: Knot abscissae (need not be sorted, must be unique)
        y: Knot values
        method: Interpolation method

    Raises:
        ValueError: If fewer than 2 knots are given, the lengths differ or
            abscissae repeat
    """

    def __init__(
        self,
        x: Sequence[float],
        y: Sequence[float],
        method: InterpolationMethod = InterpolationMethod.CUBIC,
    ):
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)

        if x.shape != y.shape or x.ndim != 1:
            raise ValueError(
                f"Knot arrays must be 1D with equal length, got {x.shape} and {y.shape}"
            )
        if x.size < 2:
            raise ValueError(f"Spline needs at least 2 knots, got {x.size}")

        order = np.argsort(x)
        x = x[order]
        y = y[order]
        if not np.all(np.diff(x) > 0):
            raise ValueError("Spline knots must have unique abscissae")

        self._x = x
        self._y = y
        self._method = method
        self._interp = _build_interpolator(x, y, method)

    @property
    def x_min(self) -> float:
        return float(self._x[0])

    @property
    def x_max(self) -> float:
        return float(self._x[-1])

    @property
    def method(self) -> InterpolationMethod:
        return self._method

    @property
    def knots(self) -> tuple[np.ndarray, np.ndarray]:
        return self._x.copy(), self._y.copy()

    @property
    def n_knots(self) -> int:
        return int(self._x.size)

    def contains(self, x: float) -> bool:
        return self.x_min <= x <= self.x_max

    def evaluate(self, x: float) -> float:
        """Spline value at x [same units as the knots]."""
        if not self.contains(x):
            logger.warning(
                f"x = {x} is outside the spline domain [{self.x_min}, {self.x_max}]"
            )
            return 0.0
        return float(self._interp(x))

    def __call__(self, x):
        """Vectorised evaluation; points outside the domain give 0."""
        x = np.asarray(x, dtype=np.float64)
        inside = (x >= self._x[0]) & (x <= self._x[-1])
        result = np.zeros_like(x)
        if np.any(inside):
            result[inside] = self._interp(x[inside])
        return result

    def __repr__(self) -> str:
        return (
            f"Spline(n_knots={self.n_knots}, x=[{self.x_min}, {self.x_max}], "
            f"method={self._method.value})"
        )
