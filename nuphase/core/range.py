"""Closed interval over a single kinematic variable."""

from __future__ import annotations

from dataclasses import dataclass

UNDEFINED_BOUND = -1.0


@dataclass(frozen=True)
class Range1D:
    """Inclusive ``[min, max]`` interval.

    The pair ``(-1, -1)`` is the sentinel for limits that are undefined or
    inapplicable to a channel; check ``is_undefined`` before use.
    """

    min: float = UNDEFINED_BOUND
    max: float = UNDEFINED_BOUND

    @classmethod
    def undefined(cls) -> Range1D:
        return cls(UNDEFINED_BOUND, UNDEFINED_BOUND)

    @classmethod
    def point(cls, value: float) -> Range1D:
        return cls(value, value)

    @property
    def is_undefined(self) -> bool:
        return self.min == UNDEFINED_BOUND and self.max == UNDEFINED_BOUND

    @property
    def is_valid(self) -> bool:
        """True for a usable, non-inverted range."""
        return not self.is_undefined and self.min <= self.max

    @property
    def width(self) -> float:
        return self.max - self.min

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def reflected(self) -> Range1D:
        """Sign-flipped range, e.g. Q2 -> q2 = -Q2."""
        return Range1D(-self.max, -self.min)

    def __iter__(self):
        yield self.min
        yield self.max

    def __repr__(self) -> str:
        return f"Range1D(min={self.min!r}, max={self.max!r})"
