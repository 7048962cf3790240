"""Minimal event record handed to kinematics generators."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, Flag, auto

from nuphase.core.interaction import Interaction


class PhaseSpaceKind(Enum):
    """Differential variables a cross-section value refers to.

    Options:
        NULL: No phase space (cleared value)
        W_Q2: d2xsec/dWdQ2
        X_Y: d2xsec/dxdy
        Q2: dxsec/dQ2
        Y: dxsec/dy
        T: dxsec/dt
    """
    NULL = "null"
    W_Q2 = "WQ2"
    X_Y = "xy"
    Q2 = "Q2"
    Y = "y"
    T = "t"


class EventFlag(Flag):
    """Event status bits.

    Options:
        KINE_GEN_ERROR: Kinematics generation failed for this event
    """
    NONE = 0
    KINE_GEN_ERROR = auto()


@dataclass
class EventRecord:
    """Interaction plus the differential cross section selected for it."""

    interaction: Interaction
    diff_xsec: float = 0.0
    diff_xsec_phase_space: PhaseSpaceKind = PhaseSpaceKind.NULL
    flags: EventFlag = EventFlag.NONE

    def set_diff_xsec(self, value: float, phase_space: PhaseSpaceKind) -> None:
        self.diff_xsec = value
        self.diff_xsec_phase_space = phase_space

    def set_flag(self, flag: EventFlag) -> None:
        self.flags |= flag

    def test_flag(self, flag: EventFlag) -> bool:
        return bool(self.flags & flag)
