"""Kinematic phase space: boundary calculators and the PhaseSpace facade."""

from nuphase.kinematics.limits import W_Q2_from_x_y, snap_degenerate, x_y_from_W_Q2
from nuphase.kinematics.phase_space import (
    CHANNEL_RULES,
    ChannelRules,
    KinematicVariable,
    PhaseSpace,
)
from nuphase.kinematics.spp import SppChannel

__all__ = [
    "PhaseSpace",
    "KinematicVariable",
    "ChannelRules",
    "CHANNEL_RULES",
    "SppChannel",
    "W_Q2_from_x_y",
    "x_y_from_W_Q2",
    "snap_degenerate",
]
