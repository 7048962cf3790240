"""Core data structures for the phase-space engine.

This module contains the interaction descriptor, particle data, ranges,
physical constants, units and the exception hierarchy.
"""

from nuphase.core.event import EventFlag, EventRecord, PhaseSpaceKind
from nuphase.core.exceptions import (
    InvariantViolation,
    KinematicsGenerationFailure,
    NumericalError,
    NuphaseError,
    UnresolvedChannel,
    UnsupportedChannel,
)
from nuphase.core.interaction import (
    ExclusiveTag,
    FourVector,
    InitialState,
    Interaction,
    InteractionFlag,
    Kinematics,
    ReferenceFrame,
    Target,
)
from nuphase.core.pdg import ParticleTable
from nuphase.core.process import CurrentKind, ProcessInfo, ProcessKind
from nuphase.core.range import Range1D

__all__ = [
    "EventFlag",
    "EventRecord",
    "PhaseSpaceKind",
    "NuphaseError",
    "UnsupportedChannel",
    "UnresolvedChannel",
    "NumericalError",
    "KinematicsGenerationFailure",
    "InvariantViolation",
    "ExclusiveTag",
    "FourVector",
    "InitialState",
    "Interaction",
    "InteractionFlag",
    "Kinematics",
    "ReferenceFrame",
    "Target",
    "ParticleTable",
    "CurrentKind",
    "ProcessInfo",
    "ProcessKind",
    "Range1D",
]
