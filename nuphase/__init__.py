"""Kinematic Phase Space and Cross-Section Integration for Neutrino Scattering

Computes interaction thresholds and the allowed ranges of W, Q2, x, y and t
for neutrino, charged-lepton and boosted dark-matter probes, integrates
differential cross-section models into total cross sections, and caches the
maximum differential cross section used by accept/reject kinematics
generators.

Key Principles:
- One dispatch table row per process kind (no silent fall-through)
- Undefined regions are reported as the (-1, -1) sentinel range
- Configuration resolved once from defaults.yaml and passed explicitly
- Caches are explicitly constructed and injected, never global

Version: 1.0
"""

__version__ = "1.0"

# Core data structures
from nuphase.core import pdg, units
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
    Interaction,
    InteractionFlag,
    ReferenceFrame,
)
from nuphase.core.pdg import ParticleTable
from nuphase.core.process import CurrentKind, ProcessKind
from nuphase.core.range import Range1D

# Configuration
from nuphase.config import NuphaseConfig, create_default_config, create_validated_config

# Phase space
from nuphase.kinematics.phase_space import KinematicVariable, PhaseSpace

# Cross sections and caching
from nuphase.xsec import Spline, XSecAlgorithm, XSecSplineList
from nuphase.cache import Cache, CacheBranch, KineGeneratorWithCache, WQ2KinematicsGenerator
from nuphase.xsec.integrator import XSecIntegrator

__all__ = [
    # Version
    "__version__",
    # Core
    "pdg",
    "units",
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
    "Interaction",
    "InteractionFlag",
    "ReferenceFrame",
    "ParticleTable",
    "CurrentKind",
    "ProcessKind",
    "Range1D",
    # Configuration
    "NuphaseConfig",
    "create_default_config",
    "create_validated_config",
    # Phase space
    "PhaseSpace",
    "KinematicVariable",
    # Cross sections
    "XSecAlgorithm",
    "Spline",
    "XSecSplineList",
    "XSecIntegrator",
    # Caching
    "Cache",
    "CacheBranch",
    "KineGeneratorWithCache",
    "WQ2KinematicsGenerator",
]
