"""Configuration Module - Single Source of Truth for Engine Parameters

Default Configuration (loaded from defaults.yaml):
    from nuphase.config import get_default, get_defaults

    # Get a specific default value by dotted key path
    t_max = get_default('phase_space.diffractive_t_max')

    # Get the full configuration dictionary
    all_defaults = get_defaults()

Recommended Usage:
    from nuphase.config import create_validated_config

    # Create a default config (already validated)
    config = create_validated_config()

    # Override individual fields
    config = create_validated_config(rel_tolerance=1e-3, safety_factors=[1.5, 1.2])

    # Hand the resolved sections to the engine
    phase_space = PhaseSpace(interaction, config.phase_space)

Import Policy:
    DO NOT use: from nuphase.config import *

Submodules:
    enums: Configuration enumerations (IntegrationType, InterpolationMethod)
    yaml_loader: YAML configuration loader (get_default, get_defaults, get_section)
    physics_config: Configuration dataclasses (PhaseSpaceConfig, IntegrationConfig, etc.)
    validation: Validation utilities (validate_config, warn_if_unsafe, etc.)
"""

from nuphase.config.enums import IntegrationType, InterpolationMethod
# Import YAML loader functions first (no circular dependencies)
from nuphase.config.yaml_loader import get_default, get_defaults, get_section, reload_defaults
from nuphase.config.physics_config import (
    IntegrationConfig,
    MaxXSecConfig,
    NuphaseConfig,
    PhaseSpaceConfig,
    RunOptions,
    create_default_config,
)
from nuphase.config.validation import (
    ConfigurationError,
    ConfigurationWarning,
    create_validated_config,
    validate_and_warn,
    validate_config,
    warn_if_unsafe,
)


__all__ = [
    # Enums
    "IntegrationType",
    "InterpolationMethod",
    # Config classes
    "IntegrationConfig",
    "MaxXSecConfig",
    "PhaseSpaceConfig",
    "RunOptions",
    "NuphaseConfig",
    # Factory functions
    "create_default_config",
    "create_validated_config",
    # Validation
    "ConfigurationError",
    "ConfigurationWarning",
    "validate_config",
    "validate_and_warn",
    "warn_if_unsafe",
    # YAML defaults access
    "get_default",
    "get_defaults",
    "get_section",
    "reload_defaults",
]
