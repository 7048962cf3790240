"""
Configuration Validation Utilities

This module provides validation functions for engine configurations.
It includes range checks, cross-validation, and safety warnings.

Import Policy:
    from nuphase.config.validation import validate_config, warn_if_unsafe

DO NOT use: from nuphase.config.validation import *
"""

import dataclasses
import warnings
from typing import List, Tuple

from nuphase.config.enums import IntegrationType
from nuphase.config.physics_config import NuphaseConfig


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


class ConfigurationWarning(Warning):
    """Warning for potentially unsafe configuration choices."""

    pass


def validate_config(config: NuphaseConfig, raise_on_error: bool = True) -> Tuple[bool, List[str]]:
    """Validate an engine configuration.

    Args:
        config: NuphaseConfig to validate
        raise_on_error: If True, raise ConfigurationError on validation failure

    Returns:
        Tuple of (is_valid, error_messages)

    Raises:
        ConfigurationError: If validation fails and raise_on_error=True
    """
    errors = config.validate()

    if errors:
        if raise_on_error:
            raise ConfigurationError(
                f"Configuration validation failed with {len(errors)} error(s):\n"
                + "\n".join(f"  - {err}" for err in errors)
            )
        return False, errors

    return True, []


def warn_if_unsafe(config: NuphaseConfig) -> List[str]:
    """Check for configuration choices that are legal but risky.

    Warnings are issued via Python's warnings module.

    Args:
        config: NuphaseConfig to check

    Returns:
        List of warning messages (empty if no warnings)
    """
    warnings_list = []

    # Loose tolerance gives a visibly noisy total cross section
    if config.integration.rel_tolerance > 0.1:
        warnings_list.append(
            f"rel_tolerance ({config.integration.rel_tolerance}) is loose. "
            "Total cross sections may be off by more than 10%."
        )

    if (config.integration.integration_type is IntegrationType.QMC
            and config.integration.max_eval < 4096):
        warnings_list.append(
            f"max_eval ({config.integration.max_eval}) is small for quasi Monte Carlo "
            "integration. Recommend at least 4096 points."
        )

    if not config.max_xsec.safety_factors:
        warnings_list.append(
            "No max cross-section safety factors configured. Rejection sampling "
            "may undershoot the true maximum."
        )

    if config.max_xsec.diff_tolerance < 1:
        warnings_list.append(
            f"diff_tolerance ({config.max_xsec.diff_tolerance}%) is tight. "
            "Expect frequent max cross-section violations."
        )

    if config.integration.validity_E_max / config.integration.validity_E_min > 1e6:
        warnings_list.append(
            "Validity energy range spans more than six decades. "
            "Free-nucleon knot count will be large."
        )

    for warning_msg in warnings_list:
        warnings.warn(warning_msg, ConfigurationWarning, stacklevel=2)

    return warnings_list


def validate_and_warn(config: NuphaseConfig) -> NuphaseConfig:
    """Validate a configuration, raising on errors and warning on risky choices.

    Raises:
        ConfigurationError: If validation fails
    """
    validate_config(config, raise_on_error=True)
    warn_if_unsafe(config)
    return config


def create_validated_config(**kwargs) -> NuphaseConfig:
    """Create an engine configuration with validation.

    Keyword arguments override fields of the matching section.

    Args:
        **kwargs: Parameters to override in default config

    Returns:
        Validated NuphaseConfig

    Raises:
        ConfigurationError: If the resulting configuration is invalid
        ValueError: If a keyword matches no configuration field

    Example:
        >>> config = create_validated_config(rel_tolerance=1e-3, mec_Q2_max=1.2)
    """
    from nuphase.config.physics_config import create_default_config

    config = create_default_config()

    phase_space_overrides = {}
    for key, value in kwargs.items():
        if hasattr(config.integration, key):
            setattr(config.integration, key, value)
        elif hasattr(config.max_xsec, key):
            setattr(config.max_xsec, key, value)
        elif hasattr(config.phase_space, key):
            phase_space_overrides[key] = value
        elif hasattr(config.run, key):
            setattr(config.run, key, value)
        else:
            raise ValueError(f"Unknown configuration parameter: {key}")

    if phase_space_overrides:
        config.phase_space = dataclasses.replace(config.phase_space, **phase_space_overrides)

    return validate_and_warn(config)
