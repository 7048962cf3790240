"""YAML Configuration Loader

Reads the packaged defaults.yaml and, when NUPHASE_DEFAULTS_PATH names a
file, layers that file on top of it key by key. A user file therefore only
needs the settings it changes. The loader has no dependencies on other config
modules to avoid circular imports.

Sections:
    integration: tolerances, evaluation cap and free-nucleon knot grid
    max_xsec: rejection-sampling cache (safety factors, spline promotion)
    phase_space: MEC Q2 ceiling and diffractive/coherent t maxima
    dark_matter: probe mass

Usage:
    from nuphase.config.yaml_loader import get_default, get_section
    t_max = get_default('phase_space.diffractive_t_max')
    knots = get_section('integration')['knots_per_efold']
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

SECTIONS = ("integration", "max_xsec", "phase_space", "dark_matter")
ENV_VAR = "NUPHASE_DEFAULTS_PATH"

_PACKAGED_PATH = Path(__file__).parent / "defaults.yaml"


def _read(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")

    unknown = sorted(set(data) - set(SECTIONS))
    if unknown:
        logger.warning(f"{path}: ignoring unknown sections {unknown}")
    return {name: dict(data[name] or {}) for name in SECTIONS if name in data}


def _override_path() -> Path | None:
    env_path = os.getenv(ENV_VAR)
    if not env_path:
        return None
    path = Path(env_path)
    if not path.exists():
        logger.warning(f"{ENV_VAR}={env_path} does not exist; using packaged defaults")
        return None
    return path


def _load_yaml_config() -> dict[str, dict[str, Any]]:
    """Packaged defaults with the optional user file merged per section."""
    if not _PACKAGED_PATH.exists():
        raise FileNotFoundError(f"Packaged configuration file not found: {_PACKAGED_PATH}")
    config = _read(_PACKAGED_PATH)

    override = _override_path()
    if override is not None:
        for name, values in _read(override).items():
            config.setdefault(name, {}).update(values)
        logger.info(f"Loaded configuration overrides from {override}")
    return config


# Cache the loaded configuration
_CONFIG_CACHE: dict[str, dict[str, Any]] | None = None


def _get_config() -> dict[str, dict[str, Any]]:
    global _CONFIG_CACHE
    if _CONFIG_CACHE is None:
        _CONFIG_CACHE = _load_yaml_config()
    return _CONFIG_CACHE


def get_defaults() -> dict[str, dict[str, Any]]:
    """All sections, as copies.

    Example:
        >>> get_defaults()['phase_space']['mec_Q2_max']
        1.44
    """
    return {name: dict(values) for name, values in _get_config().items()}


def get_section(name: str) -> dict[str, Any]:
    """One section as a copy; empty if the files do not define it.

    Raises:
        KeyError: If ``name`` is not a nuphase configuration section
    """
    if name not in SECTIONS:
        raise KeyError(f"Unknown configuration section '{name}', expected one of {SECTIONS}")
    return dict(_get_config().get(name, {}))


def get_default(key_path: str, default: Any = None) -> Any:
    """Value at a 'section.key' path, or ``default`` when unset.

    Example:
        >>> get_default('integration.max_eval')
        500000
        >>> get_default('nonexistent.key', 'fallback')
        'fallback'
    """
    section, _, key = key_path.partition(".")
    values = _get_config().get(section)
    if not key or values is None:
        return default
    value = values.get(key)
    return default if value is None else value


def reload_defaults() -> None:
    """Re-read defaults.yaml and the override file.

    Configuration objects already built from the previous defaults keep
    their values; rebuild them after reloading.
    """
    global _CONFIG_CACHE
    _CONFIG_CACHE = _load_yaml_config()
