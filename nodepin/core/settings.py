"""
Settings for nodepin.

Settings are read from a YAML file (``nodepin.yaml`` in the project root by
default). Every key is optional; missing keys keep their defaults.

Example file:

    preferred_manager: nvm
    command_timeout: 10
    ttl:
      manifest: 15
      pin_file: 120
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import SettingsError

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "nodepin.yaml"

MANAGER_CHOICES = ("auto", "nvm", "n")


@dataclass
class CacheTTLSettings:
    """
    Cache lifetimes in seconds, tuned to how often each input changes.

    Attributes:
        default: Fallback TTL for entries stored without one
        manager_detection: Manager probe results, positive and negative
        pin_file: Single-value pin files and .tool-versions
        manifest: package.json, edited more often than pin files
        project_version: Aggregate resolution per project root
        version_match: (current, required) match results
        current_version: Active Node version when one was found
        current_version_missing: Active Node version when none was found
        project_status: Full project checks per root
    """

    default: float = 300.0
    manager_detection: float = 300.0
    pin_file: float = 60.0
    manifest: float = 30.0
    project_version: float = 120.0
    version_match: float = 120.0
    current_version: float = 5.0
    current_version_missing: float = 2.0
    project_status: float = 30.0


@dataclass
class Settings:
    """
    Top-level nodepin settings.

    Attributes:
        ttl: Cache lifetimes
        command_timeout: Bound in seconds for manager commands
        node_command_timeout: Bound in seconds for ``node --version``
        preferred_manager: 'auto', 'nvm' or 'n'
        auto_detect_version: Whether project versions are resolved at all
        nvm_dir: Override for the nvm installation directory
    """

    ttl: CacheTTLSettings = field(default_factory=CacheTTLSettings)
    command_timeout: float = 15.0
    node_command_timeout: float = 5.0
    preferred_manager: str = "auto"
    auto_detect_version: bool = True
    nvm_dir: Optional[str] = None

    def __post_init__(self):
        """Validate values after initialization."""
        if self.preferred_manager not in MANAGER_CHOICES:
            raise SettingsError(
                f"Invalid preferred_manager: {self.preferred_manager}. "
                f"Must be one of: {', '.join(MANAGER_CHOICES)}"
            )
        for name in ("command_timeout", "node_command_timeout"):
            if getattr(self, name) <= 0:
                raise SettingsError(f"{name} must be positive")
        for ttl_field in fields(CacheTTLSettings):
            if getattr(self.ttl, ttl_field.name) < 0:
                raise SettingsError(f"ttl.{ttl_field.name} must not be negative")


def _coerce_number(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SettingsError(f"{key} must be a number, got {value!r}")
    return float(value)


def _build_ttl(data: Any) -> CacheTTLSettings:
    if data is None:
        return CacheTTLSettings()
    if not isinstance(data, dict):
        raise SettingsError(f"ttl must be a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(CacheTTLSettings)}
    values = {}
    for key, value in data.items():
        if key not in known:
            logger.debug(f"Ignoring unknown ttl setting: {key}")
            continue
        values[key] = _coerce_number(f"ttl.{key}", value)
    return CacheTTLSettings(**values)


def settings_from_dict(data: Dict[str, Any]) -> Settings:
    """
    Build Settings from a parsed configuration mapping.

    Args:
        data: Mapping as loaded from YAML

    Returns:
        Settings instance

    Raises:
        SettingsError: If a value has the wrong type or is out of range
    """
    values: Dict[str, Any] = {"ttl": _build_ttl(data.get("ttl"))}

    for key in ("command_timeout", "node_command_timeout"):
        if key in data:
            values[key] = _coerce_number(key, data[key])

    for key in ("auto_detect_version",):
        if key in data:
            if not isinstance(data[key], bool):
                raise SettingsError(f"{key} must be true or false, got {data[key]!r}")
            values[key] = data[key]

    if "preferred_manager" in data:
        values["preferred_manager"] = str(data["preferred_manager"]).lower()

    if data.get("nvm_dir"):
        values["nvm_dir"] = str(data["nvm_dir"])

    known = {f.name for f in fields(Settings)}
    for key in data:
        if key not in known:
            logger.debug(f"Ignoring unknown setting: {key}")

    return Settings(**values)


def load_settings(
    path: Optional[Path] = None, project_root: Optional[Path] = None
) -> Settings:
    """
    Load settings from YAML, falling back to defaults.

    Lookup order: explicit ``path``, then ``<project_root>/nodepin.yaml``.
    The ``NODEPIN_PREFERRED_MANAGER`` environment variable overrides the
    preferred manager from the file.

    Args:
        path: Explicit settings file (must exist when given)
        project_root: Directory searched for nodepin.yaml

    Returns:
        Settings instance

    Raises:
        SettingsError: If the file is missing (explicit path), is not valid
            YAML, or holds invalid values
    """
    data: Dict[str, Any] = {}

    if path is not None:
        if not path.exists():
            raise SettingsError(f"Settings file not found: {path}")
        settings_file: Optional[Path] = path
    elif project_root is not None and (project_root / SETTINGS_FILENAME).exists():
        settings_file = project_root / SETTINGS_FILENAME
    else:
        settings_file = None

    if settings_file is not None:
        logger.debug(f"Loading settings from {settings_file}")
        try:
            with open(settings_file, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid YAML in {settings_file}: {e}")
        except OSError as e:
            raise SettingsError(f"Cannot read {settings_file}: {e}")

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise SettingsError(f"{settings_file} must contain a mapping")
        data = loaded

    env_manager = os.environ.get("NODEPIN_PREFERRED_MANAGER")
    if env_manager:
        data = {**data, "preferred_manager": env_manager}

    return settings_from_dict(data)


__all__ = [
    "CacheTTLSettings",
    "Settings",
    "SETTINGS_FILENAME",
    "load_settings",
    "settings_from_dict",
]
