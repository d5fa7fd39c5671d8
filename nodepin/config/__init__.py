"""
Project configuration reading for nodepin.
"""

from .reader import (
    CONFIG_FILES,
    ConfigReader,
    ConfigSource,
    PackageJsonVersions,
    ProjectVersionConfig,
    normalize_version,
)

__all__ = [
    "CONFIG_FILES",
    "ConfigReader",
    "ConfigSource",
    "PackageJsonVersions",
    "ProjectVersionConfig",
    "normalize_version",
]
