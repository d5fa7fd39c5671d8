"""
Core functionality for nodepin.

This package contains the foundational modules that other components depend on.
"""

from .cache import (
    Cache,
    CacheEntry,
    CacheNamespace,
    CacheStats,
)

from .exceptions import (
    NodePinError,
    CacheError,
    UnknownNamespaceError,
    SettingsError,
    VersionError,
    InvalidVersionSpecError,
    ManagerError,
    ManagerNotFoundError,
)

from .interfaces import (
    CommandResult,
    CommandRunner,
    FileReader,
)

from .platform import (
    PlatformInfo,
    ShellExecutor,
    detect_platform,
    clear_platform_cache,
)

from .settings import (
    CacheTTLSettings,
    Settings,
    load_settings,
)

__all__ = [
    "Cache",
    "CacheEntry",
    "CacheNamespace",
    "CacheStats",
    "NodePinError",
    "CacheError",
    "UnknownNamespaceError",
    "SettingsError",
    "VersionError",
    "InvalidVersionSpecError",
    "ManagerError",
    "ManagerNotFoundError",
    "CommandResult",
    "CommandRunner",
    "FileReader",
    "PlatformInfo",
    "ShellExecutor",
    "detect_platform",
    "clear_platform_cache",
    "CacheTTLSettings",
    "Settings",
    "load_settings",
]
