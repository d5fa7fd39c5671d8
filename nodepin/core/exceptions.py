"""
Centralized exception hierarchy for nodepin.

Probe and read failures are recovered where they happen and never reach
callers as exceptions; the classes below cover the errors that do propagate.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class NodePinError(Exception):
    """Base exception for all nodepin errors."""

    pass


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheError(NodePinError):
    """Base exception for cache-related errors."""

    pass


class UnknownNamespaceError(CacheError, ValueError):
    """Raised when a cache namespace is not one of the known namespaces."""

    def __init__(self, namespace: str):
        self.namespace = namespace
        super().__init__(f"Unknown cache namespace: {namespace}")


# ============================================================================
# Configuration Exceptions
# ============================================================================


class SettingsError(NodePinError):
    """Raised when the settings file is malformed or holds invalid values."""

    pass


# ============================================================================
# Version Exceptions
# ============================================================================


class VersionError(NodePinError):
    """Base exception for version handling errors."""

    pass


class InvalidVersionSpecError(VersionError, ValueError):
    """Raised when a version spec cannot be interpreted at all."""

    def __init__(self, spec: str, reason: str = ""):
        self.spec = spec
        msg = f"Invalid version spec: {spec!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


# ============================================================================
# Manager Exceptions
# ============================================================================


class ManagerError(NodePinError):
    """Base exception for version manager errors."""

    pass


class ManagerNotFoundError(ManagerError):
    """Raised when an unknown manager type is requested."""

    def __init__(self, manager_type: str):
        self.manager_type = manager_type
        super().__init__(f"No implementation for version manager: {manager_type}")
