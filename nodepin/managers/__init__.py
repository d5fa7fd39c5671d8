"""
Node version manager integrations for nodepin.

Provides the nvm and n probes and the short-circuiting detector built on them.
"""

from .base import BaseNodeManager, ManagerDetectionResult, ManagerType
from .detector import ManagerDetector
from .n import NManager
from .nvm import NvmManager

__all__ = [
    "BaseNodeManager",
    "ManagerDetectionResult",
    "ManagerDetector",
    "ManagerType",
    "NManager",
    "NvmManager",
]
