"""
Base Node version manager abstraction for nodepin.

This module provides the abstract base class for integrating external Node
version managers (nvm, n) and the immutable detection result they produce.

Classes:
    ManagerType: Known manager kinds
    ManagerDetectionResult: Outcome of probing one manager
    BaseNodeManager: Abstract base class for manager implementations
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Mapping, Optional

from ..core.interfaces import CommandResult, CommandRunner
from ..core.platform import PlatformInfo
from ..core.settings import Settings

logger = logging.getLogger(__name__)


class ManagerType(str, Enum):
    """Known Node version managers, in probe priority order."""

    NVM = "nvm"
    N = "n"
    UNKNOWN = "unknown"


# =============================================================================
# Detection Result
# =============================================================================


@dataclass(frozen=True)
class ManagerDetectionResult:
    """
    Outcome of probing one version manager.

    Results are never modified; a new probe produces a new instance.

    Attributes:
        type: Manager kind
        available: Whether the manager answered its version command
        version: Manager version reported by the tool
        path: Installation directory or executable path
        error: Why the manager is unavailable
    """

    type: ManagerType
    available: bool
    version: Optional[str] = None
    path: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def unavailable(cls, manager_type: ManagerType, error: str) -> "ManagerDetectionResult":
        return cls(type=manager_type, available=False, error=error)

    def __str__(self) -> str:
        if self.available:
            return f"{self.type.value} {self.version or '?'} ({self.path or 'unknown path'})"
        return f"{self.type.value} unavailable: {self.error}"


# =============================================================================
# Abstract Manager
# =============================================================================


_VERSION_PATTERN = re.compile(r"v?(\d+\.\d+\.\d+)")


class BaseNodeManager(ABC):
    """
    Abstract base class for Node version manager implementations.

    Subclasses implement ``_probe()``; ``detect()`` wraps it so that any
    exception becomes a negative detection result instead of propagating.

    Attributes:
        manager_type: Kind of manager implemented
        command: Executable or shell function name of the manager
    """

    manager_type: ManagerType = ManagerType.UNKNOWN
    command: str = ""

    def __init__(
        self,
        runner: CommandRunner,
        platform_info: PlatformInfo,
        settings: Optional[Settings] = None,
    ):
        self.runner = runner
        self.platform = platform_info
        self.settings = settings or Settings()

    async def detect(self) -> ManagerDetectionResult:
        """
        Probe the manager.

        Returns:
            Detection result; probe failures are reported through ``error``
        """
        try:
            result = await self._probe()
        except Exception as e:
            logger.error(
                f"detect failed for {self.manager_type.value} "
                f"(platform={self.platform.type}, command={self.command}): {e}"
            )
            return ManagerDetectionResult.unavailable(self.manager_type, str(e))

        if result.available:
            logger.info(f"Found {result}")
        else:
            logger.debug(
                f"{self.manager_type.value} not available on {self.platform.type}: "
                f"{result.error}"
            )
        return result

    @abstractmethod
    async def _probe(self) -> ManagerDetectionResult:
        """
        Run the manager's version command.

        Returns:
            Detection result
        """
        pass

    async def get_current_version(self) -> Optional[str]:
        """
        Get the Node version currently on PATH.

        Returns:
            Version without a leading 'v' (e.g. '18.17.0'), or None
        """
        result = await self.runner.run_command(
            "node", ["--version"], timeout=self.settings.node_command_timeout
        )
        if result.success and result.stdout:
            return self.parse_version_output(result.stdout)

        logger.debug(
            f"node --version failed (platform={self.platform.type}): "
            f"exit={result.exit_code} {result.stderr}"
        )
        return None

    async def execute_command(
        self,
        args: List[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """Run the manager command with ``args``."""
        return await self.runner.run_command(
            self.command,
            args,
            cwd=cwd,
            env=env,
            timeout=self.settings.command_timeout if timeout is None else timeout,
        )

    @staticmethod
    def parse_version_output(output: str) -> str:
        """
        Extract an X.Y.Z version from tool output.

        Args:
            output: Raw output such as 'v18.17.0' or 'node v18.17.0'

        Returns:
            '18.17.0', or the stripped output when no version is found
        """
        match = _VERSION_PATTERN.search(output)
        return match.group(1) if match else output.strip()

    def get_name(self) -> str:
        return self.manager_type.value


__all__ = [
    "BaseNodeManager",
    "ManagerDetectionResult",
    "ManagerType",
]
