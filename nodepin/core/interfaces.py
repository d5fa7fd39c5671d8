"""
Capability interfaces nodepin depends on.

The detection and resolution code never spawns processes or touches the file
system directly; it goes through these interfaces so hosts (and tests) can
supply their own implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

from .platform import ShellExecutor


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of an external command.

    Attributes:
        exit_code: Process exit code, or -1 for spawn errors and timeouts
        stdout: Captured standard output, stripped
        stderr: Captured standard error, stripped
        success: True when the process exited with code 0
    """

    exit_code: int
    stdout: str
    stderr: str
    success: bool

    @classmethod
    def failure(cls, message: str, stdout: str = "", stderr: str = "") -> "CommandResult":
        """Build the synthetic result used for spawn errors and timeouts."""
        stderr = f"{stderr}\n{message}" if stderr else message
        return cls(exit_code=-1, stdout=stdout, stderr=stderr, success=False)


class CommandRunner(ABC):
    """Runs external commands with a bounded timeout."""

    @abstractmethod
    async def run_command(
        self,
        command: str,
        args: List[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """
        Run ``command`` with ``args``.

        Args:
            command: Executable name or path
            args: Arguments
            cwd: Working directory
            env: Variables merged over the current environment
            timeout: Seconds before the process is killed

        Returns:
            CommandResult; never raises for spawn failures or timeouts
        """
        pass

    @abstractmethod
    async def run_shell_command(
        self,
        shell: ShellExecutor,
        script: str,
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        """
        Run ``script`` through ``shell``.

        Args:
            shell: Interpreter and flags
            script: Script text
            timeout: Seconds before the process is killed
            env: Complete environment for the shell

        Returns:
            CommandResult; never raises for spawn failures or timeouts
        """
        pass


class FileReader(ABC):
    """Reads project files."""

    @abstractmethod
    async def read_file(self, path: Path) -> Optional[str]:
        """
        Read a text file.

        Returns:
            File content, or None if the file does not exist

        Raises:
            OSError: If the file exists but cannot be read
        """
        pass

    @abstractmethod
    def file_exists(self, path: Path) -> bool:
        """Check whether ``path`` exists."""
        pass


__all__ = [
    "CommandResult",
    "CommandRunner",
    "FileReader",
]
