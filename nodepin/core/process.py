"""
Asynchronous subprocess execution with timeouts.

Every command is bounded: when the timeout expires the process is killed and
reaped, and a synthetic failed CommandResult (exit code -1) is returned
instead of an exception. Spawn errors (missing executable, permission denied)
are reported the same way.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional

from .interfaces import CommandResult, CommandRunner
from .platform import ShellExecutor

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0

TIMEOUT_MESSAGE = "Command timeout"


class SubprocessRunner(CommandRunner):
    """
    CommandRunner backed by ``asyncio.create_subprocess_exec``.

    Args:
        default_timeout: Timeout in seconds used when a call passes none

    Example:
        >>> runner = SubprocessRunner()
        >>> result = await runner.run_command("node", ["--version"], timeout=5)
        >>> result.success
        True
    """

    def __init__(self, default_timeout: float = DEFAULT_TIMEOUT):
        self.default_timeout = default_timeout

    async def run_command(
        self,
        command: str,
        args: List[str],
        cwd: Optional[Path] = None,
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        full_env = {**os.environ, **env} if env else None
        return await self._execute([command, *args], cwd, full_env, timeout)

    async def run_shell_command(
        self,
        shell: ShellExecutor,
        script: str,
        timeout: Optional[float] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        return await self._execute(
            shell.argv(script), None, dict(env) if env is not None else None, timeout
        )

    async def _execute(
        self,
        argv: List[str],
        cwd: Optional[Path],
        env: Optional[Mapping[str, str]],
        timeout: Optional[float],
    ) -> CommandResult:
        timeout = self.default_timeout if timeout is None else timeout
        logger.debug(f"Running {argv} (timeout={timeout}s)")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                env=env,
            )
        except (OSError, ValueError) as e:
            logger.debug(f"Failed to start {argv[0]}: {e}")
            return CommandResult.failure(str(e))

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
        except asyncio.TimeoutError:
            logger.debug(f"Timeout after {timeout}s running {argv}")
            await _terminate(process)
            return CommandResult.failure(TIMEOUT_MESSAGE)
        except asyncio.CancelledError:
            await _terminate(process)
            raise

        exit_code = process.returncode if process.returncode is not None else -1
        return CommandResult(
            exit_code=exit_code,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
            success=exit_code == 0,
        )


async def _terminate(process: "asyncio.subprocess.Process") -> None:
    """Kill ``process`` if still running and wait for it to exit."""
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace").strip()


__all__ = [
    "DEFAULT_TIMEOUT",
    "SubprocessRunner",
    "TIMEOUT_MESSAGE",
]
