"""
nvm integration.

On Windows nvm-windows is an executable answering ``nvm version``. On Unix
nvm-sh is a shell function: a direct ``nvm --version`` only works when the
calling environment already has it, so a failed direct call is retried in a
sub-shell that sources ``$NVM_DIR/nvm.sh`` first. Both attempts together make
one probe.
"""

import logging
import os

from ..core.platform import (
    ShellExecutor,
    build_nvm_environment,
    build_nvm_init_command,
    get_interactive_shell_executor,
)
from .base import BaseNodeManager, ManagerDetectionResult, ManagerType

logger = logging.getLogger(__name__)


class NvmManager(BaseNodeManager):
    """nvm-sh / nvm-windows manager."""

    manager_type = ManagerType.NVM
    command = "nvm"

    async def _probe(self) -> ManagerDetectionResult:
        if self.platform.is_windows():
            return await self._probe_windows()
        return await self._probe_unix()

    async def _probe_windows(self) -> ManagerDetectionResult:
        result = await self.execute_command(["version"])
        if result.success:
            return ManagerDetectionResult(
                type=self.manager_type,
                available=True,
                version=result.stdout.strip(),
                path=self.platform.nvm_dir,
            )
        return ManagerDetectionResult.unavailable(
            self.manager_type, "nvm-windows not found or not properly configured"
        )

    async def _probe_unix(self) -> ManagerDetectionResult:
        direct = await self.execute_command(["--version"])
        if direct.success:
            return ManagerDetectionResult(
                type=self.manager_type,
                available=True,
                version=direct.stdout.strip(),
                path=self.platform.nvm_dir,
            )

        logger.debug(
            f"Direct nvm --version failed (exit={direct.exit_code}), "
            f"retrying through {os.path.join(self.platform.nvm_dir, 'nvm.sh')}"
        )
        script = f"{build_nvm_init_command(self.platform)} && nvm --version"
        sourced = await self.runner.run_shell_command(
            self._sourcing_shell(),
            script,
            timeout=self.settings.command_timeout,
            env=build_nvm_environment(self.platform),
        )
        if sourced.success:
            return ManagerDetectionResult(
                type=self.manager_type,
                available=True,
                version=sourced.stdout.strip(),
                path=self.platform.nvm_dir,
            )
        return ManagerDetectionResult.unavailable(
            self.manager_type, "NVM not found or not properly configured"
        )

    def _sourcing_shell(self) -> ShellExecutor:
        # Interactive, so rc files that set up nvm are read too.
        executor = get_interactive_shell_executor(self.platform)
        # nvm.sh only supports POSIX-like shells
        if self.platform.shell == "fish":
            return ShellExecutor("/bin/bash", executor.args)
        return executor


__all__ = ["NvmManager"]
