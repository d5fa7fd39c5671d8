"""n integration (tj/n, Unix only in practice)."""

import logging

from .base import BaseNodeManager, ManagerDetectionResult, ManagerType

logger = logging.getLogger(__name__)


class NManager(BaseNodeManager):
    """n version manager."""

    manager_type = ManagerType.N
    command = "n"

    async def _probe(self) -> ManagerDetectionResult:
        result = await self.execute_command(["--version"])
        if not result.success:
            return ManagerDetectionResult.unavailable(
                self.manager_type, "N version manager not found"
            )

        path = None
        which = "where" if self.platform.is_windows() else "which"
        located = await self.runner.run_command(
            which, ["n"], timeout=self.settings.command_timeout
        )
        if located.success and located.stdout:
            path = located.stdout.splitlines()[0].strip()
        else:
            logger.debug(f"{which} n failed: {located.stderr}")

        return ManagerDetectionResult(
            type=self.manager_type,
            available=True,
            version=result.stdout.strip(),
            path=path,
        )


__all__ = ["NManager"]
