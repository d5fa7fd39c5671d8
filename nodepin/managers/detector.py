"""
Version manager detection.

Detection is short-circuiting: nvm is probed first and, when it is available,
n is never probed. Only when nvm is unavailable is n probed and both results
returned. Both the per-manager probes and the combined result are cached, so
repeated detection within the TTL runs no processes at all, and negative
results are cached just like positive ones.

Usage:
    from nodepin.managers.detector import ManagerDetector

    detector = ManagerDetector(cache, SubprocessRunner())
    preferred = await detector.get_preferred_manager()
    if preferred:
        print(f"Using {preferred.type.value} {preferred.version}")
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..core.cache import Cache, CacheNamespace
from ..core.exceptions import ManagerNotFoundError
from ..core.interfaces import CommandRunner
from ..core.platform import PlatformInfo, detect_platform
from ..core.settings import Settings
from ..core.timing import PerformanceTracker
from .base import BaseNodeManager, ManagerDetectionResult, ManagerType
from .n import NManager
from .nvm import NvmManager

logger = logging.getLogger(__name__)

ALL_MANAGERS_KEY = "all_managers"

_UNSET = object()


class ManagerDetector:
    """
    Detect installed Node version managers.

    Args:
        cache: Shared cache
        runner: Command runner used by the manager probes
        platform_info: Platform information. If None, auto-detect.
        settings: Settings (TTLs, timeouts, preferred manager)
        tracker: Performance tracker for probe timings
        managers: Manager implementations by type; nvm and n by default
    """

    def __init__(
        self,
        cache: Cache,
        runner: CommandRunner,
        platform_info: Optional[PlatformInfo] = None,
        settings: Optional[Settings] = None,
        tracker: Optional[PerformanceTracker] = None,
        managers: Optional[Dict[ManagerType, BaseNodeManager]] = None,
    ):
        self.cache = cache
        self.platform = platform_info or detect_platform()
        self.settings = settings or Settings()
        self.tracker = tracker or PerformanceTracker()
        self.managers = managers or {
            ManagerType.NVM: NvmManager(runner, self.platform, self.settings),
            ManagerType.N: NManager(runner, self.platform, self.settings),
        }

    async def detect_all_managers(self) -> List[ManagerDetectionResult]:
        """
        Detect managers in priority order, stopping at the first available.

        Returns:
            ``[nvm]`` when nvm is available, otherwise ``[nvm, n]``
        """
        results = await self.cache.cached(
            CacheNamespace.ENVIRONMENT_DETECTION,
            ALL_MANAGERS_KEY,
            self._detect_all,
            ttl=self.settings.ttl.manager_detection,
        )
        return list(results)

    async def _detect_all(self) -> Tuple[ManagerDetectionResult, ...]:
        nvm = await self.detect_nvm()
        if nvm.available:
            logger.debug("nvm available, skipping other managers")
            return (nvm,)

        logger.debug("nvm not available, probing n")
        n = await self.detect_n()
        return (nvm, n)

    async def detect_nvm(self) -> ManagerDetectionResult:
        """Probe nvm (cached per platform family)."""
        return await self._detect(ManagerType.NVM)

    async def detect_n(self) -> ManagerDetectionResult:
        """Probe n (cached per platform family)."""
        return await self._detect(ManagerType.N)

    async def _detect(self, manager_type: ManagerType) -> ManagerDetectionResult:
        manager = self.managers.get(manager_type)
        if manager is None:
            return ManagerDetectionResult.unavailable(
                manager_type, f"{manager_type.value} is not supported"
            )

        async def probe() -> ManagerDetectionResult:
            async with self.tracker.measure(f"detector.detect_{manager_type.value}"):
                return await manager.detect()

        return await self.cache.cached(
            CacheNamespace.MANAGER_DETECTION,
            f"{manager_type.value}_{self.platform.cache_suffix()}",
            probe,
            ttl=self.settings.ttl.manager_detection,
        )

    async def get_preferred_manager(self) -> Optional[ManagerDetectionResult]:
        """
        Pick the manager to use.

        A single available manager is returned as is. With several, the
        configured ``preferred_manager`` wins when available, then nvm, then
        the first in probe order.

        Returns:
            Detection result of the chosen manager, or None if none available
        """
        available = [m for m in await self.detect_all_managers() if m.available]

        if not available:
            return None
        if len(available) == 1:
            return available[0]

        preferred = self.settings.preferred_manager
        if preferred != "auto":
            for manager in available:
                if manager.type.value == preferred:
                    return manager
            logger.warning(
                f"Preferred manager {preferred} not available, "
                f"falling back to automatic selection"
            )

        for manager in available:
            if manager.type == ManagerType.NVM:
                return manager
        return available[0]

    async def is_manager_available(self, manager_type: ManagerType) -> bool:
        """
        Check whether a manager type was detected as available.

        Args:
            manager_type: Manager to check; unknown names are never available

        Returns:
            True if the manager is available
        """
        try:
            manager_type = ManagerType(manager_type)
        except ValueError:
            logger.debug(f"Unknown manager type: {manager_type!r}")
            return False
        if manager_type == ManagerType.UNKNOWN:
            return False

        for manager in await self.detect_all_managers():
            if manager.type == manager_type:
                return manager.available
        return False

    async def get_current_version(self) -> Optional[str]:
        """
        Get the active Node version through the preferred manager.

        Found versions are cached for ``ttl.current_version`` seconds and a
        missing version for the shorter ``ttl.current_version_missing``.

        Returns:
            Version such as '18.17.0', or None
        """
        preferred = await self.get_preferred_manager()
        if preferred is None:
            logger.debug("No version manager available, current version unknown")
            return None

        key = f"current_version_{preferred.type.value}_{self.platform.cache_suffix()}"
        cached = self.cache.get(CacheNamespace.NODE_VERSIONS, key, _UNSET)
        if cached is not _UNSET:
            return cached

        manager = self.get_manager(preferred.type)
        try:
            async with self.tracker.measure("detector.get_current_version"):
                version = await manager.get_current_version()
        except Exception as e:
            logger.error(
                f"get_current_version failed for {preferred.type.value} "
                f"(platform={self.platform.type}): {e}"
            )
            return None

        ttl = (
            self.settings.ttl.current_version
            if version
            else self.settings.ttl.current_version_missing
        )
        self.cache.set(CacheNamespace.NODE_VERSIONS, key, version, ttl=ttl)
        return version

    def get_manager(self, manager_type: ManagerType) -> BaseNodeManager:
        """
        Get the implementation for a manager type.

        Raises:
            ManagerNotFoundError: If no implementation is registered
        """
        manager = self.managers.get(manager_type)
        if manager is None:
            raise ManagerNotFoundError(getattr(manager_type, "value", manager_type))
        return manager

    def clear_cache(self) -> None:
        """Forget every detection result and the cached current version."""
        self.cache.delete(CacheNamespace.ENVIRONMENT_DETECTION)
        self.cache.delete(CacheNamespace.MANAGER_DETECTION)
        self.cache.delete(CacheNamespace.NODE_VERSIONS)


__all__ = ["ALL_MANAGERS_KEY", "ManagerDetector"]
