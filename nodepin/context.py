"""
Shared nodepin context.

``NodePinContext`` owns the one cache and the components built on it. Construct
it once per process (or per test) and pass it to whatever needs detection,
resolution or matching; components never create caches of their own, so
invalidation through the context reaches everything.

Usage:
    from nodepin.context import NodePinContext

    context = NodePinContext.from_project(Path.cwd())
    status = await context.check_project(Path.cwd())
    if status.needs_switch:
        print(f"Switch to Node {status.target_version or status.required_version}")
"""

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

from .config.reader import ConfigReader, ConfigSource, ProjectVersionConfig
from .core.cache import Cache, CacheNamespace, CacheStats, NamespaceLike
from .core.filesystem import LocalFileReader
from .core.interfaces import CommandRunner, FileReader
from .core.platform import PlatformInfo, detect_platform
from .core.process import SubprocessRunner
from .core.settings import Settings, load_settings
from .core.timing import PerformanceTracker
from .managers.base import ManagerDetectionResult, ManagerType
from .managers.detector import ManagerDetector
from .matching.version import MatchResult, VersionMatcher

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class ProjectVersionStatus:
    """
    Result of checking a project against the active Node version.

    Attributes:
        has_config: Whether the project declares a Node version
        required_version: Normalized required spec
        source: Where the requirement came from
        current_version: Active Node version, if one could be determined
        needs_switch: Whether the active version fails the requirement;
            None when the active version is unknown
        target_version: Version to switch to when one is known
    """

    has_config: bool
    required_version: Optional[str] = None
    source: Optional[ConfigSource] = None
    current_version: Optional[str] = None
    needs_switch: Optional[bool] = None
    target_version: Optional[str] = None


class NodePinContext:
    """
    Wire the cache, detector, config reader and matcher together.

    Args:
        settings: Settings; defaults when None
        runner: Command runner; real subprocesses when None
        file_reader: File access; the local disk when None
        platform_info: Platform information. If None, auto-detect.
        clock: Monotonic time source for the cache
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        runner: Optional[CommandRunner] = None,
        file_reader: Optional[FileReader] = None,
        platform_info: Optional[PlatformInfo] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.settings = settings or Settings()

        platform_info = platform_info or detect_platform()
        if self.settings.nvm_dir:
            platform_info = dataclasses.replace(
                platform_info, nvm_dir=self.settings.nvm_dir
            )
        self.platform = platform_info

        self.cache = Cache(default_ttl=self.settings.ttl.default, clock=clock)
        self.tracker = PerformanceTracker()
        self.runner = runner or SubprocessRunner(
            default_timeout=self.settings.command_timeout
        )
        self.detector = ManagerDetector(
            self.cache,
            self.runner,
            platform_info=self.platform,
            settings=self.settings,
            tracker=self.tracker,
        )
        self.config_reader = ConfigReader(
            self.cache,
            file_reader=file_reader or LocalFileReader(),
            settings=self.settings,
            tracker=self.tracker,
        )
        self.matcher = VersionMatcher(self.cache, self.settings)

    @classmethod
    def from_project(
        cls, project_root: Path, config_path: Optional[Path] = None
    ) -> "NodePinContext":
        """
        Create a context with settings loaded for a project.

        Args:
            project_root: Directory searched for nodepin.yaml
            config_path: Explicit settings file

        Returns:
            NodePinContext
        """
        return cls(settings=load_settings(config_path, project_root))

    # ------------------------------------------------------------------
    # Managers
    # ------------------------------------------------------------------

    async def detect_all_managers(self) -> List[ManagerDetectionResult]:
        return await self.detector.detect_all_managers()

    async def get_preferred_manager(self) -> Optional[ManagerDetectionResult]:
        return await self.detector.get_preferred_manager()

    async def is_manager_available(self, manager_type: ManagerType) -> bool:
        return await self.detector.is_manager_available(manager_type)

    async def get_current_version(self) -> Optional[str]:
        return await self.detector.get_current_version()

    # ------------------------------------------------------------------
    # Project configuration
    # ------------------------------------------------------------------

    async def get_project_version_config(
        self, project_root: PathLike
    ) -> Optional[ProjectVersionConfig]:
        return await self.config_reader.get_project_version_config(project_root)

    def has_config_files(self, project_root: PathLike) -> bool:
        return self.config_reader.has_config_files(project_root)

    def match_version(self, current: str, required: str) -> MatchResult:
        return self.matcher.match_version(current, required)

    # ------------------------------------------------------------------
    # Project check
    # ------------------------------------------------------------------

    async def check_project(self, project_root: PathLike) -> ProjectVersionStatus:
        """
        Compare a project's required Node version with the active one.

        Resolution and the current-version lookup run concurrently. The
        result is cached per project root.

        Args:
            project_root: Project root directory

        Returns:
            ProjectVersionStatus
        """
        root = Path(project_root)

        if not self.settings.auto_detect_version:
            logger.debug("Project version detection disabled")
            return ProjectVersionStatus(has_config=False)

        if not await asyncio.to_thread(self.has_config_files, root):
            logger.debug(f"No Node version files in {root}")
            return ProjectVersionStatus(has_config=False)

        async def produce() -> ProjectVersionStatus:
            async with self.tracker.measure("context.check_project"):
                config, current = await asyncio.gather(
                    self.get_project_version_config(root),
                    self.get_current_version(),
                )

            if config is None:
                return ProjectVersionStatus(has_config=False)

            if not current:
                logger.warning(
                    f"Project {root} requires Node {config.version} "
                    f"but the current version is unknown"
                )
                return ProjectVersionStatus(
                    has_config=True,
                    required_version=config.version,
                    source=config.source,
                )

            match = self.match_version(current, config.version)
            logger.info(
                f"Project {root}: current={current}, required={config.version} "
                f"({config.source.value}), needs_switch={not match.matches}"
            )
            return ProjectVersionStatus(
                has_config=True,
                required_version=config.version,
                source=config.source,
                current_version=current,
                needs_switch=not match.matches,
                target_version=match.target_version,
            )

        return await self.cache.cached(
            CacheNamespace.TERMINAL_PROCESSING,
            f"workspace_version:{root}",
            produce,
            ttl=self.settings.ttl.project_status,
        )

    # ------------------------------------------------------------------
    # Cache control
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Drop every cached result."""
        self.cache.clear()

    def clear_namespace(self, namespace: NamespaceLike) -> None:
        """Drop every cached result in one namespace."""
        self.cache.delete(namespace)

    def stats(self) -> CacheStats:
        return self.cache.stats()


__all__ = ["NodePinContext", "ProjectVersionStatus"]
