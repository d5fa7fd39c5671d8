"""
Project Node version configuration.

Reads the files a project can use to pin its Node version and resolves them
into one required version spec. Sources are checked in a fixed priority order
and resolution stops at the first one that yields a version:

1. ``.nvmrc``
2. ``.node-version``
3. ``.tool-versions`` (the ``nodejs`` entry)
4. ``package.json`` ``volta.node``
5. ``package.json`` ``engines.node``

Each file read is cached on its own, with a shorter TTL for package.json
(edited often) than for pin files. The resolved result is cached too and is
not invalidated when a file changes; a file watcher can call ``invalidate()``.

Usage:
    from nodepin.config.reader import ConfigReader

    reader = ConfigReader(cache)
    config = await reader.get_project_version_config(Path("/path/to/project"))
    if config:
        print(f"Project wants Node {config.version} (from {config.source.value})")
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Tuple, Union

from ..core.cache import Cache, CacheNamespace
from ..core.filesystem import LocalFileReader
from ..core.interfaces import FileReader
from ..core.settings import Settings
from ..core.timing import PerformanceTracker

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

NVMRC = ".nvmrc"
NODE_VERSION = ".node-version"
TOOL_VERSIONS = ".tool-versions"
PACKAGE_JSON = "package.json"

CONFIG_FILES = (NVMRC, NODE_VERSION, TOOL_VERSIONS, PACKAGE_JSON)

TOOL_VERSIONS_TOKEN = "nodejs"

RANGE_MARKERS = (">=", "^", "~")

_VERSION_TRIPLE = re.compile(r"([0-9]+\.[0-9]+\.[0-9]+)")


class ConfigSource(str, Enum):
    """Where a project version requirement came from."""

    NVMRC = ".nvmrc"
    NODE_VERSION = ".node-version"
    TOOL_VERSIONS = ".tool-versions"
    PACKAGE_JSON_VOLTA = "package.json (volta.node)"
    PACKAGE_JSON_ENGINES = "package.json (engines.node)"


@dataclass(frozen=True)
class ProjectVersionConfig:
    """
    The project's required Node version.

    Attributes:
        version: Normalized version spec (e.g. '18.17.0', '18', '>18')
        source: Configuration source it was read from
    """

    version: str
    source: ConfigSource


@dataclass(frozen=True)
class PackageJsonVersions:
    """Node version fields found in package.json."""

    volta: Optional[str] = None
    engines: Optional[str] = None


def normalize_version(version: str) -> str:
    """
    Normalize a version spec read from a project file.

    Strips a leading 'v'. Specs with a range marker (``>=``, ``^``, ``~``) that
    contain a full X.Y.Z version collapse to that version, so '>=18.0.0'
    becomes '18.0.0' while '>18' and '<20.0.0' are kept verbatim.

    Args:
        version: Raw spec

    Returns:
        Normalized spec
    """
    normalized = version.strip()
    if normalized.startswith("v"):
        normalized = normalized[1:]

    if any(marker in normalized for marker in RANGE_MARKERS):
        match = _VERSION_TRIPLE.search(normalized)
        if match:
            normalized = match.group(1)

    return normalized


class ConfigReader:
    """
    Read and resolve project Node version configuration.

    Args:
        cache: Shared cache
        file_reader: File access; the local disk by default
        settings: Settings (TTLs)
        tracker: Performance tracker for read timings
    """

    def __init__(
        self,
        cache: Cache,
        file_reader: Optional[FileReader] = None,
        settings: Optional[Settings] = None,
        tracker: Optional[PerformanceTracker] = None,
    ):
        self.cache = cache
        self.files = file_reader or LocalFileReader()
        self.settings = settings or Settings()
        self.tracker = tracker or PerformanceTracker()

    # ------------------------------------------------------------------
    # Individual sources
    # ------------------------------------------------------------------

    async def read_nvmrc(self, workspace_root: PathLike) -> Optional[str]:
        """Read the version pinned in ``.nvmrc``."""
        return await self._read_pin_file(Path(workspace_root) / NVMRC)

    async def read_node_version(self, workspace_root: PathLike) -> Optional[str]:
        """Read the version pinned in ``.node-version``."""
        return await self._read_pin_file(Path(workspace_root) / NODE_VERSION)

    async def _read_pin_file(self, path: Path) -> Optional[str]:
        async def produce() -> Optional[str]:
            async with self.tracker.measure(f"config.read_{path.name}"):
                content = await self._read_text(path)
            if content is None:
                return None

            content = content.strip()
            if not content:
                logger.debug(f"{path} is empty")
                return None

            logger.info(f"Found Node version in {path.name}: {content}")
            return content

        return await self.cache.cached(
            CacheNamespace.CONFIG_FILES,
            f"file:{path}",
            produce,
            ttl=self.settings.ttl.pin_file,
        )

    async def read_tool_versions(self, workspace_root: PathLike) -> Optional[str]:
        """
        Read the ``nodejs`` entry of ``.tool-versions`` (asdf).

        Returns:
            Everything after the ``nodejs`` token on the first such line
        """
        path = Path(workspace_root) / TOOL_VERSIONS

        async def produce() -> Optional[str]:
            async with self.tracker.measure("config.read_tool_versions"):
                content = await self._read_text(path)
            if content is None:
                return None

            for line in content.splitlines():
                parts = line.strip().split(None, 1)
                if len(parts) == 2 and parts[0] == TOOL_VERSIONS_TOKEN:
                    version = parts[1].strip()
                    logger.info(f"Found Node version in {TOOL_VERSIONS}: {version}")
                    return version

            logger.debug(f"No {TOOL_VERSIONS_TOKEN} entry in {path}")
            return None

        return await self.cache.cached(
            CacheNamespace.CONFIG_FILES,
            f"tool_versions:{path}",
            produce,
            ttl=self.settings.ttl.pin_file,
        )

    async def read_package_json(
        self, workspace_root: PathLike
    ) -> Optional[PackageJsonVersions]:
        """
        Read ``volta.node`` and ``engines.node`` from package.json.

        Returns:
            The fields found, or None if the file is missing, malformed, or
            has neither field
        """
        path = Path(workspace_root) / PACKAGE_JSON

        async def produce() -> Optional[PackageJsonVersions]:
            async with self.tracker.measure("config.read_package_json"):
                content = await self._read_text(path)
            if content is None:
                return None

            try:
                data = json.loads(content)
            except ValueError as e:
                logger.error(f"Failed to parse {path}: {e}")
                return None

            if not isinstance(data, dict):
                logger.error(f"Failed to parse {path}: top level is not an object")
                return None

            versions = PackageJsonVersions(
                volta=_node_field(data, "volta"),
                engines=_node_field(data, "engines"),
            )
            if versions.volta is None and versions.engines is None:
                return None
            return versions

        return await self.cache.cached(
            CacheNamespace.CONFIG_FILES,
            f"package_json:{path}",
            produce,
            ttl=self.settings.ttl.manifest,
        )

    async def _read_text(self, path: Path) -> Optional[str]:
        try:
            return await self.files.read_file(path)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}")
            return None

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def get_project_version_config(
        self, workspace_root: PathLike
    ) -> Optional[ProjectVersionConfig]:
        """
        Resolve the project's required Node version.

        Args:
            workspace_root: Project root directory

        Returns:
            Version and source of the highest-priority source that has one,
            or None
        """
        root = Path(workspace_root)

        async def produce() -> Optional[ProjectVersionConfig]:
            async with self.tracker.measure("config.get_project_version_config"):
                return await self._resolve(root)

        return await self.cache.cached(
            CacheNamespace.CONFIG_FILES,
            _project_key(root),
            produce,
            ttl=self.settings.ttl.project_version,
        )

    async def _resolve(self, root: Path) -> Optional[ProjectVersionConfig]:
        pin_files: List[
            Tuple[Callable[[Path], Awaitable[Optional[str]]], ConfigSource]
        ] = [
            (self.read_nvmrc, ConfigSource.NVMRC),
            (self.read_node_version, ConfigSource.NODE_VERSION),
            (self.read_tool_versions, ConfigSource.TOOL_VERSIONS),
        ]
        for read, source in pin_files:
            version = await read(root)
            if version:
                return ProjectVersionConfig(normalize_version(version), source)

        package = await self.read_package_json(root)
        if package is not None:
            if package.volta:
                return ProjectVersionConfig(
                    normalize_version(package.volta), ConfigSource.PACKAGE_JSON_VOLTA
                )
            if package.engines:
                return ProjectVersionConfig(
                    normalize_version(package.engines),
                    ConfigSource.PACKAGE_JSON_ENGINES,
                )

        logger.debug(f"No Node version configured in {root}")
        return None

    def has_config_files(self, workspace_root: PathLike) -> bool:
        """
        Check whether any recognized configuration file exists.

        Only existence is checked, not content.
        """
        root = Path(workspace_root)
        return any(self.files.file_exists(root / name) for name in CONFIG_FILES)

    def invalidate(self, workspace_root: PathLike) -> None:
        """Drop every cached read and the resolved version for a project."""
        root = Path(workspace_root)
        self.cache.delete(CacheNamespace.CONFIG_FILES, _project_key(root))
        self.cache.delete(CacheNamespace.CONFIG_FILES, f"file:{root / NVMRC}")
        self.cache.delete(CacheNamespace.CONFIG_FILES, f"file:{root / NODE_VERSION}")
        self.cache.delete(
            CacheNamespace.CONFIG_FILES, f"tool_versions:{root / TOOL_VERSIONS}"
        )
        self.cache.delete(
            CacheNamespace.CONFIG_FILES, f"package_json:{root / PACKAGE_JSON}"
        )


def _node_field(data: dict, section: str) -> Optional[str]:
    value = data.get(section)
    if not isinstance(value, dict):
        return None
    node = value.get("node")
    if isinstance(node, str) and node.strip():
        return node.strip()
    return None


def _project_key(root: Path) -> str:
    return f"project_version:{root}"


__all__ = [
    "CONFIG_FILES",
    "ConfigReader",
    "ConfigSource",
    "PackageJsonVersions",
    "ProjectVersionConfig",
    "normalize_version",
]
