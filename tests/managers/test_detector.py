"""
Tests for version manager detection.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from nodepin.core.cache import CacheNamespace
from nodepin.core.exceptions import ManagerNotFoundError
from nodepin.core.platform import PlatformInfo
from nodepin.core.settings import Settings
from nodepin.managers.base import ManagerDetectionResult, ManagerType
from nodepin.managers.detector import ALL_MANAGERS_KEY, ManagerDetector
from tests.utils.fakes import FakeRunner, failed, ok


@pytest.fixture
def detector(cache, runner, linux_platform, settings):
    return ManagerDetector(cache, runner, platform_info=linux_platform, settings=settings)


def _available(manager_type, version="1.0.0"):
    return ManagerDetectionResult(type=manager_type, available=True, version=version)


class TestDetectAllManagers:
    """Test short-circuiting detection."""

    @pytest.mark.asyncio
    async def test_nvm_available_skips_n(self, detector, runner):
        runner.script("nvm", ["--version"], ok("0.39.7"))

        managers = await detector.detect_all_managers()

        assert len(managers) == 1
        assert managers[0].type == ManagerType.NVM
        assert managers[0].available
        assert managers[0].version == "0.39.7"
        assert managers[0].path == "/home/dev/.nvm"
        assert runner.count("n") == 0
        assert runner.count("which") == 0

    @pytest.mark.asyncio
    async def test_n_probed_when_nvm_missing(self, detector, runner):
        runner.script("n", ["--version"], ok("9.2.0"))
        runner.script("which", ["n"], ok("/usr/local/bin/n\n"))

        managers = await detector.detect_all_managers()

        assert [m.type for m in managers] == [ManagerType.NVM, ManagerType.N]
        assert not managers[0].available
        assert managers[0].error == "NVM not found or not properly configured"
        assert managers[1].available
        assert managers[1].version == "9.2.0"
        assert managers[1].path == "/usr/local/bin/n"

    @pytest.mark.asyncio
    async def test_nothing_installed(self, detector, runner):
        managers = await detector.detect_all_managers()

        assert [m.available for m in managers] == [False, False]
        assert managers[1].error == "N version manager not found"

    @pytest.mark.asyncio
    async def test_negative_results_are_cached(self, detector, runner):
        await detector.detect_all_managers()
        await detector.detect_all_managers()
        await detector.detect_nvm()
        await detector.detect_n()

        assert runner.count("nvm") == 1
        assert runner.count("n") == 1
        assert len(runner.shell_calls) == 1

    @pytest.mark.asyncio
    async def test_detection_reruns_after_ttl(self, detector, runner, clock):
        runner.script("nvm", ["--version"], ok("0.39.7"))
        await detector.detect_all_managers()

        clock.advance(301)
        await detector.detect_all_managers()

        assert runner.count("nvm") == 2

    @pytest.mark.asyncio
    async def test_combined_result_cached_as_unit(self, detector, runner, cache):
        runner.script("nvm", ["--version"], ok("0.39.7"))

        await detector.detect_all_managers()

        cached = cache.get(CacheNamespace.ENVIRONMENT_DETECTION, ALL_MANAGERS_KEY)
        assert [m.type for m in cached] == [ManagerType.NVM]
        assert cache.has(CacheNamespace.MANAGER_DETECTION, "nvm_unix")
        assert not cache.has(CacheNamespace.MANAGER_DETECTION, "n_unix")

    @pytest.mark.asyncio
    async def test_concurrent_detection_probes_once(
        self, cache, linux_platform, settings
    ):
        runner = FakeRunner(delay=0.01)
        runner.script("nvm", ["--version"], ok("0.39.7"))
        detector = ManagerDetector(
            cache, runner, platform_info=linux_platform, settings=settings
        )

        results = await asyncio.gather(
            *(detector.detect_all_managers() for _ in range(4))
        )

        assert all(r[0].available for r in results)
        assert runner.count("nvm") == 1

    @pytest.mark.asyncio
    async def test_probe_exception_becomes_negative_result(self, detector, runner):
        runner.script("nvm", ["--version"], RuntimeError("runner broke"))

        result = await detector.detect_nvm()

        assert not result.available
        assert "runner broke" in result.error

    @pytest.mark.asyncio
    async def test_manager_commands_use_command_timeout(self, cache, runner, linux_platform):
        detector = ManagerDetector(
            cache, runner, platform_info=linux_platform, settings=Settings(command_timeout=7)
        )

        await detector.detect_n()

        assert runner.timeouts == [7]


class TestPreferredManager:
    """Test manager selection."""

    @pytest.mark.asyncio
    async def test_none_available(self, detector):
        assert await detector.get_preferred_manager() is None

    @pytest.mark.asyncio
    async def test_single_available(self, detector, runner):
        runner.script("n", ["--version"], ok("9.2.0"))

        preferred = await detector.get_preferred_manager()

        assert preferred.type == ManagerType.N

    @pytest.mark.asyncio
    async def test_nvm_wins_when_several(self, detector):
        both = [_available(ManagerType.N), _available(ManagerType.NVM)]

        with patch.object(detector, "detect_all_managers", AsyncMock(return_value=both)):
            preferred = await detector.get_preferred_manager()

        assert preferred.type == ManagerType.NVM

    @pytest.mark.asyncio
    async def test_configured_preference_wins(self, cache, runner, linux_platform):
        detector = ManagerDetector(
            cache,
            runner,
            platform_info=linux_platform,
            settings=Settings(preferred_manager="n"),
        )
        both = [_available(ManagerType.NVM), _available(ManagerType.N)]

        with patch.object(detector, "detect_all_managers", AsyncMock(return_value=both)):
            preferred = await detector.get_preferred_manager()

        assert preferred.type == ManagerType.N

    @pytest.mark.asyncio
    async def test_is_manager_available(self, detector, runner):
        runner.script("nvm", ["--version"], ok("0.39.7"))

        assert await detector.is_manager_available(ManagerType.NVM)
        assert not await detector.is_manager_available(ManagerType.N)
        assert not await detector.is_manager_available(ManagerType.UNKNOWN)
        assert await detector.is_manager_available("nvm")

    @pytest.mark.asyncio
    async def test_unknown_manager_name_not_available(self, detector, runner):
        runner.script("nvm", ["--version"], ok("0.39.7"))

        assert await detector.is_manager_available("bogus") is False
        assert runner.calls == []


class TestCurrentVersion:
    """Test active Node version lookup."""

    @pytest.mark.asyncio
    async def test_no_manager_means_no_version(self, detector, runner):
        runner.script("node", ["--version"], ok("v18.17.0"))

        assert await detector.get_current_version() is None
        assert runner.count("node") == 0

    @pytest.mark.asyncio
    async def test_version_found_and_cached(self, detector, runner, cache, clock):
        runner.script("nvm", ["--version"], ok("0.39.7"))
        runner.script("node", ["--version"], ok("v18.17.0"))

        assert await detector.get_current_version() == "18.17.0"
        assert await detector.get_current_version() == "18.17.0"
        assert runner.count("node") == 1
        assert cache.has(CacheNamespace.NODE_VERSIONS, "current_version_nvm_unix")

        clock.advance(6)
        await detector.get_current_version()
        assert runner.count("node") == 2

    @pytest.mark.asyncio
    async def test_missing_version_cached_briefly(self, detector, runner, clock):
        runner.script("nvm", ["--version"], ok("0.39.7"))
        runner.script("node", ["--version"], failed())

        assert await detector.get_current_version() is None
        clock.advance(1)
        assert await detector.get_current_version() is None
        assert runner.count("node") == 1

        clock.advance(2)
        await detector.get_current_version()
        assert runner.count("node") == 2

    @pytest.mark.asyncio
    async def test_node_command_timeout(self, detector, runner):
        runner.script("nvm", ["--version"], ok("0.39.7"))
        runner.script("node", ["--version"], ok("v20.1.0"))

        await detector.get_current_version()

        node_index = runner.calls.index(("node", ("--version",)))
        assert runner.timeouts[node_index] == 5

    @pytest.mark.asyncio
    async def test_version_lookup_failure_returns_none(self, detector, runner):
        runner.script("nvm", ["--version"], ok("0.39.7"))
        runner.script("node", ["--version"], OSError("boom"))

        assert await detector.get_current_version() is None


class TestCacheControl:
    """Test detector cache invalidation."""

    @pytest.mark.asyncio
    async def test_clear_cache_forces_reprobe(self, detector, runner):
        runner.script("nvm", ["--version"], ok("0.39.7"))
        await detector.detect_all_managers()

        detector.clear_cache()
        await detector.detect_all_managers()

        assert runner.count("nvm") == 2

    def test_get_manager(self, detector):
        assert detector.get_manager(ManagerType.NVM).get_name() == "nvm"

        with pytest.raises(ManagerNotFoundError):
            detector.get_manager(ManagerType.UNKNOWN)


class TestWindowsDetection:
    """Test detection keys on Windows."""

    @pytest.mark.asyncio
    async def test_windows_cache_key(self, cache, runner, windows_platform: PlatformInfo):
        runner.script("nvm", ["version"], ok("1.1.11"))
        detector = ManagerDetector(cache, runner, platform_info=windows_platform)

        managers = await detector.detect_all_managers()

        assert managers[0].available
        assert managers[0].version == "1.1.11"
        assert cache.has(CacheNamespace.MANAGER_DETECTION, "nvm_windows")
        assert runner.shell_calls == []
