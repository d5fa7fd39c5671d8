"""
Pytest configuration and shared fixtures for nodepin tests.
"""

import pytest

from nodepin.core.cache import Cache
from nodepin.core.platform import PlatformInfo, clear_platform_cache
from nodepin.core.settings import Settings
from tests.utils.fakes import FakeClock, FakeFileReader, FakeRunner


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that spawn real processes",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_platform_cache():
    """Keep memoised platform detection from leaking between tests."""
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> Cache:
    """Cache driven by the fake clock."""
    return Cache(clock=clock)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def linux_platform() -> PlatformInfo:
    return PlatformInfo(
        type="linux", shell="bash", nvm_dir="/home/dev/.nvm", home_dir="/home/dev"
    )


@pytest.fixture
def windows_platform() -> PlatformInfo:
    return PlatformInfo(
        type="windows",
        shell="cmd",
        nvm_dir="C:\\Users\\dev\\AppData\\Roaming\\nvm",
        home_dir="C:\\Users\\dev",
    )


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def files() -> FakeFileReader:
    return FakeFileReader()
