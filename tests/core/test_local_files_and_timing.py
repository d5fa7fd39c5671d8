"""
Tests for local file access and operation timing.
"""

import pytest

from nodepin.core.filesystem import LocalFileReader
from nodepin.core.timing import PerformanceTracker


class TestLocalFileReader:
    """Test reading project files from disk."""

    @pytest.mark.asyncio
    async def test_read_existing_file(self, tmp_path):
        (tmp_path / ".nvmrc").write_text("18.17.0\n")

        content = await LocalFileReader().read_file(tmp_path / ".nvmrc")

        assert content == "18.17.0\n"

    @pytest.mark.asyncio
    async def test_missing_file_returns_none(self, tmp_path):
        assert await LocalFileReader().read_file(tmp_path / ".nvmrc") is None

    @pytest.mark.asyncio
    async def test_bom_is_dropped(self, tmp_path):
        (tmp_path / ".nvmrc").write_bytes(b"\xef\xbb\xbf20\n")

        assert await LocalFileReader().read_file(tmp_path / ".nvmrc") == "20\n"

    @pytest.mark.asyncio
    async def test_directory_raises(self, tmp_path):
        (tmp_path / ".nvmrc").mkdir()

        with pytest.raises(OSError):
            await LocalFileReader().read_file(tmp_path / ".nvmrc")

    def test_file_exists(self, tmp_path):
        (tmp_path / "package.json").write_text("{}")
        reader = LocalFileReader()

        assert reader.file_exists(tmp_path / "package.json")
        assert not reader.file_exists(tmp_path / ".nvmrc")


class TestPerformanceTracker:
    """Test timing aggregation."""

    def test_record_and_summary(self):
        tracker = PerformanceTracker()
        tracker.record("probe", 10.0)
        tracker.record("probe", 30.0)

        stats = tracker.summary()["probe"]

        assert stats.count == 2
        assert stats.min_ms == 10.0
        assert stats.max_ms == 30.0
        assert stats.avg_ms == 20.0

    @pytest.mark.asyncio
    async def test_measure_records_on_failure(self):
        tracker = PerformanceTracker()

        with pytest.raises(RuntimeError):
            async with tracker.measure("read"):
                raise RuntimeError("boom")

        assert tracker.summary()["read"].count == 1

    def test_measure_sync(self):
        tracker = PerformanceTracker()

        with tracker.measure_sync("match"):
            pass

        assert tracker.summary()["match"].count == 1
        assert tracker.summary()["match"].min_ms >= 0

    def test_disabled_tracker_records_nothing(self):
        tracker = PerformanceTracker(enabled=False)
        tracker.record("probe", 1.0)
        assert tracker.summary() == {}

    def test_reset(self):
        tracker = PerformanceTracker()
        tracker.record("probe", 1.0)
        tracker.reset()
        assert tracker.summary() == {}
