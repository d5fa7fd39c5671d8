"""
Test utilities for nodepin testing.

Provides fake command runners, file readers and clocks so detection and
resolution can be tested without real processes or files.
"""

from .fakes import FakeClock, FakeFileReader, FakeRunner, ok, failed

__all__ = ["FakeClock", "FakeFileReader", "FakeRunner", "ok", "failed"]
