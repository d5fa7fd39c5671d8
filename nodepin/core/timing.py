"""
Operation timing.

Records how long named operations take so slow probes and reads show up in
debug logs and in ``PerformanceTracker.summary()``.
"""

import logging
import time
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Iterator, List

logger = logging.getLogger(__name__)


@dataclass
class OperationStats:
    """Aggregated durations for one operation, in milliseconds."""

    count: int
    total_ms: float
    min_ms: float
    max_ms: float

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0


class PerformanceTracker:
    """
    Collects durations per operation name.

    Example:
        >>> tracker = PerformanceTracker()
        >>> async with tracker.measure("detector.detect_nvm"):
        ...     await probe()
        >>> tracker.summary()["detector.detect_nvm"].count
        1
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._durations: Dict[str, List[float]] = {}

    def record(self, operation: str, duration_ms: float) -> None:
        """Record one duration for ``operation``."""
        if not self.enabled:
            return
        self._durations.setdefault(operation, []).append(duration_ms)
        logger.debug(f"{operation}: {duration_ms:.2f}ms")

    @asynccontextmanager
    async def measure(self, operation: str) -> AsyncIterator[None]:
        """Time the body of an ``async with`` block, including on failure."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(operation, (time.perf_counter() - start) * 1000)

    @contextmanager
    def measure_sync(self, operation: str) -> Iterator[None]:
        """Time the body of a ``with`` block, including on failure."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(operation, (time.perf_counter() - start) * 1000)

    def summary(self) -> Dict[str, OperationStats]:
        """Aggregate recorded durations per operation."""
        return {
            operation: OperationStats(
                count=len(values),
                total_ms=sum(values),
                min_ms=min(values),
                max_ms=max(values),
            )
            for operation, values in self._durations.items()
        }

    def reset(self) -> None:
        """Forget all recorded durations."""
        self._durations.clear()


__all__ = ["OperationStats", "PerformanceTracker"]
