"""
Namespaced in-memory TTL cache.

Every expensive operation in nodepin (process execution, file reads, version
matching) goes through this cache. Entries live in one of a fixed set of
namespaces, each entry carries its own TTL, and expiry is lazy: an expired
entry is removed the first time a read observes it.

Concurrent read-through misses for the same key are coalesced: the producer
runs once as a task and every caller awaits that task.

Usage:
    from nodepin.core.cache import Cache, CacheNamespace

    cache = Cache()

    async def probe():
        return await runner.run_command("nvm", ["--version"])

    result = await cache.cached(
        CacheNamespace.MANAGER_DETECTION, "nvm_unix", probe, ttl=300
    )
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar, Union

from .exceptions import UnknownNamespaceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL = 5 * 60.0

_MISSING = object()


class CacheNamespace(str, Enum):
    """Known cache namespaces."""

    ENVIRONMENT_DETECTION = "env_detection"
    MANAGER_DETECTION = "manager_detection"
    CONFIG_FILES = "config_files"
    NODE_VERSIONS = "node_versions"
    VERSION_MATCH = "version_match"
    TERMINAL_PROCESSING = "terminal_processing"


NamespaceLike = Union[CacheNamespace, str]


def namespace_name(namespace: NamespaceLike) -> str:
    """
    Validate a namespace and return its canonical string name.

    Args:
        namespace: CacheNamespace member or its string value

    Returns:
        Namespace name

    Raises:
        UnknownNamespaceError: If the name is not a known namespace
    """
    if isinstance(namespace, CacheNamespace):
        return namespace.value
    try:
        return CacheNamespace(namespace).value
    except ValueError:
        raise UnknownNamespaceError(str(namespace)) from None


@dataclass
class CacheEntry:
    """
    A cached value with its creation time and time-to-live.

    Attributes:
        value: Cached value (may be None for negative caching)
        created_at: Clock reading when the entry was stored
        ttl: Time to live in seconds
    """

    value: Any
    created_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        """Check whether the entry has outlived its TTL at time ``now``."""
        return now - self.created_at > self.ttl


@dataclass
class CacheStats:
    """Snapshot of cache contents and hit/miss counters."""

    total_entries: int = 0
    expired_entries: int = 0
    active_entries: int = 0
    namespaces: int = 0
    namespace_names: List[str] = field(default_factory=list)
    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups that were hits."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0


class Cache:
    """
    In-memory key-value store partitioned into namespaces.

    Args:
        default_ttl: TTL in seconds used when ``set``/``cached`` get none
        clock: Monotonic time source; defaults to ``time.monotonic``

    Example:
        >>> cache = Cache()
        >>> cache.set(CacheNamespace.CONFIG_FILES, "root", "18.17.0", ttl=60)
        >>> cache.get(CacheNamespace.CONFIG_FILES, "root")
        '18.17.0'
    """

    def __init__(
        self,
        default_ttl: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.default_ttl = DEFAULT_TTL if default_ttl is None else default_ttl
        self._clock = clock or time.monotonic
        self._store: Dict[str, Dict[str, CacheEntry]] = {}
        self._inflight: Dict[Tuple[str, str], "asyncio.Task[Any]"] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def _lookup(self, name: str, key: str) -> Any:
        """Return the live value for ``key`` or ``_MISSING``."""
        with self._lock:
            entries = self._store.get(name)
            entry = entries.get(key) if entries is not None else None
            if entry is None:
                self._misses += 1
                logger.debug(f"Cache miss {name}:{key}")
                return _MISSING

            if entry.is_expired(self._clock()):
                del entries[key]
                self._misses += 1
                logger.debug(f"Cache expired {name}:{key}")
                return _MISSING

            self._hits += 1
            logger.debug(f"Cache hit {name}:{key}")
            return entry.value

    def get(self, namespace: NamespaceLike, key: str, default: Any = None) -> Any:
        """
        Get a value, expiring it lazily.

        Args:
            namespace: Cache namespace
            key: Entry key
            default: Returned when the entry is absent or expired

        Returns:
            Cached value or ``default``
        """
        value = self._lookup(namespace_name(namespace), key)
        return default if value is _MISSING else value

    def has(self, namespace: NamespaceLike, key: str) -> bool:
        """Check whether a live entry exists for ``key``."""
        return self._lookup(namespace_name(namespace), key) is not _MISSING

    def set(
        self,
        namespace: NamespaceLike,
        key: str,
        value: Any,
        ttl: Optional[float] = None,
    ) -> None:
        """
        Store ``value`` under ``key``, overwriting any existing entry.

        Args:
            namespace: Cache namespace
            key: Entry key
            value: Value to store
            ttl: Time to live in seconds (default TTL if None)
        """
        name = namespace_name(namespace)
        entry = CacheEntry(
            value=value,
            created_at=self._clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )
        with self._lock:
            self._store.setdefault(name, {})[key] = entry
        logger.debug(f"Cache set {name}:{key} (ttl={entry.ttl}s)")

    async def cached(
        self,
        namespace: NamespaceLike,
        key: str,
        producer: Callable[[], Awaitable[T]],
        ttl: Optional[float] = None,
    ) -> T:
        """
        Read-through lookup for asynchronous producers.

        On a hit the cached value is returned. On a miss ``producer`` runs once
        and its result is stored; callers that miss on the same key while it
        runs await the same computation. A producer exception reaches every
        waiting caller and nothing is cached.

        Args:
            namespace: Cache namespace
            key: Entry key
            producer: Zero-argument coroutine function computing the value
            ttl: Time to live in seconds (default TTL if None)

        Returns:
            Cached or freshly computed value
        """
        name = namespace_name(namespace)
        value = self._lookup(name, key)
        if value is not _MISSING:
            return value

        flight_key = (name, key)
        task = self._inflight.get(flight_key)
        if task is None:
            task = asyncio.ensure_future(self._produce(name, key, producer, ttl))
            self._inflight[flight_key] = task
            task.add_done_callback(
                lambda done: self._finish_flight(flight_key, done)
            )
        else:
            logger.debug(f"Joining in-flight computation for {name}:{key}")

        # Abandoning the await must not cancel the computation other
        # callers are waiting on.
        return await asyncio.shield(task)

    async def _produce(
        self,
        name: str,
        key: str,
        producer: Callable[[], Awaitable[T]],
        ttl: Optional[float],
    ) -> T:
        value = await producer()
        # An eviction while the producer ran retires this flight; its result
        # then goes back to its own waiters only.
        if self._inflight.get((name, key)) is asyncio.current_task():
            self.set(name, key, value, ttl)
        else:
            logger.debug(f"Discarding result of evicted computation {name}:{key}")
        return value

    def _finish_flight(self, flight_key: Tuple[str, str], task: "asyncio.Task[Any]") -> None:
        if self._inflight.get(flight_key) is task:
            del self._inflight[flight_key]
        if not task.cancelled():
            # Marks the exception as retrieved when every waiter went away.
            task.exception()

    def cached_sync(
        self,
        namespace: NamespaceLike,
        key: str,
        producer: Callable[[], T],
        ttl: Optional[float] = None,
    ) -> T:
        """
        Read-through lookup for synchronous producers.

        Args:
            namespace: Cache namespace
            key: Entry key
            producer: Zero-argument callable computing the value
            ttl: Time to live in seconds (default TTL if None)

        Returns:
            Cached or freshly computed value
        """
        name = namespace_name(namespace)
        value = self._lookup(name, key)
        if value is not _MISSING:
            return value

        value = producer()
        self.set(name, key, value, ttl)
        return value

    def _drop_flights(self, name: str, key: Optional[str]) -> None:
        for flight_key in list(self._inflight):
            if flight_key[0] == name and (key is None or flight_key[1] == key):
                del self._inflight[flight_key]

    def delete(self, namespace: NamespaceLike, key: Optional[str] = None) -> None:
        """
        Delete one entry, or the whole namespace when ``key`` is None.

        Computations running for the deleted keys are detached: callers
        arriving afterwards start a fresh one, and the old result is not stored.

        Args:
            namespace: Cache namespace
            key: Entry key, or None to drop every key in the namespace
        """
        name = namespace_name(namespace)
        with self._lock:
            self._drop_flights(name, key)
            if key is None:
                self._store.pop(name, None)
                logger.debug(f"Cache cleared namespace {name}")
                return

            entries = self._store.get(name)
            if entries is not None and entries.pop(key, None) is not None:
                logger.debug(f"Cache deleted {name}:{key}")

    def clear(self) -> None:
        """Remove every entry in every namespace."""
        with self._lock:
            self._store.clear()
            self._inflight.clear()
        logger.debug("Cache cleared")

    def cleanup(self) -> int:
        """
        Sweep expired entries and drop namespaces left empty.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        removed = 0
        with self._lock:
            for name in list(self._store):
                entries = self._store[name]
                expired = [k for k, e in entries.items() if e.is_expired(now)]
                for k in expired:
                    del entries[k]
                removed += len(expired)
                if not entries:
                    del self._store[name]

        if removed:
            logger.debug(f"Cache cleanup removed {removed} expired entries")
        return removed

    def stats(self) -> CacheStats:
        """
        Report cache contents without expiring anything.

        Returns:
            CacheStats snapshot
        """
        now = self._clock()
        with self._lock:
            stats = CacheStats(hits=self._hits, misses=self._misses)
            for name, entries in self._store.items():
                stats.namespace_names.append(name)
                for entry in entries.values():
                    stats.total_entries += 1
                    if entry.is_expired(now):
                        stats.expired_entries += 1

        stats.namespaces = len(stats.namespace_names)
        stats.active_entries = stats.total_entries - stats.expired_entries
        return stats


__all__ = [
    "Cache",
    "CacheEntry",
    "CacheNamespace",
    "CacheStats",
    "DEFAULT_TTL",
    "namespace_name",
]
