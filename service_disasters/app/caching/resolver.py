"""
Cache-aside resolver.

``resolve(key, producer)`` returns the cached value for ``key`` while it
is fresh, otherwise awaits ``producer()``, writes the result back with a
new expiry and returns it.

There is no per-key locking: concurrent misses on the same key each run
the producer and each write, and the last write wins.
"""

import time
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional, TypeVar, TYPE_CHECKING

from shared.logging import get_logger
from .entry import CacheEntry, utcnow
from .keys import namespace_of
from .store import CacheStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 3600


class CacheResolver:
    """Cache-aside front for expensive external lookups."""

    def __init__(
        self,
        store: CacheStore,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], datetime] = utcnow,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.store = store
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock
        self.metrics = metrics
        self.logger = get_logger("disasters.cache.resolver")

    async def resolve(self, key: str, producer: Callable[[], Awaitable[T]]) -> T:
        """Return a fresh cached value for ``key`` or compute and store one."""
        if not key:
            raise ValueError("cache key must be a non-empty string")

        namespace = namespace_of(key) or "other"
        now = self.clock()

        entry = await self._read(key, namespace)
        if entry is not None and entry.is_fresh(now):
            self.logger.debug("Cache hit", key=key, expires_at=entry.expires_at.isoformat())
            self._count(namespace, "hit")
            return entry.value

        self.logger.debug("Cache miss", key=key, expired=entry is not None)
        self._count(namespace, "miss")

        value = await self._produce(producer, namespace)

        fresh = CacheEntry(key=key, value=value, expires_at=self.clock() + self.ttl)
        await self._write(fresh, namespace)
        return value

    async def _read(self, key: str, namespace: str) -> Optional[CacheEntry]:
        # Fail open: a broken store must not take the endpoint down
        try:
            return await self.store.get(key)
        except Exception as e:
            self.logger.warning("Cache read failed, treating as miss", key=key, error=str(e))
            self._count(namespace, "read_error")
            return None

    async def _produce(self, producer: Callable[[], Awaitable[Any]], namespace: str) -> Any:
        start = time.perf_counter()
        outcome = "error"
        try:
            value = await producer()
            outcome = "ok"
            return value
        finally:
            if self.metrics:
                self.metrics.record_upstream_call(namespace, outcome, time.perf_counter() - start)

    async def _write(self, entry: CacheEntry, namespace: str) -> None:
        try:
            await self.store.upsert(entry)
        except Exception as e:
            self.logger.error("Cache write failed, returning fresh value", key=entry.key, error=str(e))
            self._count(namespace, "write_error")

    def _count(self, namespace: str, result: str) -> None:
        if self.metrics:
            self.metrics.record_cache_lookup(namespace, result)
