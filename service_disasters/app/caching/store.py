"""
Key-value cache store interface and the in-memory backend.
"""

import copy
from typing import Any, Dict, Optional, Protocol

from shared.logging import get_logger
from .entry import CacheEntry


class CacheStore(Protocol):
    """Persistent key-value store consumed by the cache-aside resolver.

    ``get`` returns the stored entry whether or not it has expired;
    staleness is the resolver's decision. ``upsert`` overwrites any
    entry with the same key. Backends wrap their own failures in
    ``StoreReadError`` / ``StoreWriteError``.
    """

    async def start(self) -> None: ...

    async def stop(self) -> None: ...

    async def get(self, key: str) -> Optional[CacheEntry]: ...

    async def upsert(self, entry: CacheEntry) -> None: ...

    async def health_check(self) -> bool: ...


class InMemoryCacheStore:
    """Process-local cache store for tests and single-node local runs."""

    def __init__(self):
        self.logger = get_logger("disasters.cache.memory")
        self._entries: Dict[str, CacheEntry] = {}

    async def start(self) -> None:
        self.logger.info("In-memory cache store ready")

    async def stop(self) -> None:
        self._entries.clear()

    async def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        # Hand out copies so callers cannot mutate what is stored
        return CacheEntry(entry.key, copy.deepcopy(entry.value), entry.expires_at)

    async def upsert(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = CacheEntry(entry.key, copy.deepcopy(entry.value), entry.expires_at)

    async def health_check(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Any) -> bool:
        return key in self._entries
