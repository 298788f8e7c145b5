"""
Caching package for the Disasters service.

Provides the cache-aside resolver that fronts every external lookup,
the key construction convention, and the cache store backends
(in-memory, PostgreSQL, Redis).
"""

from typing import TYPE_CHECKING

from .entry import CacheEntry
from .resolver import CacheResolver, DEFAULT_TTL_SECONDS
from .store import CacheStore, InMemoryCacheStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.config import BaseConfig


def build_cache_store(config: "BaseConfig") -> CacheStore:
    """Create the cache store selected by ``config.cache_backend``."""
    backend = config.cache_backend.lower()
    if backend == "memory":
        return InMemoryCacheStore()
    if backend == "postgres":
        from .postgres_store import PostgresCacheStore
        return PostgresCacheStore(config.postgres_dsn)
    if backend == "redis":
        from .redis_store import RedisCacheStore
        return RedisCacheStore(config.redis_url)
    raise ValueError(f"Unknown cache backend: {config.cache_backend}")


__all__ = [
    "CacheEntry",
    "CacheResolver",
    "CacheStore",
    "DEFAULT_TTL_SECONDS",
    "InMemoryCacheStore",
    "build_cache_store",
]
