"""
Redis cache store.

Each entry is a JSON document ``{"value": ..., "expires_at": iso}`` under
``<namespace><key>``. The Redis key is given an absolute expiry matching
``expires_at`` so Redis evicts stale entries on its own; the resolver
still checks ``expires_at`` itself.
"""

import json
from datetime import datetime
from typing import Optional

import redis.asyncio as redis

from shared.logging import get_logger
from shared.errors import ServiceException, StoreReadError, StoreWriteError
from .entry import CacheEntry, utcnow


class RedisCacheStore:
    """Cache store backed by Redis."""

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None, namespace: str = "disasters:cache:"):
        self.redis_url = redis_url
        self.namespace = namespace
        self.logger = get_logger("disasters.cache.redis")
        self.redis: Optional[redis.Redis] = client

    async def start(self):
        try:
            if self.redis is None:
                self.redis = redis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_connect_timeout=5,
                    socket_timeout=5,
                    retry_on_timeout=True,
                    health_check_interval=30
                )
            await self.redis.ping()
            self.logger.info("Redis cache store started")
        except Exception as e:
            self.logger.error("Failed to start Redis cache store", error=str(e))
            raise ServiceException("REDIS_START_FAILED", str(e))

    async def stop(self):
        if self.redis:
            await self.redis.aclose()
            self.logger.info("Redis cache store stopped")

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    async def get(self, key: str) -> Optional[CacheEntry]:
        try:
            raw = await self.redis.get(self._key(key))
        except Exception as e:
            raise StoreReadError(details={"key": key, "error": str(e)}) from e

        if raw is None:
            return None
        try:
            data = json.loads(raw)
            expires_at = datetime.fromisoformat(data["expires_at"])
        except (TypeError, KeyError, ValueError) as e:
            raise StoreReadError("Cached document is malformed", details={"key": key}) from e
        return CacheEntry(key=key, value=data.get("value"), expires_at=expires_at)

    async def upsert(self, entry: CacheEntry) -> None:
        try:
            document = json.dumps({
                "value": entry.value,
                "expires_at": entry.expires_at.isoformat(),
            })
            if entry.expires_at > utcnow():
                await self.redis.set(self._key(entry.key), document, exat=entry.expires_at)
            else:
                await self.redis.set(self._key(entry.key), document)
        except Exception as e:
            raise StoreWriteError(details={"key": entry.key, "error": str(e)}) from e

    async def health_check(self) -> bool:
        try:
            await self.redis.ping()
            return True
        except Exception:
            return False
