"""
PostgreSQL cache store.

Entries live in a single ``cache`` table keyed by ``key``; writes use
``ON CONFLICT`` so there is never more than one row per key. Expired rows
are left in place.
"""

import json
from typing import Optional

import asyncpg

from shared.logging import get_logger
from shared.errors import ServiceException, StoreReadError, StoreWriteError
from .entry import CacheEntry


class PostgresCacheStore:
    """Cache store backed by an asyncpg connection pool."""

    def __init__(self, dsn: str, pool: Optional[asyncpg.Pool] = None):
        self.dsn = dsn
        self.logger = get_logger("disasters.cache.postgres")
        self.pool: Optional[asyncpg.Pool] = pool

    async def start(self):
        """Open the pool and create the cache table."""
        try:
            if self.pool is None:
                self.pool = await asyncpg.create_pool(
                    self.dsn,
                    min_size=1,
                    max_size=10,
                    command_timeout=30
                )
            await self._create_tables()
            self.logger.info("PostgreSQL cache store started")
        except Exception as e:
            self.logger.error("Failed to start PostgreSQL cache store", error=str(e))
            raise ServiceException("POSTGRES_START_FAILED", str(e))

    async def stop(self):
        if self.pool:
            await self.pool.close()
            self.logger.info("PostgreSQL cache store stopped")

    async def _create_tables(self):
        async with self.pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS cache (
                    key TEXT PRIMARY KEY,
                    value JSONB NOT NULL,
                    expires_at TIMESTAMP WITH TIME ZONE NOT NULL
                );
            """)

    async def get(self, key: str) -> Optional[CacheEntry]:
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT key, value, expires_at FROM cache WHERE key = $1",
                    key
                )
        except Exception as e:
            raise StoreReadError(details={"key": key, "error": str(e)}) from e

        if not row:
            return None
        try:
            value = json.loads(row["value"])
        except (TypeError, json.JSONDecodeError) as e:
            raise StoreReadError("Cached value is not valid JSON", details={"key": key}) from e
        return CacheEntry(key=row["key"], value=value, expires_at=row["expires_at"])

    async def upsert(self, entry: CacheEntry) -> None:
        try:
            payload = json.dumps(entry.value)
            async with self.pool.acquire() as conn:
                await conn.execute("""
                    INSERT INTO cache (key, value, expires_at)
                    VALUES ($1, $2::jsonb, $3)
                    ON CONFLICT (key) DO UPDATE SET
                        value = EXCLUDED.value,
                        expires_at = EXCLUDED.expires_at
                """, entry.key, payload, entry.expires_at)
        except Exception as e:
            raise StoreWriteError(details={"key": entry.key, "error": str(e)}) from e

    async def health_check(self) -> bool:
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except Exception:
            return False
