"""
PostgreSQL persistence for disaster and resource records.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

import asyncpg

from shared.logging import get_logger
from shared.errors import RecordStoreError, ServiceException
from .geo import EARTH_RADIUS_M
from .models import AuditEntry, Disaster, Resource

UPDATABLE_COLUMNS = ("title", "location_name", "description", "tags", "audit_trail")


class PostgresPool:
    """Lazily created asyncpg pool shared by the record stores."""

    def __init__(self, dsn: str):
        self.dsn = dsn
        self.pool: Optional[asyncpg.Pool] = None
        self.logger = get_logger("disasters.records.postgres")

    async def start(self) -> asyncpg.Pool:
        if self.pool is None:
            try:
                self.pool = await asyncpg.create_pool(
                    self.dsn,
                    min_size=2,
                    max_size=10,
                    command_timeout=30
                )
            except Exception as e:
                self.logger.error("Failed to start PostgreSQL persistence", error=str(e))
                raise ServiceException("POSTGRES_START_FAILED", str(e))
            self.logger.info("PostgreSQL persistence started")
        return self.pool

    async def stop(self):
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL persistence stopped")


class PostgresDisasterStore:
    """``disasters`` table access."""

    def __init__(self, pool: PostgresPool):
        self._pool = pool
        self.logger = get_logger("disasters.records.postgres.disasters")

    async def start(self):
        pool = await self._pool.start()
        async with pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS disasters (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    location_name TEXT,
                    description TEXT,
                    tags TEXT[] NOT NULL DEFAULT '{}',
                    owner_id TEXT NOT NULL,
                    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
                    audit_trail JSONB NOT NULL DEFAULT '[]'
                );
            """)
            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_disasters_tags ON disasters USING GIN (tags);
            """)

    async def stop(self):
        await self._pool.stop()

    async def insert(self, disaster: Disaster) -> Disaster:
        try:
            async with self._pool.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    INSERT INTO disasters (
                        id, title, location_name, description, tags, owner_id, created_at, audit_trail
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8::jsonb)
                    RETURNING *
                """,
                    disaster.id, disaster.title, disaster.location_name, disaster.description,
                    disaster.tags, disaster.owner_id, disaster.created_at,
                    self._audit_json(disaster.audit_trail)
                )
        except Exception as e:
            self.logger.error("Error inserting disaster", disaster_id=disaster.id, error=str(e))
            raise RecordStoreError("Failed to create disaster") from e
        return self._row_to_disaster(row)

    async def get(self, disaster_id: str) -> Optional[Disaster]:
        try:
            async with self._pool.pool.acquire() as conn:
                row = await conn.fetchrow("SELECT * FROM disasters WHERE id = $1", disaster_id)
        except Exception as e:
            self.logger.error("Error loading disaster", disaster_id=disaster_id, error=str(e))
            raise RecordStoreError("Failed to load disaster") from e
        return self._row_to_disaster(row) if row else None

    async def list(self, tag: Optional[str] = None) -> List[Disaster]:
        try:
            async with self._pool.pool.acquire() as conn:
                if tag:
                    rows = await conn.fetch(
                        "SELECT * FROM disasters WHERE $1 = ANY(tags) ORDER BY created_at ASC",
                        tag
                    )
                else:
                    rows = await conn.fetch("SELECT * FROM disasters ORDER BY created_at ASC")
        except Exception as e:
            self.logger.error("Error listing disasters", tag=tag, error=str(e))
            raise RecordStoreError("Failed to list disasters") from e
        return [self._row_to_disaster(row) for row in rows]

    async def update(self, disaster_id: str, changes: Dict[str, Any]) -> Optional[Disaster]:
        columns = [column for column in UPDATABLE_COLUMNS if column in changes]
        if not columns:
            return await self.get(disaster_id)

        assignments = []
        values: List[Any] = [disaster_id]
        for column in columns:
            value = changes[column]
            if column == "audit_trail":
                values.append(self._audit_json(value))
                assignments.append(f"{column} = ${len(values)}::jsonb")
            else:
                values.append(value)
                assignments.append(f"{column} = ${len(values)}")

        try:
            async with self._pool.pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"UPDATE disasters SET {', '.join(assignments)} WHERE id = $1 RETURNING *",
                    *values
                )
        except Exception as e:
            self.logger.error("Error updating disaster", disaster_id=disaster_id, error=str(e))
            raise RecordStoreError("Failed to update disaster") from e
        return self._row_to_disaster(row) if row else None

    async def delete(self, disaster_id: str) -> bool:
        try:
            async with self._pool.pool.acquire() as conn:
                result = await conn.execute("DELETE FROM disasters WHERE id = $1", disaster_id)
        except Exception as e:
            self.logger.error("Error deleting disaster", disaster_id=disaster_id, error=str(e))
            raise RecordStoreError("Failed to delete disaster") from e
        return result.split()[-1] != "0"

    async def health_check(self) -> bool:
        try:
            async with self._pool.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except Exception:
            return False

    @staticmethod
    def _audit_json(entries: List[Any]) -> str:
        return json.dumps([
            AuditEntry.model_validate(entry).model_dump(mode="json") for entry in entries
        ])

    @staticmethod
    def _row_to_disaster(row: Any) -> Disaster:
        audit_trail = row["audit_trail"]
        if isinstance(audit_trail, str):
            audit_trail = json.loads(audit_trail)
        return Disaster(
            id=row["id"],
            title=row["title"],
            location_name=row["location_name"],
            description=row["description"],
            tags=list(row["tags"] or []),
            owner_id=row["owner_id"],
            created_at=row["created_at"],
            audit_trail=audit_trail,
        )


class PostgresResourceStore:
    """``resources`` table access with a haversine radius query."""

    def __init__(self, pool: PostgresPool):
        self._pool = pool
        self.logger = get_logger("disasters.records.postgres.resources")

    async def start(self):
        pool = await self._pool.start()
        async with pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS resources (
                    id TEXT PRIMARY KEY,
                    disaster_id TEXT,
                    name TEXT NOT NULL,
                    location_name TEXT,
                    type TEXT NOT NULL,
                    lat DOUBLE PRECISION,
                    lon DOUBLE PRECISION,
                    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
                );
            """)

    async def stop(self):
        await self._pool.stop()

    async def insert(self, resource: Resource) -> Resource:
        try:
            async with self._pool.pool.acquire() as conn:
                await conn.execute("""
                    INSERT INTO resources (id, disaster_id, name, location_name, type, lat, lon, created_at)
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                """,
                    resource.id, resource.disaster_id, resource.name, resource.location_name,
                    resource.type, resource.lat, resource.lon, resource.created_at
                )
        except Exception as e:
            self.logger.error("Error inserting resource", resource_id=resource.id, error=str(e))
            raise RecordStoreError("Failed to create resource") from e
        return resource

    async def find_nearby(self, lat: float, lon: float, radius_m: float) -> List[Tuple[Resource, float]]:
        try:
            async with self._pool.pool.acquire() as conn:
                rows = await conn.fetch(f"""
                    SELECT * FROM (
                        SELECT *,
                            2 * {EARTH_RADIUS_M} * asin(least(1.0, sqrt(
                                power(sin(radians(lat - $1) / 2), 2)
                                + cos(radians($1)) * cos(radians(lat))
                                * power(sin(radians(lon - $2) / 2), 2)
                            ))) AS distance_m
                        FROM resources
                        WHERE lat IS NOT NULL AND lon IS NOT NULL
                    ) nearby
                    WHERE distance_m <= $3
                    ORDER BY distance_m ASC
                """, lat, lon, radius_m)
        except Exception as e:
            self.logger.error("Error querying nearby resources", lat=lat, lon=lon, error=str(e))
            raise RecordStoreError("Failed to query nearby resources") from e

        return [
            (
                Resource(
                    id=row["id"],
                    disaster_id=row["disaster_id"],
                    name=row["name"],
                    location_name=row["location_name"],
                    type=row["type"],
                    lat=row["lat"],
                    lon=row["lon"],
                    created_at=row["created_at"],
                ),
                row["distance_m"],
            )
            for row in rows
        ]

    async def health_check(self) -> bool:
        try:
            async with self._pool.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except Exception:
            return False
