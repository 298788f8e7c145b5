"""
Disaster record operations: audit trail bookkeeping and resource mirroring.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from shared.logging import get_logger
from shared.errors import NotFoundError, RecordStoreError
from .models import (
    AuditEntry, Disaster, DisasterCreateRequest, DisasterUpdateRequest, Resource
)


class DisasterRecords:
    """CRUD over the disaster store plus the nearby-resource query."""

    def __init__(self, disasters, resources, *, nearby_radius_m: float = 10000.0):
        self.disasters = disasters
        self.resources = resources
        self.nearby_radius_m = nearby_radius_m
        self.logger = get_logger("disasters.records")

    async def create(self, request: DisasterCreateRequest, user_id: str) -> Disaster:
        now = datetime.now(timezone.utc)
        disaster = Disaster(
            id=str(uuid.uuid4()),
            title=request.title,
            location_name=request.location_name,
            description=request.description,
            tags=request.tags,
            owner_id=user_id,
            created_at=now,
            audit_trail=[AuditEntry(action="create", user_id=user_id, timestamp=now)],
        )
        created = await self.disasters.insert(disaster)
        self.logger.info("Disaster created", disaster_id=created.id, title=created.title)

        await self._mirror_resource(created, request)
        return created

    async def _mirror_resource(self, disaster: Disaster, request: DisasterCreateRequest) -> None:
        resource = Resource(
            id=str(uuid.uuid4()),
            disaster_id=disaster.id,
            name=disaster.title,
            location_name=disaster.location_name,
            type="disaster",
            lat=request.lat,
            lon=request.lon,
            created_at=disaster.created_at,
        )
        try:
            await self.resources.insert(resource)
        except RecordStoreError as e:
            # The disaster itself is stored; a missing resource row only hides it from nearby search
            self.logger.warning("Resource mirror insert failed", disaster_id=disaster.id, error=str(e))

    async def list(self, tag: Optional[str] = None) -> List[Disaster]:
        return await self.disasters.list(tag=tag or None)

    async def update(self, disaster_id: str, request: DisasterUpdateRequest, user_id: str) -> Disaster:
        changes: Dict[str, Any] = request.changes()
        # The trail is replaced, not appended to
        changes["audit_trail"] = [
            AuditEntry(action="update", user_id=user_id, timestamp=datetime.now(timezone.utc))
        ]
        updated = await self.disasters.update(disaster_id, changes)
        if updated is None:
            raise NotFoundError("Disaster not found", details={"id": disaster_id})
        self.logger.info("Disaster updated", disaster_id=disaster_id, fields=sorted(changes))
        return updated

    async def delete(self, disaster_id: str) -> bool:
        deleted = await self.disasters.delete(disaster_id)
        self.logger.info("Disaster deleted", disaster_id=disaster_id, existed=deleted)
        return deleted

    async def nearby_resources(self, lat: float, lon: float, radius_m: Optional[float] = None) -> List[Dict[str, Any]]:
        matches = await self.resources.find_nearby(lat, lon, radius_m or self.nearby_radius_m)
        return [resource.to_dict(distance_m=distance) for resource, distance in matches]
