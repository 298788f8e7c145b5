"""
In-memory record stores for tests and local runs.
"""

from typing import Any, Dict, List, Optional, Tuple

from shared.logging import get_logger
from .geo import haversine_m
from .models import Disaster, Resource


class InMemoryDisasterStore:
    """Disaster records held in a dict, in insertion order."""

    def __init__(self):
        self.logger = get_logger("disasters.records.memory")
        self._records: Dict[str, Disaster] = {}

    async def start(self):
        pass

    async def stop(self):
        pass

    async def insert(self, disaster: Disaster) -> Disaster:
        self._records[disaster.id] = disaster.model_copy(deep=True)
        return disaster

    async def get(self, disaster_id: str) -> Optional[Disaster]:
        record = self._records.get(disaster_id)
        return record.model_copy(deep=True) if record else None

    async def list(self, tag: Optional[str] = None) -> List[Disaster]:
        return [
            record.model_copy(deep=True)
            for record in self._records.values()
            if tag is None or tag in record.tags
        ]

    async def update(self, disaster_id: str, changes: Dict[str, Any]) -> Optional[Disaster]:
        record = self._records.get(disaster_id)
        if record is None:
            return None
        updated = Disaster.model_validate({**record.model_dump(), **changes})
        self._records[disaster_id] = updated
        return updated.model_copy(deep=True)

    async def delete(self, disaster_id: str) -> bool:
        return self._records.pop(disaster_id, None) is not None

    async def health_check(self) -> bool:
        return True


class InMemoryResourceStore:
    """Resources held in a list; nearby search is a linear haversine scan."""

    def __init__(self):
        self._resources: List[Resource] = []

    async def start(self):
        pass

    async def stop(self):
        pass

    async def insert(self, resource: Resource) -> Resource:
        self._resources.append(resource)
        return resource

    async def find_nearby(self, lat: float, lon: float, radius_m: float) -> List[Tuple[Resource, float]]:
        matches = []
        for resource in self._resources:
            if resource.lat is None or resource.lon is None:
                continue
            distance = haversine_m(lat, lon, resource.lat, resource.lon)
            if distance <= radius_m:
                matches.append((resource, distance))
        matches.sort(key=lambda match: match[1])
        return matches

    async def health_check(self) -> bool:
        return True
