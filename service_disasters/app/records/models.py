"""
Disaster and resource record models.
"""

from typing import Any, Dict, Optional, List
from dataclasses import dataclass, field
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


class AuditEntry(BaseModel):
    """One step in a disaster's audit trail."""
    action: str = Field(..., description="create or update")
    user_id: str = Field(..., description="User who performed the action")
    timestamp: datetime = Field(..., description="When the action happened")


class Disaster(BaseModel):
    """Stored disaster record."""
    id: str
    title: str
    location_name: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    owner_id: str
    created_at: datetime
    audit_trail: List[AuditEntry] = Field(default_factory=list)


def _dedupe_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    seen: Dict[str, None] = {}
    for tag in tags:
        tag = tag.strip()
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


class DisasterCreateRequest(BaseModel):
    """Request model for reporting a disaster."""
    title: str = Field(..., min_length=1, description="Short title")
    location_name: Optional[str] = Field(None, description="Human-readable location")
    description: Optional[str] = Field(None, description="Free-text report")
    tags: List[str] = Field(default_factory=list, description="Tags such as flood or earthquake")
    lat: Optional[float] = Field(None, ge=-90, le=90, description="Latitude, when known")
    lon: Optional[float] = Field(None, ge=-180, le=180, description="Longitude, when known")

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, value: List[str]) -> List[str]:
        return _dedupe_tags(value)


class DisasterUpdateRequest(BaseModel):
    """Request model for updating a disaster. Omitted fields are left unchanged."""
    title: Optional[str] = Field(None, min_length=1)
    location_name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _dedupe_tags(value)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class GeocodeRequest(BaseModel):
    description: Optional[str] = None


class VerifyImageRequest(BaseModel):
    image_url: Optional[str] = None


@dataclass
class Resource:
    """A point of interest (shelter, reported disaster, ...) with optional coordinates."""
    id: str
    name: str
    disaster_id: Optional[str] = None
    location_name: Optional[str] = None
    type: str = "disaster"
    lat: Optional[float] = None
    lon: Optional[float] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self, distance_m: Optional[float] = None) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "disaster_id": self.disaster_id,
            "name": self.name,
            "location_name": self.location_name,
            "type": self.type,
            "lat": self.lat,
            "lon": self.lon,
            "created_at": self.created_at.isoformat(),
        }
        if distance_m is not None:
            data["distance_m"] = round(distance_m, 1)
        return data
