"""
Disasters service for the Disaster Response API.
"""

from typing import Any, Dict, List, Optional

from fastapi import Depends, HTTPException, Query

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from shared.errors import ServiceException, ValidationError

from .adapters import (
    Geocoder, ImageVerifier, LocationExtractor, OfficialUpdatesScraper, SocialMediaClient
)
from .auth import MockAuth
from .caching import CacheResolver, CacheStore, build_cache_store
from .enrichment import EnrichmentService, GeocodingPipeline
from .records import DisasterRecords, build_record_stores
from .records.models import (
    Disaster, DisasterCreateRequest, DisasterUpdateRequest, GeocodeRequest, VerifyImageRequest
)

SERVICE_NAME = "disasters"
DEFAULT_PORT = 3000


class DisasterService(BaseService):
    """Disaster reporting and enrichment service."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        cache_store: Optional[CacheStore] = None,
        disaster_store=None,
        resource_store=None,
        extractor: Optional[LocationExtractor] = None,
        geocoder: Optional[Geocoder] = None,
        social_media: Optional[SocialMediaClient] = None,
        official_updates: Optional[OfficialUpdatesScraper] = None,
        image_verifier: Optional[ImageVerifier] = None,
    ):
        super().__init__(SERVICE_NAME, DEFAULT_PORT, config=config)

        # Storage
        self.cache_store = cache_store if cache_store is not None else build_cache_store(self.config)
        if disaster_store is None or resource_store is None:
            default_disasters, default_resources = build_record_stores(self.config)
            if disaster_store is None:
                disaster_store = default_disasters
            if resource_store is None:
                resource_store = default_resources
        self.disaster_store = disaster_store
        self.resource_store = resource_store

        self.resolver = CacheResolver(
            self.cache_store,
            ttl_seconds=self.config.cache_ttl_seconds,
            metrics=self.metrics,
        )
        self.records = DisasterRecords(
            self.disaster_store,
            self.resource_store,
            nearby_radius_m=self.config.nearby_radius_meters,
        )

        # Upstream adapters
        timeout = self.config.upstream_timeout_seconds
        extractor = extractor or LocationExtractor(
            self.config.gemini_api_key,
            model=self.config.gemini_model,
            base_url=self.config.gemini_base_url,
            timeout=timeout,
        )
        geocoder = geocoder or Geocoder(
            self.config.google_maps_api_key,
            url=self.config.geocode_url,
            timeout=timeout,
        )
        self.enrichment = EnrichmentService(
            self.resolver,
            GeocodingPipeline(self.resolver, extractor, geocoder),
            social_media or SocialMediaClient(self.config.social_feed_url, timeout=timeout),
            official_updates or OfficialUpdatesScraper(self.config.official_updates_url, timeout=timeout),
            image_verifier or ImageVerifier(timeout=timeout),
        )

        self.auth = MockAuth(self.config.default_user_id)

        self._setup_disaster_routes()

    def _setup_disaster_routes(self):
        """Set up disaster record and enrichment routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "Disaster Response API - Disasters Service",
                "version": "1.0.0",
                "capabilities": ["records", "geocoding", "enrichment", "caching"]
            }

        @self.app.post("/disasters", status_code=201, response_model=Disaster)
        async def create_disaster(request: DisasterCreateRequest, user: Dict[str, Any] = Depends(self.auth)):
            """Report a new disaster."""
            try:
                return await self.records.create(request, user["id"])
            except ServiceException:
                raise
            except Exception as e:
                self.logger.error("Error creating disaster", error=str(e))
                raise HTTPException(status_code=500, detail="Internal server error")

        @self.app.get("/disasters", response_model=List[Disaster])
        async def list_disasters(tag: Optional[str] = Query(None, description="Filter disasters by tag")):
            """List disasters, optionally filtered by tag."""
            try:
                return await self.records.list(tag=tag)
            except ServiceException:
                raise
            except Exception as e:
                self.logger.error("Error listing disasters", error=str(e))
                raise HTTPException(status_code=500, detail="Internal server error")

        # Registered before the /disasters/{disaster_id} routes
        @self.app.post("/disasters/geocode")
        async def geocode(request: GeocodeRequest):
            """Extract a location from free text and convert it to coordinates."""
            return await self.enrichment.geocode(request.description or "")

        @self.app.put("/disasters/{disaster_id}", response_model=Disaster)
        async def update_disaster(
            disaster_id: str,
            request: DisasterUpdateRequest,
            user: Dict[str, Any] = Depends(self.auth)
        ):
            """Update a disaster."""
            try:
                return await self.records.update(disaster_id, request, user["id"])
            except ServiceException:
                raise
            except Exception as e:
                self.logger.error("Error updating disaster", disaster_id=disaster_id, error=str(e))
                raise HTTPException(status_code=500, detail="Internal server error")

        @self.app.delete("/disasters/{disaster_id}")
        async def delete_disaster(disaster_id: str, user: Dict[str, Any] = Depends(self.auth)):
            """Delete a disaster."""
            try:
                await self.records.delete(disaster_id)
                return {"success": True}
            except ServiceException:
                raise
            except Exception as e:
                self.logger.error("Error deleting disaster", disaster_id=disaster_id, error=str(e))
                raise HTTPException(status_code=500, detail="Internal server error")

        @self.app.get("/disasters/{disaster_id}/social-media")
        async def social_media(disaster_id: str):
            """Social media reports for a disaster."""
            return await self.enrichment.social_media_posts(disaster_id)

        @self.app.get("/disasters/{disaster_id}/resources")
        async def nearby_resources(
            disaster_id: str,
            lat: Optional[float] = Query(None, ge=-90, le=90, description="Latitude"),
            lon: Optional[float] = Query(None, ge=-180, le=180, description="Longitude"),
            radius: Optional[float] = Query(None, gt=0, description="Search radius in metres"),
        ):
            """Resources near a point."""
            if lat is None or lon is None:
                raise ValidationError("lat and lon query parameters are required")
            try:
                return await self.records.nearby_resources(lat, lon, radius)
            except ServiceException:
                raise
            except Exception as e:
                self.logger.error("Error fetching nearby resources", disaster_id=disaster_id, error=str(e))
                raise HTTPException(status_code=500, detail="Internal server error")

        @self.app.get("/disasters/{disaster_id}/official-updates")
        async def official_updates(disaster_id: str):
            """Official updates scraped for a disaster."""
            return await self.enrichment.updates(disaster_id)

        @self.app.post("/disasters/{disaster_id}/verify-image")
        async def verify_image(disaster_id: str, request: VerifyImageRequest):
            """Verify the authenticity of an image."""
            return await self.enrichment.verify_image(request.image_url or "")

    async def _check_dependencies(self) -> Dict[str, Any]:
        """Check disasters service dependencies."""
        dependencies: Dict[str, Any] = {}

        for name, component in (
            ("cache", self.cache_store),
            ("disasters", self.disaster_store),
            ("resources", self.resource_store),
        ):
            try:
                dependencies[name] = "ok" if await component.health_check() else "error"
            except Exception:
                dependencies[name] = "error"

        dependencies["upstreams"] = self.enrichment.breaker_states()
        return dependencies

    async def start(self):
        """Start storage components."""
        await self.cache_store.start()
        await self.disaster_store.start()
        await self.resource_store.start()
        self.logger.info(
            "Disasters service started",
            cache_backend=self.config.cache_backend,
            record_backend=self.config.record_backend
        )

    async def stop(self):
        """Stop storage components."""
        await self.cache_store.stop()
        await self.disaster_store.stop()
        await self.resource_store.stop()
        self.logger.info("Disasters service stopped")


def create_app(config: Optional[ServiceConfig] = None, **components):
    """Create disasters service application."""
    service = DisasterService(config, **components)
    return service.app


if __name__ == "__main__":
    service = DisasterService(get_config(SERVICE_NAME, DEFAULT_PORT))
    service.run()
