"""
Cached enrichment lookups exposed by the API.
"""

from typing import Any, Awaitable, Callable, Dict, List, TypeVar

from shared.logging import get_logger
from shared.errors import ExternalServiceError, ValidationError
from ..adapters import ImageVerifier, OfficialUpdatesScraper, SocialMediaClient
from ..caching import CacheResolver
from ..caching.keys import official_updates_key, social_media_key, verification_key
from .errors import EnrichmentFailed
from .geocoding import GeocodingPipeline

T = TypeVar("T")


class EnrichmentService:
    """Pairs each enrichment lookup with its cache key and producer."""

    def __init__(
        self,
        resolver: CacheResolver,
        geocoding: GeocodingPipeline,
        social_media: SocialMediaClient,
        official_updates: OfficialUpdatesScraper,
        image_verifier: ImageVerifier,
    ):
        self.resolver = resolver
        self.geocoding = geocoding
        self.social_media = social_media
        self.official_updates = official_updates
        self.image_verifier = image_verifier
        self.logger = get_logger("disasters.enrichment")

    async def geocode(self, description: str) -> Dict[str, Any]:
        if not description:
            raise ValidationError("Missing description in request body")
        return await self.geocoding.run(description)

    async def social_media_posts(self, disaster_id: str) -> List[Dict[str, Any]]:
        return await self._lookup(
            "social_media",
            "Failed to fetch social media reports.",
            social_media_key(disaster_id),
            lambda: self.social_media.fetch_posts(disaster_id),
        )

    async def updates(self, disaster_id: str) -> List[str]:
        return await self._lookup(
            "official_updates",
            "Failed to fetch official updates.",
            official_updates_key(disaster_id),
            self.official_updates.fetch_updates,
        )

    async def verify_image(self, image_url: str) -> Dict[str, Any]:
        if not image_url:
            raise ValidationError("Missing image_url in request body")
        self.image_verifier.validate_url(image_url)
        return await self._lookup(
            "image_verification",
            "Failed to verify image.",
            verification_key(image_url),
            lambda: self.image_verifier.verify(image_url),
        )

    async def _lookup(self, lookup: str, failure_message: str, key: str, producer: Callable[[], Awaitable[T]]) -> T:
        try:
            return await self.resolver.resolve(key, producer)
        except ExternalServiceError as e:
            self.logger.error("Enrichment lookup failed", lookup=lookup, key=key, error=str(e))
            raise EnrichmentFailed(lookup, failure_message) from e

    def breaker_states(self) -> Dict[str, Any]:
        clients = [
            self.geocoding.extractor,
            self.geocoding.geocoder,
            self.social_media,
            self.official_updates,
            self.image_verifier,
        ]
        return {
            client.service_name: client.circuit_breaker.get_state()
            for client in clients
            if client.circuit_breaker is not None
        }
