"""
Two-stage geocoding pipeline: free text -> place name -> coordinates.
"""

from typing import Any, Dict

from shared.logging import get_logger
from shared.errors import ExternalServiceError
from ..adapters import Geocoder, LocationExtractor
from ..caching import CacheResolver
from ..caching.keys import extraction_key, geocode_key
from .errors import GeocodingFailed


class GeocodingPipeline:
    """Extract a place from a description, then geocode it.

    Both stages go through the resolver under their own namespace. The
    geocode stage is keyed on the extracted place name, so different
    descriptions naming the same place share one geocode entry.
    """

    def __init__(self, resolver: CacheResolver, extractor: LocationExtractor, geocoder: Geocoder):
        self.resolver = resolver
        self.extractor = extractor
        self.geocoder = geocoder
        self.logger = get_logger("disasters.enrichment.geocoding")

    async def run(self, description: str) -> Dict[str, Any]:
        try:
            location_name = await self.resolver.resolve(
                extraction_key(description),
                lambda: self.extractor.extract(description),
            )
        except ExternalServiceError as e:
            self.logger.error("Location extraction failed", error=str(e))
            raise GeocodingFailed("extraction") from e

        try:
            coordinates = await self.resolver.resolve(
                geocode_key(location_name),
                lambda: self.geocoder.geocode(location_name),
            )
        except ExternalServiceError as e:
            self.logger.error("Geocoding failed", location_name=location_name, error=str(e))
            raise GeocodingFailed("geocode") from e

        return {
            "location_name": location_name,
            "coordinates": {"lat": coordinates["lat"], "lon": coordinates["lon"]},
        }
