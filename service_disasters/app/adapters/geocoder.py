"""
Geocoding through the Google Maps Geocoding API.
"""

from typing import Any, Dict, Optional

from shared.errors import ExternalServiceError
from .base import UpstreamClient

NO_COORDINATES = {"lat": 0.0, "lon": 0.0}


class Geocoder(UpstreamClient):
    """Resolve a place name to latitude/longitude."""

    service_name = "google_maps"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        url: str = "https://maps.googleapis.com/maps/api/geocode/json",
        **kwargs
    ):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.url = url

    async def geocode(self, location_name: str) -> Dict[str, float]:
        """Return ``{"lat", "lon"}`` for the first match, or zeros when nothing matches."""
        if not self.api_key:
            raise ExternalServiceError(self.service_name, "API key is not configured")

        response = await self._request(
            "GET",
            self.url,
            params={"address": location_name, "key": self.api_key},
        )
        location = self._first_location(self._json(response))
        if location is None:
            self.logger.info("No geocoding result", location_name=location_name)
            return dict(NO_COORDINATES)
        return location

    def _first_location(self, payload: Any) -> Optional[Dict[str, float]]:
        try:
            location = payload["results"][0]["geometry"]["location"]
        except (KeyError, IndexError, TypeError):
            return None
        try:
            return {"lat": float(location["lat"]), "lon": float(location["lng"])}
        except (KeyError, TypeError, ValueError) as e:
            raise ExternalServiceError(self.service_name, "Malformed location in response") from e
