"""
Adapters package for the Disasters service.

Contains HTTP client wrappers for the third-party lookups behind the
enrichment endpoints. These adapters encapsulate:

- Endpoint URLs, API keys and request shapes
- Retry policies and circuit breakers
- Error handling that maps to shared errors

Adapters never cache; caching is applied by the caller through the
cache-aside resolver.
"""

from .base import UpstreamClient
from .geocoder import Geocoder, NO_COORDINATES
from .image_verifier import ImageVerifier
from .location_extractor import LocationExtractor, UNKNOWN_LOCATION
from .official_updates import OfficialUpdatesScraper
from .social_media import SocialMediaClient, SAMPLE_POSTS

__all__ = [
    "UpstreamClient",
    "Geocoder",
    "NO_COORDINATES",
    "ImageVerifier",
    "LocationExtractor",
    "UNKNOWN_LOCATION",
    "OfficialUpdatesScraper",
    "SocialMediaClient",
    "SAMPLE_POSTS",
]
