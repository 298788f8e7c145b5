"""
Enrichment package: cached third-party lookups for disaster reports.
"""

from .errors import EnrichmentFailed, GeocodingFailed, GEOCODE_FAILURE_MESSAGE
from .geocoding import GeocodingPipeline
from .service import EnrichmentService

__all__ = [
    "EnrichmentFailed",
    "EnrichmentService",
    "GeocodingFailed",
    "GeocodingPipeline",
    "GEOCODE_FAILURE_MESSAGE",
]
