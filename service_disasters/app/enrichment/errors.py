"""
Client-facing enrichment failures.

Upstream error text stays in the logs; responses only name the lookup
that failed.
"""

from typing import Any, Dict, Optional

from shared.errors import ExternalServiceError

GEOCODE_FAILURE_MESSAGE = "Failed to extract or convert location."


class EnrichmentFailed(ExternalServiceError):
    """An enrichment lookup failed upstream."""

    def __init__(self, lookup: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(lookup, message, details={"lookup": lookup, **(details or {})})
        self.message = message


class GeocodingFailed(EnrichmentFailed):
    """Either stage of the geocoding pipeline failed."""

    def __init__(self, stage: str):
        super().__init__("geocoding", GEOCODE_FAILURE_MESSAGE, details={"stage": stage})
