"""
Cache key construction.

A key is a fixed namespace tag followed by the adapter's natural
discriminant, concatenated without a separator. Changing a tag orphans
every entry already stored under it.
"""

from typing import Optional

EXTRACTION_PREFIX = "gemini_"
GEOCODE_PREFIX = "google_"
SOCIAL_PREFIX = "social_"
UPDATES_PREFIX = "updates_"
VERIFY_PREFIX = "verify_"

NAMESPACES = {
    EXTRACTION_PREFIX: "extraction",
    GEOCODE_PREFIX: "geocode",
    SOCIAL_PREFIX: "social",
    UPDATES_PREFIX: "updates",
    VERIFY_PREFIX: "verify",
}


def extraction_key(description: str) -> str:
    """Key for the place name extracted from free text."""
    return EXTRACTION_PREFIX + description


def geocode_key(location_name: str) -> str:
    """Key for coordinates of a resolved place name."""
    return GEOCODE_PREFIX + location_name


def social_media_key(disaster_id: str) -> str:
    return SOCIAL_PREFIX + disaster_id


def official_updates_key(disaster_id: str) -> str:
    return UPDATES_PREFIX + disaster_id


def verification_key(image_url: str) -> str:
    return VERIFY_PREFIX + image_url


def namespace_of(key: str) -> Optional[str]:
    """Return the adapter namespace a key belongs to, if it has a known tag."""
    for prefix, namespace in NAMESPACES.items():
        if key.startswith(prefix):
            return namespace
    return None
