"""
Tests for cache key construction.
"""

from service_disasters.app.caching.keys import (
    extraction_key,
    geocode_key,
    namespace_of,
    official_updates_key,
    social_media_key,
    verification_key,
)


class TestCacheKeys:
    """Key format is part of the persisted contract."""

    def test_prefixes_are_concatenated_without_separator(self):
        assert extraction_key("Flood in Miami") == "gemini_Flood in Miami"
        assert geocode_key("Miami, FL") == "google_Miami, FL"
        assert social_media_key("42") == "social_42"
        assert official_updates_key("42") == "updates_42"
        assert verification_key("https://img.example/a.jpg") == "verify_https://img.example/a.jpg"

    def test_discriminant_is_used_verbatim(self):
        """No trimming or case folding happens on the discriminant."""
        assert extraction_key("  Flood ") == "gemini_  Flood "
        assert geocode_key("Unknown") == "google_Unknown"

    def test_namespace_of_known_keys(self):
        assert namespace_of("gemini_anything") == "extraction"
        assert namespace_of("google_Houston") == "geocode"
        assert namespace_of("social_1") == "social"
        assert namespace_of("updates_1") == "updates"
        assert namespace_of("verify_x") == "verify"

    def test_namespace_of_unknown_key(self):
        assert namespace_of("other_key") is None
