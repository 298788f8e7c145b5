"""
Shared configuration management for the Disaster Response API.
"""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="DISASTER_",
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")
    log_format: str = Field(default="json", description="json | console")

    # Storage backends
    cache_backend: str = Field(default="memory", description="memory | postgres | redis")
    record_backend: str = Field(default="memory", description="memory | postgres")
    postgres_dsn: str = Field(default="postgres://localhost:5432/disasters")
    redis_url: str = Field(default="redis://localhost:6379/0")

    # Cache policy
    cache_ttl_seconds: int = Field(default=3600, ge=1)

    # External services
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DISASTER_GEMINI_API_KEY", "GEMINI_API_KEY"),
    )
    gemini_model: str = Field(default="gemini-2.0-flash")
    gemini_base_url: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    google_maps_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DISASTER_GOOGLE_MAPS_API_KEY", "GOOGLE_MAPS_API_KEY"),
    )
    geocode_url: str = Field(default="https://maps.googleapis.com/maps/api/geocode/json")
    official_updates_url: str = Field(default="https://www.redcross.org")
    social_feed_url: Optional[str] = Field(default=None)
    upstream_timeout_seconds: float = Field(default=10.0, gt=0)

    # Geospatial
    nearby_radius_meters: float = Field(default=10000.0, gt=0)

    # Mock authentication
    default_user_id: str = Field(default="anonymous")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
