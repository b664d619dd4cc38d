"""Application configuration via environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Albion Rush"
    app_version: str = "0.1.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # TransLink SEQ GTFS-RT feed
    translink_trip_updates_url: str = Field(
        default="https://gtfsrt.api.translink.com.au/api/realtime/SEQ/TripUpdates",
        validation_alias=AliasChoices("GTFS_RT_URL", "TRANSLINK_TRIP_UPDATES_URL"),
    )
    feed_cache_ttl_ms: int = Field(default=15000, ge=0)
    feed_fetch_timeout_sec: float = Field(default=10.0, gt=0)

    # Departure derivation
    departure_limit: int = Field(default=5, ge=1, le=20)
    departure_grace_sec: int = Field(default=60, ge=0)
    default_mode: str = "albion"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
