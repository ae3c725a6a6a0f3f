"""Application configuration using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="FARE_AGGREGATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", gt=0, le=65535)
    reload: bool = Field(default=True, description="Enable auto-reload in development")

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )

    # Upstream price API
    api_base_url: str = Field(
        default="https://api.texttoaction.de",
        description="Root URL of the price API hosting both fare providers",
    )
    provider_timeout: float = Field(
        default=15.0,
        description="Upper bound for a single provider call (seconds)",
        gt=0,
        le=120,
    )
    default_currency: str = Field(
        default="EUR",
        description="Currency assumed when a provider omits it",
        pattern="^[A-Z]{3}$",
    )

    # Live fare provider
    live_fares_enabled: bool = Field(default=True, description="Query the live fare provider")
    live_fares_priority: int = Field(default=0, description="Lower runs first", ge=0)
    live_fares_adults: int = Field(default=1, description="Passenger count", gt=0, le=9)
    live_fares_max_results: int = Field(
        default=10,
        description="Maximum number of fares requested",
        gt=0,
        le=250,
    )

    # Cached fare provider
    cached_fares_enabled: bool = Field(default=True, description="Query the cached fare provider")
    cached_fares_priority: int = Field(default=1, description="Lower runs first", ge=0)

    # Booking partners
    booking_partners: list[str] = Field(
        default=["aviasales", "skyscanner"],
        description="Partners for which deep links are generated",
    )
    aviasales_base_url: str = Field(default="https://www.aviasales.com")
    aviasales_marker: str = Field(default="485199", description="Affiliate marker")
    skyscanner_base_url: str = Field(default="https://www.skyscanner.de/transport/fluge")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get application settings (singleton).

    Returns:
        Settings instance
    """
    return Settings()
