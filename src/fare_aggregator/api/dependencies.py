"""Dependency wiring for FastAPI endpoints."""

from __future__ import annotations

from functools import lru_cache

import httpx
from fastapi import Depends

from fare_aggregator.config import Settings, get_settings
from fare_aggregator.domain.services.aggregator import AggregatorFacade
from fare_aggregator.domain.services.booking_links import BookingLinkConfig
from fare_aggregator.domain.services.fallback import FallbackOrchestrator
from fare_aggregator.infrastructure.providers import build_providers


@lru_cache(maxsize=1)
def get_http_client() -> httpx.AsyncClient:
    """Return shared HTTP client for provider calls (singleton)."""
    settings = get_settings()
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=settings.provider_timeout,
        headers={"Accept": "application/json"},
    )


def get_link_config(settings: Settings = Depends(get_settings)) -> BookingLinkConfig:
    return BookingLinkConfig(
        aviasales_base_url=settings.aviasales_base_url,
        aviasales_marker=settings.aviasales_marker,
        skyscanner_base_url=settings.skyscanner_base_url,
    )


def get_aggregator(
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    link_config: BookingLinkConfig = Depends(get_link_config),
) -> AggregatorFacade:
    """Assemble the facade from explicit configuration."""
    return AggregatorFacade(
        providers=build_providers(settings, http_client),
        orchestrator=FallbackOrchestrator(provider_timeout=settings.provider_timeout),
        link_config=link_config,
        partners=settings.booking_partners,
    )
