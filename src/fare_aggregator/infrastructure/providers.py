"""Provider table assembled once at start-up."""

from __future__ import annotations

import httpx

from ..config import Settings
from ..domain.ports.flight_provider import FlightProviderProtocol, ProviderSpec
from .cached_fare_client import CACHED_FARES_ID, CachedFareClient
from .live_fare_client import LIVE_FARES_ID, LiveFareClient


def build_provider_specs(settings: Settings) -> list[ProviderSpec]:
    """Return enabled provider specs ordered by priority."""
    specs: list[ProviderSpec] = []
    if settings.live_fares_enabled:
        specs.append(
            ProviderSpec(
                id=LIVE_FARES_ID,
                priority=settings.live_fares_priority,
                date_format="%Y-%m-%d",
                requires_date=True,
                default_currency=settings.default_currency,
            )
        )
    if settings.cached_fares_enabled:
        specs.append(
            ProviderSpec(
                id=CACHED_FARES_ID,
                priority=settings.cached_fares_priority,
                date_format="%Y-%m-%d",
                requires_date=False,
                default_currency=settings.default_currency,
            )
        )
    return sorted(specs, key=lambda spec: spec.priority)


def build_providers(
    settings: Settings,
    http_client: httpx.AsyncClient,
) -> list[FlightProviderProtocol]:
    """Instantiate a client for every enabled provider."""
    providers: list[FlightProviderProtocol] = []
    for spec in build_provider_specs(settings):
        if spec.id == LIVE_FARES_ID:
            providers.append(
                LiveFareClient(
                    spec,
                    http_client,
                    adults=settings.live_fares_adults,
                    max_results=settings.live_fares_max_results,
                )
            )
        elif spec.id == CACHED_FARES_ID:
            providers.append(CachedFareClient(spec, http_client))
    return providers
