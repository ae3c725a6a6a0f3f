"""Shared pytest fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from copy import deepcopy
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import httpx
import pytest

from fare_aggregator.domain.models import Offer, SearchQuery
from fare_aggregator.domain.ports.flight_provider import ProviderSpec

LIVE_FARES_PAYLOAD: dict[str, Any] = {
    "data": [
        {
            "id": "1",
            "airline_name": "Lufthansa",
            "airline": "LH",
            "price": {"total": "240.00", "currency": "EUR"},
            "stops": 1,
            "departure_at": "2025-03-05T10:15:00+01:00",
        },
        {
            "id": "2",
            "airline": "KLM",
            "price": 310,
            "currency": "EUR",
            "transfers": 0,
            "departure_time": "2025-03-05T13:40:00",
        },
        {
            "id": "3",
            "validating_airline": ["MH", "QR"],
            "price": {"grandTotal": "199.00", "currency": "EUR"},
            "itineraries": [
                {
                    "segments": [
                        {"departure": {"iataCode": "FRA", "at": "2025-03-05T21:05:00"}},
                        {"departure": {"iataCode": "DOH", "at": "2025-03-06T06:10:00"}},
                    ]
                }
            ],
        },
    ]
}

CACHED_FARES_PAYLOAD: dict[str, Any] = {
    "success": True,
    "origin": "FRA",
    "destination": "KUL",
    "lowest_price": 215,
    "flights": [
        {
            "price": 260,
            "currency": "eur",
            "airline": "EK",
            "stops": 1,
            "departure_at": "2025-03-05T14:20:00Z",
            "duration": "16h 05m",
        },
        {
            "price": 215,
            "currency": "EUR",
            "airline": "TK",
        },
    ],
}


@dataclass
class FakeProvider:
    """Provider double recording every query it receives."""

    spec: ProviderSpec
    offers: list[Offer] = field(default_factory=list)
    error: Exception | None = None
    delay: float = 0.0
    calls: list[SearchQuery] = field(default_factory=list)

    async def search(self, query: SearchQuery) -> list[Offer]:
        self.calls.append(query)
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.offers)


@pytest.fixture
def live_payload_builder() -> Callable[[], dict[str, Any]]:
    """Return a factory that produces independent copies of the live fare payload."""

    def _builder() -> dict[str, Any]:
        return deepcopy(LIVE_FARES_PAYLOAD)

    return _builder


@pytest.fixture
def cached_payload_builder() -> Callable[[], dict[str, Any]]:
    def _builder() -> dict[str, Any]:
        return deepcopy(CACHED_FARES_PAYLOAD)

    return _builder


@pytest.fixture
def offer_factory() -> Callable[..., Offer]:
    def _factory(
        price: int | str,
        provider_id: str = "live_fares",
        currency: str = "EUR",
        stops: int | None = None,
    ) -> Offer:
        return Offer(
            price=Decimal(str(price)),
            currency=currency,
            stops=stops,
            provider_id=provider_id,
        )

    return _factory


@pytest.fixture
def provider_factory() -> Callable[..., FakeProvider]:
    def _factory(
        provider_id: str,
        priority: int,
        offers: list[Offer] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        requires_date: bool = False,
    ) -> FakeProvider:
        spec = ProviderSpec(id=provider_id, priority=priority, requires_date=requires_date)
        return FakeProvider(spec=spec, offers=offers or [], error=error, delay=delay)

    return _factory


@pytest.fixture
def query() -> SearchQuery:
    return SearchQuery.create("FRA", "KUL", "2025-03-05")


@pytest.fixture
def mock_http() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by the given handler."""

    def _factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            base_url="https://api.test",
        )

    return _factory
