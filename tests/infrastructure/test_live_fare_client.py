"""Tests for LiveFareClient and its normalizer."""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal

import httpx
import pytest

from fare_aggregator.domain.errors import EmptyResult, MalformedQuery, NetworkFailure, ProviderError
from fare_aggregator.domain.models import SearchQuery
from fare_aggregator.domain.ports.flight_provider import ProviderSpec
from fare_aggregator.infrastructure.live_fare_client import LIVE_FARES_ID, LiveFareClient

SPEC = ProviderSpec(id=LIVE_FARES_ID, priority=0, requires_date=True, default_currency="EUR")


def _client(mock_http, handler, **kwargs) -> LiveFareClient:
    return LiveFareClient(SPEC, mock_http(handler), **kwargs)


@pytest.mark.asyncio
async def test_request_body_uses_provider_date_format(mock_http, query, live_payload_builder):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=live_payload_builder())

    await _client(mock_http, handler, adults=2, max_results=5).search(query)

    assert seen[0].method == "POST"
    assert seen[0].url.path == "/amadeus/search"
    assert json.loads(seen[0].content) == {
        "origin": "FRA",
        "destination": "KUL",
        "departure_date": "2025-03-05",
        "adults": 2,
        "max_results": 5,
    }


@pytest.mark.asyncio
async def test_heterogeneous_fares_are_normalized(mock_http, query, live_payload_builder):
    client = _client(mock_http, lambda request: httpx.Response(200, json=live_payload_builder()))

    offers = await client.search(query)

    assert [o.price for o in offers] == [Decimal("240.00"), Decimal("310"), Decimal("199.00")]
    assert {o.currency for o in offers} == {"EUR"}
    assert [o.airline_name for o in offers] == ["Lufthansa", "KLM", "MH"]
    assert [o.stops for o in offers] == [1, 0, 1]
    assert offers[2].departure_at == datetime(2025, 3, 5, 21, 5)
    assert all(o.provider_id == LIVE_FARES_ID for o in offers)


@pytest.mark.asyncio
async def test_missing_stop_count_is_unknown(mock_http, query):
    payload = [{"price": 120, "currency": "EUR", "airline": "LH"}]
    client = _client(mock_http, lambda request: httpx.Response(200, json=payload))

    offers = await client.search(query)

    assert offers[0].stops is None
    assert offers[0].departure_at is None


@pytest.mark.asyncio
async def test_nested_itinerary_stop_count(mock_http, query):
    payload = {"flights": [{"price": "99.5", "itinerary": {"stops": 2}}], "currency": "usd"}
    client = _client(mock_http, lambda request: httpx.Response(200, json=payload))

    offers = await client.search(query)

    assert offers[0].stops == 2
    assert offers[0].currency == "USD"


@pytest.mark.asyncio
async def test_fares_without_price_are_dropped(mock_http, query, caplog):
    payload = [{"price": None, "airline": "LH"}, {"price": "n/a"}, {"price": 0}]
    client = _client(mock_http, lambda request: httpx.Response(200, json=payload))

    with caplog.at_level("WARNING"), pytest.raises(EmptyResult):
        await client.search(query)

    assert "fare dropped" in caplog.text


@pytest.mark.asyncio
async def test_mixed_currencies_are_a_provider_error(mock_http, query):
    payload = [{"price": 100, "currency": "EUR"}, {"price": 90, "currency": "USD"}]
    client = _client(mock_http, lambda request: httpx.Response(200, json=payload))

    with pytest.raises(ProviderError, match="several currencies"):
        await client.search(query)


@pytest.mark.asyncio
async def test_error_status_carries_upstream_message(mock_http, query):
    client = _client(
        mock_http,
        lambda request: httpx.Response(502, json={"detail": "Amadeus search failed"}),
    )

    with pytest.raises(ProviderError) as exc_info:
        await client.search(query)

    assert exc_info.value.status_code == 502
    assert "Amadeus search failed" in exc_info.value.message


@pytest.mark.asyncio
@pytest.mark.parametrize("error_cls", [httpx.ConnectError, httpx.ReadTimeout])
async def test_transport_errors_are_network_failures(mock_http, query, error_cls):
    def handler(request: httpx.Request) -> httpx.Response:
        raise error_cls("boom", request=request)

    with pytest.raises(NetworkFailure):
        await _client(mock_http, handler).search(query)


@pytest.mark.asyncio
async def test_invalid_json_is_a_provider_error(mock_http, query):
    client = _client(mock_http, lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(ProviderError, match="not valid JSON"):
        await client.search(query)


@pytest.mark.asyncio
async def test_unknown_shape_is_a_provider_error(mock_http, query):
    client = _client(mock_http, lambda request: httpx.Response(200, json={"status": "ok"}))

    with pytest.raises(ProviderError, match="unrecognized"):
        await client.search(query)


@pytest.mark.asyncio
async def test_missing_date_fails_before_request(mock_http):
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[])

    with pytest.raises(MalformedQuery):
        await _client(mock_http, handler).search(SearchQuery.create("FRA", "KUL"))

    assert calls == []


@pytest.mark.asyncio
async def test_undecodable_content_encoding_is_a_provider_error(mock_http, query):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            headers={"Content-Encoding": "gzip"},
            stream=httpx.ByteStream(b"not gzip at all"),
        )

    with pytest.raises(ProviderError):
        await _client(mock_http, handler).search(query)


@pytest.mark.asyncio
async def test_fractional_stop_count_is_unknown(mock_http, query):
    payload = [{"price": 120, "currency": "EUR", "stops": 1.7}, {"price": 130, "stops": 2.0}]
    client = _client(mock_http, lambda request: httpx.Response(200, json=payload))

    offers = await client.search(query)

    assert [o.stops for o in offers] == [None, 2]
