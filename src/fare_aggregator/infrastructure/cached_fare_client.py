"""Client for the cached fare provider (GET by route, optional date)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..domain.errors import EmptyResult, ProviderError
from ..domain.models import Offer, SearchQuery, normalize_iata_code
from ..domain.ports.flight_provider import ProviderSpec
from .http_provider import (
    HttpProviderClient,
    ensure_single_currency,
    parse_currency,
    parse_datetime,
    parse_price,
    parse_stops,
    parse_text,
    raise_for_failed_payload,
)

logger = logging.getLogger(__name__)

CACHED_FARES_ID = "cached_fares"


@dataclass(slots=True)
class CachedFareNormalizer:
    """Map `{success, lowest_price, flights[]}` payloads onto Offer."""

    provider_id: str
    default_currency: str

    def normalize(self, payload: Any) -> list[Offer]:
        if not isinstance(payload, dict):
            raise ProviderError(self.provider_id, "unrecognized response shape")
        raise_for_failed_payload(self.provider_id, payload)

        flights = payload.get("flights") or []
        if not isinstance(flights, list):
            raise ProviderError(self.provider_id, "`flights` is not a list")

        payload_currency = parse_currency(payload.get("currency"))
        offers: list[Offer] = []
        for flight in flights:
            if not isinstance(flight, dict):
                continue
            price = parse_price(flight.get("price"))
            if price is None:
                logger.warning(
                    "flight dropped, no usable price",
                    extra={"provider": self.provider_id, "raw_price": flight.get("price")},
                )
                continue
            offers.append(
                Offer(
                    price=price,
                    currency=(
                        parse_currency(flight.get("currency"))
                        or payload_currency
                        or self.default_currency
                    ),
                    airline_name=parse_text(flight.get("airline")),
                    stops=parse_stops(flight.get("stops")),
                    departure_at=parse_datetime(flight.get("departure_at")),
                    provider_id=self.provider_id,
                )
            )
        return offers


class CachedFareClient(HttpProviderClient):
    """Look up recently observed fares for a route."""

    def __init__(self, spec: ProviderSpec, http_client: httpx.AsyncClient) -> None:
        super().__init__(spec, http_client)
        self._normalizer = CachedFareNormalizer(
            provider_id=spec.id,
            default_currency=spec.default_currency,
        )

    def build_request(self, query: SearchQuery) -> tuple[str, dict[str, str]]:
        """Return request path and query parameters."""
        origin = normalize_iata_code(query.origin, "origin")
        destination = normalize_iata_code(query.destination, "destination")
        params: dict[str, str] = {}
        if query.departure_date is not None:
            params["date"] = self.spec.format_date(query.departure_date)
        return f"/travelpayouts/prices/{origin}/{destination}", params

    async def search(self, query: SearchQuery) -> list[Offer]:
        path, params = self.build_request(query)
        payload = await self._request_json("GET", path, params=params)
        offers = self._normalizer.normalize(payload)
        if not offers:
            raise EmptyResult(self.spec.id)
        ensure_single_currency(self.spec.id, offers)
        logger.debug(
            "cached fares normalized",
            extra={"provider": self.spec.id, "offers_count": len(offers)},
        )
        return offers
