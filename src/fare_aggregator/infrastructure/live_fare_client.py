"""Client for the live fare provider (POST search, heterogeneous fare objects)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

import httpx

from ..domain.errors import EmptyResult, MalformedQuery, ProviderError
from ..domain.models import Offer, SearchQuery, normalize_iata_code
from ..domain.ports.flight_provider import ProviderSpec
from .http_provider import (
    HttpProviderClient,
    ensure_single_currency,
    parse_currency,
    parse_datetime,
    parse_price,
    parse_stops,
    raise_for_failed_payload,
)

logger = logging.getLogger(__name__)

LIVE_FARES_ID = "live_fares"

# Checked in order; the first present value wins.
AIRLINE_KEYS = ("airline_name", "airline", "validating_airline")
STOPS_KEYS = ("stops", "transfers")
DEPARTURE_KEYS = ("departure_at", "departure_time")
LIST_KEYS = ("data", "flights", "offers", "results")


@dataclass(slots=True)
class LiveFareNormalizer:
    """Map raw live-fare objects onto Offer, leaving unknown fields as None."""

    provider_id: str
    default_currency: str

    def normalize(self, payload: Any) -> list[Offer]:
        fares = self._extract_fares(payload)
        payload_currency = (
            parse_currency(payload.get("currency")) if isinstance(payload, dict) else None
        )
        offers: list[Offer] = []
        for fare in fares:
            if not isinstance(fare, dict):
                continue
            offer = self._build_offer(fare, payload_currency)
            if offer is None:
                logger.warning(
                    "fare dropped, no usable price",
                    extra={"provider": self.provider_id, "fare_id": fare.get("id")},
                )
                continue
            offers.append(offer)
        return offers

    def _extract_fares(self, payload: Any) -> list[Any]:
        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict):
            raise_for_failed_payload(self.provider_id, payload)
            for key in LIST_KEYS:
                value = payload.get(key)
                if isinstance(value, list):
                    return value
        raise ProviderError(self.provider_id, "unrecognized response shape")

    def _build_offer(self, fare: dict[str, Any], payload_currency: str | None) -> Offer | None:
        price, price_currency = self._price(fare)
        if price is None:
            return None
        currency = (
            parse_currency(fare.get("currency"))
            or price_currency
            or payload_currency
            or self.default_currency
        )
        return Offer(
            price=price,
            currency=currency,
            airline_name=self._airline(fare),
            stops=self._stops(fare),
            departure_at=self._departure(fare),
            provider_id=self.provider_id,
        )

    @staticmethod
    def _price(fare: dict[str, Any]) -> tuple[Decimal | None, str | None]:
        raw = fare.get("price")
        if isinstance(raw, dict):
            value = raw.get("total") or raw.get("grandTotal") or raw.get("amount")
            return parse_price(value), parse_currency(raw.get("currency"))
        return parse_price(raw), None

    @staticmethod
    def _airline(fare: dict[str, Any]) -> str | None:
        for key in AIRLINE_KEYS:
            value = fare.get(key)
            if isinstance(value, list):
                value = value[0] if value else None
            if isinstance(value, str) and value.strip():
                return value.strip()
        return None

    @staticmethod
    def _stops(fare: dict[str, Any]) -> int | None:
        for key in STOPS_KEYS:
            stops = parse_stops(fare.get(key))
            if stops is not None:
                return stops
        itinerary = _first_itinerary(fare)
        if itinerary is None:
            return None
        stops = parse_stops(itinerary.get("stops"))
        if stops is not None:
            return stops
        segments = itinerary.get("segments")
        if isinstance(segments, list) and segments:
            return len(segments) - 1
        return None

    @staticmethod
    def _departure(fare: dict[str, Any]) -> datetime | None:
        for key in DEPARTURE_KEYS:
            value = parse_datetime(fare.get(key))
            if value is not None:
                return value
        itinerary = _first_itinerary(fare)
        if itinerary is None:
            return None
        segments = itinerary.get("segments")
        if not isinstance(segments, list) or not segments or not isinstance(segments[0], dict):
            return None
        departure = segments[0].get("departure") or {}
        if not isinstance(departure, dict):
            return None
        return parse_datetime(departure.get("at"))


def _first_itinerary(fare: dict[str, Any]) -> dict[str, Any] | None:
    itinerary = fare.get("itinerary")
    if isinstance(itinerary, dict):
        return itinerary
    itineraries = fare.get("itineraries")
    if isinstance(itineraries, list) and itineraries and isinstance(itineraries[0], dict):
        return itineraries[0]
    return None


class LiveFareClient(HttpProviderClient):
    """Search live fares; a departure date is mandatory for this provider."""

    search_path = "/amadeus/search"

    def __init__(
        self,
        spec: ProviderSpec,
        http_client: httpx.AsyncClient,
        adults: int = 1,
        max_results: int = 10,
    ) -> None:
        super().__init__(spec, http_client)
        self._adults = adults
        self._max_results = max_results
        self._normalizer = LiveFareNormalizer(
            provider_id=spec.id,
            default_currency=spec.default_currency,
        )

    def build_request(self, query: SearchQuery) -> dict[str, Any]:
        """Build the JSON body of the search call."""
        if query.departure_date is None:
            raise MalformedQuery(f"{self.spec.id} requires a departure date")
        return {
            "origin": normalize_iata_code(query.origin, "origin"),
            "destination": normalize_iata_code(query.destination, "destination"),
            "departure_date": self.spec.format_date(query.departure_date),
            "adults": self._adults,
            "max_results": self._max_results,
        }

    async def search(self, query: SearchQuery) -> list[Offer]:
        body = self.build_request(query)
        payload = await self._request_json("POST", self.search_path, json=body)
        offers = self._normalizer.normalize(payload)
        if not offers:
            raise EmptyResult(self.spec.id)
        ensure_single_currency(self.spec.id, offers)
        logger.debug(
            "live fares normalized",
            extra={"provider": self.spec.id, "offers_count": len(offers)},
        )
        return offers
