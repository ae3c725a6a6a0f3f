"""Single entry point combining price lookup and booking links."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any
from uuid import uuid4

from ..errors import MalformedQuery
from ..models import (
    AggregateFailure,
    AggregateResponse,
    AggregateStatus,
    SearchQuery,
    SearchResult,
)
from ..ports.flight_provider import FlightProviderProtocol
from .booking_links import (
    DEFAULT_LINK_CONFIG,
    BookingLinkConfig,
    BookingPartner,
    booking_link,
)
from .fallback import FallbackOrchestrator

logger = logging.getLogger(__name__)


class AggregatorFacade:
    """Validate the query, find offers, attach booking links."""

    def __init__(
        self,
        providers: Iterable[FlightProviderProtocol],
        orchestrator: FallbackOrchestrator | None = None,
        link_config: BookingLinkConfig = DEFAULT_LINK_CONFIG,
        partners: Iterable[BookingPartner | str] = tuple(BookingPartner),
    ) -> None:
        self._providers = tuple(sorted(providers, key=lambda p: p.spec.priority))
        self._orchestrator = orchestrator or FallbackOrchestrator()
        self._link_config = link_config
        self._partners = tuple(partners)

    @property
    def provider_ids(self) -> list[str]:
        return [p.spec.id for p in self._providers]

    async def aggregate(
        self,
        origin: Any,
        destination: Any,
        departure_date: Any = None,
    ) -> AggregateResponse:
        """
        Search offers and build booking links for one route.

        Links are produced even when every provider failed, so the caller can
        still send the user to a partner's own search page.

        Raises:
            MalformedQuery: If the query is invalid. No provider is called.
        """
        query = SearchQuery.create(origin, destination, departure_date)
        search_id = self._generate_search_id()
        extra = {"search_id": search_id}
        logger.info(
            "aggregate called",
            extra={
                **extra,
                "origin": query.origin,
                "destination": query.destination,
                "departure_date": str(query.departure_date),
            },
        )

        result = await self._orchestrator.search_with_fallback(
            query, self._providers, log_extra=extra
        )
        links, link_errors = self._build_links(query, extra)
        status = self._status(result)

        logger.info(
            "aggregate finished",
            extra={**extra, "status": status.value, "links": len(links)},
        )
        return AggregateResponse(
            search_id=search_id,
            status=status,
            result=result,
            links=links,
            link_errors=link_errors,
        )

    def links_for(self, query: SearchQuery) -> tuple[dict[str, str], dict[str, str]]:
        """Return booking links and per-partner errors without calling providers."""
        return self._build_links(query, {})

    def _build_links(
        self,
        query: SearchQuery,
        extra: dict[str, Any],
    ) -> tuple[dict[str, str], dict[str, str]]:
        links: dict[str, str] = {}
        errors: dict[str, str] = {}
        for partner in self._partners:
            key = str(partner)
            try:
                links[key] = booking_link(
                    partner,
                    query.origin,
                    query.destination,
                    query.departure_date,
                    config=self._link_config,
                )
            except MalformedQuery as e:
                logger.warning(
                    "booking link not generated",
                    extra={**extra, "partner": key, "error": str(e)},
                )
                errors[key] = str(e)
        return links, errors

    @staticmethod
    def _status(result: SearchResult | AggregateFailure) -> AggregateStatus:
        if isinstance(result, SearchResult):
            return AggregateStatus.OFFERS
        if result.no_offers:
            return AggregateStatus.NO_OFFERS
        return AggregateStatus.FAILED

    @staticmethod
    def _generate_search_id() -> str:
        return uuid4().hex
