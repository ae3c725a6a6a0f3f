"""Contracts for external flight-price providers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Protocol

from ..models import Offer, SearchQuery


@dataclass(frozen=True, slots=True)
class ProviderSpec:
    """Static description of a provider, fixed at start-up."""

    id: str
    priority: int
    date_format: str = "%Y-%m-%d"
    requires_date: bool = False
    default_currency: str = "EUR"

    def format_date(self, value: date) -> str:
        """Render a departure date the way this provider's search API expects it."""
        return value.strftime(self.date_format)


class FlightProviderProtocol(Protocol):
    """Port describing a single price provider."""

    spec: ProviderSpec

    async def search(self, query: SearchQuery) -> list[Offer]:
        """
        Return normalized offers for the query.

        Raises NetworkFailure, ProviderError or EmptyResult on failure and
        MalformedQuery when a request cannot be built from the query.
        """
