"""Domain models shared by providers, orchestrator and facade."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from .errors import FailureKind, MalformedQuery, ProviderFailure

IATA_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def normalize_iata_code(value: Any, field: str = "code") -> str:
    """Upper-case and validate a 3-letter IATA airport or city code."""
    if not isinstance(value, str):
        raise MalformedQuery(f"{field} must be a string, got {type(value).__name__}")
    code = value.strip().upper()
    if not IATA_CODE_PATTERN.match(code):
        raise MalformedQuery(f"{field} must be a 3-letter IATA code, got {value!r}")
    return code


def parse_departure_date(value: Any) -> date | None:
    """Accept a date, a datetime or an ISO `YYYY-MM-DD` string; empty means no date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        # fromisoformat also takes basic and week forms such as 20250305
        if DATE_PATTERN.match(text):
            try:
                return date.fromisoformat(text)
            except ValueError:
                pass
        raise MalformedQuery(f"departure date must be YYYY-MM-DD, got {value!r}")
    raise MalformedQuery(f"departure date has unsupported type {type(value).__name__}")


class SearchQuery(BaseModel):
    """Origin, destination and optional departure date of one search."""

    model_config = ConfigDict(frozen=True)

    origin: str
    destination: str
    departure_date: date | None = None

    @field_validator("origin", "destination", mode="before")
    @classmethod
    def _validate_code(cls, value: Any, info: ValidationInfo) -> str:
        return normalize_iata_code(value, info.field_name)

    @field_validator("departure_date", mode="before")
    @classmethod
    def _validate_date(cls, value: Any) -> date | None:
        return parse_departure_date(value)

    @model_validator(mode="after")
    def _check_route(self) -> SearchQuery:
        if self.origin == self.destination:
            raise ValueError("origin and destination must differ")
        return self

    @classmethod
    def create(
        cls,
        origin: Any,
        destination: Any,
        departure_date: Any = None,
    ) -> SearchQuery:
        """
        Build a validated query.

        Raises:
            MalformedQuery: If any code or the date is invalid, or origin equals destination
        """
        origin = normalize_iata_code(origin, "origin")
        destination = normalize_iata_code(destination, "destination")
        parsed_date = parse_departure_date(departure_date)
        if origin == destination:
            raise MalformedQuery(f"origin and destination must differ, got {origin} twice")
        try:
            return cls(origin=origin, destination=destination, departure_date=parsed_date)
        except ValidationError as e:
            raise MalformedQuery(str(e)) from None


class Offer(BaseModel):
    """A single bookable fare. `None` fields are unknown, not defaulted."""

    model_config = ConfigDict(frozen=True)

    price: Decimal = Field(gt=0)
    currency: str = Field(pattern=r"^[A-Z]{3}$")
    airline_name: str | None = None
    stops: int | None = Field(default=None, ge=0)
    departure_at: datetime | None = None
    provider_id: str


def lowest_price(offers: Iterable[Offer]) -> Decimal | None:
    """
    Return the minimum price of offers quoted in one currency.

    Providers normalize to a single currency before offers reach this point;
    a mix is a precondition violation and no conversion is attempted.

    Raises:
        ValueError: If offers are quoted in more than one currency
    """
    offers = list(offers)
    if not offers:
        return None
    currencies = {offer.currency for offer in offers}
    if len(currencies) > 1:
        raise ValueError(f"offers mix currencies: {sorted(currencies)}")
    return min(offer.price for offer in offers)


class SearchResult(BaseModel):
    """Offers supplied by the first provider that had any."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["result"] = "result"
    query: SearchQuery
    provider_used: str
    offers: tuple[Offer, ...]
    lowest_price: Decimal | None = None
    currency: str | None = None

    @classmethod
    def from_offers(
        cls,
        query: SearchQuery,
        provider_id: str,
        offers: Iterable[Offer],
    ) -> SearchResult:
        offers = tuple(offers)
        return cls(
            query=query,
            provider_used=provider_id,
            offers=offers,
            lowest_price=lowest_price(offers),
            currency=offers[0].currency if offers else None,
        )


class ProviderFailureInfo(BaseModel):
    """Diagnostic record of one failed provider attempt."""

    model_config = ConfigDict(frozen=True)

    provider_id: str
    kind: FailureKind
    message: str
    status_code: int | None = None

    @classmethod
    def from_exception(cls, error: ProviderFailure) -> ProviderFailureInfo:
        return cls(
            provider_id=error.provider_id,
            kind=error.kind,
            message=error.message,
            status_code=error.status_code,
        )


class AggregateFailure(BaseModel):
    """Every provider was tried and none produced offers."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    query: SearchQuery
    failures: tuple[ProviderFailureInfo, ...]

    @property
    def no_offers(self) -> bool:
        """True when providers answered but the route simply has no fares."""
        answered = [f for f in self.failures if f.kind != FailureKind.SKIPPED]
        return bool(answered) and all(f.kind == FailureKind.EMPTY_RESULT for f in answered)


class AggregateStatus(StrEnum):
    OFFERS = "offers"
    NO_OFFERS = "no_offers"
    FAILED = "failed"


class AggregateResponse(BaseModel):
    """Everything the presentation layer receives for one search."""

    model_config = ConfigDict(frozen=True)

    search_id: str
    status: AggregateStatus
    result: Annotated[SearchResult | AggregateFailure, Field(discriminator="kind")]
    links: dict[str, str] = Field(default_factory=dict)
    link_errors: dict[str, str] = Field(default_factory=dict)
