"""Deep links into booking partners' own search pages."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Any

from ..errors import MalformedQuery
from ..models import normalize_iata_code, parse_departure_date


class BookingPartner(StrEnum):
    AVIASALES = "aviasales"
    SKYSCANNER = "skyscanner"


@dataclass(frozen=True, slots=True)
class BookingLinkConfig:
    """Partner base URLs and affiliate identifiers."""

    aviasales_base_url: str = "https://www.aviasales.com"
    aviasales_marker: str = "485199"
    skyscanner_base_url: str = "https://www.skyscanner.de/transport/fluge"


DEFAULT_LINK_CONFIG = BookingLinkConfig()


def _aviasales_link(origin: str, destination: str, day: date, config: BookingLinkConfig) -> str:
    # Day then month, no year.
    base = config.aviasales_base_url.rstrip("/")
    return (
        f"{base}/search/{origin}{day:%d%m}{destination}1"
        f"?marker={config.aviasales_marker}"
    )


def _skyscanner_link(origin: str, destination: str, day: date, config: BookingLinkConfig) -> str:
    # Two-digit year, month, day; codes lower-case.
    base = config.skyscanner_base_url.rstrip("/")
    return (
        f"{base}/{origin.lower()}/{destination.lower()}/{day:%y%m%d}/"
        "?adultsv2=1&cabinclass=economy&rtn=0"
    )


_LinkFormatter = Callable[[str, str, date, BookingLinkConfig], str]

_FORMATTERS: dict[BookingPartner, _LinkFormatter] = {
    BookingPartner.AVIASALES: _aviasales_link,
    BookingPartner.SKYSCANNER: _skyscanner_link,
}


def resolve_partner(partner: BookingPartner | str) -> BookingPartner:
    try:
        return BookingPartner(partner)
    except ValueError:
        raise MalformedQuery(f"unknown booking partner {partner!r}") from None


def booking_link(
    partner: BookingPartner | str,
    origin: Any,
    destination: Any,
    departure_date: Any,
    config: BookingLinkConfig = DEFAULT_LINK_CONFIG,
) -> str:
    """
    Build the partner's search URL for a one-way, one-adult economy trip.

    Pure and deterministic: the same arguments always give the same URL.

    Args:
        partner: Booking partner identifier
        origin: IATA code of the departure airport
        destination: IATA code of the arrival airport
        departure_date: `date` or ISO `YYYY-MM-DD` string
        config: Partner base URLs and marker

    Returns:
        Absolute URL

    Raises:
        MalformedQuery: For unknown partners, invalid codes or a missing date
    """
    formatter = _FORMATTERS[resolve_partner(partner)]
    origin_code = normalize_iata_code(origin, "origin")
    destination_code = normalize_iata_code(destination, "destination")
    day = parse_departure_date(departure_date)
    if day is None:
        raise MalformedQuery("booking links require a departure date")
    return formatter(origin_code, destination_code, day, config)
