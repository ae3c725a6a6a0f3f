"""Shared HTTP plumbing for provider clients."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from ..domain.errors import NetworkFailure, ProviderError
from ..domain.models import Offer
from ..domain.ports.flight_provider import ProviderSpec

logger = logging.getLogger(__name__)


class HttpProviderClient:
    """
    Base for providers reached over HTTP.

    Translates transport problems into NetworkFailure and non-success
    answers into ProviderError; subclasses only build requests and
    normalize payloads.
    """

    def __init__(self, spec: ProviderSpec, http_client: httpx.AsyncClient) -> None:
        """
        Initialize client.

        Args:
            spec: Static provider description
            http_client: Shared client, base URL and timeout already configured
        """
        self.spec = spec
        self._http = http_client

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkFailure(self.spec.id, f"timeout: {e}" if str(e) else "timeout") from e
        except httpx.TransportError as e:
            raise NetworkFailure(self.spec.id, str(e) or type(e).__name__) from e
        except httpx.HTTPError as e:
            # Decoding and redirect errors are not transport problems.
            raise ProviderError(self.spec.id, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise ProviderError(
                self.spec.id,
                self._upstream_message(response),
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            logger.error(
                "provider returned undecodable body",
                extra={"provider": self.spec.id, "status_code": response.status_code},
            )
            raise ProviderError(
                self.spec.id,
                "response body is not valid JSON",
                status_code=response.status_code,
            ) from None

    @staticmethod
    def _upstream_message(response: httpx.Response) -> str:
        fallback = f"HTTP {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            return fallback
        if isinstance(body, dict):
            for key in ("detail", "error", "message"):
                value = body.get(key)
                if value:
                    return f"{fallback}: {value}"
        return fallback


def raise_for_failed_payload(provider_id: str, payload: Any) -> None:
    """Some endpoints answer 200 with `success: false` and an `error` text."""
    if isinstance(payload, dict) and payload.get("success") is False:
        message = payload.get("error") or payload.get("detail") or "provider reported failure"
        raise ProviderError(provider_id, str(message))


def ensure_single_currency(provider_id: str, offers: list[Offer]) -> None:
    currencies = sorted({offer.currency for offer in offers})
    if len(currencies) > 1:
        raise ProviderError(provider_id, f"offers quoted in several currencies: {currencies}")


def parse_price(value: Any) -> Decimal | None:
    """Positive Decimal from a number or numeric string, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not price.is_finite() or price <= 0:
        return None
    return price


def parse_stops(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        stops = int(value)
    except (TypeError, ValueError):
        return None
    return stops if stops >= 0 else None


def parse_datetime(value: Any) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_currency(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    code = value.strip().upper()
    if len(code) == 3 and code.isascii() and code.isalpha():
        return code
    return None


def parse_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
