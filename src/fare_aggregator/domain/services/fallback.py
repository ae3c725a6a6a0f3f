"""Sequential provider fallback: first provider with offers wins."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..errors import FailureKind, MalformedQuery, NetworkFailure, ProviderFailure
from ..models import AggregateFailure, Offer, ProviderFailureInfo, SearchQuery, SearchResult
from ..ports.flight_provider import FlightProviderProtocol

logger = logging.getLogger(__name__)


class FallbackOrchestrator:
    """
    Query providers one by one in priority order.

    Results are never merged across providers: each provider quotes its own
    live prices, so the offers returned always come from a single source.
    Offers handed over by a provider must share one currency.
    """

    def __init__(self, provider_timeout: float | None = None) -> None:
        """
        Initialize orchestrator.

        Args:
            provider_timeout: Upper bound in seconds for each provider call.
                Exceeding it counts as a network failure.
        """
        self._provider_timeout = provider_timeout

    async def search_with_fallback(
        self,
        query: SearchQuery,
        providers: Iterable[FlightProviderProtocol],
        log_extra: Mapping[str, Any] | None = None,
    ) -> SearchResult | AggregateFailure:
        """
        Return offers of the first provider that has any.

        Args:
            query: Validated search query
            providers: Candidate providers, ordered by `spec.priority`
            log_extra: Extra fields attached to every log record

        Returns:
            SearchResult on the first non-empty answer, otherwise an
            AggregateFailure listing one reason per provider in order
        """
        extra = dict(log_extra or {})
        failures: list[ProviderFailureInfo] = []

        for provider in sorted(providers, key=lambda p: p.spec.priority):
            provider_id = provider.spec.id

            if provider.spec.requires_date and query.departure_date is None:
                logger.info(
                    "provider skipped, departure date required",
                    extra={**extra, "provider": provider_id},
                )
                failures.append(
                    ProviderFailureInfo(
                        provider_id=provider_id,
                        kind=FailureKind.SKIPPED,
                        message="provider requires a departure date",
                    )
                )
                continue

            try:
                offers = await self._call(provider, query)
            except ProviderFailure as e:
                logger.warning(
                    "provider attempt failed",
                    extra={
                        **extra,
                        "provider": provider_id,
                        "kind": str(e.kind),
                        "error": e.message,
                    },
                )
                failures.append(ProviderFailureInfo.from_exception(e))
                continue
            except MalformedQuery as e:
                logger.warning(
                    "provider rejected query",
                    extra={**extra, "provider": provider_id, "error": str(e)},
                )
                failures.append(
                    ProviderFailureInfo(
                        provider_id=provider_id,
                        kind=FailureKind.PROVIDER_ERROR,
                        message=str(e),
                    )
                )
                continue
            except Exception as e:
                logger.exception(
                    "unexpected error from provider",
                    extra={**extra, "provider": provider_id},
                )
                failures.append(
                    ProviderFailureInfo(
                        provider_id=provider_id,
                        kind=FailureKind.PROVIDER_ERROR,
                        message=f"{type(e).__name__}: {e}",
                    )
                )
                continue

            if not offers:
                failures.append(
                    ProviderFailureInfo(
                        provider_id=provider_id,
                        kind=FailureKind.EMPTY_RESULT,
                        message="no offers returned",
                    )
                )
                continue

            result = SearchResult.from_offers(query, provider_id, offers)
            logger.info(
                "provider answered",
                extra={
                    **extra,
                    "provider": provider_id,
                    "offers_count": len(result.offers),
                    "lowest_price": str(result.lowest_price),
                },
            )
            return result

        logger.error(
            "all providers exhausted",
            extra={**extra, "failures": [f.kind.value for f in failures]},
        )
        return AggregateFailure(query=query, failures=tuple(failures))

    async def _call(self, provider: FlightProviderProtocol, query: SearchQuery) -> list[Offer]:
        if self._provider_timeout is None:
            return await provider.search(query)
        try:
            return await asyncio.wait_for(provider.search(query), timeout=self._provider_timeout)
        except TimeoutError:
            raise NetworkFailure(
                provider.spec.id,
                f"no answer within {self._provider_timeout:g}s",
            ) from None
