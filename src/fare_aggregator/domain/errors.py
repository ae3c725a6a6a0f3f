"""Error taxonomy for the fare aggregation path."""

from __future__ import annotations

from enum import StrEnum


class FailureKind(StrEnum):
    """Why a single provider attempt did not yield offers."""

    NETWORK_FAILURE = "network_failure"
    PROVIDER_ERROR = "provider_error"
    EMPTY_RESULT = "empty_result"
    SKIPPED = "skipped"


class AggregatorError(Exception):
    """Base class for all aggregation errors."""


class MalformedQuery(AggregatorError, ValueError):
    """Raised when origin, destination or date violate the query rules."""


class ProviderFailure(AggregatorError):
    """Raised by a provider client when a search attempt fails."""

    kind: FailureKind = FailureKind.PROVIDER_ERROR

    def __init__(self, provider_id: str, message: str, status_code: int | None = None) -> None:
        """
        Initialize provider failure.

        Args:
            provider_id: Identifier of the failing provider
            message: Human readable reason, upstream message when available
            status_code: HTTP status returned by the provider, if any
        """
        self.provider_id = provider_id
        self.message = message
        self.status_code = status_code
        super().__init__(f"{provider_id}: {message}")


class NetworkFailure(ProviderFailure):
    """Connection problem or timeout while talking to a provider."""

    kind = FailureKind.NETWORK_FAILURE


class ProviderError(ProviderFailure):
    """Provider answered with a non-success status or an unusable body."""

    kind = FailureKind.PROVIDER_ERROR


class EmptyResult(ProviderFailure):
    """Provider answered successfully but had no offers."""

    kind = FailureKind.EMPTY_RESULT

    def __init__(self, provider_id: str, message: str = "no offers returned") -> None:
        super().__init__(provider_id, message)
