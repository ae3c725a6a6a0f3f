"""HTTP surface of the Fare Aggregator service."""

from fare_aggregator.api.routes import router

__all__ = ["router"]
