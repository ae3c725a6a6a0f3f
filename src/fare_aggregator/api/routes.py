"""API routes for the Fare Aggregator service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from fare_aggregator.api.dependencies import get_aggregator
from fare_aggregator.domain.errors import MalformedQuery
from fare_aggregator.domain.models import AggregateResponse, SearchQuery
from fare_aggregator.domain.services.aggregator import AggregatorFacade

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/flights")


@router.get(
    "/search",
    response_model=AggregateResponse,
    tags=["flights"],
)
async def search_flights(
    origin: str = Query(description="IATA code of the departure airport"),
    destination: str = Query(description="IATA code of the arrival airport"),
    date: str | None = Query(default=None, description="Departure date, YYYY-MM-DD"),
    aggregator: AggregatorFacade = Depends(get_aggregator),
) -> AggregateResponse:
    """
    Return offers of the first provider that has any, plus booking links.

    Provider failures are reported in the body with status `failed` or
    `no_offers`; only malformed input yields an error status.
    """
    logger.info(
        "search_flights called",
        extra={"event": "call", "origin": origin, "destination": destination, "date": date},
    )
    try:
        response = await aggregator.aggregate(origin, destination, date)
    except MalformedQuery as e:
        logger.info("search_flights rejected", extra={"event": "rejected", "error": str(e)})
        raise HTTPException(status_code=422, detail=str(e)) from None

    logger.info(
        "search_flights finished",
        extra={
            "search_id": response.search_id,
            "status": response.status.value,
        },
    )
    return response


@router.get("/links", tags=["flights"])
async def get_booking_links(
    origin: str = Query(description="IATA code of the departure airport"),
    destination: str = Query(description="IATA code of the arrival airport"),
    date: str | None = Query(default=None, description="Departure date, YYYY-MM-DD"),
    aggregator: AggregatorFacade = Depends(get_aggregator),
) -> dict[str, dict[str, str]]:
    """Return booking partner links for a route without querying providers."""
    try:
        query = SearchQuery.create(origin, destination, date)
    except MalformedQuery as e:
        raise HTTPException(status_code=422, detail=str(e)) from None

    links, errors = aggregator.links_for(query)
    return {"links": links, "link_errors": errors}
