"""API route handlers for parkzone.

POST /api/v1/current-zone: classify a GPS fix (paid, residential, none)
POST /api/v1/recommend: ranked parking for a resolved destination
GET  /api/v1/zones/{dataset}: zone listing with crosswalk annotations
GET  /api/v1/search-bias: circle for biasing external place search

Handlers only translate between HTTP and the engine; the zone indexes
are built once at startup and read from app.state.
"""

import logging
from dataclasses import asdict
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from parkzone.api.schemas import (
    CurrentZoneRequest,
    CurrentZoneResultResponse,
    ErrorResponse,
    LocationResponse,
    RecommendRequest,
    RecommendResponse,
    SearchBiasResponse,
    ZoneSummaryResponse,
)
from parkzone.config import settings
from parkzone.core.types import ResolvedDestination, SearchBias
from parkzone.pipeline.current_zone import resolve_current_zone
from parkzone.pipeline.recommend import RecommendationError, recommend_parking
from parkzone.retrieval.datasets import ZoneIndexes

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["parking"])


def get_indexes(request: Request) -> ZoneIndexes:
    """Zone indexes built during startup."""
    indexes = getattr(request.app.state, "indexes", None)
    if indexes is None:
        raise HTTPException(status_code=503, detail="Zone indexes are not loaded")
    return indexes


@router.post("/current-zone", response_model=CurrentZoneResultResponse)
async def current_zone(body: CurrentZoneRequest, indexes: ZoneIndexes = Depends(get_indexes)):
    """Resolve which parking zone a coordinate is in."""
    result = resolve_current_zone(
        body.lat,
        body.lng,
        indexes.paid,
        indexes.residential,
        accuracy_meters=body.accuracy_meters,
        fallback_meters=settings.nearest_fallback_meters,
        poor_gps_warning_meters=settings.poor_gps_warning_meters,
    )
    return CurrentZoneResultResponse(
        location=LocationResponse(lat=result.lat, lng=result.lng, accuracy_meters=result.accuracy_meters),
        zone=asdict(result.zone),
        snapshot_at=result.snapshot_at,
        warnings=result.warnings,
    )


@router.post(
    "/recommend",
    response_model=RecommendResponse,
    responses={
        422: {"model": ErrorResponse, "description": "Destination too far from paid parking"},
        502: {"model": ErrorResponse, "description": "No paid zones for destination"},
    },
)
async def recommend(body: RecommendRequest, indexes: ZoneIndexes = Depends(get_indexes)):
    """Recommend paid and residential parking near a resolved destination."""
    destination = ResolvedDestination(
        destination=body.destination.strip(),
        street=body.street,
        latitude=body.latitude,
        longitude=body.longitude,
    )
    try:
        result = recommend_parking(
            destination,
            indexes.paid,
            indexes.residential,
            limit=body.limit if body.limit is not None else settings.default_recommendation_limit,
            enforce_downtown_distance=body.enforce_downtown_distance,
            max_downtown_distance_meters=settings.max_downtown_distance_meters,
            max_residential_distance_meters=settings.max_residential_distance_meters,
        )
    except RecommendationError as e:
        logger.info("Recommendation refused for %s: %s", destination.destination, e.code)
        return JSONResponse(
            status_code=e.status_code,
            content=ErrorResponse(detail=e.message, error_type=e.code).model_dump(),
        )

    return RecommendResponse(**asdict(result))


@router.get("/zones/{dataset}", response_model=list[ZoneSummaryResponse])
async def list_zones(dataset: Literal["paid", "residential"], indexes: ZoneIndexes = Depends(get_indexes)):
    """Every zone in a dataset with its secondary code and resolution status."""
    index = indexes.paid if dataset == "paid" else indexes.residential
    return index.summaries()


@router.get("/search-bias", response_model=SearchBiasResponse)
async def search_bias(indexes: ZoneIndexes = Depends(get_indexes)):
    """Where an external place search should look for destinations."""
    fallback = SearchBias(
        latitude=settings.search_bias_latitude,
        longitude=settings.search_bias_longitude,
        radius_meters=settings.search_bias_radius_meters,
    )
    return asdict(indexes.paid.search_bias(fallback))
