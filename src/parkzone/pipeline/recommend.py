"""Destination parking recommendation — paid first, residential alongside.

Takes a destination that an external resolver already geocoded and
returns the ranked paid zones plus residential permit zones near it.

Policy:
  1. Paid candidates come from the paid index, restricted to zones with a
     pay-by-phone number, deduplicated by that number. None at all is a
     terminal NO_PAID_ZONES failure.
  2. If the nearest paid zone is farther than the downtown cap the caller
     either gets DESTINATION_TOO_FAR or, with enforcement off, the results
     flagged ``within_downtown_distance=False``.
  3. Residential candidates use their own, smaller cap. An empty list is
     a normal outcome explained by a fixed warning string.
"""

import logging
import math

from parkzone.core.types import (
    PaidRecommendation,
    ParkingRecommendation,
    ResidentialRecommendation,
    ResolvedDestination,
)
from parkzone.observability.tracing import start_span, trace
from parkzone.pipeline.geometry import round_meters
from parkzone.retrieval.datasets import PERMIT_REQUIRED, has_secondary_code, paid_zone_number
from parkzone.retrieval.zone_index import ZoneIndex, clamp_limit

logger = logging.getLogger(__name__)

MAX_DESTINATION_DISTANCE_METERS = 1000
MIN_DOWNTOWN_DISTANCE_METERS = 100
MAX_RESIDENTIAL_RECOMMENDATION_DISTANCE_METERS = 500
DEFAULT_RECOMMENDATION_LIMIT = 5

NO_PAID_ZONES = "NO_PAID_ZONES"
DESTINATION_TOO_FAR = "DESTINATION_TOO_FAR"


def no_nearby_residential_warning(max_distance_meters: float = MAX_RESIDENTIAL_RECOMMENDATION_DISTANCE_METERS) -> str:
    return f"No residential zones found within {max_distance_meters:g}m of the destination."


NO_NEARBY_RESIDENTIAL_WARNING = no_nearby_residential_warning()


class RecommendationError(Exception):
    """A policy outcome the caller must handle, not an empty result.

    Attributes:
        code: machine-readable reason (NO_PAID_ZONES, DESTINATION_TOO_FAR).
        status_code: HTTP status an API layer should answer with.
    """

    def __init__(self, message: str, code: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


def normalize_recommendation_limit(value, fallback: int = DEFAULT_RECOMMENDATION_LIMIT) -> int:
    """Clamp a requested limit to [1, 5]; junk input falls back to 5."""
    return clamp_limit(value, fallback=fallback)


def _downtown_cap(value: float | None) -> int:
    if value is None or not math.isfinite(value):
        value = MAX_DESTINATION_DISTANCE_METERS
    return max(MIN_DOWNTOWN_DISTANCE_METERS, math.floor(value))


@trace(name="recommend_parking", span_type="CHAIN")
def recommend_parking(
    destination: ResolvedDestination,
    paid_index: ZoneIndex,
    residential_index: ZoneIndex,
    limit=None,
    enforce_downtown_distance: bool = True,
    max_downtown_distance_meters: float | None = None,
    max_residential_distance_meters: float = MAX_RESIDENTIAL_RECOMMENDATION_DISTANCE_METERS,
) -> ParkingRecommendation:
    """Build the recommendation payload for a resolved destination.

    Raises:
        RecommendationError: NO_PAID_ZONES when the paid index yields no
            candidate; DESTINATION_TOO_FAR when enforcement is on and the
            nearest paid zone is beyond the downtown cap.
    """
    limit = normalize_recommendation_limit(limit)
    max_downtown = _downtown_cap(max_downtown_distance_meters)
    lat, lng = destination.latitude, destination.longitude

    with start_span(name="paid_candidates") as span:
        span.set_inputs({"lat": lat, "lng": lng, "limit": limit})
        paid = paid_index.recommend(
            lat, lng, limit,
            predicate=has_secondary_code,
            dedup_key=paid_zone_number,
        )
        span.set_outputs({"count": len(paid)})

    if not paid:
        logger.warning("No paid zones for destination: %s", destination.destination)
        raise RecommendationError(
            "No paid downtown parking zones were found for this destination.",
            NO_PAID_ZONES,
            502,
        )

    nearest = paid[0].distance_meters
    within_downtown = nearest <= max_downtown
    if not within_downtown and enforce_downtown_distance:
        raise RecommendationError(
            f"Destination is too far from downtown paid parking zones ({round_meters(nearest)}m away). "
            f"Please refine your destination or choose one closer to downtown San Luis Obispo "
            f"(within {max_downtown}m).",
            DESTINATION_TOO_FAR,
            422,
        )

    with start_span(name="residential_candidates") as span:
        span.set_inputs({"max_distance_meters": max_residential_distance_meters})
        residential = residential_index.recommend(
            lat, lng, limit,
            max_distance_meters=max_residential_distance_meters,
        )
        span.set_outputs({"count": len(residential)})

    street = destination.street
    recommendations = [
        PaidRecommendation(
            zone_number=item.zone_key,
            price=item.zone.attributes.rate_label,
            street=street,
            intended_destination=destination.destination,
            distance_meters=item.distance_meters,
            zone_lat=item.nearest_point.lat,
            zone_lng=item.nearest_point.lng,
            source_type=item.zone.attributes.zone_type,
            source_object_id=item.zone.attributes.object_id,
            provisional_reason=item.zone.provisional_reason,
        )
        for item in paid
    ]
    residential_recommendations = [
        ResidentialRecommendation(
            zone_number=item.zone.zone_id,
            price=PERMIT_REQUIRED,
            street=street,
            intended_destination=destination.destination,
            distance_meters=item.distance_meters,
            zone_lat=item.nearest_point.lat,
            zone_lng=item.nearest_point.lng,
            district=item.zone.attributes.district,
            hours=item.zone.attributes.hours,
            description=item.zone.attributes.description,
        )
        for item in residential
    ]

    warnings: list[str] = []
    if not residential_recommendations:
        warnings.append(no_nearby_residential_warning(max_residential_distance_meters))

    logger.info(
        "Recommended %d paid / %d residential zones for %s",
        len(recommendations), len(residential_recommendations), destination.destination,
        extra={"distance_m": round(nearest, 1)},
    )

    return ParkingRecommendation(
        destination=destination.destination,
        street=street,
        destination_lat=lat,
        destination_lng=lng,
        nearest_parking_distance_meters=nearest,
        recommendations=recommendations,
        residential_recommendations=residential_recommendations,
        warnings=warnings,
        has_paid_candidates=True,
        within_downtown_distance=within_downtown,
        max_downtown_distance_meters=max_downtown,
    )
