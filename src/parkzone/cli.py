"""parkzone CLI — current-zone and destination recommendation lookups."""

import logging
import sys

from parkzone.config import settings
from parkzone.core.types import ResolvedDestination
from parkzone.ingestion.loader import DatasetError
from parkzone.pipeline.current_zone import resolve_current_zone
from parkzone.pipeline.geometry import round_meters
from parkzone.pipeline.recommend import RecommendationError, recommend_parking
from parkzone.retrieval.datasets import ZoneIndexes, load_indexes


def _setup() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _parse_floats(args: list[str]) -> list[float] | None:
    try:
        return [float(a) for a in args]
    except ValueError:
        return None


def _load() -> ZoneIndexes:
    try:
        return load_indexes(settings)
    except DatasetError as e:
        print(f"Could not load zone datasets: {e}")
        sys.exit(2)


def zone_main() -> None:
    """Which zone is a coordinate in: parkzone-zone <lat> <lng> [accuracy_m]"""
    _setup()

    values = _parse_floats(sys.argv[1:])
    if not values or len(values) not in (2, 3):
        print("Usage: parkzone-zone <lat> <lng> [accuracy_m]")
        print("  Example: parkzone-zone 35.2810 -120.6630 15")
        sys.exit(1)

    lat, lng = values[0], values[1]
    accuracy = values[2] if len(values) == 3 else None

    indexes = _load()
    result = resolve_current_zone(
        lat, lng, indexes.paid, indexes.residential,
        accuracy_meters=accuracy,
        fallback_meters=settings.nearest_fallback_meters,
        poor_gps_warning_meters=settings.poor_gps_warning_meters,
    )

    zone = result.zone
    print(f"\n{zone.message}")
    print(f"  Category:   {zone.category} ({zone.match_type})")
    if zone.zone_number:
        print(f"  Zone:       {zone.zone_number}")
    if zone.rate:
        print(f"  Rate:       {zone.rate}")
    if zone.district:
        print(f"  District:   {zone.district}")
    if zone.hours:
        print(f"  Hours:      {zone.hours}")
    print(f"  Payment:    {zone.payment_entry_label}")
    for warning in result.warnings:
        print(f"  ! {warning}")


def recommend_main() -> None:
    """Parking near a destination: parkzone-recommend <lat> <lng> [limit]"""
    _setup()

    values = _parse_floats(sys.argv[1:])
    if not values or len(values) not in (2, 3):
        print("Usage: parkzone-recommend <lat> <lng> [limit]")
        print("  Example: parkzone-recommend 35.2800 -120.6640 3")
        sys.exit(1)

    lat, lng = values[0], values[1]
    limit = values[2] if len(values) == 3 else settings.default_recommendation_limit

    indexes = _load()
    destination = ResolvedDestination(destination=f"{lat:.5f}, {lng:.5f}", latitude=lat, longitude=lng)
    try:
        result = recommend_parking(
            destination, indexes.paid, indexes.residential,
            limit=limit,
            enforce_downtown_distance=settings.enforce_downtown_distance,
            max_downtown_distance_meters=settings.max_downtown_distance_meters,
            max_residential_distance_meters=settings.max_residential_distance_meters,
        )
    except RecommendationError as e:
        print(f"\n[{e.code}] {e.message}")
        sys.exit(1)

    print(f"\nParking near {result.destination}")
    print(f"  Nearest paid zone: {round_meters(result.nearest_parking_distance_meters)}m")
    if not result.within_downtown_distance:
        print(f"  (outside the {result.max_downtown_distance_meters}m downtown limit)")

    print("\nPaid:")
    for rec in result.recommendations:
        line = f"  Zone {rec.zone_number:<8} {rec.price:<28} {round_meters(rec.distance_meters):>5}m"
        if rec.provisional_reason:
            line += "  (provisional)"
        print(line)

    print("\nResidential:")
    for rec in result.residential_recommendations:
        print(f"  Zone {rec.zone_number:<8} {rec.district or rec.description:<28} {round_meters(rec.distance_meters):>5}m")
    for warning in result.warnings:
        print(f"  ! {warning}")
