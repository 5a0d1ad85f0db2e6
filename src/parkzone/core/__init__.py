"""Core domain types shared across all parkzone modules."""

from parkzone.core.types import (
    Bounds,
    CodeResolution,
    Coordinate,
    CrosswalkRule,
    CurrentZone,
    CurrentZoneResult,
    LookupResult,
    PaidRecommendation,
    ParkingRecommendation,
    RecommendationItem,
    ResidentialRecommendation,
    ResolvedDestination,
    SearchBias,
    ZoneAttributes,
    ZoneGeometry,
    ZoneRecord,
)

__all__ = [
    "Bounds",
    "CodeResolution",
    "Coordinate",
    "CrosswalkRule",
    "CurrentZone",
    "CurrentZoneResult",
    "LookupResult",
    "PaidRecommendation",
    "ParkingRecommendation",
    "RecommendationItem",
    "ResidentialRecommendation",
    "ResolvedDestination",
    "SearchBias",
    "ZoneAttributes",
    "ZoneGeometry",
    "ZoneRecord",
]
