"""Domain types for the parkzone zone index and recommendation engine.

All shared dataclasses and type definitions live here to prevent
circular imports and establish a single source of truth for the
domain model. Every other module imports from here.

Geometry and zone records are frozen: they are built once from static
data at process start and only ever read afterwards.
"""

import math
from dataclasses import dataclass, field

# GeoJSON axis order: (lng, lat)
Position = tuple[float, float]
Ring = tuple[Position, ...]
PolygonRings = tuple[Ring, ...]

MATCH_INSIDE = "inside"
MATCH_NEAREST = "nearest"
MATCH_NONE = "none"

RESOLUTION_CONFIRMED = "confirmed"
RESOLUTION_PROVISIONAL = "provisional"
RESOLUTION_UNRESOLVED = "unresolved"


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Coordinate:
    """A WGS84 point in degrees."""

    lat: float
    lng: float


@dataclass(frozen=True)
class ZoneGeometry:
    """A Polygon or MultiPolygon, normalised to a tuple of polygons.

    Each polygon is a tuple of rings: the first ring is the outer boundary,
    any further rings are holes. Rings are not assumed to be closed.
    """

    kind: str                           # "Polygon" or "MultiPolygon"
    polygons: tuple[PolygonRings, ...]

    def iter_positions(self):
        for polygon in self.polygons:
            for ring in polygon:
                yield from ring


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned lat/lng bounding box."""

    min_lat: float = float("inf")
    max_lat: float = float("-inf")
    min_lng: float = float("inf")
    max_lng: float = float("-inf")

    @property
    def is_finite(self) -> bool:
        return all(
            math.isfinite(v)
            for v in (self.min_lat, self.max_lat, self.min_lng, self.max_lng)
        )


# ---------------------------------------------------------------------------
# Zone records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ZoneAttributes:
    """Human-readable attributes pulled from a feature's properties.

    Fields a dataset does not carry stay empty: a residential permit
    zone has no meter zone, a paid meter block has no district.
    """

    zone_id: str
    code: str = ""
    label: str = ""
    description: str = ""
    district: str = ""
    hours: str = ""
    zone_type: str = ""         # e.g., "Meter", "Lot", "Structure"
    meter_zone: str = ""        # e.g., "Zone 1 - $2.00/hr"
    object_id: int | None = None
    rate_label: str = ""        # what the UI shows as the price


@dataclass(frozen=True)
class CrosswalkRule:
    """One row of a crosswalk table.

    ``match`` pairs are attribute names on ZoneAttributes and the exact
    value each must equal. A rule with a reason is a provisional mapping.
    """

    rule_id: str
    match: tuple[tuple[str, str], ...]
    resolved_code: str
    reason: str | None = None


@dataclass(frozen=True)
class CodeResolution:
    """Outcome of resolving a record's secondary code against a crosswalk."""

    code: str | None
    reason: str | None
    status: str                 # confirmed | provisional | unresolved
    rule_id: str | None = None


@dataclass(frozen=True)
class ZoneRecord:
    """An immutable zone in a ZoneIndex."""

    attributes: ZoneAttributes
    geometry: ZoneGeometry
    center_lat: float
    center_lng: float
    secondary_code: str | None = None
    provisional_reason: str | None = None
    resolution: str = RESOLUTION_UNRESOLVED

    @property
    def zone_id(self) -> str:
        return self.attributes.zone_id

    @property
    def is_provisional(self) -> bool:
        return self.resolution == RESOLUTION_PROVISIONAL

    def summary(self) -> dict:
        """Geometry-free view used by listings and API responses."""
        attrs = self.attributes
        return {
            "zone_id": attrs.zone_id,
            "code": attrs.code,
            "label": attrs.label,
            "description": attrs.description,
            "district": attrs.district,
            "hours": attrs.hours,
            "zone_type": attrs.zone_type,
            "meter_zone": attrs.meter_zone,
            "object_id": attrs.object_id,
            "rate_label": attrs.rate_label,
            "secondary_code": self.secondary_code,
            "provisional_reason": self.provisional_reason,
            "resolution": self.resolution,
        }


# ---------------------------------------------------------------------------
# Query results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LookupResult:
    """Single-zone classification of a coordinate.

    inside  <=> distance_meters == 0 and zone is not None
    none    <=> zone is None (distance may still report the closest centre)
    """

    match_type: str
    distance_meters: float | None
    zone: ZoneRecord | None = None


@dataclass(frozen=True)
class RecommendationItem:
    """One ranked zone near a query coordinate."""

    zone_key: str
    distance_meters: float
    nearest_point: Coordinate
    zone: ZoneRecord


@dataclass(frozen=True)
class SearchBias:
    """Circle handed to an external place search to bias toward the paid area."""

    latitude: float
    longitude: float
    radius_meters: int


# ---------------------------------------------------------------------------
# Policy layer inputs / outputs
# ---------------------------------------------------------------------------

@dataclass
class ResolvedDestination:
    """A destination already geocoded by an external resolver."""

    destination: str
    latitude: float
    longitude: float
    street: str = ""


@dataclass
class PaidRecommendation:
    zone_number: str
    price: str
    street: str
    intended_destination: str
    distance_meters: float
    zone_lat: float
    zone_lng: float
    source_type: str = ""
    source_object_id: int | None = None
    provisional_reason: str | None = None


@dataclass
class ResidentialRecommendation:
    zone_number: str
    price: str
    street: str
    intended_destination: str
    distance_meters: float
    zone_lat: float
    zone_lng: float
    district: str = ""
    hours: str = ""
    description: str = ""


@dataclass
class ParkingRecommendation:
    """Final payload for 'find me parking near X'."""

    destination: str
    street: str
    destination_lat: float
    destination_lng: float
    nearest_parking_distance_meters: float
    recommendations: list[PaidRecommendation] = field(default_factory=list)
    residential_recommendations: list[ResidentialRecommendation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    has_paid_candidates: bool = True
    within_downtown_distance: bool = True
    max_downtown_distance_meters: int = 1000


@dataclass
class CurrentZone:
    """Categorised zone for a GPS fix."""

    category: str               # paid | residential | none
    match_type: str
    distance_meters: float | None
    zone_number: str | None
    rate: str | None
    payment_eligible: bool
    payment_entry_label: str
    message: str
    provisional_reason: str | None = None
    district: str | None = None
    hours: str | None = None


@dataclass
class CurrentZoneResult:
    lat: float
    lng: float
    accuracy_meters: float | None
    zone: CurrentZone
    snapshot_at: str
    warnings: list[str] = field(default_factory=list)
