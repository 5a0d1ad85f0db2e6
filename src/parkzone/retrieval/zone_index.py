"""Zone index — built once per dataset, queried by classify and recommend.

One generic index serves every zone dataset (paid meter blocks,
residential permit areas). Dataset differences live entirely in the
attribute parser and the crosswalk handed to ``ZoneIndex.build``.

Queries are linear scans over the records in build order. That is fine at
hundreds of zones and keeps the semantics simple:

  - classify: first containing record wins; otherwise the nearest
    bounding-box centre within the caller's fallback radius.
  - recommend: nearest boundary point per record, stable sort by haversine
    distance, dedup by key (nearest occurrence kept), truncate.

The index never changes after build, so queries need no locking.
"""

import logging
import math
from collections.abc import Callable, Iterable

from parkzone.core.types import (
    MATCH_INSIDE,
    MATCH_NEAREST,
    MATCH_NONE,
    Bounds,
    Coordinate,
    LookupResult,
    RecommendationItem,
    SearchBias,
    ZoneAttributes,
    ZoneRecord,
)
from parkzone.ingestion.loader import GeometryError, parse_geometry
from parkzone.pipeline.geometry import (
    bounds_center,
    bounds_of,
    haversine_meters,
    is_finite_coordinate,
    nearest_point_on_geometry,
    point_in_geometry,
)
from parkzone.retrieval.crosswalk import Crosswalk

logger = logging.getLogger(__name__)

DEFAULT_NEAREST_FALLBACK_METERS = 120
DEFAULT_RECOMMENDATION_LIMIT = 2
MAX_RECOMMENDATION_LIMIT = 5

SEARCH_BIAS_MIN_RADIUS_METERS = 800
SEARCH_BIAS_PADDING_METERS = 300

AttributeParser = Callable[[dict], ZoneAttributes]
RecordPredicate = Callable[[ZoneRecord], bool]
DedupKey = Callable[[ZoneRecord], str]


def clamp_limit(value, fallback: int = DEFAULT_RECOMMENDATION_LIMIT) -> int:
    """Clamp a requested result count to [1, MAX_RECOMMENDATION_LIMIT].

    Non-numeric and non-finite requests use ``fallback`` (itself clamped).
    """
    try:
        numeric = float(value)
    except (TypeError, ValueError, OverflowError):
        numeric = math.nan
    if not math.isfinite(numeric):
        numeric = float(fallback)
    return max(1, min(MAX_RECOMMENDATION_LIMIT, math.floor(numeric)))


def _none_result(distance_meters: float | None = None) -> LookupResult:
    return LookupResult(match_type=MATCH_NONE, distance_meters=distance_meters, zone=None)


class ZoneIndex:
    """Immutable, ordered collection of ZoneRecords for one dataset."""

    def __init__(self, name: str, records: Iterable[ZoneRecord]):
        self.name = name
        self._records: tuple[ZoneRecord, ...] = tuple(records)

        bounds = Bounds()
        for record in self._records:
            bounds = bounds_of(record.geometry, bounds)
        self._bounds = bounds

    @classmethod
    def build(
        cls,
        name: str,
        features: Iterable[dict],
        parse_attributes: AttributeParser,
        crosswalk: Crosswalk | None = None,
    ) -> "ZoneIndex":
        """Build an index from GeoJSON features, dropping unusable geometry.

        Args:
            name: dataset name used in logs ("paid", "residential").
            features: GeoJSON Feature dicts in source order.
            parse_attributes: maps a feature's properties to ZoneAttributes.
            crosswalk: secondary-code rules; None means no codes.
        """
        crosswalk = crosswalk or Crosswalk()
        records: list[ZoneRecord] = []
        dropped = 0

        for position, feature in enumerate(features):
            if not isinstance(feature, dict):
                dropped += 1
                continue
            try:
                geometry = parse_geometry(feature.get("geometry"))
            except GeometryError as e:
                dropped += 1
                logger.debug("%s feature %d dropped: %s", name, position, e)
                continue

            attributes = parse_attributes(feature.get("properties") or {})
            center_lat, center_lng = bounds_center(bounds_of(geometry))
            resolution = crosswalk.resolve(attributes)

            records.append(ZoneRecord(
                attributes=attributes,
                geometry=geometry,
                center_lat=center_lat,
                center_lng=center_lng,
                secondary_code=resolution.code,
                provisional_reason=resolution.reason,
                resolution=resolution.status,
            ))

        if dropped:
            logger.warning("%s zone index: dropped %d features with missing or invalid geometry", name, dropped)
        logger.info(
            "Built %s zone index: %d zones (%d with secondary codes)",
            name, len(records), sum(1 for r in records if r.secondary_code),
        )
        return cls(name, records)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    @property
    def records(self) -> tuple[ZoneRecord, ...]:
        return self._records

    def bounds(self) -> Bounds:
        return self._bounds

    def summaries(self) -> list[dict]:
        return [record.summary() for record in self._records]

    def contains(self, lat: float, lng: float) -> bool:
        """True when any zone contains the point (boundary included)."""
        if not is_finite_coordinate(lat, lng):
            return False
        return any(point_in_geometry(lng, lat, r.geometry) for r in self._records)

    def search_bias(self, fallback: SearchBias) -> SearchBias:
        """Circle covering every zone, padded, for biasing a place search.

        Radius = farthest bounding-box corner from the centre + padding,
        never below SEARCH_BIAS_MIN_RADIUS_METERS. An empty index returns
        ``fallback``.
        """
        b = self._bounds
        if not b.is_finite:
            return fallback

        lat, lng = bounds_center(b)
        corners = [
            (b.min_lat, b.min_lng),
            (b.max_lat, b.min_lng),
            (b.min_lat, b.max_lng),
            (b.max_lat, b.max_lng),
        ]
        farthest = max(haversine_meters(lat, lng, c_lat, c_lng) for c_lat, c_lng in corners)
        radius = math.floor(farthest + SEARCH_BIAS_PADDING_METERS + 0.5)
        return SearchBias(
            latitude=lat,
            longitude=lng,
            radius_meters=max(SEARCH_BIAS_MIN_RADIUS_METERS, radius),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def classify(
        self,
        lat: float,
        lng: float,
        fallback_radius_meters: float | None = DEFAULT_NEAREST_FALLBACK_METERS,
    ) -> LookupResult:
        """Which zone is this coordinate in (or next to)?

        Returns ``inside`` for the first containing zone, ``nearest`` when
        the closest zone centre is within ``fallback_radius_meters``, else
        ``none``. A None or negative radius disables the fallback. When the
        fallback misses, the closest centre distance is still reported.
        """
        if not is_finite_coordinate(lat, lng):
            return _none_result()

        for record in self._records:
            if point_in_geometry(lng, lat, record.geometry):
                return LookupResult(match_type=MATCH_INSIDE, distance_meters=0.0, zone=record)

        if fallback_radius_meters is None or fallback_radius_meters < 0:
            return _none_result()

        nearest: ZoneRecord | None = None
        nearest_distance = math.inf
        for record in self._records:
            distance = haversine_meters(lat, lng, record.center_lat, record.center_lng)
            if distance < nearest_distance:
                nearest_distance = distance
                nearest = record

        if nearest is None:
            return _none_result()
        if nearest_distance <= fallback_radius_meters:
            return LookupResult(match_type=MATCH_NEAREST, distance_meters=nearest_distance, zone=nearest)
        return _none_result(nearest_distance)

    def recommend(
        self,
        lat: float,
        lng: float,
        limit=None,
        *,
        predicate: RecordPredicate | None = None,
        dedup_key: DedupKey | None = None,
        max_distance_meters: float | None = None,
    ) -> list[RecommendationItem]:
        """Rank zones by distance from the coordinate to each zone's boundary.

        A coordinate already inside a zone is 0 m from it. Items are sorted
        non-decreasing by distance (ties keep build order), deduplicated by
        ``dedup_key`` (defaults to zone_id) and cut to ``clamp_limit(limit)``.
        """
        if not is_finite_coordinate(lat, lng):
            return []

        limit = clamp_limit(limit)
        key_of = dedup_key or (lambda record: record.zone_id)

        candidates: list[RecommendationItem] = []
        for record in self._records:
            if predicate is not None and not predicate(record):
                continue
            near_lng, near_lat = nearest_point_on_geometry(lng, lat, record.geometry)
            distance = haversine_meters(lat, lng, near_lat, near_lng)
            if max_distance_meters is not None and distance > max(0.0, max_distance_meters):
                continue
            candidates.append(RecommendationItem(
                zone_key=key_of(record),
                distance_meters=distance,
                nearest_point=Coordinate(lat=near_lat, lng=near_lng),
                zone=record,
            ))

        candidates.sort(key=lambda item: item.distance_meters)

        results: list[RecommendationItem] = []
        seen: set[str] = set()
        for item in candidates:
            if item.zone_key in seen:
                continue
            seen.add(item.zone_key)
            results.append(item)
            if len(results) >= limit:
                break
        return results
