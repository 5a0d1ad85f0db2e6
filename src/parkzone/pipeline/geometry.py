"""Geometry kernel — containment, boundary projection and distances.

Pure functions with no I/O or state. Positions follow GeoJSON order
(lng, lat); function arguments follow the call site's convention and say so.

Two metrics on purpose:
  - a locally scaled planar approximation (longitude * cos(lat)) picks
    *which* boundary point is nearest. Valid at city scale only.
  - haversine reports every distance a caller sees.
"""

import math

from parkzone.core.types import Bounds, PolygonRings, Position, Ring, ZoneGeometry

EARTH_RADIUS_METERS = 6_371_000
ON_SEGMENT_EPSILON = 1e-10
DEGENERATE_SEGMENT_EPSILON = 1e-16
# cos(lat) floor so projection near the poles never divides by zero
MIN_LNG_SCALE = 1e-12


def is_finite_coordinate(lat: float, lng: float) -> bool:
    """True when both values are real, finite numbers."""
    try:
        return math.isfinite(lat) and math.isfinite(lng)
    except TypeError:
        return False


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Finite and inside the WGS84 lat/lng ranges."""
    return is_finite_coordinate(lat, lng) and -90 <= lat <= 90 and -180 <= lng <= 180


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def round_meters(value: float) -> int:
    """Whole meters for user-facing text, halves rounded up (149.5 -> 150)."""
    return math.floor(value + 0.5)


# ---------------------------------------------------------------------------
# Containment
# ---------------------------------------------------------------------------

def is_point_on_segment(lng: float, lat: float, start: Position, end: Position) -> bool:
    """Collinear with the segment and between its endpoints (within epsilon)."""
    lng1, lat1 = start
    lng2, lat2 = end
    cross = (lat - lat1) * (lng2 - lng1) - (lng - lng1) * (lat2 - lat1)
    if abs(cross) > ON_SEGMENT_EPSILON:
        return False
    dot = (lng - lng1) * (lng - lng2) + (lat - lat1) * (lat - lat2)
    return dot <= ON_SEGMENT_EPSILON


def point_in_ring(lng: float, lat: float, ring: Ring) -> bool:
    """Even-odd ray cast. A point on any edge counts as inside.

    The ring is walked cyclically, so the closing edge exists whether or
    not the data repeats the first vertex.
    """
    inside = False
    n = len(ring)
    j = n - 1
    for i in range(n):
        lng_i, lat_i = ring[i]
        lng_j, lat_j = ring[j]

        if is_point_on_segment(lng, lat, ring[j], ring[i]):
            return True

        if (lat_i > lat) != (lat_j > lat):
            cross_lng = (lng_j - lng_i) * (lat - lat_i) / (lat_j - lat_i) + lng_i
            if lng < cross_lng:
                inside = not inside
        j = i
    return inside


def point_in_polygon(lng: float, lat: float, polygon: PolygonRings) -> bool:
    """Inside the outer ring and inside none of the holes."""
    if not polygon or not point_in_ring(lng, lat, polygon[0]):
        return False
    return not any(point_in_ring(lng, lat, hole) for hole in polygon[1:])


def point_in_geometry(lng: float, lat: float, geometry: ZoneGeometry) -> bool:
    return any(point_in_polygon(lng, lat, polygon) for polygon in geometry.polygons)


# ---------------------------------------------------------------------------
# Nearest boundary point (planar approximation)
# ---------------------------------------------------------------------------

def planar_distance_squared(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Squared degree distance with longitude scaled by cos(mean latitude).

    Only comparable against other values from this function; never report it.
    """
    scale_lng = math.cos(math.radians((lat1 + lat2) / 2))
    d_lat = lat2 - lat1
    d_lng = (lng2 - lng1) * scale_lng
    return d_lat * d_lat + d_lng * d_lng


def nearest_point_on_segment(lng: float, lat: float, start: Position, end: Position) -> Position:
    """Project (lng, lat) onto a segment in a plane scaled at the query latitude."""
    scale_lng = max(math.cos(math.radians(lat)), MIN_LNG_SCALE)
    px, py = lng * scale_lng, lat
    x1, y1 = start[0] * scale_lng, start[1]
    x2, y2 = end[0] * scale_lng, end[1]

    dx = x2 - x1
    dy = y2 - y1
    length_squared = dx * dx + dy * dy
    if length_squared <= DEGENERATE_SEGMENT_EPSILON:
        return start[0], start[1]

    t = ((px - x1) * dx + (py - y1) * dy) / length_squared
    t = max(0.0, min(1.0, t))
    return (x1 + t * dx) / scale_lng, y1 + t * dy


def nearest_point_on_ring(lng: float, lat: float, ring: Ring) -> Position:
    if not ring:
        return lng, lat
    if len(ring) == 1:
        return ring[0]

    best_point = ring[0]
    best_distance = math.inf
    j = len(ring) - 1
    for i in range(len(ring)):
        candidate = nearest_point_on_segment(lng, lat, ring[j], ring[i])
        distance = planar_distance_squared(lat, lng, candidate[1], candidate[0])
        if distance < best_distance:
            best_distance = distance
            best_point = candidate
        j = i
    return best_point


def nearest_point_on_polygon(lng: float, lat: float, polygon: PolygonRings) -> Position:
    """The query point itself when inside; otherwise the closest point on any ring."""
    if point_in_polygon(lng, lat, polygon):
        return lng, lat

    best_point: Position = (lng, lat)
    best_distance = math.inf
    for ring in polygon:
        candidate = nearest_point_on_ring(lng, lat, ring)
        distance = planar_distance_squared(lat, lng, candidate[1], candidate[0])
        if distance < best_distance:
            best_distance = distance
            best_point = candidate
    return best_point


def nearest_point_on_geometry(lng: float, lat: float, geometry: ZoneGeometry) -> Position:
    best_point: Position = (lng, lat)
    best_distance = math.inf
    for polygon in geometry.polygons:
        candidate = nearest_point_on_polygon(lng, lat, polygon)
        distance = planar_distance_squared(lat, lng, candidate[1], candidate[0])
        if distance < best_distance:
            best_distance = distance
            best_point = candidate
    return best_point


# ---------------------------------------------------------------------------
# Bounding boxes
# ---------------------------------------------------------------------------

def bounds_of(geometry: ZoneGeometry, bounds: Bounds | None = None) -> Bounds:
    """Fold every vertex of every ring through min/max accumulators.

    Pass an existing Bounds to extend it (e.g., across a whole dataset).
    """
    acc = bounds or Bounds()
    min_lat, max_lat = acc.min_lat, acc.max_lat
    min_lng, max_lng = acc.min_lng, acc.max_lng
    for lng, lat in geometry.iter_positions():
        min_lat = min(min_lat, lat)
        max_lat = max(max_lat, lat)
        min_lng = min(min_lng, lng)
        max_lng = max(max_lng, lng)
    return Bounds(min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng)


def bounds_center(bounds: Bounds) -> tuple[float, float]:
    """Bounding-box midpoint as (lat, lng). Not a centroid."""
    return (bounds.min_lat + bounds.max_lat) / 2, (bounds.min_lng + bounds.max_lng) / 2
