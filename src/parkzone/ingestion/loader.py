"""Static dataset loading — GeoJSON zone layers and crosswalk rule tables.

Zone layers are ArcGIS exports saved as GeoJSON FeatureCollections
(outSR=4326, so positions are (lng, lat) degrees). Crosswalk tables come in
two shapes and both are accepted:

  - an ordered rule list, e.g. provisional pay-by-phone rules:
        [{"id": "r1", "type": "Meter", "meterZone": "Zone 1", "payByPhoneZone": "7501",
          "description": "Provisional mapping pending city confirmation"}]
    or the generic form {"id", "match": {attr: value}, "resolvedCode", "reason"}
  - a flat {zone_id: code} mapping (residential permit crosswalk)

Geometry that fails to parse raises GeometryError; callers decide whether
to drop the record.
"""

import json
import logging
import math
from pathlib import Path

from parkzone.core.types import CrosswalkRule, PolygonRings, Position, Ring, ZoneGeometry

logger = logging.getLogger(__name__)

SUPPORTED_GEOMETRY_TYPES = ("Polygon", "MultiPolygon")


class DatasetError(Exception):
    """A dataset file is missing or is not the shape we expect."""


class GeometryError(ValueError):
    """A feature's geometry cannot be used for containment or projection."""


# ---------------------------------------------------------------------------
# Geometry parsing
# ---------------------------------------------------------------------------

def _parse_position(raw) -> Position:
    if not isinstance(raw, (list, tuple)) or len(raw) < 2:
        raise GeometryError(f"position must be [lng, lat], got {raw!r}")
    lng, lat = raw[0], raw[1]
    for value in (lng, lat):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise GeometryError(f"position values must be numbers, got {raw!r}")
        if not math.isfinite(value):
            raise GeometryError(f"position values must be finite, got {raw!r}")
    return float(lng), float(lat)


def _parse_ring(raw) -> Ring:
    if not isinstance(raw, (list, tuple)) or not raw:
        raise GeometryError("ring has no positions")
    return tuple(_parse_position(p) for p in raw)


def _parse_polygon(raw) -> PolygonRings:
    if not isinstance(raw, (list, tuple)) or not raw:
        raise GeometryError("polygon has no rings")
    return tuple(_parse_ring(r) for r in raw)


def parse_geometry(raw) -> ZoneGeometry:
    """Parse a GeoJSON Polygon/MultiPolygon into an immutable ZoneGeometry."""
    if not isinstance(raw, dict):
        raise GeometryError("geometry is missing")

    kind = raw.get("type")
    coordinates = raw.get("coordinates")
    if kind == "Polygon":
        return ZoneGeometry(kind=kind, polygons=(_parse_polygon(coordinates),))
    if kind == "MultiPolygon":
        if not isinstance(coordinates, (list, tuple)) or not coordinates:
            raise GeometryError("multipolygon has no polygons")
        return ZoneGeometry(kind=kind, polygons=tuple(_parse_polygon(p) for p in coordinates))
    raise GeometryError(f"unsupported geometry type: {kind!r}")


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

def _read_json(path: str | Path):
    p = Path(path)
    try:
        with p.open(encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise DatasetError(f"Dataset file not found: {p}") from e
    except json.JSONDecodeError as e:
        raise DatasetError(f"Dataset file is not valid JSON: {p} ({e})") from e


def load_feature_collection(path: str | Path) -> list[dict]:
    """Read a GeoJSON FeatureCollection and return its features in file order."""
    data = _read_json(path)
    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise DatasetError(f"Expected a GeoJSON FeatureCollection in {path}")

    features = data.get("features") or []
    if not isinstance(features, list):
        raise DatasetError(f"FeatureCollection.features must be a list in {path}")

    logger.info("Loaded %d features from %s", len(features), Path(path).name)
    return features


def _rule_from_entry(index: int, entry: dict) -> CrosswalkRule | None:
    rule_id = str(entry.get("id") or f"rule-{index}")

    if "match" in entry:
        match = entry.get("match") or {}
        code = entry.get("resolvedCode", entry.get("resolved_code"))
        reason = entry.get("reason")
        pairs = tuple((str(k), str(v)) for k, v in match.items())
    else:
        # pay-by-phone provisional rule; meterZone is required, a missing type matches any type
        if entry.get("meterZone") is None:
            logger.warning("Skipping crosswalk rule %s: no meterZone", rule_id)
            return None
        pairs = ()
        if entry.get("type"):
            pairs += (("zone_type", str(entry["type"])),)
        pairs += (("meter_zone", str(entry["meterZone"])),)
        code = entry.get("payByPhoneZone")
        reason = entry.get("description")

    if not pairs:
        logger.warning("Skipping crosswalk rule %s: no match keys", rule_id)
        return None
    if code is None:
        logger.warning("Skipping crosswalk rule %s: no resolved code", rule_id)
        return None

    return CrosswalkRule(
        rule_id=rule_id,
        match=pairs,
        resolved_code=str(code),
        reason=str(reason) if reason else None,
    )


def parse_crosswalk(data) -> list[CrosswalkRule]:
    """Turn a decoded crosswalk document into ordered CrosswalkRules."""
    if isinstance(data, dict):
        return [
            CrosswalkRule(rule_id=str(zone_id), match=(("zone_id", str(zone_id)),), resolved_code=str(code))
            for zone_id, code in data.items()
            if code is not None
        ]

    if isinstance(data, list):
        rules = []
        for i, entry in enumerate(data):
            if not isinstance(entry, dict):
                logger.warning("Skipping crosswalk entry %d: not an object", i)
                continue
            rule = _rule_from_entry(i, entry)
            if rule is not None:
                rules.append(rule)
        return rules

    raise DatasetError("Crosswalk must be a list of rules or a {zone_id: code} mapping")


def load_crosswalk(path: str | Path | None) -> list[CrosswalkRule]:
    """Load a crosswalk file. No path means no rules."""
    if not path:
        return []
    rules = parse_crosswalk(_read_json(path))
    logger.info("Loaded %d crosswalk rules from %s", len(rules), Path(path).name)
    return rules
