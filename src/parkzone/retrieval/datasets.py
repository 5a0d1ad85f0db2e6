"""Zone datasets — attribute parsers and one-time index construction.

Two datasets, one ZoneIndex type:

  paid         downtown meter blocks / lots (ArcGIS "Downtown Parking Rates").
               Properties: OBJECTID, Type, MeterZone, Name, Label.
               Secondary code = pay-by-phone zone number via provisional rules
               keyed on (Type, MeterZone).
  residential  residential permit areas (ArcGIS street parking layer).
               Properties: zoneID, code, description, DISTRICT, HOURS, label.
               Secondary code = pay-by-park zone via a {zoneID: code} map.

Indexes are built once at startup (``load_indexes``) and passed by
reference to every caller.
"""

import logging
from dataclasses import dataclass

from parkzone.config import Settings
from parkzone.core.types import ZoneAttributes, ZoneRecord
from parkzone.ingestion.loader import load_crosswalk, load_feature_collection, parse_crosswalk
from parkzone.retrieval.crosswalk import Crosswalk
from parkzone.retrieval.zone_index import ZoneIndex

logger = logging.getLogger(__name__)

PERMIT_REQUIRED = "Permit required"
PAID_KEY_FIELDS = ("zone_type", "meter_zone")
RESIDENTIAL_KEY_FIELDS = ("zone_id",)


def _prop(properties: dict, key: str) -> str | None:
    """Property as a string; None when absent or null (empty strings are kept)."""
    value = properties.get(key)
    return None if value is None else str(value)


def _object_id(properties: dict) -> int:
    value = properties.get("OBJECTID")
    try:
        return int(value)
    except (TypeError, ValueError):
        return -1


def parse_paid_attributes(properties: dict) -> ZoneAttributes:
    object_id = _object_id(properties)
    meter_zone = _prop(properties, "MeterZone")
    if meter_zone is None:
        meter_zone = "Unknown"
    zone_type = _prop(properties, "Type")
    if zone_type is None:
        zone_type = "Unknown"
    return ZoneAttributes(
        zone_id=str(object_id),
        label=_prop(properties, "Label") or "",
        description=_prop(properties, "Name") or "",
        zone_type=zone_type,
        meter_zone=meter_zone,
        object_id=object_id,
        rate_label=meter_zone,
    )


def parse_residential_attributes(properties: dict) -> ZoneAttributes:
    zone_id = _prop(properties, "zoneID")
    if zone_id is None:
        zone_id = _prop(properties, "code")
    if zone_id is None:
        zone_id = "UNKNOWN"

    code = _prop(properties, "code")
    description = _prop(properties, "description")
    district = _prop(properties, "DISTRICT")
    hours = _prop(properties, "HOURS")
    label = _prop(properties, "label")
    return ZoneAttributes(
        zone_id=zone_id,
        code=zone_id if code is None else code,
        description=zone_id if description is None else description,
        district=district or "",
        hours=hours or "",
        label=label or "",
        rate_label=PERMIT_REQUIRED,
    )


def paid_zone_number(record: ZoneRecord) -> str:
    """Pay-by-phone zone number, or a stable per-feature placeholder."""
    return record.secondary_code or f"OBJECTID-{record.attributes.object_id}"


def has_secondary_code(record: ZoneRecord) -> bool:
    return bool(record.secondary_code)


@dataclass(frozen=True)
class ZoneIndexes:
    """Both indexes a process needs, built together at startup."""

    paid: ZoneIndex
    residential: ZoneIndex


def build_paid_index(features: list[dict], rules_data: list | None = None) -> ZoneIndex:
    rules = parse_crosswalk(rules_data) if rules_data is not None else []
    return ZoneIndex.build(
        "paid", features, parse_paid_attributes, Crosswalk(rules, key_fields=PAID_KEY_FIELDS),
    )


def build_residential_index(features: list[dict], crosswalk_data: dict | None = None) -> ZoneIndex:
    rules = parse_crosswalk(crosswalk_data) if crosswalk_data is not None else []
    return ZoneIndex.build(
        "residential", features, parse_residential_attributes,
        Crosswalk(rules, key_fields=RESIDENTIAL_KEY_FIELDS),
    )


def load_indexes(settings: Settings) -> ZoneIndexes:
    """Read the configured dataset files and build both indexes."""
    paid = ZoneIndex.build(
        "paid",
        load_feature_collection(settings.paid_zones_path),
        parse_paid_attributes,
        Crosswalk(load_crosswalk(settings.paid_rules_path), key_fields=PAID_KEY_FIELDS),
    )
    residential = ZoneIndex.build(
        "residential",
        load_feature_collection(settings.residential_zones_path),
        parse_residential_attributes,
        Crosswalk(load_crosswalk(settings.residential_crosswalk_path), key_fields=RESIDENTIAL_KEY_FIELDS),
    )
    logger.info("Zone indexes ready: %d paid, %d residential", len(paid), len(residential))
    return ZoneIndexes(paid=paid, residential=residential)
