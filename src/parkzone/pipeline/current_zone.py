"""Current-zone resolution for a GPS fix ("what zone am I parked in?").

Paid zones win over residential ones: a fix that classifies into a paid
zone with a pay-by-phone number is payable. Otherwise the residential
index is consulted, and failing both the caller gets an explicit ``none``
category with guidance rather than an error.
"""

import logging
import math
from datetime import datetime, timezone

from parkzone.core.types import (
    MATCH_NEAREST,
    MATCH_NONE,
    CurrentZone,
    CurrentZoneResult,
    LookupResult,
)
from parkzone.observability.tracing import trace
from parkzone.pipeline.geometry import is_valid_coordinate, round_meters
from parkzone.retrieval.datasets import PERMIT_REQUIRED
from parkzone.retrieval.zone_index import ZoneIndex

logger = logging.getLogger(__name__)

NEAREST_FALLBACK_METERS = 100
POOR_GPS_WARNING_METERS = 100
PROVISIONAL_MAPPING_WARNING = "Pay-by-phone zone uses a provisional rule mapping for this meter zone."


def normalize_accuracy(value: float | None) -> float | None:
    """Reported GPS accuracy, or None when missing, non-finite or negative."""
    if value is None or not math.isfinite(value):
        return None
    return value if value >= 0 else None


def poor_gps_warning(accuracy_meters: float) -> str:
    return (
        f"GPS accuracy is currently low ({round_meters(accuracy_meters)}m). "
        "Zone detection may be approximate."
    )


def _distance_label(lookup: LookupResult) -> str:
    if lookup.match_type != MATCH_NEAREST or lookup.distance_meters is None:
        return ""
    return f" (~{round_meters(lookup.distance_meters)}m away)"


def _no_zone(fallback_meters: float) -> CurrentZone:
    return CurrentZone(
        category="none",
        match_type=MATCH_NONE,
        distance_meters=None,
        zone_number=None,
        rate=None,
        payment_eligible=False,
        payment_entry_label="No payment available",
        message=(
            f"No nearby paid or residential zone found within {fallback_meters:g}m. "
            "Move closer to marked parking streets/blocks."
        ),
    )


@trace(name="resolve_current_zone", span_type="CHAIN")
def resolve_current_zone(
    lat: float,
    lng: float,
    paid_index: ZoneIndex,
    residential_index: ZoneIndex,
    accuracy_meters: float | None = None,
    fallback_meters: float = NEAREST_FALLBACK_METERS,
    poor_gps_warning_meters: float = POOR_GPS_WARNING_METERS,
    now: datetime | None = None,
) -> CurrentZoneResult:
    """Categorise a coordinate as a paid, residential or no-zone location.

    Invalid coordinates resolve to the ``none`` category; they never raise.
    """
    accuracy = normalize_accuracy(accuracy_meters)
    snapshot_at = (now or datetime.now(timezone.utc)).isoformat()
    warnings: list[str] = []

    if accuracy is not None and accuracy > poor_gps_warning_meters:
        warnings.append(poor_gps_warning(accuracy))

    def _result(zone: CurrentZone) -> CurrentZoneResult:
        logger.info(
            "Current zone resolved: %s", zone.zone_number or "none",
            extra={"category": zone.category, "match_type": zone.match_type},
        )
        return CurrentZoneResult(
            lat=lat, lng=lng, accuracy_meters=accuracy,
            zone=zone, snapshot_at=snapshot_at, warnings=warnings,
        )

    if not is_valid_coordinate(lat, lng):
        return _result(_no_zone(fallback_meters))

    paid = paid_index.classify(lat, lng, fallback_meters)
    if paid.zone is not None and paid.zone.secondary_code:
        zone = paid.zone
        if zone.is_provisional:
            warnings.append(PROVISIONAL_MAPPING_WARNING)
            warnings.append(zone.provisional_reason)
        return _result(CurrentZone(
            category="paid",
            match_type=paid.match_type,
            distance_meters=paid.distance_meters,
            zone_number=zone.secondary_code,
            rate=zone.attributes.meter_zone,
            payment_eligible=True,
            payment_entry_label="Proceed to Payment",
            message=(
                f"Paid Zone {zone.secondary_code} at {zone.attributes.meter_zone}"
                f"{_distance_label(paid)}"
            ),
            provisional_reason=zone.provisional_reason,
        ))

    residential = residential_index.classify(lat, lng, fallback_meters)
    if residential.zone is not None:
        zone = residential.zone
        return _result(CurrentZone(
            category="residential",
            match_type=residential.match_type,
            distance_meters=residential.distance_meters,
            zone_number=zone.zone_id,
            rate=PERMIT_REQUIRED,
            payment_eligible=False,
            payment_entry_label="Residential permit area",
            message=f"Residential Zone {zone.zone_id} ({PERMIT_REQUIRED}){_distance_label(residential)}",
            district=zone.attributes.district,
            hours=zone.attributes.hours,
        ))

    return _result(_no_zone(fallback_meters))
