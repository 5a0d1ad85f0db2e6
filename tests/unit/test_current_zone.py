"""Tests for current-zone resolution of a GPS fix."""

import math
from datetime import datetime, timezone

import pytest

from conftest import ORIGIN_LAT, ORIGIN_LNG, offset
from parkzone.core.types import MATCH_INSIDE, MATCH_NEAREST, MATCH_NONE
from parkzone.pipeline.current_zone import (
    PROVISIONAL_MAPPING_WARNING,
    normalize_accuracy,
    resolve_current_zone,
)

FIXED_NOW = datetime(2026, 3, 2, 17, 30, tzinfo=timezone.utc)


class TestPaidZone:
    def test_inside_paid_zone(self, paid_index, residential_index):
        result = resolve_current_zone(ORIGIN_LAT, ORIGIN_LNG, paid_index, residential_index, accuracy_meters=10)
        zone = result.zone

        assert zone.category == "paid"
        assert zone.match_type == MATCH_INSIDE
        assert zone.distance_meters == 0
        assert zone.zone_number == "7501"
        assert zone.rate == "Zone 1 - $2.00/hr"
        assert zone.payment_eligible is True
        assert zone.payment_entry_label == "Proceed to Payment"
        assert zone.message == "Paid Zone 7501 at Zone 1 - $2.00/hr"

    def test_provisional_mapping_warns(self, paid_index, residential_index):
        result = resolve_current_zone(ORIGIN_LAT, ORIGIN_LNG, paid_index, residential_index)
        assert result.warnings == [
            PROVISIONAL_MAPPING_WARNING,
            "Zone 1 meters share one pay-by-phone zone.",
        ]
        assert result.zone.provisional_reason == "Zone 1 meters share one pay-by-phone zone."

    def test_confirmed_mapping_has_no_warning(self, paid_index, residential_index):
        result = resolve_current_zone(*offset(-200, 0), paid_index, residential_index)
        assert result.zone.zone_number == "7510"
        assert result.warnings == []

    def test_nearest_paid_zone_message(self, paid_index, residential_index):
        result = resolve_current_zone(*offset(0, 40), paid_index, residential_index)
        zone = result.zone

        assert zone.match_type == MATCH_NEAREST
        assert zone.distance_meters == pytest.approx(40, abs=1.0)
        assert zone.message == "Paid Zone 7501 at Zone 1 - $2.00/hr (~40m away)"

    def test_zone_without_pay_by_phone_number_is_not_payable(self, paid_index, residential_index):
        """Inside the structure (no rule) and far from residential: no zone."""
        result = resolve_current_zone(*offset(200, 0), paid_index, residential_index)
        assert result.zone.category == "none"
        assert result.zone.payment_eligible is False


class TestResidentialZone:
    def test_inside_residential_zone(self, paid_index, residential_index):
        result = resolve_current_zone(*offset(0, 400), paid_index, residential_index)
        zone = result.zone

        assert zone.category == "residential"
        assert zone.match_type == MATCH_INSIDE
        assert zone.zone_number == "A"
        assert zone.rate == "Permit required"
        assert zone.payment_eligible is False
        assert zone.payment_entry_label == "Residential permit area"
        assert zone.message == "Residential Zone A (Permit required)"
        assert zone.district == "Mill Street"
        assert zone.hours == "Mon-Fri 8am-5pm"

    def test_nearest_residential_zone(self, paid_index, residential_index):
        result = resolve_current_zone(*offset(0, 470), paid_index, residential_index)
        assert result.zone.category == "residential"
        assert result.zone.match_type == MATCH_NEAREST
        assert result.zone.message == "Residential Zone A (Permit required) (~70m away)"


class TestNoZone:
    def test_far_from_everything(self, paid_index, residential_index):
        result = resolve_current_zone(*offset(800, 800), paid_index, residential_index)
        zone = result.zone

        assert zone.category == "none"
        assert zone.match_type == MATCH_NONE
        assert zone.zone_number is None
        assert zone.payment_entry_label == "No payment available"
        assert zone.message == (
            "No nearby paid or residential zone found within 100m. "
            "Move closer to marked parking streets/blocks."
        )

    def test_custom_fallback_in_message(self, paid_index, residential_index):
        result = resolve_current_zone(*offset(800, 800), paid_index, residential_index, fallback_meters=50)
        assert "within 50m" in result.zone.message

    @pytest.mark.parametrize("lat,lng", [(math.nan, ORIGIN_LNG), (ORIGIN_LAT, math.inf), (95.0, ORIGIN_LNG)])
    def test_invalid_coordinates(self, paid_index, residential_index, lat, lng):
        result = resolve_current_zone(lat, lng, paid_index, residential_index)
        assert result.zone.category == "none"


class TestGpsAccuracy:
    def test_poor_accuracy_warns(self, paid_index, residential_index):
        result = resolve_current_zone(*offset(800, 800), paid_index, residential_index, accuracy_meters=149.5)
        assert result.warnings == [
            "GPS accuracy is currently low (150m). Zone detection may be approximate."
        ]
        assert result.accuracy_meters == 149.5

    def test_threshold_is_exclusive(self, paid_index, residential_index):
        result = resolve_current_zone(*offset(800, 800), paid_index, residential_index, accuracy_meters=100)
        assert result.warnings == []

    @pytest.mark.parametrize("value,expected", [(None, None), (-5, None), (math.nan, None), (0, 0), (12.5, 12.5)])
    def test_normalize_accuracy(self, value, expected):
        assert normalize_accuracy(value) == expected


class TestSnapshot:
    def test_snapshot_uses_clock(self, paid_index, residential_index):
        result = resolve_current_zone(ORIGIN_LAT, ORIGIN_LNG, paid_index, residential_index, now=FIXED_NOW)
        assert result.snapshot_at == "2026-03-02T17:30:00+00:00"
        assert (result.lat, result.lng) == (ORIGIN_LAT, ORIGIN_LNG)

    def test_deterministic(self, paid_index, residential_index):
        lat, lng = offset(12, -60)
        first = resolve_current_zone(lat, lng, paid_index, residential_index, now=FIXED_NOW)
        second = resolve_current_zone(lat, lng, paid_index, residential_index, now=FIXED_NOW)
        assert first == second
