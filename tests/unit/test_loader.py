"""Tests for dataset loading — geometry, feature collections and crosswalks."""

import json

import pytest

from parkzone.config import DATA_DIR
from parkzone.core.types import RESOLUTION_UNRESOLVED, ZoneAttributes
from parkzone.ingestion.loader import (
    DatasetError,
    GeometryError,
    load_crosswalk,
    load_feature_collection,
    parse_crosswalk,
    parse_geometry,
)
from parkzone.retrieval.crosswalk import Crosswalk


class TestParseGeometry:
    def test_polygon(self):
        geometry = parse_geometry({"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1]]]})
        assert geometry.kind == "Polygon"
        assert geometry.polygons == ((((0.0, 0.0), (1.0, 0.0), (1.0, 1.0)),),)

    def test_multipolygon(self):
        geometry = parse_geometry({
            "type": "MultiPolygon",
            "coordinates": [[[[0, 0], [1, 0], [1, 1]]], [[[2, 2], [3, 2], [3, 3]]]],
        })
        assert geometry.kind == "MultiPolygon"
        assert len(geometry.polygons) == 2

    def test_extra_position_values_ignored(self):
        """Altitude or measure values after [lng, lat] are dropped."""
        geometry = parse_geometry({"type": "Polygon", "coordinates": [[[0, 0, 12.5], [1, 0, 3], [1, 1, 0]]]})
        assert geometry.polygons[0][0][0] == (0.0, 0.0)

    @pytest.mark.parametrize("raw", [
        None,
        {},
        {"type": "Point", "coordinates": [0, 0]},
        {"type": "Polygon", "coordinates": []},
        {"type": "Polygon", "coordinates": [[]]},
        {"type": "Polygon", "coordinates": [[[0, 0], [1]]]},
        {"type": "Polygon", "coordinates": [[[0, 0], ["a", 1]]]},
        {"type": "Polygon", "coordinates": [[[0, 0], [float("nan"), 1]]]},
        {"type": "MultiPolygon", "coordinates": []},
    ])
    def test_rejects_unusable_geometry(self, raw):
        with pytest.raises(GeometryError):
            parse_geometry(raw)


class TestLoadFeatureCollection:
    def test_reads_features_in_order(self, tmp_path):
        path = tmp_path / "zones.geojson"
        path.write_text(json.dumps({
            "type": "FeatureCollection",
            "features": [{"type": "Feature", "properties": {"n": 1}}, {"type": "Feature", "properties": {"n": 2}}],
        }))
        features = load_feature_collection(path)
        assert [f["properties"]["n"] for f in features] == [1, 2]

    def test_missing_file(self, tmp_path):
        with pytest.raises(DatasetError, match="not found"):
            load_feature_collection(tmp_path / "missing.geojson")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.geojson"
        path.write_text("{not json")
        with pytest.raises(DatasetError, match="not valid JSON"):
            load_feature_collection(path)

    def test_not_a_feature_collection(self, tmp_path):
        path = tmp_path / "feature.geojson"
        path.write_text(json.dumps({"type": "Feature"}))
        with pytest.raises(DatasetError, match="FeatureCollection"):
            load_feature_collection(path)

    def test_bundled_datasets_load(self):
        paid = load_feature_collection(DATA_DIR / "downtown-parking-rates.geojson")
        residential = load_feature_collection(DATA_DIR / "residential-permit-zones.geojson")
        assert len(paid) > 0
        assert len(residential) > 0


class TestParseCrosswalk:
    def test_mapping_form(self):
        rules = parse_crosswalk({"A": "5101", "B": 5102, "C": None})
        assert [(r.rule_id, r.match, r.resolved_code) for r in rules] == [
            ("A", (("zone_id", "A"),), "5101"),
            ("B", (("zone_id", "B"),), "5102"),
        ]
        assert all(r.reason is None for r in rules)

    def test_pay_by_phone_rules(self):
        rules = parse_crosswalk([
            {"id": "z1", "type": "Meter", "meterZone": "Zone 1", "payByPhoneZone": "7501", "description": "pending"},
            {"id": "lot", "meterZone": "Lot", "payByPhoneZone": 7510},
        ])
        assert rules[0].match == (("zone_type", "Meter"), ("meter_zone", "Zone 1"))
        assert rules[0].reason == "pending"
        assert rules[1].match == (("meter_zone", "Lot"),)
        assert rules[1].resolved_code == "7510"
        assert rules[1].reason is None

    def test_generic_rules(self):
        rules = parse_crosswalk([
            {"id": "g1", "match": {"zone_id": "12"}, "resolvedCode": "900", "reason": "interim"},
            {"match": {"district": "North"}, "resolved_code": "901"},
        ])
        assert rules[0].rule_id == "g1"
        assert rules[0].reason == "interim"
        assert rules[1].rule_id == "rule-1"
        assert rules[1].resolved_code == "901"

    def test_skips_unusable_entries(self):
        rules = parse_crosswalk([
            "not an object",
            {"id": "no-keys", "payByPhoneZone": "1"},
            {"id": "no-code", "type": "Meter", "meterZone": "Zone 1"},
            {"id": "ok", "type": "Meter", "meterZone": "Zone 1", "payByPhoneZone": "1"},
        ])
        assert [r.rule_id for r in rules] == ["ok"]

    def test_pay_by_phone_rule_requires_meter_zone(self):
        """A type alone must not hand every zone of that type a pay-by-phone number."""
        rules = parse_crosswalk([
            {"id": "structures", "type": "Structure", "payByPhoneZone": "9", "description": "x"},
            {"id": "meters", "type": "Meter", "meterZone": "Zone 1", "payByPhoneZone": "7501"},
        ])
        assert [r.rule_id for r in rules] == ["meters"]

        crosswalk = Crosswalk(rules)
        structure = ZoneAttributes(zone_id="4", zone_type="Structure", meter_zone="Structure - $1.50/hr")
        assert crosswalk.resolve(structure).status == RESOLUTION_UNRESOLVED

    def test_rejects_other_shapes(self):
        with pytest.raises(DatasetError):
            parse_crosswalk("7501")

    def test_load_without_path(self):
        assert load_crosswalk(None) == []
        assert load_crosswalk("") == []

    def test_bundled_rules_load(self):
        rules = load_crosswalk(DATA_DIR / "paybyphone-provisional-rules.json")
        assert {r.resolved_code for r in rules} == {"7501", "7502", "7510"}
