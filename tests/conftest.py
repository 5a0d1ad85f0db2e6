"""Shared test fixtures.

Zone fixtures are squares laid out in metres around downtown San Luis
Obispo (35.2810, -120.6630), so expected distances can be read straight
off the layout:

  paid         1  Meter Zone 1     50 m square at the origin          -> 7501 (provisional)
               2  Meter Zone 1     50 m square 100 m east             -> 7501 (provisional)
               3  Meter Zone 2     50 m square 150 m west             -> 7502 (provisional)
               4  Structure        40 m square 200 m north            -> no rule
               5  Lot              40 m square 200 m south            -> 7510 (confirmed)
  residential  A                   100 m square 400 m east            -> 5101
               B                   100 m square 420 m west            -> no rule
               C                   100 m square 1500 m north          -> no rule
"""

import math

import mlflow
import pytest

from parkzone.retrieval.datasets import build_paid_index, build_residential_index

ORIGIN_LAT = 35.2810
ORIGIN_LNG = -120.6630
METERS_PER_DEGREE_LAT = 6_371_000 * math.pi / 180


def offset(north_m: float, east_m: float, lat: float = ORIGIN_LAT, lng: float = ORIGIN_LNG) -> tuple[float, float]:
    """(lat, lng) of a point north_m / east_m metres from (lat, lng)."""
    d_lat = north_m / METERS_PER_DEGREE_LAT
    d_lng = east_m / (METERS_PER_DEGREE_LAT * math.cos(math.radians(lat)))
    return lat + d_lat, lng + d_lng


def square_ring(north_m: float, east_m: float, half_m: float) -> list[list[float]]:
    """Closed GeoJSON ring ([lng, lat] pairs) for a square centred at an offset."""
    corners = [(-half_m, -half_m), (-half_m, half_m), (half_m, half_m), (half_m, -half_m), (-half_m, -half_m)]
    ring = []
    for dn, de in corners:
        lat, lng = offset(north_m + dn, east_m + de)
        ring.append([lng, lat])
    return ring


def polygon_feature(rings: list, properties: dict | None = None) -> dict:
    return {
        "type": "Feature",
        "properties": properties or {},
        "geometry": {"type": "Polygon", "coordinates": rings},
    }


def square_feature(north_m: float, east_m: float, half_m: float, properties: dict | None = None) -> dict:
    return polygon_feature([square_ring(north_m, east_m, half_m)], properties)


PAID_RULES = [
    {
        "id": "meter-zone-1",
        "type": "Meter",
        "meterZone": "Zone 1 - $2.00/hr",
        "payByPhoneZone": "7501",
        "description": "Zone 1 meters share one pay-by-phone zone.",
    },
    {
        "id": "meter-zone-2",
        "type": "Meter",
        "meterZone": "Zone 2 - $1.50/hr",
        "payByPhoneZone": "7502",
        "description": "Zone 2 meters share one pay-by-phone zone.",
    },
    {"id": "lots", "type": "Lot", "meterZone": "Lot - $1.25/hr", "payByPhoneZone": "7510"},
]

RESIDENTIAL_CROSSWALK = {"A": "5101"}


def _paid(object_id: int, zone_type: str, meter_zone: str, name: str) -> dict:
    return {"OBJECTID": object_id, "Type": zone_type, "MeterZone": meter_zone, "Name": name}


def _residential(zone_id: str, district: str, hours: str) -> dict:
    return {"zoneID": zone_id, "code": zone_id, "description": f"{district} permit area",
            "DISTRICT": district, "HOURS": hours}


@pytest.fixture(autouse=True)
def _disable_mlflow_tracing():
    """Disable MLflow tracing during tests so nothing is written to mlruns/."""
    mlflow.tracing.disable()
    yield
    mlflow.tracing.enable()


@pytest.fixture
def paid_features() -> list[dict]:
    return [
        square_feature(0, 0, 25, _paid(1, "Meter", "Zone 1 - $2.00/hr", "Higuera 700")),
        square_feature(0, 100, 25, _paid(2, "Meter", "Zone 1 - $2.00/hr", "Higuera 800")),
        square_feature(0, -150, 25, _paid(3, "Meter", "Zone 2 - $1.50/hr", "Marsh 600")),
        square_feature(200, 0, 20, _paid(4, "Structure", "Structure - $1.50/hr", "Palm St Structure")),
        square_feature(-200, 0, 20, _paid(5, "Lot", "Lot - $1.25/hr", "Nipomo Lot")),
    ]


@pytest.fixture
def residential_features() -> list[dict]:
    return [
        square_feature(0, 400, 50, _residential("A", "Mill Street", "Mon-Fri 8am-5pm")),
        square_feature(0, -420, 50, _residential("B", "Old Town", "Daily 6pm-7am")),
        square_feature(1500, 0, 50, _residential("C", "Monterey Heights", "Mon-Sat 10am-6pm")),
    ]


@pytest.fixture
def paid_index(paid_features):
    return build_paid_index(paid_features, PAID_RULES)


@pytest.fixture
def residential_index(residential_features):
    return build_residential_index(residential_features, RESIDENTIAL_CROSSWALK)
