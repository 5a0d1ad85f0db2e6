"""Pydantic request/response models for the parkzone API.

These are the API contract, decoupled from the internal domain dataclasses.
We bridge them using dataclasses.asdict() in the route handlers.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Current zone
# ---------------------------------------------------------------------------

class CurrentZoneRequest(BaseModel):
    """Request body for POST /api/v1/current-zone."""

    lat: float = Field(..., ge=-90, le=90, examples=[35.2810])
    lng: float = Field(..., ge=-180, le=180, examples=[-120.6630])
    accuracy_meters: float | None = Field(
        None,
        description="Reported GPS accuracy; negative or missing values are ignored",
    )


class LocationResponse(BaseModel):
    lat: float
    lng: float
    accuracy_meters: float | None = None


class CurrentZoneResponse(BaseModel):
    category: str = Field(..., pattern="^(paid|residential|none)$")
    match_type: str = Field(..., pattern="^(inside|nearest|none)$")
    distance_meters: float | None = None
    zone_number: str | None = None
    rate: str | None = None
    payment_eligible: bool = False
    payment_entry_label: str = ""
    message: str = ""
    provisional_reason: str | None = None
    district: str | None = None
    hours: str | None = None


class CurrentZoneResultResponse(BaseModel):
    """Current-zone payload: where the fix is, what zone it falls in."""

    location: LocationResponse
    zone: CurrentZoneResponse
    snapshot_at: str
    warnings: list[str] = []


# ---------------------------------------------------------------------------
# Destination recommendation
# ---------------------------------------------------------------------------

class RecommendRequest(BaseModel):
    """Request body for POST /api/v1/recommend.

    The destination arrives already geocoded; free-text resolution happens
    upstream.
    """

    destination: str = Field(..., min_length=1, max_length=200, examples=["Mission Plaza"])
    street: str = ""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    limit: int | None = Field(None, description="Clamped to 1-5 server-side")
    enforce_downtown_distance: bool = True


class PaidRecommendationResponse(BaseModel):
    zone_number: str
    price: str
    street: str = ""
    intended_destination: str
    distance_meters: float
    zone_lat: float
    zone_lng: float
    source_type: str = ""
    source_object_id: int | None = None
    provisional_reason: str | None = None


class ResidentialRecommendationResponse(BaseModel):
    zone_number: str
    price: str
    street: str = ""
    intended_destination: str
    distance_meters: float
    zone_lat: float
    zone_lng: float
    district: str = ""
    hours: str = ""
    description: str = ""


class RecommendResponse(BaseModel):
    """Ranked paid and residential parking for a destination."""

    destination: str
    street: str = ""
    destination_lat: float
    destination_lng: float
    nearest_parking_distance_meters: float
    recommendations: list[PaidRecommendationResponse] = []
    residential_recommendations: list[ResidentialRecommendationResponse] = []
    warnings: list[str] = []
    within_downtown_distance: bool = True
    max_downtown_distance_meters: int = 1000


# ---------------------------------------------------------------------------
# Zone listings
# ---------------------------------------------------------------------------

class ZoneSummaryResponse(BaseModel):
    zone_id: str
    code: str = ""
    label: str = ""
    description: str = ""
    district: str = ""
    hours: str = ""
    zone_type: str = ""
    meter_zone: str = ""
    object_id: int | None = None
    rate_label: str = ""
    secondary_code: str | None = None
    provisional_reason: str | None = None
    resolution: str = "unresolved"


class SearchBiasResponse(BaseModel):
    latitude: float
    longitude: float
    radius_meters: int


class ErrorResponse(BaseModel):
    """Error response body."""

    detail: str
    error_type: str = "recommendation_error"
