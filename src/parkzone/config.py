"""parkzone configuration — datasets, lookup radii and policy caps."""

from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings

DATA_DIR = Path(__file__).parent / "data"


class Settings(BaseSettings):
    # Datasets (bundled; a changed dataset needs a process restart)
    paid_zones_path: str = str(DATA_DIR / "downtown-parking-rates.geojson")
    paid_rules_path: str = str(DATA_DIR / "paybyphone-provisional-rules.json")
    residential_zones_path: str = str(DATA_DIR / "residential-permit-zones.geojson")
    residential_crosswalk_path: str = str(DATA_DIR / "paybypark-zone-crosswalk.json")

    @model_validator(mode="after")
    def _strip_paths(self) -> "Settings":
        """Strip whitespace/newlines from dataset paths (a common paste error in env files)."""
        for field in ("paid_zones_path", "paid_rules_path",
                      "residential_zones_path", "residential_crosswalk_path"):
            val = getattr(self, field)
            if val and val != val.strip():
                setattr(self, field, val.strip())
        return self

    # Current-zone lookup
    nearest_fallback_meters: float = 100.0
    poor_gps_warning_meters: float = 100.0

    # Destination recommendation policy
    default_recommendation_limit: int = 5
    max_downtown_distance_meters: int = 1000
    max_residential_distance_meters: float = 500.0
    enforce_downtown_distance: bool = True

    # Used when the paid dataset is empty (downtown San Luis Obispo)
    search_bias_latitude: float = 35.2809
    search_bias_longitude: float = -120.6626
    search_bias_radius_meters: int = 1800

    # MLflow tracing
    mlflow_tracking_uri: str = "sqlite:///mlruns/mlflow.db"
    mlflow_experiment_name: str = "parkzone"
    tracing_enabled: bool = True

    # Logging
    log_json: bool = True
    log_level: str = "INFO"

    # API server (parkzone-api)
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
