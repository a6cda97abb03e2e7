from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_out_dir() -> str:
    # Keep logs and run artifacts in backend/out by default.
    return str(Path(__file__).resolve().parents[1] / "out")


class Settings(BaseSettings):
    """Validated settings (env-driven), keeping config out of code for easy extension."""

    model_config = SettingsConfigDict(
        # Support both "repo root/.env" and "backend/.env" (local dev)
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    out_dir: str = Field(default_factory=_default_out_dir, alias="OUT_DIR")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Empty means the built-in central London network.
    network_asset_path: str = Field(default="", alias="NETWORK_ASSET_PATH")
    default_start_node: str = Field(default="W", alias="DEFAULT_START_NODE")
    default_end_node: str = Field(default="T", alias="DEFAULT_END_NODE")

    aqi_simulation_enabled: bool = Field(default=True, alias="AQI_SIMULATION_ENABLED")
    aqi_refresh_interval_s: float = Field(default=5.0, ge=0.1, le=3600.0, alias="AQI_REFRESH_INTERVAL_S")
    aqi_fluctuation_ratio: float = Field(default=0.10, ge=0.0, le=1.0, alias="AQI_FLUCTUATION_RATIO")
    aqi_simulation_floor: float = Field(default=15.0, ge=0.0, le=500.0, alias="AQI_SIMULATION_FLOOR")
    aqi_simulation_ceiling: float = Field(default=200.0, ge=0.0, le=500.0, alias="AQI_SIMULATION_CEILING")
    aqi_simulation_seed: int | None = Field(default=None, alias="AQI_SIMULATION_SEED")

    route_cache_ttl_s: int = Field(default=600, ge=1, alias="ROUTE_CACHE_TTL_S")
    route_cache_max_entries: int = Field(default=256, ge=1, alias="ROUTE_CACHE_MAX_ENTRIES")

    location_aqi_cache_ttl_s: int = Field(default=300, ge=1, alias="LOCATION_AQI_CACHE_TTL_S")
    location_aqi_center_lat: float = Field(default=51.5074, ge=-90, le=90, alias="LOCATION_AQI_CENTER_LAT")
    location_aqi_center_lon: float = Field(default=-0.1278, ge=-180, le=180, alias="LOCATION_AQI_CENTER_LON")
    route_aqi_sample_points: int = Field(default=10, ge=1, le=500, alias="ROUTE_AQI_SAMPLE_POINTS")

    @model_validator(mode="after")
    def order_simulation_bounds(self) -> "Settings":
        if self.aqi_simulation_floor > self.aqi_simulation_ceiling:
            self.aqi_simulation_floor, self.aqi_simulation_ceiling = (
                self.aqi_simulation_ceiling,
                self.aqi_simulation_floor,
            )
        return self


settings = Settings()
