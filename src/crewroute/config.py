"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="CREWROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Crew Route Planner API"
    api_prefix: str = "/api"

    average_speed_mph: float = Field(
        default=30.0,
        gt=0.0,
        description="Average road speed used to turn leg distances into drive minutes.",
    )
    minimum_drive_minutes: int = Field(
        default=5,
        ge=0,
        description="Floor applied to every leg (drive, park and walk-in overhead).",
    )
    earth_radius_miles: float = Field(default=3958.8, gt=0.0)

    active_job_statuses: tuple[str, ...] = Field(
        default=("in_progress", "on_site", "en_route"),
        description="Job statuses meaning the crew is already en route to or working at the site.",
    )
    closed_job_statuses: tuple[str, ...] = Field(default=("completed", "cancelled"))

    maps_base_url: str = Field(
        default="https://www.google.com/maps/dir/",
        description="Deep-link endpoint of the turn-by-turn navigation app.",
    )
    maps_travel_mode: str = "driving"
    maps_waypoint_separator: str = "%7C"

    geocoder_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of a Nominatim-compatible geocoder (e.g., https://nominatim.openstreetmap.org).",
    )
    geocoder_user_agent: str = "crew-route-planner/1.0"
    geocoder_timeout_seconds: float = Field(default=10.0, gt=0.0)
    geocoder_max_retries: int = Field(default=2, ge=0)
    geocoder_backoff_seconds: float = Field(default=0.5, ge=0.0)
    geocoder_country_codes: Optional[str] = None
    resolution_deadline_seconds: float = Field(
        default=15.0,
        gt=0.0,
        description="Total time budget for address lookups within one planning request.",
    )

    split_route_stop_threshold: int = Field(default=6, ge=1)
    high_drive_time_minutes: int = Field(default=180, ge=1)
    default_job_hours: float = Field(default=2.5, ge=0.0)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator(
        "active_job_statuses",
        "closed_job_statuses",
        "frontend_allowed_origins",
        mode="before",
    )
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
