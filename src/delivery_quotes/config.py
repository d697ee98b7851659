"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DQ_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = "Delivery Quotes API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level applied when the app starts.")

    # Routing service (Mapbox Directions)
    mapbox_access_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DQ_MAPBOX_ACCESS_TOKEN", "MAPBOX_ACCESS_TOKEN"),
        description="Mapbox access token. When unset, distances use the haversine formula only.",
    )
    mapbox_base_url: str = Field(default="https://api.mapbox.com")
    mapbox_timeout_seconds: float = Field(default=10.0, gt=0.0)

    # Quoting
    quote_validity_minutes: int = Field(default=30, ge=1)
    currency: str = Field(default="UGX", min_length=3, max_length=3)
    pricing_rules_enabled: bool = Field(
        default=False,
        description="Resolve fee configuration from pricing rules instead of the fixed default.",
    )
    pricing_timezone: str = Field(
        default="Africa/Kampala",
        description="Timezone used to evaluate pricing rule day and hour windows.",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    # Admin authorization
    jwt_secret: Optional[str] = Field(
        default=None,
        description="Shared secret used to verify identity-provider tokens for admin endpoints.",
    )
    jwt_algorithm: str = Field(default="HS256")

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
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
