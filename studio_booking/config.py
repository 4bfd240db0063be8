"""
Application configuration loaded from environment variables (or a .env file).

Call get_settings.cache_clear() in tests after changing the environment.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    api_title: str = "Fight Club Booking API"
    api_version: str = "0.1.0"

    database_url: str = Field(
        default="sqlite:///./studio_booking.db",
        description="SQLAlchemy database URL",
    )
    skip_db_init: bool = Field(
        default=False,
        description="Skip table creation and seeding on startup",
    )
    seed_demo_data: bool = Field(
        default=True,
        description="Seed coaches, session types and availability into an empty database",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )

    booking_reference_prefix: str = "BK"
    booking_reference_length: int = Field(default=6, ge=4, le=16)
    booking_reference_attempts: int = Field(
        default=5,
        ge=1,
        description="How many fresh reference codes to try before giving up",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
