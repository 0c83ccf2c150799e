"""Application configuration via pydantic settings."""

from functools import lru_cache
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application configuration."""

    app_env: str = Field("local", alias="APP_ENV")
    app_name: str = "Reservapp Booking API"
    api_v1_prefix: str = "/api/v1"
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    database_url: str = Field(..., alias="DATABASE_URL")
    sync_database_url: str | None = Field(default=None, alias="SYNC_DATABASE_URL")

    redis_url: str | None = Field(default=None, alias="REDIS_URL")

    operating_timezone: str = Field("America/Santiago", alias="OPERATING_TIMEZONE")
    default_slot_minutes: int = Field(60, alias="DEFAULT_SLOT_MINUTES")
    reservation_daily_limit: int = Field(10, alias="RESERVATION_DAILY_LIMIT")
    reservation_min_minutes: int = Field(30, alias="RESERVATION_MIN_MINUTES")
    reservation_max_minutes: int = Field(480, alias="RESERVATION_MAX_MINUTES")
    cancellation_notice_hours: int = Field(24, alias="CANCELLATION_NOTICE_HOURS")
    suspension_grace_days: int = Field(3, alias="SUSPENSION_GRACE_DAYS")

    cors_allowlist: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"], alias="CORS_ALLOWLIST"
    )
    rate_limit_default: str = Field("100/minute", alias="RATE_LIMIT_DEFAULT")
    rate_limit_booking: str = Field("20/minute", alias="RATE_LIMIT_BOOKING")

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[3] / ".env",
        case_sensitive=False,
    )

    @field_validator("cors_allowlist", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("operating_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @property
    def tz(self) -> ZoneInfo:
        """Civil timezone every booking and due date is reckoned in."""
        return ZoneInfo(self.operating_timezone)


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()  # type: ignore[call-arg]
