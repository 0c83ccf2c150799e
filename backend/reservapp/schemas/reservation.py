"""Pydantic schemas for reservations."""
from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from reservapp.core.config import get_settings
from reservapp.models.reservation import ReservationStatus


class ReservationCreate(BaseModel):
    """Payload for creating reservations.

    Duration and "must be in the future" rules are request validation; the
    booking core itself only rejects empty or inverted intervals.
    """

    resource_id: uuid.UUID
    title: str = Field(min_length=3, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    start_at: datetime
    end_at: datetime
    attendees: int = Field(default=1, ge=1, le=100)

    @field_validator("title", "description", mode="before")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("start_at", "end_at")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @model_validator(mode="after")
    def _check_interval(self) -> "ReservationCreate":
        settings = get_settings()
        if self.end_at <= self.start_at:
            raise ValueError("Reservation end time must be after start time")
        if self.start_at <= datetime.now(UTC):
            raise ValueError("Reservations must start in the future")
        duration = self.end_at - self.start_at
        if duration < timedelta(minutes=settings.reservation_min_minutes):
            raise ValueError(
                f"Reservations must last at least {settings.reservation_min_minutes} minutes"
            )
        if duration > timedelta(minutes=settings.reservation_max_minutes):
            raise ValueError(
                f"Reservations cannot last more than {settings.reservation_max_minutes} minutes"
            )
        return self


class ReservationRead(BaseModel):
    """Serialized reservation representation."""

    id: uuid.UUID
    resource_id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: str | None = None
    start_at: datetime
    end_at: datetime
    status: ReservationStatus
    attendees: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("start_at", "end_at", "created_at", "updated_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
