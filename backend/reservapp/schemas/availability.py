"""Availability check and slot schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from reservapp.services.availability_service import UnavailableReason


class AvailabilityCheckRequest(BaseModel):
    """Interval to test against a resource's schedule and bookings."""

    start_at: datetime
    end_at: datetime


class ConflictRead(BaseModel):
    reservation_id: uuid.UUID
    start_at: datetime
    end_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AvailabilityDecisionRead(BaseModel):
    """Outcome of an availability check."""

    available: bool
    reason_code: UnavailableReason | None = None
    reason: str | None = None
    conflict: ConflictRead | None = None

    model_config = ConfigDict(from_attributes=True)


class TimeSlotRead(BaseModel):
    start_at: datetime
    end_at: datetime
    available: bool

    model_config = ConfigDict(from_attributes=True)


class SlotListResponse(BaseModel):
    """Advisory slot listing for a resource and day."""

    resource_id: uuid.UUID
    slots: list[TimeSlotRead]
    message: str | None = None
