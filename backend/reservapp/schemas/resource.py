"""Schemas for resources and their weekly windows."""

from __future__ import annotations

import uuid
from datetime import time

from pydantic import BaseModel, ConfigDict, Field


class AvailabilityWindowRead(BaseModel):
    id: uuid.UUID
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class ResourceRead(BaseModel):
    """Serialized resource with its schedule."""

    id: uuid.UUID
    name: str
    resource_type: str
    description: str | None = None
    capacity: int | None = None
    is_active: bool
    windows: list[AvailabilityWindowRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
