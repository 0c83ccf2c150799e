"""Bookable resources and their weekly availability windows."""

from __future__ import annotations

import uuid
from datetime import time
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from reservapp.db.base import Base
from reservapp.models.mixins import TimestampMixin


if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from reservapp.models.reservation import Reservation


class Resource(TimestampMixin, Base):
    """A studio, room or piece of equipment that can be reserved."""

    __tablename__ = "resources"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    resource_type: Mapped[str] = mapped_column(
        String(64), nullable=False, default="room"
    )
    description: Mapped[str | None] = mapped_column(String(1024))
    capacity: Mapped[int | None] = mapped_column(Integer())
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    windows: Mapped[list["AvailabilityWindow"]] = relationship(
        "AvailabilityWindow",
        back_populates="resource",
        cascade="all, delete-orphan",
        order_by="[AvailabilityWindow.day_of_week, AvailabilityWindow.start_time]",
    )
    reservations: Mapped[list["Reservation"]] = relationship(
        "Reservation", back_populates="resource"
    )


class AvailabilityWindow(TimestampMixin, Base):
    """Weekly opening window for a resource (day 0 is Sunday)."""

    __tablename__ = "resource_availability"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_window_start_before_end"),
        CheckConstraint(
            "day_of_week >= 0 AND day_of_week <= 6", name="ck_window_day_of_week"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    resource_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time(), nullable=False)
    end_time: Mapped[time] = mapped_column(Time(), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    resource: Mapped["Resource"] = relationship("Resource", back_populates="windows")
