"""Availability resolution for bookable resources.

Bookings are evaluated against the civil calendar of the operating timezone:
the weekday and the time-of-day of a request are read in that zone, never in
UTC or in the caller's zone. Reservation intervals are half-open, so
back-to-back bookings do not conflict.
"""

from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any, Sequence

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from reservapp.core.config import get_settings
from reservapp.models.reservation import Reservation, ReservationStatus
from reservapp.models.resource import AvailabilityWindow, Resource

logger = logging.getLogger(__name__)

ACTIVE_RESERVATION_STATUSES = frozenset(
    {ReservationStatus.PENDING, ReservationStatus.CONFIRMED}
)


class UnavailableReason(str, enum.Enum):
    """Why a requested interval cannot be booked."""

    INVALID_INTERVAL = "invalid_interval"
    RESOURCE_NOT_FOUND = "resource_not_found"
    RESOURCE_INACTIVE = "resource_inactive"
    SCHEDULE_UNAVAILABLE = "schedule_unavailable"
    OUTSIDE_OPERATING_HOURS = "outside_operating_hours"
    RESERVATION_CONFLICT = "reservation_conflict"


@dataclass(slots=True, frozen=True)
class ConflictingReservation:
    """Identity and bounds of the reservation blocking a request."""

    reservation_id: uuid.UUID
    start_at: datetime
    end_at: datetime


@dataclass(slots=True, frozen=True)
class AvailabilityDecision:
    """Result of an availability check."""

    available: bool
    reason_code: UnavailableReason | None = None
    reason: str | None = None
    conflict: ConflictingReservation | None = None

    @classmethod
    def unavailable(
        cls,
        code: UnavailableReason,
        reason: str,
        conflict: ConflictingReservation | None = None,
    ) -> "AvailabilityDecision":
        return cls(available=False, reason_code=code, reason=reason, conflict=conflict)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"available": self.available}
        if self.reason_code is not None:
            payload["reason_code"] = self.reason_code.value
        if self.reason is not None:
            payload["reason"] = self.reason
        if self.conflict is not None:
            payload["conflict"] = {
                "reservation_id": str(self.conflict.reservation_id),
                "start_at": self.conflict.start_at.isoformat(),
                "end_at": self.conflict.end_at.isoformat(),
            }
        return payload


AVAILABLE = AvailabilityDecision(available=True)


@dataclass(slots=True, frozen=True)
class TimeSlot:
    """Fixed-size candidate slot inside an availability window."""

    start_at: datetime
    end_at: datetime
    available: bool


def coerce_utc(moment: datetime) -> datetime:
    """Return ``moment`` in UTC; naive values are taken to already be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def operating_timezone() -> tzinfo:
    return get_settings().tz


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open overlap: ``[a, b)`` and ``[c, d)`` overlap iff ``a < d and c < b``."""
    return a_start < b_end and b_start < a_end


def civil_weekday(moment: datetime, tz: tzinfo) -> int:
    """Sunday-indexed weekday (0..6) of the civil date ``moment`` falls on."""
    return coerce_utc(moment).astimezone(tz).isoweekday() % 7


def weekday_of(day: date) -> int:
    return day.isoweekday() % 7


def _fmt(value: time) -> str:
    return value.strftime("%H:%M")


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _window_contains(window: AvailabilityWindow, start: time, end: time) -> bool:
    return window.start_time <= start and end <= window.end_time


def _nearest_window(
    windows: Sequence[AvailabilityWindow], start: time
) -> AvailabilityWindow:
    target = _minutes(start)

    def _distance(window: AvailabilityWindow) -> int:
        if _minutes(window.start_time) <= target <= _minutes(window.end_time):
            return 0
        return min(
            abs(_minutes(window.start_time) - target),
            abs(_minutes(window.end_time) - target),
        )

    return min(windows, key=lambda window: (_distance(window), window.start_time))


def _active_windows_for(resource: Resource, weekday: int) -> list[AvailabilityWindow]:
    return [
        window
        for window in resource.windows
        if window.is_active and window.day_of_week == weekday
    ]


async def _load_resource(
    session: AsyncSession,
    resource_id: uuid.UUID,
    *,
    lock: bool = False,
) -> Resource | None:
    stmt: Select[tuple[Resource]] = (
        select(Resource)
        .options(selectinload(Resource.windows))
        .where(Resource.id == resource_id)
        .execution_options(populate_existing=True)
    )
    if lock:
        # Serializes every booking attempt on this resource, including the
        # case where no reservation row exists yet to be locked.
        stmt = stmt.with_for_update(of=Resource)
    result = await session.execute(stmt)
    return result.scalars().unique().one_or_none()


def _overlap_query(
    resource_id: uuid.UUID,
    start_at: datetime,
    end_at: datetime,
) -> Select[tuple[Reservation]]:
    return (
        select(Reservation)
        .where(
            Reservation.resource_id == resource_id,
            Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
            Reservation.start_at < end_at,
            start_at < Reservation.end_at,
        )
        .order_by(Reservation.start_at.asc())
    )


async def find_conflicts(
    session: AsyncSession,
    *,
    resource_id: uuid.UUID,
    start_at: datetime,
    end_at: datetime,
    lock: bool = False,
) -> list[Reservation]:
    """Return active reservations overlapping ``[start_at, end_at)``."""
    stmt = _overlap_query(resource_id, coerce_utc(start_at), coerce_utc(end_at))
    if lock:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def check_availability(
    session: AsyncSession,
    *,
    resource_id: uuid.UUID,
    start_at: datetime,
    end_at: datetime,
    lock: bool = False,
    tz: tzinfo | None = None,
) -> AvailabilityDecision:
    """Decide whether ``resource_id`` can be booked for ``[start_at, end_at)``.

    Pass ``lock=True`` from inside the transaction that will insert the
    reservation; the resource row and any overlapping rows are then read
    ``FOR UPDATE`` so a concurrent booking of the same resource waits and
    re-observes the conflict.
    """
    tz = tz or operating_timezone()
    start_at = coerce_utc(start_at)
    end_at = coerce_utc(end_at)

    if end_at <= start_at:
        return AvailabilityDecision.unavailable(
            UnavailableReason.INVALID_INTERVAL,
            "Reservation end time must be after start time",
        )

    resource = await _load_resource(session, resource_id, lock=lock)
    if resource is None:
        return AvailabilityDecision.unavailable(
            UnavailableReason.RESOURCE_NOT_FOUND, "Resource does not exist"
        )
    if not resource.is_active:
        return AvailabilityDecision.unavailable(
            UnavailableReason.RESOURCE_INACTIVE, "Resource is not currently available"
        )

    local_start = start_at.astimezone(tz)
    local_end = end_at.astimezone(tz)
    windows = _active_windows_for(resource, civil_weekday(start_at, tz))
    if not windows:
        return AvailabilityDecision.unavailable(
            UnavailableReason.SCHEDULE_UNAVAILABLE,
            "Resource is closed this day of the week",
        )

    start_tod = local_start.time().replace(second=0, microsecond=0)
    # Round the end up so a partial minute past closing does not fit.
    end_minute = local_end.replace(second=0, microsecond=0)
    if end_minute != local_end:
        end_minute += timedelta(minutes=1)
    end_tod = end_minute.time()
    same_day = end_minute.date() == local_start.date()
    if not same_day or not any(
        _window_contains(window, start_tod, end_tod) for window in windows
    ):
        nearest = _nearest_window(windows, start_tod)
        return AvailabilityDecision.unavailable(
            UnavailableReason.OUTSIDE_OPERATING_HOURS,
            "Resource is only available between "
            f"{_fmt(nearest.start_time)} and {_fmt(nearest.end_time)}",
        )

    conflicts = await find_conflicts(
        session,
        resource_id=resource.id,
        start_at=start_at,
        end_at=end_at,
        lock=lock,
    )
    if conflicts:
        first = conflicts[0]
        logger.info(
            "Booking of resource %s for %s-%s conflicts with reservation %s",
            resource.id,
            start_at.isoformat(),
            end_at.isoformat(),
            first.id,
        )
        return AvailabilityDecision.unavailable(
            UnavailableReason.RESERVATION_CONFLICT,
            "Resource is already booked for this time",
            ConflictingReservation(
                reservation_id=first.id,
                start_at=coerce_utc(first.start_at),
                end_at=coerce_utc(first.end_at),
            ),
        )

    return AVAILABLE


def _exists_locally(moment: datetime) -> bool:
    """False for wall-clock times skipped by a DST jump."""
    return (
        moment.astimezone(UTC).astimezone(moment.tzinfo).replace(tzinfo=None)
        == moment.replace(tzinfo=None)
    )


def _tile_window(
    day: date,
    window: AvailabilityWindow,
    *,
    duration: timedelta,
    step: timedelta,
    tz: tzinfo,
) -> list[tuple[datetime, datetime]]:
    """Fixed-size UTC spans for one window, stepped on the civil clock."""
    window_start = datetime.combine(day, window.start_time, tzinfo=tz)
    window_end = datetime.combine(day, window.end_time, tzinfo=tz)
    spans: list[tuple[datetime, datetime]] = []
    cursor = window_start
    while cursor + duration <= window_end:
        end = cursor + duration
        start_utc = cursor.astimezone(UTC)
        end_utc = end.astimezone(UTC)
        # Spans touching a DST gap or overlap are not the requested length.
        if (
            _exists_locally(cursor)
            and _exists_locally(end)
            and end_utc - start_utc == duration
        ):
            spans.append((start_utc, end_utc))
        cursor += step
    return spans


async def enumerate_slots(
    session: AsyncSession,
    *,
    resource_id: uuid.UUID,
    on_date: date,
    slot_duration_minutes: int | None = None,
    step_minutes: int | None = None,
    tz: tzinfo | None = None,
) -> list[TimeSlot]:
    """List fixed-size candidate slots for ``on_date`` with availability flags.

    Read-only and lock-free: the answer is advisory, a later booking must go
    through :func:`check_availability` inside its own transaction.
    """
    tz = tz or operating_timezone()
    duration_minutes = (
        get_settings().default_slot_minutes
        if slot_duration_minutes is None
        else slot_duration_minutes
    )
    if duration_minutes <= 0:
        raise ValueError("Slot duration must be positive")
    if step_minutes is not None and step_minutes <= 0:
        raise ValueError("Slot step must be positive")
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=step_minutes) if step_minutes is not None else duration

    resource = await _load_resource(session, resource_id)
    if resource is None or not resource.is_active:
        raise ValueError("Resource not found or inactive")

    windows = _active_windows_for(resource, weekday_of(on_date))
    if not windows:
        return []

    spans: list[tuple[datetime, datetime]] = []
    for window in windows:
        spans.extend(
            _tile_window(on_date, window, duration=duration, step=step, tz=tz)
        )
    if not spans:
        return []

    range_start = min(start for start, _ in spans)
    range_end = max(end for _, end in spans)
    busy = [
        (coerce_utc(reservation.start_at), coerce_utc(reservation.end_at))
        for reservation in await find_conflicts(
            session,
            resource_id=resource.id,
            start_at=range_start,
            end_at=range_end,
        )
    ]

    slots = [
        TimeSlot(
            start_at=start.astimezone(UTC),
            end_at=end.astimezone(UTC),
            available=not any(
                intervals_overlap(start, end, busy_start, busy_end)
                for busy_start, busy_end in busy
            ),
        )
        for start, end in spans
    ]
    slots.sort(key=lambda slot: slot.start_at)
    return slots
