"""Reservation management service helpers."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from reservapp.core.config import get_settings
from reservapp.models.mixins import utcnow
from reservapp.models.reservation import Reservation, ReservationStatus
from reservapp.services.availability_service import (
    AvailabilityDecision,
    check_availability,
    coerce_utc,
)

logger = logging.getLogger(__name__)

_ALLOWED_STATUS_TRANSITIONS: dict[ReservationStatus, set[ReservationStatus]] = {
    ReservationStatus.PENDING: {
        ReservationStatus.CONFIRMED,
        ReservationStatus.CANCELLED,
    },
    ReservationStatus.CONFIRMED: {
        ReservationStatus.CANCELLED,
        ReservationStatus.COMPLETED,
    },
    ReservationStatus.CANCELLED: set(),
    ReservationStatus.COMPLETED: set(),
}

_LIMIT_WINDOW = timedelta(hours=24)


class ReservationUnavailableError(ValueError):
    """Raised when a booking is rejected by the availability check."""

    def __init__(self, decision: AvailabilityDecision) -> None:
        super().__init__(decision.reason or "Resource is not available")
        self.decision = decision


class ReservationNotFoundError(ValueError):
    """Raised when a reservation does not exist for the acting user."""


@dataclass(slots=True, frozen=True)
class ReservationLimit:
    """Daily booking allowance for a user."""

    allowed: bool
    count: int
    limit: int


def _base_reservation_query():
    return select(Reservation).options(selectinload(Reservation.resource))


async def get_reservation(
    session: AsyncSession,
    *,
    reservation_id: uuid.UUID,
) -> Reservation | None:
    stmt = _base_reservation_query().where(Reservation.id == reservation_id)
    result = await session.execute(stmt)
    return result.scalars().unique().one_or_none()


async def list_user_reservations(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    status: ReservationStatus | None = None,
    skip: int = 0,
    limit: int = 50,
) -> Sequence[Reservation]:
    stmt = (
        _base_reservation_query()
        .where(Reservation.user_id == user_id)
        .order_by(Reservation.start_at.desc())
    )
    if status is not None:
        stmt = stmt.where(Reservation.status == status)
    result = await session.execute(stmt.offset(skip).limit(limit))
    return result.scalars().unique().all()


async def check_user_reservation_limit(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    now: datetime | None = None,
) -> ReservationLimit:
    """Count the user's bookings made in the trailing 24 hours."""
    limit = get_settings().reservation_daily_limit
    window_start = coerce_utc(now or datetime.now(UTC)) - _LIMIT_WINDOW
    count = (
        await session.execute(
            select(func.count())
            .select_from(Reservation)
            .where(
                Reservation.user_id == user_id,
                Reservation.created_at >= window_start,
            )
        )
    ).scalar_one()
    return ReservationLimit(allowed=count < limit, count=count, limit=limit)


async def create_reservation(
    session: AsyncSession,
    *,
    resource_id: uuid.UUID,
    user_id: uuid.UUID,
    start_at: datetime,
    end_at: datetime,
    title: str,
    description: str | None = None,
    attendees: int = 1,
    status: ReservationStatus = ReservationStatus.CONFIRMED,
    details: dict[str, Any] | None = None,
) -> Reservation:
    """Check availability and insert the reservation in one transaction.

    The check is always repeated here with row locks held; a decision made
    earlier, outside this transaction, is never trusted.
    """
    if status not in (ReservationStatus.PENDING, ReservationStatus.CONFIRMED):
        raise ValueError("New reservations must be pending or confirmed")

    start_at = coerce_utc(start_at)
    end_at = coerce_utc(end_at)
    try:
        decision = await check_availability(
            session,
            resource_id=resource_id,
            start_at=start_at,
            end_at=end_at,
            lock=True,
        )
        if not decision.available:
            raise ReservationUnavailableError(decision)

        reservation = Reservation(
            resource_id=resource_id,
            user_id=user_id,
            title=title,
            description=description,
            start_at=start_at,
            end_at=end_at,
            attendees=attendees,
            status=status,
            details=details or {"created_from": "api"},
        )
        session.add(reservation)
        await session.flush()
        await session.commit()
    except ReservationUnavailableError as exc:
        await session.rollback()
        logger.info(
            "Rejected booking of resource %s by user %s: %s",
            resource_id,
            user_id,
            exc.decision.reason_code,
        )
        raise
    except Exception:
        await session.rollback()
        logger.exception("Booking transaction failed for resource %s", resource_id)
        raise

    logger.info(
        "Created reservation %s on resource %s for user %s",
        reservation.id,
        resource_id,
        user_id,
    )
    return reservation


def _validate_status_transition(
    current: ReservationStatus, target: ReservationStatus
) -> None:
    allowed = _ALLOWED_STATUS_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise ValueError(f"Invalid status transition from {current.value} to {target.value}")


async def cancel_reservation(
    session: AsyncSession,
    *,
    reservation_id: uuid.UUID,
    user_id: uuid.UUID,
    now: datetime | None = None,
) -> Reservation:
    """Cancel a confirmed reservation owned by ``user_id``.

    Cancellation is only allowed up to the configured notice period before the
    reservation starts.
    """
    reservation = await get_reservation(session, reservation_id=reservation_id)
    if reservation is None or reservation.user_id != user_id:
        raise ReservationNotFoundError("Reservation not found")
    if reservation.status == ReservationStatus.CANCELLED:
        raise ValueError("Reservation is already cancelled")
    if reservation.status != ReservationStatus.CONFIRMED:
        raise ValueError("Only confirmed reservations can be cancelled")

    notice = timedelta(hours=get_settings().cancellation_notice_hours)
    current = coerce_utc(now or datetime.now(UTC))
    if coerce_utc(reservation.start_at) - current < notice:
        raise ValueError(
            "Reservations cannot be cancelled less than "
            f"{get_settings().cancellation_notice_hours} hours before they start"
        )

    _validate_status_transition(reservation.status, ReservationStatus.CANCELLED)
    reservation.status = ReservationStatus.CANCELLED
    await session.commit()
    logger.info("Cancelled reservation %s", reservation.id)
    return reservation


async def complete_finished_reservations(
    session: AsyncSession,
    *,
    now: datetime | None = None,
) -> int:
    """Mark confirmed reservations whose end has passed as completed."""
    cutoff = coerce_utc(now or datetime.now(UTC))
    result = await session.execute(
        update(Reservation)
        .where(
            Reservation.status == ReservationStatus.CONFIRMED,
            Reservation.end_at <= cutoff,
        )
        .values(status=ReservationStatus.COMPLETED, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    completed = result.rowcount or 0
    logger.info("Completed %s finished reservation(s)", completed)
    return completed
