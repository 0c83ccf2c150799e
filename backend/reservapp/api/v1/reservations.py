"""Reservation management API."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from reservapp.api import deps
from reservapp.core.config import get_settings
from reservapp.models.reservation import ReservationStatus
from reservapp.schemas.reservation import ReservationCreate, ReservationRead
from reservapp.services import reservation_service
from reservapp.services.reservation_service import (
    ReservationNotFoundError,
    ReservationUnavailableError,
)

router = APIRouter()

_settings = get_settings()
_BOOKING_RATE_DEP = deps.rate_dependency(
    deps.parse_rate(_settings.rate_limit_booking, fallback=(20, 60))
)


@router.get("", response_model=list[ReservationRead], summary="List my reservations")
async def list_reservations(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    user_id: Annotated[uuid.UUID, Depends(deps.get_current_user_id)],
    status_filter: ReservationStatus | None = None,
    skip: int = 0,
    limit: int = 50,
) -> list[ReservationRead]:
    reservations = await reservation_service.list_user_reservations(
        session,
        user_id=user_id,
        status=status_filter,
        skip=max(skip, 0),
        limit=min(max(limit, 1), 100),
    )
    return [ReservationRead.model_validate(obj) for obj in reservations]


@router.post(
    "",
    response_model=ReservationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create reservation",
    dependencies=[_BOOKING_RATE_DEP],
)
async def create_reservation(
    payload: ReservationCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    user_id: Annotated[uuid.UUID, Depends(deps.get_current_user_id)],
) -> ReservationRead:
    allowance = await reservation_service.check_user_reservation_limit(
        session, user_id=user_id
    )
    # The count ran in its own short transaction; the booking opens a fresh one.
    await session.commit()
    if not allowance.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "message": "Daily reservation limit reached",
                "count": allowance.count,
                "limit": allowance.limit,
            },
        )
    try:
        reservation = await reservation_service.create_reservation(
            session,
            user_id=user_id,
            **payload.model_dump(),
        )
    except ReservationUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=exc.decision.to_dict()
        ) from exc
    except IntegrityError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unable to create reservation",
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return ReservationRead.model_validate(reservation)


@router.get(
    "/{reservation_id}", response_model=ReservationRead, summary="Get reservation"
)
async def get_reservation(
    reservation_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    user_id: Annotated[uuid.UUID, Depends(deps.get_current_user_id)],
) -> ReservationRead:
    reservation = await reservation_service.get_reservation(
        session, reservation_id=reservation_id
    )
    if reservation is None or reservation.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found"
        )
    return ReservationRead.model_validate(reservation)


@router.patch(
    "/{reservation_id}/cancel",
    response_model=ReservationRead,
    summary="Cancel reservation",
)
async def cancel_reservation(
    reservation_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    user_id: Annotated[uuid.UUID, Depends(deps.get_current_user_id)],
) -> ReservationRead:
    try:
        reservation = await reservation_service.cancel_reservation(
            session, reservation_id=reservation_id, user_id=user_id
        )
    except ReservationNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return ReservationRead.model_validate(reservation)
