"""Resource catalogue and availability endpoints."""

from __future__ import annotations

import uuid
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from reservapp.api import deps
from reservapp.core.config import get_settings
from reservapp.schemas.availability import (
    AvailabilityCheckRequest,
    AvailabilityDecisionRead,
    SlotListResponse,
    TimeSlotRead,
)
from reservapp.schemas.resource import ResourceRead
from reservapp.services import availability_service, resource_service

router = APIRouter()

_settings = get_settings()
_DEFAULT_RATE_DEP = deps.rate_dependency(
    deps.parse_rate(_settings.rate_limit_default, fallback=(100, 60))
)


@router.get("", response_model=list[ResourceRead], summary="List active resources")
async def list_resources(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> list[ResourceRead]:
    resources = await resource_service.list_resources(session)
    return [ResourceRead.model_validate(resource) for resource in resources]


@router.get("/{resource_id}", response_model=ResourceRead, summary="Get resource")
async def get_resource(
    resource_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> ResourceRead:
    resource = await resource_service.get_resource(session, resource_id=resource_id)
    if resource is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found"
        )
    return ResourceRead.model_validate(resource)


@router.get(
    "/{resource_id}/availability",
    response_model=SlotListResponse,
    summary="List candidate slots for a day",
    dependencies=[_DEFAULT_RATE_DEP],
)
async def list_slots(
    resource_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    on_date: Annotated[date, Query(alias="date")],
    duration: Annotated[int | None, Query(ge=1, le=24 * 60)] = None,
    step: Annotated[int | None, Query(ge=1, le=24 * 60)] = None,
) -> SlotListResponse:
    try:
        slots = await availability_service.enumerate_slots(
            session,
            resource_id=resource_id,
            on_date=on_date,
            slot_duration_minutes=duration,
            step_minutes=step,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    message = None if slots else "Resource is not available on this day"
    return SlotListResponse(
        resource_id=resource_id,
        slots=[TimeSlotRead.model_validate(slot) for slot in slots],
        message=message,
    )


@router.post(
    "/{resource_id}/availability/check",
    response_model=AvailabilityDecisionRead,
    summary="Check whether an interval can be booked",
    dependencies=[_DEFAULT_RATE_DEP],
)
async def check_availability(
    resource_id: uuid.UUID,
    payload: AvailabilityCheckRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> AvailabilityDecisionRead:
    decision = await availability_service.check_availability(
        session,
        resource_id=resource_id,
        start_at=payload.start_at,
        end_at=payload.end_at,
    )
    return AvailabilityDecisionRead.model_validate(decision)
