"""Resource catalogue and weekly schedule management."""
from __future__ import annotations

import uuid
from datetime import time

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from reservapp.models.resource import AvailabilityWindow, Resource


async def list_resources(
    session: AsyncSession,
    *,
    include_inactive: bool = False,
) -> list[Resource]:
    """Return resources with their windows, active ones only by default."""
    stmt: Select[tuple[Resource]] = (
        select(Resource)
        .options(selectinload(Resource.windows))
        .order_by(Resource.name.asc())
    )
    if not include_inactive:
        stmt = stmt.where(Resource.is_active.is_(True))
    result = await session.execute(stmt)
    return list(result.scalars().unique().all())


async def get_resource(
    session: AsyncSession,
    *,
    resource_id: uuid.UUID,
) -> Resource | None:
    return await session.get(
        Resource, resource_id, options=[selectinload(Resource.windows)]
    )


async def create_resource(
    session: AsyncSession,
    *,
    name: str,
    resource_type: str = "room",
    description: str | None = None,
    capacity: int | None = None,
    is_active: bool = True,
) -> Resource:
    if capacity is not None and capacity < 1:
        raise ValueError("Capacity must be at least 1")
    resource = Resource(
        name=name,
        resource_type=resource_type,
        description=description,
        capacity=capacity,
        is_active=is_active,
        windows=[],
    )
    session.add(resource)
    await session.commit()
    return resource


def _validate_window(day_of_week: int, start_time: time, end_time: time) -> None:
    if not 0 <= day_of_week <= 6:
        raise ValueError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")
    if start_time >= end_time:
        raise ValueError("Window start time must be before its end time")


async def add_availability_window(
    session: AsyncSession,
    *,
    resource_id: uuid.UUID,
    day_of_week: int,
    start_time: time,
    end_time: time,
    is_active: bool = True,
) -> AvailabilityWindow:
    """Attach a weekly window; windows may repeat or overlap within a day."""
    _validate_window(day_of_week, start_time, end_time)
    resource = await get_resource(session, resource_id=resource_id)
    if resource is None:
        raise ValueError("Resource not found")
    window = AvailabilityWindow(
        day_of_week=day_of_week,
        start_time=start_time.replace(second=0, microsecond=0),
        end_time=end_time.replace(second=0, microsecond=0),
        is_active=is_active,
    )
    resource.windows.append(window)
    await session.commit()
    return window


async def set_window_active(
    session: AsyncSession,
    *,
    window_id: uuid.UUID,
    is_active: bool,
) -> AvailabilityWindow:
    window = await session.get(AvailabilityWindow, window_id)
    if window is None:
        raise ValueError("Availability window not found")
    window.is_active = is_active
    await session.commit()
    return window
