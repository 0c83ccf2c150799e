"""Seed the default studios and their weekly schedules."""
from __future__ import annotations

import asyncio
from datetime import time

from sqlalchemy import select

from reservapp.db.session import get_sessionmaker
from reservapp.models.resource import AvailabilityWindow, Resource

WEEKDAYS = (1, 2, 3, 4, 5)
ALL_DAYS = (0, 1, 2, 3, 4, 5, 6)

DEFAULT_RESOURCES = (
    {
        "name": "Studio A",
        "resource_type": "room",
        "description": "Large room with whiteboard and projector",
        "capacity": 10,
        "days": WEEKDAYS,
        "hours": (time(9, 0), time(18, 0)),
    },
    {
        "name": "Studio B",
        "resource_type": "room",
        "description": "Small room for meetings",
        "capacity": 6,
        "days": ALL_DAYS,
        "hours": (time(8, 0), time(22, 0)),
    },
)


async def seed_resources() -> None:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        created = 0
        for spec in DEFAULT_RESOURCES:
            existing = await session.execute(
                select(Resource.id).where(Resource.name == spec["name"])
            )
            if existing.scalar_one_or_none() is not None:
                continue
            opens, closes = spec["hours"]
            session.add(
                Resource(
                    name=spec["name"],
                    resource_type=spec["resource_type"],
                    description=spec["description"],
                    capacity=spec["capacity"],
                    windows=[
                        AvailabilityWindow(
                            day_of_week=day, start_time=opens, end_time=closes
                        )
                        for day in spec["days"]
                    ],
                )
            )
            created += 1
        if created:
            await session.commit()
        print(f"Seeded {created} resource(s).")


def main() -> None:
    asyncio.run(seed_resources())


if __name__ == "__main__":
    main()
