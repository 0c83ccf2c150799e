"""Test fixtures for the booking backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator
from datetime import time

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("OPERATING_TIMEZONE", "America/Santiago")

from reservapp.core.config import get_settings
from reservapp.db.base import Base
from reservapp.db.session import dispose_engine, get_sessionmaker
from reservapp.main import app
from reservapp.models import AvailabilityWindow, Resource

ALL_DAYS = range(7)
WEEKDAYS = range(1, 6)


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)
    get_settings.cache_clear()


async def seed_resource(
    db_url: str,
    *,
    name: str,
    days=WEEKDAYS,
    hours: tuple[time, time] = (time(9, 0), time(18, 0)),
    is_active: bool = True,
    extra_windows: list[tuple[int, time, time]] | None = None,
) -> Resource:
    """Insert a resource open ``hours`` on every day in ``days``."""
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        windows = [
            AvailabilityWindow(day_of_week=day, start_time=hours[0], end_time=hours[1])
            for day in days
        ]
        for day, opens, closes in extra_windows or []:
            windows.append(
                AvailabilityWindow(day_of_week=day, start_time=opens, end_time=closes)
            )
        resource = Resource(
            name=name,
            resource_type="room",
            capacity=8,
            is_active=is_active,
            windows=windows,
        )
        session.add(resource)
        await session.commit()
        return resource


@pytest.fixture()
def resource_factory(reset_database: None, db_url: str):
    """Return a coroutine that seeds a resource in the test database."""

    async def _factory(**kwargs) -> Resource:
        return await seed_resource(db_url, **kwargs)

    return _factory


@pytest_asyncio.fixture()
async def app_context(
    reset_database: AsyncIterator[None], db_url: str
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client plus a weekday studio and an every-day studio."""
    studio_a = await seed_resource(db_url, name="Studio A")
    studio_b = await seed_resource(
        db_url, name="Studio B", days=ALL_DAYS, hours=(time(8, 0), time(22, 0))
    )
    context: dict[str, object] = {
        "studio_a_id": studio_a.id,
        "studio_b_id": studio_b.id,
    }

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context
