"""Resource and availability API tests."""
from __future__ import annotations

import uuid
from datetime import date, datetime, time
from zoneinfo import ZoneInfo

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

SCL = ZoneInfo("America/Santiago")
MONDAY = date(2025, 6, 2)
SUNDAY = date(2025, 6, 1)


def _iso(day: date, hour: int, minute: int = 0) -> str:
    return datetime.combine(day, time(hour, minute), tzinfo=SCL).isoformat()


async def test_list_and_get_resources(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]

    list_resp = await client.get("/api/v1/resources")
    assert list_resp.status_code == 200
    names = [resource["name"] for resource in list_resp.json()]
    assert names == ["Studio A", "Studio B"]

    studio_a_id = app_context["studio_a_id"]
    detail = await client.get(f"/api/v1/resources/{studio_a_id}")
    assert detail.status_code == 200
    body = detail.json()
    assert body["capacity"] == 8
    assert [window["day_of_week"] for window in body["windows"]] == [1, 2, 3, 4, 5]
    assert body["windows"][0]["start_time"] == "09:00:00"

    missing = await client.get(f"/api/v1/resources/{uuid.uuid4()}")
    assert missing.status_code == 404


async def test_slot_listing(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    studio_a_id = app_context["studio_a_id"]

    response = await client.get(
        f"/api/v1/resources/{studio_a_id}/availability",
        params={"date": MONDAY.isoformat(), "duration": 90},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["message"] is None
    # 09:00-18:00 holds six 90 minute slots.
    assert len(payload["slots"]) == 6
    assert all(slot["available"] for slot in payload["slots"])
    first_start = datetime.fromisoformat(payload["slots"][0]["start_at"])
    assert first_start == datetime.combine(MONDAY, time(9, 0), tzinfo=SCL)


async def test_slot_listing_closed_day(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    studio_a_id = app_context["studio_a_id"]

    response = await client.get(
        f"/api/v1/resources/{studio_a_id}/availability",
        params={"date": SUNDAY.isoformat()},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["slots"] == []
    assert payload["message"] == "Resource is not available on this day"


async def test_slot_listing_unknown_resource(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.get(
        f"/api/v1/resources/{uuid.uuid4()}/availability",
        params={"date": MONDAY.isoformat()},
    )
    assert response.status_code == 404


async def test_availability_check(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    studio_a_id = app_context["studio_a_id"]

    open_resp = await client.post(
        f"/api/v1/resources/{studio_a_id}/availability/check",
        json={"start_at": _iso(MONDAY, 10), "end_at": _iso(MONDAY, 11)},
    )
    assert open_resp.status_code == 200
    assert open_resp.json()["available"] is True

    closed_resp = await client.post(
        f"/api/v1/resources/{studio_a_id}/availability/check",
        json={"start_at": _iso(SUNDAY, 10), "end_at": _iso(SUNDAY, 11)},
    )
    assert closed_resp.status_code == 200
    body = closed_resp.json()
    assert body["available"] is False
    assert body["reason_code"] == "schedule_unavailable"

    early_resp = await client.post(
        f"/api/v1/resources/{studio_a_id}/availability/check",
        json={"start_at": _iso(MONDAY, 7), "end_at": _iso(MONDAY, 8)},
    )
    body = early_resp.json()
    assert body["reason_code"] == "outside_operating_hours"
    assert body["reason"] == "Resource is only available between 09:00 and 18:00"
