"""Penalty quote API tests."""
from __future__ import annotations

import uuid
from decimal import Decimal

import pytest
from httpx import AsyncClient

from reservapp.db.session import get_sessionmaker
from reservapp.models import SubscriptionPlan

pytestmark = pytest.mark.asyncio


async def test_quote_with_default_policy(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.post(
        "/api/v1/penalties/quote",
        json={
            "base_amount": 100000,
            "due_date": "2026-02-01",
            "payment_date": "2026-02-04",
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert body["penalty_amount"] == 5500
    assert Decimal(body["penalty_rate"]) == Decimal("0.055")
    assert body["days_late"] == 1
    assert body["within_grace_period"] is False
    assert body["total_amount"] == 105500


async def test_quote_inside_grace(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.post(
        "/api/v1/penalties/quote",
        json={
            "base_amount": 100000,
            "due_date": "2026-02-01",
            "payment_date": "2026-02-03",
        },
    )
    body = response.json()
    assert body["penalty_amount"] == 0
    assert body["within_grace_period"] is True
    assert body["total_amount"] == 100000


async def test_quote_with_policy_override(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.post(
        "/api/v1/penalties/quote",
        json={
            "base_amount": 50000,
            "due_date": "2026-02-01",
            "payment_date": "2026-02-06",
            "policy": {
                "grace_period_days": 0,
                "base_rate": "0.10",
                "daily_rate": "0.01",
                "max_rate": "0.20",
            },
        },
    )
    assert response.status_code == 200
    assert response.json()["penalty_amount"] == 7500


async def test_quote_with_plan(app_context: dict[str, object], db_url: str) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        plan = SubscriptionPlan(
            name="Lenient",
            price=20000,
            grace_period_days=5,
        )
        session.add(plan)
        await session.commit()
        plan_id = plan.id

    response = await client.post(
        "/api/v1/penalties/quote",
        json={
            "base_amount": 100000,
            "due_date": "2026-02-01",
            "payment_date": "2026-02-04",
            "plan_id": str(plan_id),
        },
    )
    assert response.status_code == 200
    assert response.json()["within_grace_period"] is True

    missing = await client.post(
        "/api/v1/penalties/quote",
        json={
            "base_amount": 100000,
            "due_date": "2026-02-01",
            "payment_date": "2026-02-04",
            "plan_id": str(uuid.uuid4()),
        },
    )
    assert missing.status_code == 404


async def test_quote_rejects_negative_amount(app_context: dict[str, object]) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    response = await client.post(
        "/api/v1/penalties/quote",
        json={
            "base_amount": -5,
            "due_date": "2026-02-01",
            "payment_date": "2026-02-04",
        },
    )
    assert response.status_code == 422
