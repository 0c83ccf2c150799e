"""Penalty run and grace-period suspension tests."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from reservapp.db.session import get_sessionmaker
from reservapp.models import (
    Payment,
    PaymentStatus,
    Subscription,
    SubscriptionPlan,
    SubscriptionStatus,
)
from reservapp.services.availability_service import coerce_utc
from reservapp.services.penalty_application_service import (
    apply_overdue_penalties,
    suspend_expired_subscriptions,
)

pytestmark = pytest.mark.asyncio

# 11:00 on 2025-06-20 in Santiago.
NOW = datetime(2025, 6, 20, 15, 0, tzinfo=UTC)


async def _seed_subscription(db_url: str, **plan_kwargs) -> tuple[uuid.UUID, uuid.UUID]:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        plan = SubscriptionPlan(name="Studio Monthly", price=10000, **plan_kwargs)
        subscription = Subscription(user_id=uuid.uuid4(), plan=plan)
        session.add_all([plan, subscription])
        await session.commit()
        return subscription.id, subscription.user_id


async def _add_payment(
    db_url: str,
    subscription_id: uuid.UUID,
    user_id: uuid.UUID,
    *,
    due_date: date,
    amount: int = 10000,
    status: PaymentStatus = PaymentStatus.PENDING,
    penalty_fee: int = 0,
) -> uuid.UUID:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        payment = Payment(
            subscription_id=subscription_id,
            user_id=user_id,
            amount=amount,
            due_date=due_date,
            status=status,
            penalty_fee=penalty_fee,
            total_amount=amount + penalty_fee,
        )
        session.add(payment)
        await session.commit()
        return payment.id


async def test_overdue_payment_is_penalized(reset_database, db_url: str) -> None:
    subscription_id, user_id = await _seed_subscription(db_url)
    overdue = await _add_payment(
        db_url, subscription_id, user_id, due_date=date(2025, 6, 10)
    )
    in_grace = await _add_payment(
        db_url, subscription_id, user_id, due_date=date(2025, 6, 19)
    )
    await _add_payment(
        db_url,
        subscription_id,
        user_id,
        due_date=date(2025, 6, 1),
        status=PaymentStatus.PAID,
    )
    await _add_payment(
        db_url, subscription_id, user_id, due_date=date(2025, 6, 30)
    )

    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        summary = await apply_overdue_penalties(session, now=NOW)
    assert summary.checked == 2
    assert summary.applied == 1
    assert summary.skipped == 1
    assert summary.failed == 0

    async with sessionmaker() as session:
        penalized = await session.get(Payment, overdue)
        untouched = await session.get(Payment, in_grace)
        subscription = await session.get(Subscription, subscription_id)
    # 10 days late, 8 past grace: 0.05 + 8 * 0.005 = 0.09
    assert penalized.penalty_fee == 900
    assert penalized.total_amount == 10900
    assert untouched.penalty_fee == 0
    assert subscription.status is SubscriptionStatus.PAST_DUE
    assert coerce_utc(subscription.grace_period_end) == NOW + timedelta(days=3)


async def test_penalized_payments_are_not_charged_twice(
    reset_database, db_url: str
) -> None:
    subscription_id, user_id = await _seed_subscription(db_url)
    await _add_payment(db_url, subscription_id, user_id, due_date=date(2025, 6, 10))

    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        first = await apply_overdue_penalties(session, now=NOW)
    async with sessionmaker() as session:
        second = await apply_overdue_penalties(
            session, now=NOW + timedelta(days=5)
        )
    assert first.applied == 1
    assert second.checked == 0


async def test_plan_policy_is_used(reset_database, db_url: str) -> None:
    subscription_id, user_id = await _seed_subscription(
        db_url,
        grace_period_days=0,
        penalty_base_rate=Decimal("0.10"),
        penalty_daily_rate=Decimal("0.01"),
        max_penalty_rate=Decimal("0.12"),
    )
    payment_id = await _add_payment(
        db_url, subscription_id, user_id, due_date=date(2025, 6, 10)
    )
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await apply_overdue_penalties(session, now=NOW)
    async with sessionmaker() as session:
        payment = await session.get(Payment, payment_id)
    assert payment.penalty_fee == 1200


async def test_expired_grace_suspends_subscription(reset_database, db_url: str) -> None:
    subscription_id, user_id = await _seed_subscription(db_url)
    await _add_payment(db_url, subscription_id, user_id, due_date=date(2025, 6, 10))

    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        await apply_overdue_penalties(session, now=NOW)

    async with sessionmaker() as session:
        assert await suspend_expired_subscriptions(
            session, now=NOW + timedelta(days=1)
        ) == 0
    async with sessionmaker() as session:
        assert await suspend_expired_subscriptions(
            session, now=NOW + timedelta(days=4)
        ) == 1

    async with sessionmaker() as session:
        subscription = (
            await session.execute(
                select(Subscription).where(Subscription.id == subscription_id)
            )
        ).scalar_one()
    assert subscription.status is SubscriptionStatus.SUSPENDED
    assert subscription.grace_period_end is None
