"""Scheduled application of late-payment penalties and suspensions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from reservapp.core.config import get_settings
from reservapp.models.subscription import (
    Payment,
    PaymentStatus,
    Subscription,
    SubscriptionStatus,
)
from reservapp.services.availability_service import coerce_utc
from reservapp.services.penalty_service import PenaltyPolicy, calculate_penalty

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PenaltyRunSummary:
    """Counters reported by a penalty run."""

    checked: int = 0
    applied: int = 0
    skipped: int = 0
    failed: int = 0


def _apply_to_payment(payment: Payment, *, now: datetime) -> bool:
    settings = get_settings()
    subscription = payment.subscription
    result = calculate_penalty(
        payment.amount,
        payment.due_date,
        now,
        PenaltyPolicy.from_plan(subscription.plan),
        tz=settings.tz,
    )
    if result.days_late == 0:
        return False

    payment.penalty_fee = result.penalty_amount
    payment.total_amount = payment.amount + result.penalty_amount
    subscription.status = SubscriptionStatus.PAST_DUE
    if subscription.grace_period_end is None:
        subscription.grace_period_end = now + timedelta(
            days=settings.suspension_grace_days
        )
    logger.info(
        "Applied penalty %s (rate %s, %s day(s) late) to payment %s",
        result.penalty_amount,
        result.penalty_rate,
        result.days_late,
        payment.id,
    )
    return True


async def apply_overdue_penalties(
    session: AsyncSession,
    *,
    now: datetime | None = None,
) -> PenaltyRunSummary:
    """Price every unpaid, unpenalized payment that is past due."""
    settings = get_settings()
    now = coerce_utc(now or datetime.now(UTC))
    today = now.astimezone(settings.tz).date()

    stmt: Select[tuple[Payment]] = (
        select(Payment)
        .options(selectinload(Payment.subscription).selectinload(Subscription.plan))
        .where(
            Payment.status == PaymentStatus.PENDING,
            Payment.penalty_fee == 0,
            Payment.due_date < today,
        )
        .order_by(Payment.due_date.asc())
    )
    payments = list((await session.execute(stmt)).scalars().unique().all())
    summary = PenaltyRunSummary(checked=len(payments))
    logger.info("Found %s overdue payment(s) without penalties", len(payments))

    for payment in payments:
        try:
            async with session.begin_nested():
                applied = _apply_to_payment(payment, now=now)
        except Exception as exc:
            logger.exception("Failed to apply penalty to payment %s: %s", payment.id, exc)
            summary.failed += 1
            continue
        if applied:
            summary.applied += 1
        else:
            summary.skipped += 1

    await session.commit()
    logger.info(
        "Penalty run complete: checked=%s applied=%s skipped=%s failed=%s",
        summary.checked,
        summary.applied,
        summary.skipped,
        summary.failed,
    )
    return summary


async def suspend_expired_subscriptions(
    session: AsyncSession,
    *,
    now: datetime | None = None,
) -> int:
    """Suspend past-due subscriptions whose grace period has run out."""
    now = coerce_utc(now or datetime.now(UTC))
    stmt: Select[tuple[Subscription]] = select(Subscription).where(
        Subscription.status == SubscriptionStatus.PAST_DUE,
        Subscription.grace_period_end.is_not(None),
        Subscription.grace_period_end <= now,
    )
    subscriptions = list((await session.execute(stmt)).scalars().all())
    for subscription in subscriptions:
        subscription.status = SubscriptionStatus.SUSPENDED
        subscription.grace_period_end = None
        logger.info("Suspended subscription %s", subscription.id)
    await session.commit()
    return len(subscriptions)
