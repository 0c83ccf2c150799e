"""Late-payment penalty quotes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from reservapp.api import deps
from reservapp.core.config import get_settings
from reservapp.models.subscription import SubscriptionPlan
from reservapp.schemas.penalty import PenaltyQuoteRead, PenaltyQuoteRequest
from reservapp.services.penalty_service import PenaltyPolicy, calculate_penalty

router = APIRouter()


@router.post("/quote", response_model=PenaltyQuoteRead, summary="Quote a late fee")
async def quote_penalty(
    payload: PenaltyQuoteRequest,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> PenaltyQuoteRead:
    policy: PenaltyPolicy | None = None
    if payload.policy is not None:
        policy = payload.policy.to_policy()
    elif payload.plan_id is not None:
        plan = await session.get(SubscriptionPlan, payload.plan_id)
        if plan is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found"
            )
        policy = PenaltyPolicy.from_plan(plan)

    result = calculate_penalty(
        payload.base_amount,
        payload.due_date,
        payload.payment_date,
        policy,
        tz=get_settings().tz,
    )
    return PenaltyQuoteRead(
        penalty_amount=result.penalty_amount,
        penalty_rate=result.penalty_rate,
        days_late=result.days_late,
        within_grace_period=result.within_grace_period,
        total_amount=payload.base_amount + result.penalty_amount,
    )
