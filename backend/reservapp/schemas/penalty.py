"""Schemas for penalty quotes."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from reservapp.services.penalty_service import PenaltyPolicy


class PenaltyPolicyOverride(BaseModel):
    """Rates are fractions: 0.05 means 5%."""

    grace_period_days: int = Field(default=2, ge=0)
    base_rate: Decimal = Field(default=Decimal("0.05"), ge=0)
    daily_rate: Decimal = Field(default=Decimal("0.005"), ge=0)
    max_rate: Decimal = Field(default=Decimal("0.50"), ge=0)

    def to_policy(self) -> PenaltyPolicy:
        return PenaltyPolicy(
            grace_period_days=self.grace_period_days,
            base_rate=self.base_rate,
            daily_rate=self.daily_rate,
            max_rate=self.max_rate,
        )


class PenaltyQuoteRequest(BaseModel):
    base_amount: int = Field(ge=0)
    due_date: date
    payment_date: date
    plan_id: uuid.UUID | None = None
    policy: PenaltyPolicyOverride | None = None


class PenaltyQuoteRead(BaseModel):
    penalty_amount: int
    penalty_rate: Decimal
    days_late: int
    within_grace_period: bool
    total_amount: int

    model_config = ConfigDict(from_attributes=True)
