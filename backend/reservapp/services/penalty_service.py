"""Late-payment penalty calculation.

Penalties accrue per civil calendar day once a grace period has elapsed:

* no penalty on or before ``due_date + grace_period_days`` (the boundary day
  itself is still inside the grace period);
* afterwards ``base_rate + days_late * daily_rate``, capped at ``max_rate``;
* the capped rate is applied to the base amount and rounded half-up to a whole
  currency unit.

Everything here is pure and safe to call concurrently.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from reservapp.models.subscription import SubscriptionPlan


def _to_rate(value: Decimal | float | int | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(slots=True, frozen=True)
class PenaltyPolicy:
    """Per-plan penalty configuration; rates are fractions (0.05 == 5%)."""

    grace_period_days: int = 2
    base_rate: Decimal = Decimal("0.05")
    daily_rate: Decimal = Decimal("0.005")
    max_rate: Decimal = Decimal("0.50")

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_rate", _to_rate(self.base_rate))
        object.__setattr__(self, "daily_rate", _to_rate(self.daily_rate))
        object.__setattr__(self, "max_rate", _to_rate(self.max_rate))
        if self.grace_period_days < 0:
            raise ValueError("grace_period_days must be non-negative")
        if min(self.base_rate, self.daily_rate, self.max_rate) < 0:
            raise ValueError("Penalty rates must be non-negative")

    @classmethod
    def from_plan(cls, plan: "SubscriptionPlan") -> "PenaltyPolicy":
        """Build the policy embedded in a subscription plan."""
        return cls(
            grace_period_days=plan.grace_period_days,
            base_rate=plan.penalty_base_rate,
            daily_rate=plan.penalty_daily_rate,
            max_rate=plan.max_penalty_rate,
        )


DEFAULT_POLICY = PenaltyPolicy()


@dataclass(slots=True, frozen=True)
class PenaltyResult:
    """Outcome of a penalty calculation."""

    penalty_amount: int
    penalty_rate: Decimal
    days_late: int
    within_grace_period: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "penalty_amount": self.penalty_amount,
            "penalty_rate": str(self.penalty_rate),
            "days_late": self.days_late,
            "within_grace_period": self.within_grace_period,
        }


def _civil_date(value: date | datetime, tz: tzinfo | None) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None and tz is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def calendar_days_between(
    payment_date: date | datetime,
    due_date: date | datetime,
    *,
    tz: tzinfo | None = None,
) -> int:
    """Whole civil days from ``due_date`` to ``payment_date`` (may be negative).

    Time of day is discarded; aware datetimes are first moved into ``tz`` when
    one is given so both dates are read off the same calendar.
    """
    return (_civil_date(payment_date, tz) - _civil_date(due_date, tz)).days


def calculate_penalty(
    base_amount: int,
    due_date: date | datetime,
    payment_date: date | datetime,
    policy: PenaltyPolicy | None = None,
    *,
    tz: tzinfo | None = None,
) -> PenaltyResult:
    """Compute the surcharge owed for paying ``base_amount`` on ``payment_date``."""
    if isinstance(base_amount, bool) or not isinstance(base_amount, int):
        raise ValueError("base_amount must be a whole currency amount")
    if base_amount < 0:
        raise ValueError("base_amount must be non-negative")

    policy = policy or DEFAULT_POLICY

    total_days_late = max(0, calendar_days_between(payment_date, due_date, tz=tz))
    days_late = max(0, total_days_late - policy.grace_period_days)
    within_grace_period = total_days_late > 0 and days_late == 0

    if days_late == 0:
        return PenaltyResult(
            penalty_amount=0,
            penalty_rate=Decimal("0"),
            days_late=0,
            within_grace_period=within_grace_period,
        )

    penalty_rate = min(
        policy.base_rate + days_late * policy.daily_rate, policy.max_rate
    )
    penalty_amount = int(
        (Decimal(base_amount) * penalty_rate).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
    )
    return PenaltyResult(
        penalty_amount=penalty_amount,
        penalty_rate=penalty_rate,
        days_late=days_late,
        within_grace_period=within_grace_period,
    )
