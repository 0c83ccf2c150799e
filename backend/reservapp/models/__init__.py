"""ORM models package export."""

from reservapp.models.reservation import Reservation, ReservationStatus
from reservapp.models.resource import AvailabilityWindow, Resource
from reservapp.models.subscription import (
    Payment,
    PaymentStatus,
    Subscription,
    SubscriptionPlan,
    SubscriptionStatus,
)

__all__ = [
    "AvailabilityWindow",
    "Payment",
    "PaymentStatus",
    "Reservation",
    "ReservationStatus",
    "Resource",
    "Subscription",
    "SubscriptionPlan",
    "SubscriptionStatus",
]
