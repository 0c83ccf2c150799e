"""Schema exports."""

from reservapp.schemas.availability import (
    AvailabilityCheckRequest,
    AvailabilityDecisionRead,
    ConflictRead,
    SlotListResponse,
    TimeSlotRead,
)
from reservapp.schemas.penalty import (
    PenaltyPolicyOverride,
    PenaltyQuoteRead,
    PenaltyQuoteRequest,
)
from reservapp.schemas.reservation import ReservationCreate, ReservationRead
from reservapp.schemas.resource import AvailabilityWindowRead, ResourceRead

__all__ = [
    "AvailabilityCheckRequest",
    "AvailabilityDecisionRead",
    "AvailabilityWindowRead",
    "ConflictRead",
    "PenaltyPolicyOverride",
    "PenaltyQuoteRead",
    "PenaltyQuoteRequest",
    "ReservationCreate",
    "ReservationRead",
    "ResourceRead",
    "SlotListResponse",
    "TimeSlotRead",
]
