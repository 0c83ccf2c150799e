"""Service layer exports."""
from reservapp.services import (
    availability_service,
    penalty_application_service,
    penalty_service,
    reservation_service,
    resource_service,
)

__all__ = [
    "availability_service",
    "penalty_application_service",
    "penalty_service",
    "reservation_service",
    "resource_service",
]
