"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_service import (
    AvailabilityService,
    AvailabilityStoreProtocol,
    records_to_weekly,
    weekly_to_records,
)
from .schemas import AvailabilityRecord, ChangeRequest, ChangeRequestStatus

__all__ = [
    "AvailabilityRecord",
    "AvailabilityService",
    "AvailabilityStoreProtocol",
    "ChangeRequest",
    "ChangeRequestStatus",
    "records_to_weekly",
    "weekly_to_records",
]
