"""
Wire-format models exchanged with the marketplace API.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, ConfigDict, Field, field_validator


class AvailabilityRecord(BaseModel):
    """One stored range: a day name plus HH:MM[:SS] start and end."""

    model_config = ConfigDict(extra="ignore")

    day_of_week: str
    start_time: str
    end_time: str


class ChangeRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ChangeRequest(BaseModel):
    """A tutor's request for the administrators to change a day's hours."""

    model_config = ConfigDict(extra="ignore", arbitrary_types_allowed=True)

    id: Optional[int] = None
    day_of_week: str
    start_time: str
    end_time: str
    reason: str
    status: ChangeRequestStatus = ChangeRequestStatus.PENDING
    admin_notes: Optional[str] = None
    created_at: Optional[DateTime] = Field(default=None)

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, value: Any) -> Optional[DateTime]:
        """Accept ISO 8601 strings as sent by the API."""
        if value is None or isinstance(value, DateTime):
            return value
        parsed = pendulum.parse(str(value))
        if not isinstance(parsed, DateTime):
            raise ValueError(f"created_at must be a timestamp, got {value!r}")
        return parsed

    def format_display(self) -> str:
        created = self.created_at.format("DD.MM.YYYY") if self.created_at else "-"
        return (
            f"{self.day_of_week} {self.start_time} - {self.end_time} "
            f"[{self.status.value}] ({created})"
        )
