"""
Application services for loading, editing and saving weekly availability.

The service converts between the API's flat record list and the domain's
per-day slot sets, and delegates storage to any object implementing
``AvailabilityStoreProtocol``. This keeps the CLI thin and lets tests swap
the HTTP adapter for a stub.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from pydantic import ValidationError

from ..domain.exceptions import (
    EditError,
    GatewayError,
    InvalidChangeRequest,
)
from ..domain.models import DEFAULT_WEEK, DayName, TimeRange, ViewFilter, WeeklyAvailability
from ..domain.range_codec import ranges_to_slots, slots_to_ranges, verify_round_trip
from ..domain.range_editor import RangeEditor, coerce_range
from .schemas import AvailabilityRecord, ChangeRequest

logger = logging.getLogger(__name__)


class AvailabilityStoreProtocol(Protocol):
    """Protocol describing the storage behaviour needed by the service."""

    def load_records(self, tutor_id: int) -> List[Dict[str, Any]]:
        """Return every stored availability record of the tutor."""

    def save_records(self, tutor_id: int, records: List[Dict[str, str]]) -> None:
        """Replace the tutor's stored records with ``records``."""

    def list_change_requests(self, tutor_id: int) -> List[Dict[str, Any]]:
        """Return the tutor's schedule change requests."""

    def create_change_request(self, tutor_id: int, payload: Dict[str, str]) -> Dict[str, Any]:
        """Store a new change request and return it as saved."""


def records_to_weekly(
    records: Iterable[Mapping[str, Any]],
    days: Sequence[DayName] = DEFAULT_WEEK,
) -> WeeklyAvailability:
    """
    Build a WeeklyAvailability from stored ``{day_of_week, start_time, end_time}``
    records. Seconds in times are truncated.

    Raises:
        UnknownDay: If a record names a day outside ``days``.
        GatewayError: If a record is malformed.
    """
    weekly = WeeklyAvailability.empty(days)
    ranges_by_day: Dict[Any, List[TimeRange]] = defaultdict(list)

    for raw in records:
        try:
            record = AvailabilityRecord.model_validate(raw)
        except ValidationError as exc:
            raise GatewayError(f"Malformed availability record {raw!r}: {exc}") from exc

        day = weekly.resolve_day(record.day_of_week)
        try:
            time_range = coerce_range((record.start_time, record.end_time))
        except EditError as exc:
            raise GatewayError(
                f"Invalid stored range for {record.day_of_week}: {exc}"
            ) from exc
        ranges_by_day[day].append(time_range)

    for day, ranges in ranges_by_day.items():
        weekly = weekly.with_slots(day, ranges_to_slots(ranges))
    return weekly


def weekly_to_records(weekly: WeeklyAvailability) -> List[AvailabilityRecord]:
    """
    Flatten every non-empty day into records, in week order.

    Empty days produce no records, which clears them on save.
    """
    records: List[AvailabilityRecord] = []
    for day in weekly.days:
        slots = weekly.slots[day]
        if not slots:
            continue
        verify_round_trip(slots)
        for time_range in slots_to_ranges(slots):
            records.append(
                AvailabilityRecord(
                    day_of_week=day.value,
                    start_time=time_range.start_time,
                    end_time=time_range.end_time,
                )
            )
    return records


class AvailabilityService:
    """
    Orchestrates storage access and the domain editor for one tutor.
    """

    def __init__(
        self,
        store: AvailabilityStoreProtocol,
        tutor_id: int,
        days: Sequence[DayName] = DEFAULT_WEEK,
    ) -> None:
        self._store = store
        self._tutor_id = tutor_id
        self._days = tuple(days)

    @property
    def tutor_id(self) -> int:
        return self._tutor_id

    def load(self) -> WeeklyAvailability:
        """Fetch and decode the tutor's stored availability."""
        records = self._store.load_records(self._tutor_id)
        weekly = records_to_weekly(records, self._days)
        logger.debug("Loaded %d records for tutor %s", len(records), self._tutor_id)
        return weekly

    def save(self, weekly: WeeklyAvailability) -> List[AvailabilityRecord]:
        """Replace the stored availability with ``weekly``."""
        records = weekly_to_records(weekly)
        self._store.save_records(
            self._tutor_id,
            [record.model_dump() for record in records],
        )
        logger.info("Saved %d ranges for tutor %s", len(records), self._tutor_id)
        return records

    def open_session(self, view: Optional[ViewFilter] = None) -> RangeEditor:
        """Load the availability and start an edit session over it."""
        return RangeEditor(self.load(), view=view, editing=True)

    def save_session(self, editor: RangeEditor) -> List[AvailabilityRecord]:
        """Persist the session's availability and close the session."""
        records = self.save(editor.availability)
        editor.finish()
        return records

    def submit_change_request(self, day: DayName, start: str, end: str, reason: str) -> ChangeRequest:
        """
        Ask the administrators to change the hours of ``day``.

        Raises:
            UnknownDay: If the day is outside the configured week.
            InvalidTimeFormat / InvalidRange: If the times are malformed.
            InvalidChangeRequest: If no reason is given.
        """
        weekday = WeeklyAvailability.empty(self._days).resolve_day(day)
        time_range = coerce_range((start, end))
        if not reason or not reason.strip():
            raise InvalidChangeRequest("Please explain why the schedule change is needed.")

        payload = {
            "day_of_week": weekday.value,
            "start_time": time_range.start_time,
            "end_time": time_range.end_time,
            "reason": reason.strip(),
        }
        saved = self._store.create_change_request(self._tutor_id, payload)
        return self._parse_change_request({**payload, **(saved or {})})

    def list_change_requests(self) -> List[ChangeRequest]:
        """Return the tutor's change requests, newest first."""
        requests = [
            self._parse_change_request(raw)
            for raw in self._store.list_change_requests(self._tutor_id)
        ]
        dated = [r for r in requests if r.created_at is not None]
        undated = [r for r in requests if r.created_at is None]
        dated.sort(key=lambda r: r.created_at, reverse=True)
        return dated + undated

    @staticmethod
    def _parse_change_request(raw: Mapping[str, Any]) -> ChangeRequest:
        try:
            return ChangeRequest.model_validate(raw)
        except ValidationError as exc:
            raise GatewayError(f"Malformed change request {raw!r}: {exc}") from exc
