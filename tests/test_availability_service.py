"""
Tests for the AvailabilityService orchestration layer.
"""

from typing import Any, Dict, List

import pendulum
import pytest

from tutorslots.domain.exceptions import (
    GatewayError,
    InvalidChangeRequest,
    InvalidRange,
    RoundTripViolation,
    UnknownDay,
)
from tutorslots.domain.models import ViewFilter, WeeklyAvailability, Weekday
from tutorslots.domain.time_grid import tick_of
from tutorslots.services.availability_service import (
    AvailabilityService,
    records_to_weekly,
    weekly_to_records,
)
from tutorslots.services.schemas import ChangeRequestStatus


class StubStore:
    """Minimal stub matching AvailabilityStoreProtocol."""

    def __init__(self, records: List[Dict[str, Any]] = None, requests: List[Dict[str, Any]] = None):
        self.records = list(records or [])
        self.requests = list(requests or [])
        self.saved: List[Dict[str, Any]] = []
        self.created: List[Dict[str, Any]] = []

    def load_records(self, tutor_id):
        return self.records

    def save_records(self, tutor_id, records):
        self.saved.append({"tutor_id": tutor_id, "records": records})
        self.records = records

    def list_change_requests(self, tutor_id):
        return self.requests

    def create_change_request(self, tutor_id, payload):
        self.created.append(payload)
        return {"id": 7, "status": "pending", "created_at": "2024-11-25T10:00:00+00:00"}


class TestRecordsToWeekly:
    """Decoding stored records."""

    def test_groups_records_by_day(self):
        weekly = records_to_weekly([
            {"day_of_week": "Monday", "start_time": "09:00:00", "end_time": "10:00:00"},
            {"day_of_week": "Monday", "start_time": "13:00", "end_time": "16:00"},
            {"day_of_week": "Saturday", "start_time": "22:00", "end_time": "24:00:00"},
        ])

        assert weekly.slots_for("Monday") == frozenset({18, 19, 26, 27, 28, 29, 30, 31})
        assert weekly.slots_for("Saturday") == frozenset({44, 45, 46, 47})
        assert weekly.slots_for("Tuesday") == frozenset()

    def test_overlapping_records_merge(self):
        weekly = records_to_weekly([
            {"day_of_week": "Friday", "start_time": "09:00", "end_time": "11:00"},
            {"day_of_week": "Friday", "start_time": "10:00", "end_time": "12:00"},
        ])

        assert weekly.slots_for("Friday") == frozenset(range(18, 24))

    def test_extra_fields_ignored(self):
        weekly = records_to_weekly([
            {"id": 3, "tutor_id": 1, "day_of_week": "Monday", "start_time": "09:00", "end_time": "09:30"},
        ])

        assert weekly.slots_for("Monday") == frozenset({18})

    def test_unknown_day_fails_fast(self):
        with pytest.raises(UnknownDay):
            records_to_weekly([{"day_of_week": "monday", "start_time": "09:00", "end_time": "10:00"}])

    def test_missing_field_raises_gateway_error(self):
        with pytest.raises(GatewayError):
            records_to_weekly([{"day_of_week": "Monday", "start_time": "09:00"}])

    def test_bad_time_raises_gateway_error(self):
        with pytest.raises(GatewayError):
            records_to_weekly([{"day_of_week": "Monday", "start_time": "9", "end_time": "10:00"}])


class TestWeeklyToRecords:
    """Encoding for save."""

    def test_flattens_in_week_order(self):
        weekly = (
            WeeklyAvailability.empty()
            .with_slots("Wednesday", {18, 19, 22})
            .with_slots("Monday", range(26, 32))
        )

        records = [r.model_dump() for r in weekly_to_records(weekly)]

        assert records == [
            {"day_of_week": "Monday", "start_time": "13:00", "end_time": "16:00"},
            {"day_of_week": "Wednesday", "start_time": "09:00", "end_time": "10:00"},
            {"day_of_week": "Wednesday", "start_time": "11:00", "end_time": "11:30"},
        ]

    def test_empty_days_produce_no_records(self):
        assert weekly_to_records(WeeklyAvailability.empty()) == []

    def test_midnight_end(self):
        records = weekly_to_records(WeeklyAvailability.empty().with_slots("Friday", {47}))

        assert records[0].end_time == "24:00"

    def test_records_reload_to_same_week(self):
        weekly = WeeklyAvailability.empty().with_slots("Tuesday", {0, 1, 5, 20, 21, 47})
        records = [r.model_dump() for r in weekly_to_records(weekly)]

        assert records_to_weekly(records) == weekly

    def test_lossy_conversion_is_refused(self, monkeypatch):
        from tutorslots.domain import range_codec

        monkeypatch.setattr(range_codec, "slots_to_ranges", lambda slots: [])

        with pytest.raises(RoundTripViolation):
            weekly_to_records(WeeklyAvailability.empty().with_slots("Monday", {3}))


class TestAvailabilityService:
    """Load, edit and save through a stub store."""

    def test_load_and_save(self):
        store = StubStore(records=[
            {"day_of_week": "Monday", "start_time": "09:00", "end_time": "11:00"},
        ])
        service = AvailabilityService(store=store, tutor_id=42)

        editor = service.open_session()
        assert editor.add_range("Monday", "10:00", "13:00").ok
        assert editor.toggle_day("Thursday", ViewFilter(8, 9)).ok

        records = service.save_session(editor)

        assert [r.model_dump() for r in records] == [
            {"day_of_week": "Monday", "start_time": "09:00", "end_time": "13:00"},
            {"day_of_week": "Thursday", "start_time": "08:00", "end_time": "09:00"},
        ]
        assert store.saved[0]["tutor_id"] == 42
        assert store.saved[0]["records"][0] == {
            "day_of_week": "Monday", "start_time": "09:00", "end_time": "13:00",
        }
        assert not editor.editing

    def test_cleared_day_is_saved_as_no_records(self):
        store = StubStore(records=[
            {"day_of_week": "Monday", "start_time": "09:00", "end_time": "11:00"},
        ])
        service = AvailabilityService(store=store, tutor_id=1)

        editor = service.open_session()
        editor.toggle_day("Monday", ViewFilter.full_day())
        service.save_session(editor)

        assert store.saved[0]["records"] == []

    def test_seven_day_week(self):
        store = StubStore(records=[
            {"day_of_week": "Sunday", "start_time": "10:00", "end_time": "12:00"},
        ])
        service = AvailabilityService(store=store, tutor_id=1, days=list(Weekday))

        weekly = service.load()

        assert weekly.slots_for("Sunday") == frozenset({20, 21, 22, 23})


class TestChangeRequests:
    """Schedule change requests."""

    def test_submit_normalises_and_posts(self):
        store = StubStore()
        service = AvailabilityService(store=store, tutor_id=5)

        created = service.submit_change_request("Tuesday", "09:00:00", "12:00", "  exams  ")

        assert store.created == [{
            "day_of_week": "Tuesday",
            "start_time": "09:00",
            "end_time": "12:00",
            "reason": "exams",
        }]
        assert created.id == 7
        assert created.status is ChangeRequestStatus.PENDING
        assert created.created_at == pendulum.datetime(2024, 11, 25, 10, 0)

    def test_blank_reason_rejected(self):
        store = StubStore()
        service = AvailabilityService(store=store, tutor_id=5)

        with pytest.raises(InvalidChangeRequest):
            service.submit_change_request("Tuesday", "09:00", "12:00", "   ")
        assert store.created == []

    def test_invalid_times_and_day_rejected(self):
        service = AvailabilityService(store=StubStore(), tutor_id=5)

        with pytest.raises(InvalidRange):
            service.submit_change_request("Tuesday", "12:00", "09:00", "exams")
        with pytest.raises(UnknownDay):
            service.submit_change_request("Sunday", "09:00", "12:00", "exams")

    def test_list_newest_first(self):
        store = StubStore(requests=[
            {"id": 1, "day_of_week": "Monday", "start_time": "09:00", "end_time": "10:00",
             "reason": "a", "status": "approved", "created_at": "2024-01-01T09:00:00Z"},
            {"id": 2, "day_of_week": "Friday", "start_time": "09:00", "end_time": "10:00",
             "reason": "b", "status": "rejected", "admin_notes": "full",
             "created_at": "2024-03-01T09:00:00Z"},
            {"id": 3, "day_of_week": "Friday", "start_time": "11:00", "end_time": "12:00",
             "reason": "c"},
        ])
        service = AvailabilityService(store=store, tutor_id=5)

        requests = service.list_change_requests()

        assert [r.id for r in requests] == [2, 1, 3]
        assert requests[0].status is ChangeRequestStatus.REJECTED
        assert requests[0].admin_notes == "full"

    def test_malformed_request_raises(self):
        store = StubStore(requests=[{"id": 1, "day_of_week": "Monday"}])
        service = AvailabilityService(store=store, tutor_id=5)

        with pytest.raises(GatewayError):
            service.list_change_requests()


def test_weekly_slots_for_boundary_example():
    """Stored 13:00-16:00 loads as exactly six half-hour slots."""
    weekly = records_to_weekly([
        {"day_of_week": "Monday", "start_time": "13:00", "end_time": "16:00"},
    ])

    assert weekly.slots_for("Monday") == frozenset(
        tick_of(t) for t in ("13:00", "13:30", "14:00", "14:30", "15:00", "15:30")
    )
