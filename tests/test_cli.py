"""
Tests for the command line interface, run against the JSON file store.
"""

import json

import pytest
from typer.testing import CliRunner

from tutorslots.cli.app import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("tutor_id: 42\ndata_file: data.json\n", encoding="utf-8")
    return path


def _invoke(config_file, *args, input=None):
    return runner.invoke(app, [*args, "--config", str(config_file), "--mock"], input=input)


def _stored(config_file):
    data = json.loads((config_file.parent / "data.json").read_text(encoding="utf-8"))
    return data["tutors"]["42"]


class TestEditingCommands:
    """add, edit, delete and toggle-day."""

    def test_add_saves_merged_range(self, config_file):
        assert _invoke(config_file, "add", "Monday", "09:00", "11:00").exit_code == 0
        result = _invoke(config_file, "add", "Monday", "10:00", "13:00")

        assert result.exit_code == 0
        assert "Availability saved" in result.stdout
        assert _stored(config_file)["availability"] == [
            {"day_of_week": "Monday", "start_time": "09:00", "end_time": "13:00"},
        ]

    def test_edit_and_delete(self, config_file):
        _invoke(config_file, "add", "Tuesday", "09:00", "12:00")

        assert _invoke(config_file, "edit", "Tuesday", "09:00", "12:00", "14:00", "15:00").exit_code == 0
        assert _stored(config_file)["availability"][0]["start_time"] == "14:00"

        assert _invoke(config_file, "delete", "Tuesday", "14:00", "15:00").exit_code == 0
        assert _stored(config_file)["availability"] == []

    def test_toggle_day_window(self, config_file):
        result = _invoke(config_file, "toggle-day", "Friday", "--from-hour", "9", "--to-hour", "11")

        assert result.exit_code == 0
        assert _stored(config_file)["availability"] == [
            {"day_of_week": "Friday", "start_time": "09:00", "end_time": "11:00"},
        ]

    @pytest.mark.parametrize(
        "args",
        [
            ("add", "Monday", "12:00", "09:00"),
            ("add", "Monday", "9am", "10:00"),
            ("add", "Sunday", "09:00", "10:00"),
            ("edit", "Monday", "09:00", "10:00", "11:00", "12:00"),
        ],
    )
    def test_rejected_edit_exits_with_error(self, config_file, args):
        result = _invoke(config_file, *args)

        assert result.exit_code == 1
        assert not (config_file.parent / "data.json").exists()


class TestReadCommands:
    """show, summary and check."""

    def test_show_lists_ranges(self, config_file):
        _invoke(config_file, "add", "Wednesday", "13:00", "16:00")

        result = _invoke(config_file, "show")

        assert result.exit_code == 0
        assert "13:00 - 16:00" in result.stdout
        assert "unavailable" in result.stdout

    def test_show_with_filter(self, config_file):
        _invoke(config_file, "add", "Wednesday", "08:00", "16:00")

        result = _invoke(config_file, "show", "--from-hour", "9", "--to-hour", "11")

        assert result.exit_code == 0
        assert "09:00 - 11:00" in result.stdout

    def test_summary(self, config_file):
        _invoke(config_file, "add", "Monday", "09:00", "12:00")

        result = _invoke(config_file, "summary")

        assert result.exit_code == 0
        assert "1 of 6 days, 3.0 hours per week" in result.stdout
        assert "Monday: 3.0 h" in result.stdout
        assert "Tuesday: 0.0 h" in result.stdout

    def test_check_time(self, config_file):
        _invoke(config_file, "add", "Monday", "13:00", "14:00")

        inside = _invoke(config_file, "check", "Monday", "13:15")
        outside = _invoke(config_file, "check", "Monday", "14:00")

        assert inside.exit_code == 0
        assert "is available" in inside.stdout
        assert "is not available" in outside.stdout

    def test_check_lists_slot_starts(self, config_file):
        _invoke(config_file, "add", "Monday", "09:00", "10:00")

        result = _invoke(config_file, "check", "Monday")

        assert result.exit_code == 0
        assert "09:00, 09:30" in result.stdout

    def test_check_rejects_bad_time(self, config_file):
        result = _invoke(config_file, "check", "Monday", "1pm")

        assert result.exit_code == 1

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["show", "--config", str(tmp_path / "nope.yaml"), "--mock"])

        assert result.exit_code == 1
        assert "Error" in result.stdout


class TestChangeRequestCommands:
    def test_request_and_list(self, config_file):
        result = _invoke(config_file, "request-change", "Monday", "10:00", "14:00", "--reason", "exams")

        assert result.exit_code == 0
        assert "Awaiting admin approval" in result.stdout

        listing = _invoke(config_file, "requests")
        assert listing.exit_code == 0
        assert "Pending" in listing.stdout
        assert "exams" in listing.stdout

    def test_blank_reason_rejected(self, config_file):
        result = _invoke(config_file, "request-change", "Monday", "10:00", "14:00", "--reason", "  ")

        assert result.exit_code == 1

    def test_no_requests(self, config_file):
        result = _invoke(config_file, "requests")

        assert result.exit_code == 0
        assert "No schedule change requests" in result.stdout


class TestSession:
    """Interactive session driven through stdin."""

    def test_edits_are_saved(self, config_file):
        result = _invoke(
            config_file,
            "session",
            input="add Monday 09:00 10:00\nday Tuesday\nsave\n",
        )

        assert result.exit_code == 0
        assert _stored(config_file)["availability"] == [
            {"day_of_week": "Monday", "start_time": "09:00", "end_time": "10:00"},
            {"day_of_week": "Tuesday", "start_time": "00:00", "end_time": "24:00"},
        ]

    def test_quit_without_changes_saves_nothing(self, config_file):
        result = _invoke(config_file, "session", input="show\nquit\n")

        assert result.exit_code == 0
        assert not (config_file.parent / "data.json").exists()

    def test_bad_command_reports_and_continues(self, config_file):
        result = _invoke(config_file, "session", input="add Monday 11:00 10:00\nsave\n")

        assert result.exit_code == 0
        assert "✗" in result.stdout
        assert _stored(config_file)["availability"] == []


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.stdout
