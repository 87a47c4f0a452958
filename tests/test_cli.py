"""Tests for the command-line entry point."""

import json

import pytest

import main
from booking_engine.calendar_sync.base import NullCalendarAdapter


@pytest.fixture(autouse=True)
def offline_engine_builder(monkeypatch):
    """Keep the CLI off the network regardless of local credentials."""
    original = main.build_engine
    monkeypatch.setattr(main, "build_engine", lambda: original(NullCalendarAdapter()))


def _run(capsys, *argv):
    code = main.main(list(argv))
    return code, json.loads(capsys.readouterr().out)


class TestCli:
    def test_availability(self, capsys):
        code, payload = _run(capsys, "availability", "--start", "2030-11-04", "--end", "2030-11-05")
        assert code == 0
        assert [d["date"] for d in payload["slots"]] == ["2030-11-04", "2030-11-05"]
        assert len(payload["slots"][0]["times"]) == 16

    def test_book(self, capsys):
        code, payload = _run(
            capsys, "book", "--lead-id", "lead_demo", "--date", "2030-11-04", "--time", "10:00",
        )
        assert code == 0
        assert payload["success"] is True
        assert payload["meeting"]["event_id"].startswith("evt_")

    def test_book_unknown_lead(self, capsys):
        code, payload = _run(
            capsys, "book", "--lead-id", "nobody", "--date", "2030-11-04", "--time", "10:00",
        )
        assert code == 1
        assert payload == {"code": "NOT_FOUND", "message": "Lead not found"}

    def test_book_closed_day(self, capsys):
        code, payload = _run(
            capsys, "book", "--lead-id", "lead_demo", "--date", "2030-11-09", "--time", "10:00",
        )
        assert code == 1
        assert payload["code"] == "CONFLICT"
        assert payload["message"] == "SLOT_UNAVAILABLE"
        assert payload["reason"] == "day_closed"

    def test_bad_request(self, capsys):
        code, payload = _run(capsys, "availability", "--start", "2030-11-05", "--end", "2030-11-04")
        assert code == 1
        assert payload["code"] == "BAD_REQUEST"

    def test_demo_books_first_open_slot(self, capsys):
        code, payload = _run(capsys, "demo")
        assert code == 0
        assert payload["booking"]["success"] is True
        assert payload["lead_status"] == "MEETING_SCHEDULED"
        assert payload["calendar"] == {"configured": False}
