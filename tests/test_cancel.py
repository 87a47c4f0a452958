"""Tests for meeting cancellation."""

import pytest

from booking_engine.errors import InvalidStatusTransitionError, NotFoundError
from booking_engine.schemas.calendar_schema import MeetingStatus
from tests.conftest import make_booking, make_meeting


class TestCancel:
    @pytest.mark.asyncio
    async def test_placeholder_event_never_reaches_calendar(self, engine, fake_adapter):
        engine.meetings.add(make_meeting(event_id="evt_1700000000000_abc123xyz"))

        result = await engine.cancel("mtg_existing")

        assert result.success is True
        assert result.meeting.status == MeetingStatus.CANCELLED
        assert fake_adapter.calls_to("delete") == []

    @pytest.mark.asyncio
    async def test_real_event_is_deleted_once(self, engine, fake_adapter):
        engine.meetings.add(make_meeting(event_id="gcal_real"))
        await engine.cancel("mtg_existing")
        assert fake_adapter.calls_to("delete") == ["gcal_real"]

    @pytest.mark.asyncio
    async def test_calendar_error_still_cancels_locally(self, engine, fake_adapter):
        engine.meetings.add(make_meeting(event_id="gcal_real"))
        fake_adapter.fail_with = RuntimeError("connection reset")

        result = await engine.cancel("mtg_existing")

        assert result.meeting.status == MeetingStatus.CANCELLED
        assert engine.meetings.require("mtg_existing").status == MeetingStatus.CANCELLED
        assert fake_adapter.calls_to("delete") == ["gcal_real"]

    @pytest.mark.asyncio
    async def test_event_already_gone_still_cancels(self, engine, fake_adapter):
        engine.meetings.add(make_meeting(event_id="gcal_real"))
        fake_adapter.delete_result = False
        result = await engine.cancel("mtg_existing")
        assert result.meeting.status == MeetingStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_record_is_kept(self, engine):
        engine.meetings.add(make_meeting())
        await engine.cancel("mtg_existing")
        assert [m.id for m in engine.meetings.all()] == ["mtg_existing"]

    @pytest.mark.asyncio
    async def test_slot_reopens(self, engine):
        booked = await engine.book(make_booking(start_time="10:00"))
        await engine.cancel(booked.meeting.id)
        rebooked = await engine.book(make_booking(start_time="10:00"))
        assert rebooked.meeting.id != booked.meeting.id

    @pytest.mark.asyncio
    async def test_cancelling_twice_is_a_no_op(self, engine, fake_adapter):
        engine.meetings.add(make_meeting(event_id="gcal_real"))
        await engine.cancel("mtg_existing")
        result = await engine.cancel("mtg_existing")
        assert result.meeting.status == MeetingStatus.CANCELLED
        assert len(fake_adapter.calls_to("delete")) == 1

    @pytest.mark.asyncio
    async def test_unknown_meeting(self, engine):
        with pytest.raises(NotFoundError):
            await engine.cancel("mtg_missing")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [MeetingStatus.COMPLETED, MeetingStatus.NO_SHOW])
    async def test_finished_meeting_cannot_be_cancelled(self, engine, fake_adapter, status):
        engine.meetings.add(make_meeting(status=status, event_id="gcal_real"))
        with pytest.raises(InvalidStatusTransitionError):
            await engine.cancel("mtg_existing")
        assert fake_adapter.calls == []
