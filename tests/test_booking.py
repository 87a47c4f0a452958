"""Tests for the booking orchestrator."""

import asyncio

import pytest
from pydantic import ValidationError

from booking_engine.calendar_sync.placeholders import is_placeholder_event_id
from booking_engine.errors import ConflictReason, NotFoundError, SlotUnavailableError
from booking_engine.schemas.attendee_schema import AttendeeType, LeadStatus
from booking_engine.schemas.calendar_schema import MeetingStatus
from tests.conftest import (
    CUSTOMER_ID,
    FakeCalendarAdapter,
    LEAD_ID,
    MONDAY,
    SATURDAY,
    at,
    build_engine,
    failing_adapter,
    make_booking,
    make_meeting,
    window,
)


class TestBookingHappyPath:
    @pytest.mark.asyncio
    async def test_books_with_calendar_event(self, engine, fake_adapter):
        confirmation = await engine.book(make_booking(start_time="10:00"))

        assert confirmation.success is True
        assert confirmation.meeting.event_id == "gcal_1"
        assert confirmation.meeting.meet_url == "https://meet.google.com/gca-lend-001"
        assert confirmation.meeting.scheduled_at == at(MONDAY, "10:00")
        assert confirmation.meeting.duration == 30

        stored = engine.meetings.require(confirmation.meeting.id)
        assert stored.status == MeetingStatus.SCHEDULED
        assert stored.lead_id == LEAD_ID
        assert stored.customer_id is None
        assert len(fake_adapter.calls_to("create")) == 1

    @pytest.mark.asyncio
    async def test_event_details_sent_to_calendar(self, engine, fake_adapter):
        await engine.book(make_booking(start_time="11:00", duration=45, timezone="Europe/Paris"))
        details = fake_adapter.calls_to("create")[0]
        assert details.summary == "Meeting with Jane Doe"
        assert details.description == "Discovery call with Jane Doe (jane@example.com)"
        assert details.start == at(MONDAY, "11:00")
        assert details.end == at(MONDAY, "11:45")
        assert details.timezone == "Europe/Paris"
        assert details.attendee_email == "jane@example.com"

    @pytest.mark.asyncio
    async def test_custom_title_and_description(self, engine, fake_adapter):
        confirmation = await engine.book(
            make_booking(title="Kickoff", description="Scope review")
        )
        stored = engine.meetings.require(confirmation.meeting.id)
        assert stored.title == "Kickoff"
        assert stored.description == "Scope review"
        assert fake_adapter.calls_to("create")[0].summary == "Kickoff"

    @pytest.mark.asyncio
    async def test_lead_moves_to_meeting_scheduled(self, engine):
        await engine.book(make_booking())
        assert engine.attendees.get_lead(LEAD_ID).status == LeadStatus.MEETING_SCHEDULED

    @pytest.mark.asyncio
    async def test_books_for_customer(self, engine):
        confirmation = await engine.book(
            make_booking(attendee_id=CUSTOMER_ID, attendee_type=AttendeeType.CUSTOMER)
        )
        stored = engine.meetings.require(confirmation.meeting.id)
        assert stored.customer_id == CUSTOMER_ID
        assert stored.lead_id is None
        assert engine.attendees.get_lead(LEAD_ID).status == LeadStatus.NEW

    @pytest.mark.asyncio
    async def test_last_slot_of_the_day(self, engine):
        confirmation = await engine.book(make_booking(start_time="16:30"))
        assert confirmation.meeting.scheduled_at == at(MONDAY, "16:30")

    @pytest.mark.asyncio
    async def test_adjacent_meetings_allowed(self, engine):
        await engine.book(make_booking(start_time="10:00"))
        await engine.book(make_booking(start_time="10:30"))
        assert len(engine.meetings.all()) == 2


class TestBookingRejections:
    @pytest.mark.asyncio
    async def test_existing_meeting_conflicts(self, engine, fake_adapter):
        engine.meetings.add(make_meeting(start="10:00"))
        with pytest.raises(SlotUnavailableError) as excinfo:
            await engine.book(make_booking(start_time="10:00"))
        assert excinfo.value.reason == ConflictReason.MEETING_OVERLAP
        assert excinfo.value.code == "CONFLICT"
        assert len(engine.meetings.all()) == 1
        assert fake_adapter.calls_to("create") == []

    @pytest.mark.asyncio
    async def test_partial_overlap_conflicts(self, engine):
        engine.meetings.add(make_meeting(start="10:00", duration=60))
        with pytest.raises(SlotUnavailableError):
            await engine.book(make_booking(start_time="10:30"))

    @pytest.mark.asyncio
    async def test_cancelled_meeting_does_not_conflict(self, engine):
        engine.meetings.add(make_meeting(start="10:00", status=MeetingStatus.CANCELLED))
        confirmation = await engine.book(make_booking(start_time="10:00"))
        assert confirmation.success

    @pytest.mark.asyncio
    async def test_closed_day(self, engine):
        with pytest.raises(SlotUnavailableError) as excinfo:
            await engine.book(make_booking(day=SATURDAY))
        assert excinfo.value.reason == ConflictReason.DAY_CLOSED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("start_time", ["08:30", "16:45", "17:00"])
    async def test_outside_working_hours(self, engine, start_time):
        with pytest.raises(SlotUnavailableError) as excinfo:
            await engine.book(make_booking(start_time=start_time))
        assert excinfo.value.reason == ConflictReason.OUTSIDE_WORKING_HOURS

    @pytest.mark.asyncio
    async def test_blocked_time(self, engine):
        engine.blocks.add(at(MONDAY, "12:00"), at(MONDAY, "13:00"))
        with pytest.raises(SlotUnavailableError) as excinfo:
            await engine.book(make_booking(start_time="12:30"))
        assert excinfo.value.reason == ConflictReason.BLOCKED

    @pytest.mark.asyncio
    async def test_external_busy_time(self, engine, fake_adapter):
        fake_adapter.busy = [window(MONDAY, "15:00", "16:00")]
        with pytest.raises(SlotUnavailableError) as excinfo:
            await engine.book(make_booking(start_time="15:30"))
        assert excinfo.value.reason == ConflictReason.CALENDAR_BUSY
        assert fake_adapter.calls_to("create") == []

    @pytest.mark.asyncio
    async def test_past_slot(self, fake_adapter, app_config):
        engine = build_engine(fake_adapter, app_config, lambda: at(MONDAY, "11:00"))
        with pytest.raises(SlotUnavailableError) as excinfo:
            await engine.book(make_booking(start_time="10:00"))
        assert excinfo.value.reason == ConflictReason.IN_PAST

    @pytest.mark.asyncio
    async def test_unknown_lead(self, engine, fake_adapter):
        with pytest.raises(NotFoundError, match="Lead not found"):
            await engine.book(make_booking(attendee_id="lead_missing"))
        assert fake_adapter.calls == []

    @pytest.mark.asyncio
    async def test_unknown_customer(self, engine):
        with pytest.raises(NotFoundError, match="Customer not found"):
            await engine.book(
                make_booking(attendee_id="cust_missing", attendee_type=AttendeeType.CUSTOMER)
            )

    def test_malformed_time_rejected_before_booking(self):
        with pytest.raises(ValidationError):
            make_booking(start_time="9am")

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValidationError, match="Unknown timezone"):
            make_booking(timezone="Mars/Olympus")


class TestBookingCalendarFallback:
    @pytest.mark.asyncio
    async def test_calendar_failure_falls_back_to_placeholders(self, app_config, clock):
        adapter = failing_adapter()
        engine = build_engine(adapter, app_config, clock)

        confirmation = await engine.book(make_booking())

        assert is_placeholder_event_id(confirmation.meeting.event_id)
        assert confirmation.meeting.meet_url.startswith("https://meet.google.com/")
        stored = engine.meetings.require(confirmation.meeting.id)
        assert stored.status == MeetingStatus.SCHEDULED
        assert len(adapter.calls_to("create")) == 1

    @pytest.mark.asyncio
    async def test_unconfigured_calendar_uses_placeholders(self, offline_engine, unconfigured_adapter):
        confirmation = await offline_engine.book(make_booking())
        assert confirmation.meeting.event_id.startswith("evt_")
        assert unconfigured_adapter.calls == []

    @pytest.mark.asyncio
    async def test_calendar_timeout_falls_back(self, app_config, clock):
        adapter = FakeCalendarAdapter(hang=True)
        engine = build_engine(adapter, app_config, clock)
        confirmation = await engine.book(make_booking())
        assert is_placeholder_event_id(confirmation.meeting.event_id)

    @pytest.mark.asyncio
    async def test_missing_meet_link_is_generated(self, engine, fake_adapter):
        from booking_engine.calendar_sync.base import CalendarEventResult

        async def create_without_link(details):
            fake_adapter.calls.append(("create", details))
            return CalendarEventResult(event_id="gcal_nolink")

        fake_adapter.create_event = create_without_link
        confirmation = await engine.book(make_booking())
        assert confirmation.meeting.event_id == "gcal_nolink"
        assert confirmation.meeting.meet_url.startswith("https://meet.google.com/")


class TestBookingRace:
    @pytest.mark.asyncio
    async def test_concurrent_bookings_for_same_slot(self, engine, fake_adapter):
        results = await asyncio.gather(
            engine.book(make_booking(start_time="10:00")),
            engine.book(make_booking(start_time="10:00")),
            return_exceptions=True,
        )
        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, SlotUnavailableError)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert len(engine.meetings.all()) == 1

    @pytest.mark.asyncio
    async def test_losing_booking_removes_its_calendar_event(self, engine, fake_adapter):
        from booking_engine.calendar_sync.base import CalendarEventResult

        async def create_while_another_writer_wins(details):
            fake_adapter.calls.append(("create", details))
            engine.meetings.add(make_meeting(meeting_id="mtg_winner", start="10:00"))
            return CalendarEventResult(event_id="gcal_loser")

        fake_adapter.create_event = create_while_another_writer_wins

        with pytest.raises(SlotUnavailableError) as excinfo:
            await engine.book(make_booking(start_time="10:00"))

        assert excinfo.value.reason == ConflictReason.MEETING_OVERLAP
        assert fake_adapter.calls_to("delete") == ["gcal_loser"]
        assert [m.id for m in engine.meetings.all()] == ["mtg_winner"]
        assert engine.attendees.get_lead(LEAD_ID).status == LeadStatus.NEW
