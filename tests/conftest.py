"""Shared test fixtures and helpers."""

import asyncio
from datetime import date, datetime, timezone
from typing import Optional

import pytest

from booking_engine.calendar_sync.base import (
    CalendarEventResult,
    CalendarSyncAdapter,
    EventDetails,
    EventUpdate,
)
from booking_engine.config import AppConfig, CalendarConfig, SchedulingConfig
from booking_engine.errors import CalendarSyncError
from booking_engine.scheduling.time_window import TimeWindow
from booking_engine.schemas.attendee_schema import AttendeeRef, AttendeeType, Customer, Lead
from booking_engine.schemas.booking_schema import BookingRequest
from booking_engine.schemas.calendar_schema import Meeting, MeetingStatus, WorkingHours
from booking_engine.services.engine import BookingEngine

# 2030-11-04 is a Monday; the fixed clock sits on the Friday before.
MONDAY = date(2030, 11, 4)
TUESDAY = date(2030, 11, 5)
SATURDAY = date(2030, 11, 9)
SUNDAY = date(2030, 11, 10)
NOW = datetime(2030, 11, 1, 12, 0, tzinfo=timezone.utc)

LEAD_ID = "lead_1"
CUSTOMER_ID = "cust_1"


def at(day: date, hhmm: str) -> datetime:
    """UTC instant for a wall-clock time on ``day``."""
    hours, minutes = (int(p) for p in hhmm.split(":"))
    return datetime(day.year, day.month, day.day, hours, minutes, tzinfo=timezone.utc)


def window(day: date, start: str, end: str) -> TimeWindow:
    return TimeWindow(at(day, start), at(day, end))


def make_meeting(
    meeting_id: str = "mtg_existing",
    day: date = MONDAY,
    start: str = "10:00",
    duration: int = 30,
    status: MeetingStatus = MeetingStatus.SCHEDULED,
    event_id: str = "evt_1_placeholder",
    lead_id: Optional[str] = LEAD_ID,
) -> Meeting:
    """Helper to create a Meeting with sensible defaults."""
    return Meeting(
        id=meeting_id,
        lead_id=lead_id,
        event_id=event_id,
        meet_url="https://meet.google.com/abc-defg-hij",
        title="Meeting with Jane Doe",
        scheduled_at=at(day, start),
        duration=duration,
        status=status,
    )


def make_booking(
    day: date = MONDAY,
    start_time: str = "10:00",
    duration: int = 30,
    attendee_id: str = LEAD_ID,
    attendee_type: AttendeeType = AttendeeType.LEAD,
    **extra,
) -> BookingRequest:
    return BookingRequest(
        attendee=AttendeeRef(type=attendee_type, id=attendee_id),
        date=day,
        start_time=start_time,
        duration=duration,
        **extra,
    )


def weekday_hours(start: str = "09:00", end: str = "17:00") -> list[WorkingHours]:
    """Monday to Friday working hours."""
    return [WorkingHours(day_of_week=d, start_time=start, end_time=end) for d in range(1, 6)]


class FakeCalendarAdapter(CalendarSyncAdapter):
    """Recording adapter that can be told to fail or hang."""

    def __init__(
        self,
        configured: bool = True,
        fail_with: Optional[Exception] = None,
        hang: bool = False,
        busy: Optional[list[TimeWindow]] = None,
    ) -> None:
        self.configured = configured
        self.fail_with = fail_with
        self.hang = hang
        self.busy = list(busy or [])
        self.delete_result = True
        self.calls: list[tuple[str, object]] = []
        self._created = 0

    def calls_to(self, method: str) -> list[object]:
        return [args for name, args in self.calls if name == method]

    def is_configured(self) -> bool:
        return self.configured

    async def _misbehave(self) -> None:
        if self.hang:
            await asyncio.sleep(3600)
        if self.fail_with is not None:
            raise self.fail_with

    async def create_event(self, details: EventDetails) -> CalendarEventResult:
        self.calls.append(("create", details))
        await self._misbehave()
        self._created += 1
        return CalendarEventResult(
            event_id=f"gcal_{self._created}",
            meet_url=f"https://meet.google.com/gca-lend-{self._created:03d}",
            html_link=f"https://calendar.google.com/event?eid=gcal_{self._created}",
        )

    async def update_event(self, event_id: str, update: EventUpdate) -> CalendarEventResult:
        self.calls.append(("update", (event_id, update)))
        await self._misbehave()
        return CalendarEventResult(event_id=event_id)

    async def delete_event(self, event_id: str) -> bool:
        self.calls.append(("delete", event_id))
        await self._misbehave()
        return self.delete_result

    async def get_free_busy(self, start: datetime, end: datetime) -> list[TimeWindow]:
        self.calls.append(("free_busy", (start, end)))
        await self._misbehave()
        query = TimeWindow(start, end)
        return [b for b in self.busy if b.overlaps(query)]


@pytest.fixture
def app_config():
    return AppConfig(
        scheduling=SchedulingConfig(
            operator_timezone="UTC",
            default_duration_minutes=30,
            min_duration_minutes=15,
            max_duration_minutes=480,
            max_range_days=62,
            meeting_kind="Discovery call",
        ),
        calendar=CalendarConfig(
            client_id=None,
            client_secret=None,
            refresh_token=None,
            calendar_id=None,
            sync_timeout_sec=0.2,
        ),
        log_level="DEBUG",
        service_name="test",
    )


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def fake_adapter():
    return FakeCalendarAdapter()


@pytest.fixture
def unconfigured_adapter():
    return FakeCalendarAdapter(configured=False)


def build_engine(adapter, config, clock) -> BookingEngine:
    engine = BookingEngine(adapter=adapter, config=config, clock=clock)
    for wh in weekday_hours():
        engine.working_hours.set_day(wh)
    engine.attendees.add_lead(Lead(id=LEAD_ID, name="Jane Doe", email="jane@example.com"))
    engine.attendees.add_customer(
        Customer(id=CUSTOMER_ID, name="Acme Corp", email="ops@acme.example")
    )
    return engine


@pytest.fixture
def engine(fake_adapter, app_config, clock):
    """Engine with weekday 09:00-17:00 hours, one lead, one customer, a configured fake calendar."""
    return build_engine(fake_adapter, app_config, clock)


@pytest.fixture
def offline_engine(unconfigured_adapter, app_config, clock):
    """Same seed data with calendar sync switched off."""
    return build_engine(unconfigured_adapter, app_config, clock)


def failing_adapter(message: str = "Google is down") -> FakeCalendarAdapter:
    return FakeCalendarAdapter(fail_with=CalendarSyncError(message))
