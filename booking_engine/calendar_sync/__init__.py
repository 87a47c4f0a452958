from booking_engine.calendar_sync.base import (
    CalendarEventResult,
    CalendarSyncAdapter,
    EventDetails,
    EventUpdate,
    NullCalendarAdapter,
)
from booking_engine.calendar_sync.google_calendar import GoogleCalendarAdapter
from booking_engine.calendar_sync.placeholders import (
    generate_event_id,
    generate_meet_url,
    is_placeholder_event_id,
)
from booking_engine.calendar_sync.sync import CalendarSync, Synced, SyncOutcome, Unsynced

__all__ = [
    "CalendarEventResult",
    "CalendarSyncAdapter",
    "EventDetails",
    "EventUpdate",
    "NullCalendarAdapter",
    "GoogleCalendarAdapter",
    "generate_event_id",
    "generate_meet_url",
    "is_placeholder_event_id",
    "CalendarSync",
    "Synced",
    "SyncOutcome",
    "Unsynced",
]
