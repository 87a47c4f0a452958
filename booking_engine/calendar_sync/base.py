"""
Calendar sync adapter interface.

An adapter wraps one external calendar provider. Every method is a
coroutine because providers are reached over the network. Adapters raise
CalendarSyncError on failure; callers never talk to an adapter directly
but go through the CalendarSync gateway, which turns failures into
Unsynced outcomes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from booking_engine.errors import CalendarSyncError
from booking_engine.scheduling.time_window import TimeWindow


@dataclass(frozen=True)
class EventDetails:
    """Everything needed to create an external calendar event."""

    summary: str
    start: datetime
    end: datetime
    timezone: str = "UTC"
    description: Optional[str] = None
    attendee_email: Optional[str] = None
    attendee_name: Optional[str] = None


@dataclass(frozen=True)
class EventUpdate:
    """Partial event change; ``None`` fields are left untouched."""

    summary: Optional[str] = None
    description: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    timezone: Optional[str] = None
    attendee_email: Optional[str] = None
    attendee_name: Optional[str] = None


@dataclass(frozen=True)
class CalendarEventResult:
    event_id: str
    meet_url: Optional[str] = None
    html_link: Optional[str] = None


class CalendarSyncAdapter(ABC):
    """Capability interface for an external calendar provider."""

    @abstractmethod
    def is_configured(self) -> bool:
        """When False, no other method may be called."""

    @abstractmethod
    async def create_event(self, details: EventDetails) -> CalendarEventResult:
        ...

    @abstractmethod
    async def update_event(self, event_id: str, update: EventUpdate) -> CalendarEventResult:
        ...

    @abstractmethod
    async def delete_event(self, event_id: str) -> bool:
        ...

    @abstractmethod
    async def get_free_busy(self, start: datetime, end: datetime) -> list[TimeWindow]:
        ...


class NullCalendarAdapter(CalendarSyncAdapter):
    """Adapter used when no calendar provider is configured."""

    def is_configured(self) -> bool:
        return False

    async def create_event(self, details: EventDetails) -> CalendarEventResult:
        raise CalendarSyncError("Calendar is not configured")

    async def update_event(self, event_id: str, update: EventUpdate) -> CalendarEventResult:
        raise CalendarSyncError("Calendar is not configured")

    async def delete_event(self, event_id: str) -> bool:
        raise CalendarSyncError("Calendar is not configured")

    async def get_free_busy(self, start: datetime, end: datetime) -> list[TimeWindow]:
        raise CalendarSyncError("Calendar is not configured")
