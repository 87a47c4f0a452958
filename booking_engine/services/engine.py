"""
Composition root.

Wires the stores, the calendar adapter and the clock into the services.
Tests build an engine with fresh stores and a fake adapter; the CLI builds
one from ``settings``.
"""

import logging
from typing import Optional

from booking_engine.calendar_sync.base import CalendarSyncAdapter, NullCalendarAdapter
from booking_engine.calendar_sync.google_calendar import GoogleCalendarAdapter
from booking_engine.calendar_sync.sync import CalendarSync
from booking_engine.config import AppConfig, CalendarConfig, settings
from booking_engine.schemas.booking_schema import (
    AvailabilityQuery,
    AvailabilityResponse,
    BookingConfirmation,
    BookingRequest,
    CancellationResult,
    RescheduleRequest,
)
from booking_engine.schemas.calendar_schema import Meeting, MeetingStatus
from booking_engine.services.admin import MeetingAdminService
from booking_engine.services.availability import AvailabilityService
from booking_engine.services.booking import BookingOrchestrator
from booking_engine.services.cancel import CancelOrchestrator
from booking_engine.services.reschedule import RescheduleOrchestrator
from booking_engine.services.validation import Clock, SlotValidator, utc_now
from booking_engine.stores.attendees import AttendeeDirectory
from booking_engine.stores.availability_blocks import AvailabilityBlockStore
from booking_engine.stores.meetings import MeetingStore
from booking_engine.stores.working_hours import WorkingHoursStore

logger = logging.getLogger(__name__)


def build_calendar_adapter(config: CalendarConfig) -> CalendarSyncAdapter:
    """Google when every credential is present, otherwise the null adapter."""
    if config.is_configured:
        logger.info("Calendar sync enabled for calendar %s", config.calendar_id)
        return GoogleCalendarAdapter(config)
    logger.info("Calendar sync disabled; meetings get placeholder event ids")
    return NullCalendarAdapter()


class BookingEngine:
    def __init__(
        self,
        working_hours: Optional[WorkingHoursStore] = None,
        blocks: Optional[AvailabilityBlockStore] = None,
        meetings: Optional[MeetingStore] = None,
        attendees: Optional[AttendeeDirectory] = None,
        adapter: Optional[CalendarSyncAdapter] = None,
        config: AppConfig = settings,
        clock: Clock = utc_now,
    ) -> None:
        self.config = config
        self.working_hours = working_hours or WorkingHoursStore()
        self.blocks = blocks or AvailabilityBlockStore()
        self.meetings = meetings or MeetingStore()
        self.attendees = attendees or AttendeeDirectory()
        self.adapter = adapter or build_calendar_adapter(config.calendar)
        self.sync = CalendarSync(self.adapter, config.calendar.sync_timeout_sec)

        scheduling = config.scheduling
        tz = scheduling.tz
        validator = SlotValidator(self.working_hours, self.blocks, self.meetings, tz)

        self.availability = AvailabilityService(
            self.working_hours, self.blocks, self.meetings, self.sync,
            tz, scheduling.operator_timezone, clock,
        )
        self.booking = BookingOrchestrator(
            self.attendees, self.meetings, validator, self.sync, scheduling, clock,
        )
        self.rescheduling = RescheduleOrchestrator(self.meetings, validator, self.sync, clock)
        self.cancellation = CancelOrchestrator(self.meetings, self.sync)
        self.admin = MeetingAdminService(self.meetings, self.attendees)

    async def get_availability(self, query: AvailabilityQuery) -> AvailabilityResponse:
        return await self.availability.get_availability(query)

    async def book(self, request: BookingRequest) -> BookingConfirmation:
        return await self.booking.book(request)

    async def reschedule(self, request: RescheduleRequest) -> BookingConfirmation:
        return await self.rescheduling.reschedule(request)

    async def cancel(self, meeting_id: str) -> CancellationResult:
        return await self.cancellation.cancel(meeting_id)

    def update_status(self, meeting_id: str, status: MeetingStatus) -> Meeting:
        return self.admin.update_status(meeting_id, status)

    def calendar_status(self) -> dict[str, bool]:
        return {"configured": self.sync.configured}
