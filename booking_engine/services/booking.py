"""
Booking orchestrator: reserve a slot exactly once.

Resolve the attendee, re-validate the slot against current state, try to
create an external calendar event (falling back to placeholder ids),
persist the meeting, then move a lead to MEETING_SCHEDULED.
"""

from typing import Optional

from booking_engine.calendar_sync.base import EventDetails
from booking_engine.calendar_sync.placeholders import generate_event_id, generate_meet_url
from booking_engine.calendar_sync.sync import CalendarSync, Synced, SyncOutcome
from booking_engine.config import SchedulingConfig
from booking_engine.errors import ConflictReason, SlotUnavailableError
from booking_engine.logging_context import get_request_logger, with_request_id
from booking_engine.scheduling.conflict_resolver import overlaps_busy
from booking_engine.scheduling.time_window import parse_hhmm
from booking_engine.schemas.attendee_schema import Attendee, AttendeeType, LeadStatus
from booking_engine.schemas.booking_schema import (
    BookingConfirmation,
    BookingRequest,
    MeetingSummary,
)
from booking_engine.schemas.calendar_schema import Meeting, MeetingStatus
from booking_engine.services.validation import Clock, SlotValidator, utc_now
from booking_engine.stores.attendees import AttendeeDirectory
from booking_engine.stores.meetings import MeetingStore, new_meeting_id

logger = get_request_logger(__name__)


def calendar_identifiers(outcome: SyncOutcome) -> tuple[str, str]:
    """Event id and meet link for a booking, given how calendar sync went."""
    if isinstance(outcome, Synced):
        return outcome.event_id, outcome.meet_url or generate_meet_url()
    return generate_event_id(), generate_meet_url()


class BookingOrchestrator:
    def __init__(
        self,
        attendees: AttendeeDirectory,
        meetings: MeetingStore,
        validator: SlotValidator,
        sync: CalendarSync,
        scheduling: SchedulingConfig,
        clock: Clock = utc_now,
    ) -> None:
        self._attendees = attendees
        self._meetings = meetings
        self._validator = validator
        self._sync = sync
        self._scheduling = scheduling
        self._clock = clock

    @with_request_id
    async def book(self, request: BookingRequest) -> BookingConfirmation:
        """
        Reserve ``request.duration`` minutes at ``request.start_time`` on ``request.date``.

        Raises:
            NotFoundError: If the attendee reference does not resolve.
            SlotUnavailableError: If the slot is closed, taken, blocked, busy or past.
        """
        attendee = self._attendees.resolve(request.attendee)

        window = self._validator.check(
            request.date, parse_hhmm(request.start_time), request.duration, self._clock()
        )
        busy = await self._sync.free_busy(window)
        if overlaps_busy(window, busy):
            logger.info("Slot %s is busy in the external calendar", window.start.isoformat())
            raise SlotUnavailableError(ConflictReason.CALENDAR_BUSY)

        title = request.title or f"Meeting with {attendee.name}"
        description = request.description or self._default_description(attendee)
        outcome = await self._sync.create_event(EventDetails(
            summary=title,
            description=description,
            start=window.start,
            end=window.end,
            timezone=request.timezone,
            attendee_email=attendee.email,
            attendee_name=attendee.name,
        ))
        event_id, meet_url = calendar_identifiers(outcome)
        if not isinstance(outcome, Synced):
            logger.info("Using placeholder calendar ids (%s)", outcome.reason)

        meeting = Meeting(
            id=new_meeting_id(),
            lead_id=attendee.ref.id if attendee.ref.type == AttendeeType.LEAD else None,
            customer_id=attendee.ref.id if attendee.ref.type == AttendeeType.CUSTOMER else None,
            event_id=event_id,
            meet_url=meet_url,
            title=title,
            description=description,
            scheduled_at=window.start,
            duration=request.duration,
            status=MeetingStatus.SCHEDULED,
            timezone=request.timezone,
        )
        try:
            self._meetings.add(meeting)
        except SlotUnavailableError:
            await self._discard_event(outcome)
            raise

        if attendee.is_lead:
            self._attendees.set_lead_status(attendee.ref.id, LeadStatus.MEETING_SCHEDULED)

        logger.info(
            "Booked meeting %s with %s at %s (%d min)",
            meeting.id, attendee.ref.id, meeting.scheduled_at.isoformat(), meeting.duration,
        )
        return BookingConfirmation(meeting=MeetingSummary.from_meeting(meeting))

    def _default_description(self, attendee: Attendee) -> str:
        return f"{self._scheduling.meeting_kind} with {attendee.name} ({attendee.email})"

    async def _discard_event(self, outcome: Optional[SyncOutcome]) -> None:
        """Remove an external event created for a booking that lost the race."""
        if isinstance(outcome, Synced):
            logger.info("Removing external event %s for rejected booking", outcome.event_id)
            await self._sync.delete_event(outcome.event_id)
