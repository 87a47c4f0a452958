"""
Move a scheduled meeting to a new slot.

The new slot is validated like a fresh booking except that the meeting
being moved does not conflict with itself.
"""

from booking_engine.calendar_sync.base import EventUpdate
from booking_engine.calendar_sync.sync import CalendarSync, Synced
from booking_engine.errors import SlotUnavailableError
from booking_engine.logging_context import get_request_logger, with_request_id
from booking_engine.scheduling.meeting_status import ensure_transition
from booking_engine.scheduling.time_window import parse_hhmm
from booking_engine.schemas.booking_schema import (
    BookingConfirmation,
    MeetingSummary,
    RescheduleRequest,
)
from booking_engine.schemas.calendar_schema import Meeting, MeetingStatus
from booking_engine.services.validation import Clock, SlotValidator, utc_now
from booking_engine.stores.meetings import MeetingStore

logger = get_request_logger(__name__)


class RescheduleOrchestrator:
    def __init__(
        self,
        meetings: MeetingStore,
        validator: SlotValidator,
        sync: CalendarSync,
        clock: Clock = utc_now,
    ) -> None:
        self._meetings = meetings
        self._validator = validator
        self._sync = sync
        self._clock = clock

    @with_request_id
    async def reschedule(self, request: RescheduleRequest) -> BookingConfirmation:
        """
        Raises:
            NotFoundError: If the meeting does not exist.
            InvalidStatusTransitionError: If the meeting is no longer scheduled.
            SlotUnavailableError: If the new slot fails validation.
        """
        meeting = self._meetings.require(request.meeting_id)
        ensure_transition(meeting.status, MeetingStatus.SCHEDULED)

        duration = request.duration or meeting.duration
        tz_name = request.timezone or meeting.timezone
        window = self._validator.check(
            request.date,
            parse_hhmm(request.start_time),
            duration,
            self._clock(),
            exclude_meeting_id=meeting.id,
        )

        outcome = await self._sync.update_event(
            meeting.event_id,
            EventUpdate(start=window.start, end=window.end, timezone=tz_name),
        )
        event_id, meet_url = meeting.event_id, meeting.meet_url
        if isinstance(outcome, Synced):
            event_id = outcome.event_id or event_id
            meet_url = outcome.meet_url or meet_url
        else:
            logger.info("Calendar event %s not moved (%s)", meeting.event_id, outcome.reason)

        moved = meeting.model_copy(update={
            "scheduled_at": window.start,
            "duration": duration,
            "timezone": tz_name,
            "event_id": event_id,
            "meet_url": meet_url,
        })
        try:
            moved = self._meetings.replace(moved)
        except SlotUnavailableError:
            if isinstance(outcome, Synced):
                await self._restore_event(meeting)
            raise

        logger.info(
            "Rescheduled meeting %s from %s to %s",
            meeting.id, meeting.scheduled_at.isoformat(), moved.scheduled_at.isoformat(),
        )
        return BookingConfirmation(meeting=MeetingSummary.from_meeting(moved))

    async def _restore_event(self, meeting: Meeting) -> None:
        window = meeting.window
        logger.info("Moving external event %s back after rejected reschedule", meeting.event_id)
        await self._sync.update_event(
            meeting.event_id,
            EventUpdate(start=window.start, end=window.end, timezone=meeting.timezone),
        )
