"""Cancel a meeting and release its slot."""

from booking_engine.calendar_sync.sync import NOT_CONFIGURED, PLACEHOLDER_EVENT, CalendarSync, Unsynced
from booking_engine.logging_context import get_request_logger, with_request_id
from booking_engine.scheduling.meeting_status import ensure_transition
from booking_engine.schemas.booking_schema import CancellationResult
from booking_engine.schemas.calendar_schema import MeetingStatus
from booking_engine.stores.meetings import MeetingStore

logger = get_request_logger(__name__)


class CancelOrchestrator:
    def __init__(self, meetings: MeetingStore, sync: CalendarSync) -> None:
        self._meetings = meetings
        self._sync = sync

    @with_request_id
    async def cancel(self, meeting_id: str) -> CancellationResult:
        """
        Mark a meeting CANCELLED and remove its external event when one exists.

        Cancelling an already cancelled meeting returns it unchanged. The
        record is kept; only its status changes, so the slot reopens.

        Raises:
            NotFoundError: If the meeting does not exist.
            InvalidStatusTransitionError: If the meeting is COMPLETED or NO_SHOW.
        """
        meeting = self._meetings.require(meeting_id)
        if meeting.status == MeetingStatus.CANCELLED:
            logger.info("Meeting %s already cancelled", meeting_id)
            return CancellationResult(meeting=meeting)
        ensure_transition(meeting.status, MeetingStatus.CANCELLED)

        outcome = await self._sync.delete_event(meeting.event_id)
        if isinstance(outcome, Unsynced) and outcome.reason not in (NOT_CONFIGURED, PLACEHOLDER_EVENT):
            logger.warning(
                "External event %s for meeting %s not removed (%s)",
                meeting.event_id, meeting_id, outcome.reason,
            )

        cancelled = self._meetings.replace(
            meeting.model_copy(update={"status": MeetingStatus.CANCELLED})
        )
        logger.info("Cancelled meeting %s", meeting_id)
        return CancellationResult(meeting=cancelled)
