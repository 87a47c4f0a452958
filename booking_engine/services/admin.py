"""Operator-side meeting status changes (completed, no-show)."""

from booking_engine.logging_context import get_request_logger, with_request_id
from booking_engine.scheduling.meeting_status import ensure_transition
from booking_engine.schemas.attendee_schema import LeadStatus
from booking_engine.schemas.calendar_schema import Meeting, MeetingStatus
from booking_engine.stores.attendees import AttendeeDirectory
from booking_engine.stores.meetings import MeetingStore

logger = get_request_logger(__name__)


class MeetingAdminService:
    def __init__(self, meetings: MeetingStore, attendees: AttendeeDirectory) -> None:
        self._meetings = meetings
        self._attendees = attendees

    @with_request_id
    def update_status(self, meeting_id: str, status: MeetingStatus) -> Meeting:
        """
        Record the outcome of a meeting.

        The external calendar is left untouched. A completed meeting with a
        lead advances that lead to MEETING_COMPLETED.

        Raises:
            NotFoundError: If the meeting does not exist.
            InvalidStatusTransitionError: If the change is not allowed.
        """
        meeting = self._meetings.require(meeting_id)
        if meeting.status == status:
            return meeting
        ensure_transition(meeting.status, status)

        updated = self._meetings.replace(meeting.model_copy(update={"status": status}))
        if status == MeetingStatus.COMPLETED and meeting.lead_id:
            if self._attendees.get_lead(meeting.lead_id) is not None:
                self._attendees.set_lead_status(meeting.lead_id, LeadStatus.MEETING_COMPLETED)

        logger.info("Meeting %s status: %s -> %s", meeting_id, meeting.status.value, status.value)
        return updated
