"""
In-memory meeting store.

In production this is the meetings table guarded by an exclusion
constraint on the ``[scheduled_at, scheduled_at + duration)`` range of
non-cancelled rows. Here the same guarantee comes from checking and
writing under a single lock: when two writers race for overlapping time,
the first one wins and the second gets SLOT_UNAVAILABLE.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Optional

from booking_engine.errors import ConflictReason, NotFoundError, SlotUnavailableError
from booking_engine.scheduling.conflict_resolver import overlaps_meeting
from booking_engine.scheduling.time_window import TimeWindow
from booking_engine.schemas.calendar_schema import Meeting

logger = logging.getLogger(__name__)


def new_meeting_id() -> str:
    return f"mtg_{uuid.uuid4().hex[:12]}"


class MeetingStore:
    def __init__(self) -> None:
        self._meetings: dict[str, Meeting] = {}
        self._lock = threading.Lock()

    def get(self, meeting_id: str) -> Optional[Meeting]:
        meeting = self._meetings.get(meeting_id)
        return meeting.model_copy() if meeting else None

    def require(self, meeting_id: str) -> Meeting:
        """Fetch a meeting or raise NotFoundError."""
        meeting = self.get(meeting_id)
        if meeting is None:
            raise NotFoundError("Meeting not found")
        return meeting

    def active_in(
        self, window: TimeWindow, exclude_id: Optional[str] = None
    ) -> list[Meeting]:
        """Non-cancelled meetings overlapping ``window``."""
        return sorted(
            (
                m.model_copy()
                for m in self._meetings.values()
                if m.is_active and m.id != exclude_id and m.window.overlaps(window)
            ),
            key=lambda m: m.scheduled_at,
        )

    def add(self, meeting: Meeting) -> Meeting:
        """Insert a new meeting.

        Raises:
            SlotUnavailableError: If an active meeting already overlaps it.
        """
        with self._lock:
            if meeting.id in self._meetings:
                raise ValueError(f"Meeting {meeting.id} already exists")
            self._check_free(meeting)
            self._meetings[meeting.id] = meeting.model_copy()
        logger.info(
            "Meeting %s stored at %s for %d min",
            meeting.id, meeting.scheduled_at.isoformat(), meeting.duration,
        )
        return meeting

    def replace(self, meeting: Meeting) -> Meeting:
        """Overwrite an existing meeting, re-checking overlap against the others.

        Raises:
            NotFoundError: If the meeting does not exist.
            SlotUnavailableError: If the new time overlaps another active meeting.
        """
        updated = meeting.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        with self._lock:
            if updated.id not in self._meetings:
                raise NotFoundError("Meeting not found")
            self._check_free(updated)
            self._meetings[updated.id] = updated
        logger.debug("Meeting %s updated (status %s)", updated.id, updated.status.value)
        return updated.model_copy()

    def all(self) -> list[Meeting]:
        return sorted(
            (m.model_copy() for m in self._meetings.values()),
            key=lambda m: m.scheduled_at,
        )

    def reset(self) -> None:
        """Clear all meetings. Used by test fixtures for isolation."""
        with self._lock:
            self._meetings.clear()

    def _check_free(self, meeting: Meeting) -> None:
        # caller holds self._lock
        if not meeting.is_active:
            return
        if overlaps_meeting(meeting.window, self._meetings.values(), exclude_meeting_id=meeting.id):
            logger.info("Rejected meeting %s: overlaps an active meeting", meeting.id)
            raise SlotUnavailableError(ConflictReason.MEETING_OVERLAP)
