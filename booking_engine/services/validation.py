"""
Write-path slot validation shared by booking and rescheduling.

Availability shown to a client may be stale by the time they submit, so
every write re-checks the request against current store state using the
same predicates the availability query uses.
"""

from datetime import date, datetime, timezone, tzinfo
from typing import Callable, Iterable, Optional

from booking_engine.errors import ConflictReason, SlotUnavailableError
from booking_engine.logging_context import get_request_logger
from booking_engine.scheduling.conflict_resolver import check_working_hours, find_conflict
from booking_engine.scheduling.time_window import (
    TimeWindow,
    day_of_week,
    format_minutes,
    wall_clock_exists,
    wall_clock_instant,
)
from booking_engine.stores.availability_blocks import AvailabilityBlockStore
from booking_engine.stores.meetings import MeetingStore
from booking_engine.stores.working_hours import WorkingHoursStore

logger = get_request_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SlotValidator:
    """Checks a requested wall-clock window against working hours, meetings and blocks."""

    def __init__(
        self,
        working_hours: WorkingHoursStore,
        blocks: AvailabilityBlockStore,
        meetings: MeetingStore,
        tz: tzinfo,
    ) -> None:
        self._working_hours = working_hours
        self._blocks = blocks
        self._meetings = meetings
        self._tz = tz

    def check(
        self,
        day: date,
        start_minute: int,
        duration: int,
        now: datetime,
        busy: Iterable[TimeWindow] = (),
        exclude_meeting_id: Optional[str] = None,
    ) -> TimeWindow:
        """
        Validate a request and return its absolute window.

        Raises:
            SlotUnavailableError: With the first constraint the request violates.
        """
        hours = self._working_hours.get_day(day_of_week(day))
        reason: Optional[ConflictReason] = check_working_hours(hours, start_minute, duration)
        window = None
        if reason is None and not wall_clock_exists(day, start_minute, self._tz):
            reason = ConflictReason.NONEXISTENT_TIME
        if reason is None:
            window = TimeWindow.from_wall_clock(day, start_minute, duration, self._tz)
            if window.end > wall_clock_instant(day, hours.end_minute, self._tz):
                reason = ConflictReason.OUTSIDE_WORKING_HOURS
        if reason is None:
            reason = find_conflict(
                window,
                self._meetings.active_in(window, exclude_id=exclude_meeting_id),
                self._blocks.overlapping(window),
                busy,
                now,
                exclude_meeting_id=exclude_meeting_id,
            )
        if reason is not None:
            logger.info(
                "Slot %s +%dmin on %s unavailable: %s",
                format_minutes(start_minute), duration,
                day.isoformat(), reason.value,
            )
            raise SlotUnavailableError(reason)
        return window
