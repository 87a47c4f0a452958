"""
Conflict detection for candidate and requested booking windows.

The same predicates back both the read path (marking generated slots
available or not) and the write path (re-validating a booking or
reschedule against fresh store state). Everything here is pure: callers
pass in the meetings, blocks, external busy intervals and the current
instant.
"""

from datetime import datetime
from typing import Iterable, Optional

from booking_engine.errors import ConflictReason
from booking_engine.scheduling.slot_generator import CandidateSlot
from booking_engine.scheduling.time_window import TimeWindow
from booking_engine.schemas.booking_schema import TimeSlot
from booking_engine.schemas.calendar_schema import AvailabilityBlock, Meeting, WorkingHours


def overlaps_meeting(
    window: TimeWindow, meetings: Iterable[Meeting], exclude_meeting_id: Optional[str] = None
) -> bool:
    """True if any non-cancelled meeting (other than the excluded one) overlaps."""
    return any(
        m.is_active and m.id != exclude_meeting_id and window.overlaps(m.window)
        for m in meetings
    )


def overlaps_block(window: TimeWindow, blocks: Iterable[AvailabilityBlock]) -> bool:
    return any(window.overlaps(b.window) for b in blocks)


def overlaps_busy(window: TimeWindow, busy: Iterable[TimeWindow]) -> bool:
    return any(window.overlaps(b) for b in busy)


def find_conflict(
    window: TimeWindow,
    meetings: Iterable[Meeting],
    blocks: Iterable[AvailabilityBlock],
    busy: Iterable[TimeWindow],
    now: datetime,
    exclude_meeting_id: Optional[str] = None,
) -> Optional[ConflictReason]:
    """Return the first reason ``window`` cannot be booked, or None if it is free."""
    if overlaps_meeting(window, meetings, exclude_meeting_id):
        return ConflictReason.MEETING_OVERLAP
    if overlaps_block(window, blocks):
        return ConflictReason.BLOCKED
    if overlaps_busy(window, busy):
        return ConflictReason.CALENDAR_BUSY
    if window.starts_before(now):
        return ConflictReason.IN_PAST
    return None


def check_working_hours(
    hours: Optional[WorkingHours], start_minute: int, duration: int
) -> Optional[ConflictReason]:
    """Check a wall-clock request against one day's working hours.

    The start must fall inside ``[start_time, end_time)`` and the meeting
    must finish no later than ``end_time``.
    """
    if hours is None or not hours.is_enabled:
        return ConflictReason.DAY_CLOSED
    if not hours.start_minute <= start_minute < hours.end_minute:
        return ConflictReason.OUTSIDE_WORKING_HOURS
    if start_minute + duration > hours.end_minute:
        return ConflictReason.OUTSIDE_WORKING_HOURS
    return None


def annotate(
    candidate: CandidateSlot,
    meetings: Iterable[Meeting],
    blocks: Iterable[AvailabilityBlock],
    busy: Iterable[TimeWindow],
    now: datetime,
) -> TimeSlot:
    """Resolve a candidate slot into a TimeSlot with its availability flag."""
    conflict = find_conflict(candidate.window, meetings, blocks, busy, now)
    return TimeSlot(start=candidate.start, end=candidate.end, available=conflict is None)
