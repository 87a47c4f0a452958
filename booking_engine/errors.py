"""
Error taxonomy for the booking engine.

NotFoundError and SlotUnavailableError are surfaced to callers as-is.
CalendarSyncError is raised by calendar adapters and is always absorbed
by the CalendarSync gateway; it never reaches an end user.
"""

from enum import Enum
from typing import Optional


class ConflictReason(str, Enum):
    """Why a requested window cannot be booked."""

    DAY_CLOSED = "day_closed"
    OUTSIDE_WORKING_HOURS = "outside_working_hours"
    MEETING_OVERLAP = "meeting_overlap"
    BLOCKED = "blocked"
    CALENDAR_BUSY = "calendar_busy"
    IN_PAST = "in_past"
    NONEXISTENT_TIME = "nonexistent_time"


class BookingError(Exception):
    """Base class for errors raised by the booking engine."""

    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class NotFoundError(BookingError):
    """An attendee or meeting reference does not resolve."""

    code = "NOT_FOUND"


class SlotUnavailableError(BookingError):
    """The requested window violates a scheduling constraint."""

    code = "CONFLICT"

    def __init__(self, reason: ConflictReason) -> None:
        super().__init__("SLOT_UNAVAILABLE")
        self.reason = reason

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message, "reason": self.reason.value}


class InvalidStatusTransitionError(BookingError):
    """A meeting status change is not allowed from its current status."""

    code = "CONFLICT"


class CalendarSyncError(BookingError):
    """The external calendar provider failed or is unavailable."""

    code = "CALENDAR_SYNC_FAILED"

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause
