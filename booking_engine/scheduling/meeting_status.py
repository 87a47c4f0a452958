"""
Meeting status lifecycle.

SCHEDULED is the only non-terminal status. From it a meeting may be
completed, cancelled or marked as a no-show, or stay SCHEDULED while its
time is moved. Nothing leaves CANCELLED, COMPLETED or NO_SHOW.

Usage:
    ensure_transition(meeting.status, MeetingStatus.CANCELLED)
"""

import logging
from dataclasses import dataclass

from booking_engine.errors import InvalidStatusTransitionError
from booking_engine.schemas.calendar_schema import MeetingStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusTransition:
    """A single valid status change."""
    from_status: MeetingStatus
    to_status: MeetingStatus


TRANSITIONS: list[StatusTransition] = [
    StatusTransition(MeetingStatus.SCHEDULED, MeetingStatus.SCHEDULED),
    StatusTransition(MeetingStatus.SCHEDULED, MeetingStatus.COMPLETED),
    StatusTransition(MeetingStatus.SCHEDULED, MeetingStatus.CANCELLED),
    StatusTransition(MeetingStatus.SCHEDULED, MeetingStatus.NO_SHOW),
]

TERMINAL_STATUSES = frozenset({
    MeetingStatus.COMPLETED,
    MeetingStatus.CANCELLED,
    MeetingStatus.NO_SHOW,
})


def allowed_targets(current: MeetingStatus) -> list[MeetingStatus]:
    """Statuses reachable from ``current``."""
    return [t.to_status for t in TRANSITIONS if t.from_status == current]


def can_transition(current: MeetingStatus, target: MeetingStatus) -> bool:
    return target in allowed_targets(current)


def ensure_transition(current: MeetingStatus, target: MeetingStatus) -> None:
    """
    Validate a status change.

    Raises:
        InvalidStatusTransitionError: If ``target`` is not reachable from ``current``.
    """
    if can_transition(current, target):
        logger.debug("Status transition allowed: %s -> %s", current.value, target.value)
        return
    valid = [s.value for s in allowed_targets(current)]
    raise InvalidStatusTransitionError(
        f"No valid transition from '{current.value}' to '{target.value}'. "
        f"Valid targets: {valid}"
    )


def is_terminal(status: MeetingStatus) -> bool:
    return status in TERMINAL_STATUSES
