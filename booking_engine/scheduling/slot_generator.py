"""
Candidate slot generation from recurring working hours.

Pure and store-agnostic: given a date range, a duration and the weekly
working hours, produce every fixed-length window that fits inside each
day's open hours. Whether a slot is actually free is decided later by
the conflict resolver.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, tzinfo
from typing import Mapping, Optional

from booking_engine.scheduling.time_window import (
    TimeWindow,
    day_of_week,
    format_minutes,
    iter_days,
    wall_clock_exists,
    wall_clock_instant,
)
from booking_engine.schemas.calendar_schema import WorkingHours

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateSlot:
    """A provisional slot; availability is not known yet."""

    day: date
    start_minute: int
    end_minute: int
    window: TimeWindow

    @property
    def start(self) -> str:
        return format_minutes(self.start_minute)

    @property
    def end(self) -> str:
        return format_minutes(self.end_minute)


@dataclass
class DayCandidates:
    day: date
    slots: list[CandidateSlot] = field(default_factory=list)


def working_hours_by_day(hours: list[WorkingHours]) -> dict[int, WorkingHours]:
    """Index enabled working hours by weekday number."""
    return {wh.day_of_week: wh for wh in hours if wh.is_enabled}


def slots_for_day(
    day: date, hours: Optional[WorkingHours], duration: int, tz: tzinfo
) -> list[CandidateSlot]:
    """Step through one day's working window in ``duration`` increments.

    A slot that would run past the end of the window is not generated.
    Windows last ``duration`` elapsed minutes, so on a DST change day a
    slot is also dropped when its real end passes the closing instant.
    """
    if duration <= 0:
        raise ValueError(f"duration must be positive, got {duration}")
    if hours is None or not hours.is_enabled:
        return []

    slots = []
    closes_at = wall_clock_instant(day, hours.end_minute, tz)
    slot_start = hours.start_minute
    while slot_start + duration <= hours.end_minute:
        # Starts skipped by a forward DST shift do not exist on this day.
        if wall_clock_exists(day, slot_start, tz):
            window = TimeWindow.from_wall_clock(day, slot_start, duration, tz)
            if window.end <= closes_at:
                slots.append(CandidateSlot(
                    day=day,
                    start_minute=slot_start,
                    end_minute=slot_start + duration,
                    window=window,
                ))
        slot_start += duration
    return slots


def generate_slots(
    range_start: date,
    range_end: date,
    duration: int,
    working_hours: Mapping[int, WorkingHours],
    tz: tzinfo,
) -> list[DayCandidates]:
    """Candidate slots for every day in ``[range_start, range_end]``.

    Days without enabled working hours are still returned, with no slots.
    """
    result = []
    for day in iter_days(range_start, range_end):
        slots = slots_for_day(day, working_hours.get(day_of_week(day)), duration, tz)
        result.append(DayCandidates(day=day, slots=slots))
    logger.debug(
        "Generated %d candidate slot(s) across %d day(s) for %d-minute duration",
        sum(len(d.slots) for d in result), len(result), duration,
    )
    return result
