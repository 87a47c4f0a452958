"""
In-memory weekly working hours.

In production this is a table with one row per weekday, edited from the
admin dashboard. Reads happen on every availability query and booking.
"""

import logging
from typing import Optional

from booking_engine.schemas.calendar_schema import WorkingHours

logger = logging.getLogger(__name__)


class WorkingHoursStore:
    """One WorkingHours row per weekday (0 = Sunday)."""

    def __init__(self, hours: Optional[list[WorkingHours]] = None) -> None:
        self._by_day: dict[int, WorkingHours] = {}
        for wh in hours or []:
            self.set_day(wh)

    def set_day(self, hours: WorkingHours) -> WorkingHours:
        """Create or replace the row for ``hours.day_of_week``."""
        self._by_day[hours.day_of_week] = hours
        logger.info(
            "Working hours set for day %d: %s-%s (%s)",
            hours.day_of_week, hours.start_time, hours.end_time,
            "enabled" if hours.is_enabled else "disabled",
        )
        return hours

    def get_day(self, day_of_week: int) -> Optional[WorkingHours]:
        return self._by_day.get(day_of_week)

    def enabled_days(self) -> dict[int, WorkingHours]:
        return {day: wh for day, wh in self._by_day.items() if wh.is_enabled}

    def all(self) -> list[WorkingHours]:
        return [self._by_day[day] for day in sorted(self._by_day)]

    def reset(self) -> None:
        """Clear all rows. Used by test fixtures for isolation."""
        self._by_day.clear()
