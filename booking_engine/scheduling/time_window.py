"""
Time-window value type and wall-clock helpers.

All slot and conflict math goes through TimeWindow, a half-open
``[start, end)`` interval of timezone-aware datetimes. Working hours are
stored as ``HH:mm`` strings on the operator's wall clock; the helpers here
turn those into absolute instants for a given calendar day.

Usage:
    tz = ZoneInfo("Europe/London")
    window = TimeWindow.from_wall_clock(date(2026, 11, 2), parse_hhmm("09:00"), 30, tz)
    window.overlaps(other)
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterator

MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"^(\d{2}):(\d{2})$")


def parse_hhmm(value: str) -> int:
    """Convert an ``HH:mm`` string to minutes from midnight.

    ``24:00`` is accepted so a working window can run to the end of the day.

    Raises:
        ValueError: If the value is not a valid ``HH:mm`` time.
    """
    match = _HHMM.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Time must be in HH:mm format, got {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise ValueError(f"Time out of range: {value!r}")
    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    """Format minutes from midnight as ``HH:mm``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def day_of_week(day: date) -> int:
    """Weekday number with 0 = Sunday through 6 = Saturday."""
    return (day.weekday() + 1) % 7


def iter_days(first: date, last: date) -> Iterator[date]:
    """Yield every calendar day from ``first`` to ``last`` inclusive."""
    current = first
    while current <= last:
        yield current
        current += timedelta(days=1)


def wall_clock_instant(day: date, minutes: int, tz: tzinfo) -> datetime:
    """The UTC instant at ``minutes`` past midnight on ``day`` in ``tz``.

    A wall time repeated by a backward DST shift resolves to its first
    occurrence. A skipped wall time resolves as if the shift had not
    happened yet; use ``wall_clock_exists`` to detect those.
    """
    local = datetime.combine(day, time(0)) + timedelta(minutes=minutes)
    return local.replace(tzinfo=tz).astimezone(timezone.utc)


def wall_clock_exists(day: date, minutes: int, tz: tzinfo) -> bool:
    """False when a forward DST shift in ``tz`` skips this wall time."""
    local = datetime.combine(day, time(0)) + timedelta(minutes=minutes)
    round_trip = wall_clock_instant(day, minutes, tz).astimezone(tz)
    return round_trip.replace(tzinfo=None) == local


class SkippedWallClockError(ValueError):
    """A wall-clock time that a forward DST shift skips over."""


def ensure_aware(value: datetime) -> datetime:
    """Normalize a datetime to UTC, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval ``[start, end)`` between two aware instants."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", ensure_aware(self.start))
        object.__setattr__(self, "end", ensure_aware(self.end))
        if self.end <= self.start:
            raise ValueError(
                f"Window end {self.end.isoformat()} must be after start {self.start.isoformat()}"
            )

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> "TimeWindow":
        return cls(start, start + timedelta(minutes=minutes))

    @classmethod
    def from_wall_clock(
        cls, day: date, start_minute: int, duration: int, tz: tzinfo
    ) -> "TimeWindow":
        """Build a window of ``duration`` elapsed minutes from a wall-clock start.

        Raises:
            SkippedWallClockError: If the start does not exist in ``tz``.
        """
        if not wall_clock_exists(day, start_minute, tz):
            raise SkippedWallClockError(
                f"{format_minutes(start_minute)} on {day.isoformat()} does not exist in {tz}"
            )
        return cls.from_duration(wall_clock_instant(day, start_minute, tz), duration)

    @classmethod
    def for_days(cls, first: date, last: date, tz: tzinfo) -> "TimeWindow":
        """Window covering every instant of the days ``first``..``last`` in ``tz``."""
        return cls(
            wall_clock_instant(first, 0, tz),
            wall_clock_instant(last + timedelta(days=1), 0, tz),
        )

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: "TimeWindow") -> bool:
        return self.start < other.end and self.end > other.start

    def starts_before(self, instant: datetime) -> bool:
        return self.start < ensure_aware(instant)

    def contains(self, other: "TimeWindow") -> bool:
        return self.start <= other.start and other.end <= self.end
