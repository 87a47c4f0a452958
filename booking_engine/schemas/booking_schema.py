"""Availability and booking request/response models."""

from datetime import date, datetime
from typing import Any, Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator

from booking_engine.config import settings
from booking_engine.scheduling.time_window import parse_hhmm
from booking_engine.schemas.attendee_schema import AttendeeRef
from booking_engine.schemas.calendar_schema import Meeting


def _date_part(value: Any) -> Any:
    """Accept full ISO timestamps for date fields by keeping the date part."""
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    if isinstance(value, datetime):
        return value.date()
    return value


def _check_duration(value: int) -> int:
    low = settings.scheduling.min_duration_minutes
    high = settings.scheduling.max_duration_minutes
    if not low <= value <= high:
        raise ValueError(f"duration must be between {low} and {high} minutes, got {value}")
    return value


def _check_start_time(value: str) -> str:
    minutes = parse_hhmm(value)
    if minutes >= 24 * 60:
        raise ValueError(f"start_time must be before 24:00, got {value!r}")
    return value


def _check_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {value!r}") from None
    return value


class AvailabilityQuery(BaseModel):
    """Date range to compute open slots for, both days inclusive."""

    start_date: date
    end_date: date
    duration: int = Field(default_factory=lambda: settings.scheduling.default_duration_minutes)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, value: Any) -> Any:
        return _date_part(value)

    @field_validator("duration")
    @classmethod
    def duration_bounds(cls, value: int) -> int:
        return _check_duration(value)

    @model_validator(mode="after")
    def check_range(self) -> "AvailabilityQuery":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        days = (self.end_date - self.start_date).days + 1
        if days > settings.scheduling.max_range_days:
            raise ValueError(
                f"range covers {days} days, limit is {settings.scheduling.max_range_days}"
            )
        return self


class TimeSlot(BaseModel):
    """One candidate booking window on one day."""
    start: str
    end: str
    available: bool


class DaySlots(BaseModel):
    date: str
    times: list[TimeSlot] = Field(default_factory=list)


class AvailabilityResponse(BaseModel):
    slots: list[DaySlots] = Field(default_factory=list)
    timezone: str


class BookingRequest(BaseModel):
    """Reserve ``duration`` minutes from ``start_time`` on ``date``."""

    attendee: AttendeeRef
    date: date
    start_time: str
    duration: int = Field(default_factory=lambda: settings.scheduling.default_duration_minutes)
    timezone: str = "UTC"
    title: Optional[str] = None
    description: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value: Any) -> Any:
        return _date_part(value)

    @field_validator("start_time")
    @classmethod
    def start_time_format(cls, value: str) -> str:
        return _check_start_time(value)

    @field_validator("duration")
    @classmethod
    def duration_bounds(cls, value: int) -> int:
        return _check_duration(value)

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, value: str) -> str:
        return _check_timezone(value)


class RescheduleRequest(BaseModel):
    """Move a meeting; duration and timezone default to the meeting's own."""

    meeting_id: str
    date: date
    start_time: str
    duration: Optional[int] = None
    timezone: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value: Any) -> Any:
        return _date_part(value)

    @field_validator("start_time")
    @classmethod
    def start_time_format(cls, value: str) -> str:
        return _check_start_time(value)

    @field_validator("duration")
    @classmethod
    def optional_duration(cls, value: Optional[int]) -> Optional[int]:
        return None if value is None else _check_duration(value)

    @field_validator("timezone")
    @classmethod
    def optional_timezone(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_timezone(value)


class MeetingSummary(BaseModel):
    id: str
    event_id: str
    meet_url: str
    scheduled_at: datetime
    duration: int

    @classmethod
    def from_meeting(cls, meeting: Meeting) -> "MeetingSummary":
        return cls(
            id=meeting.id,
            event_id=meeting.event_id,
            meet_url=meeting.meet_url,
            scheduled_at=meeting.scheduled_at,
            duration=meeting.duration,
        )


class BookingConfirmation(BaseModel):
    """Result of a successful booking or reschedule."""
    success: Literal[True] = True
    meeting: MeetingSummary


class CancellationResult(BaseModel):
    success: Literal[True] = True
    meeting: Meeting
