"""Working hours, availability blocks and meeting records."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from booking_engine.scheduling.time_window import TimeWindow, ensure_aware, parse_hhmm


class MeetingStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class WorkingHours(BaseModel):
    """Recurring open hours for one weekday (0 = Sunday)."""

    day_of_week: int = Field(ge=0, le=6)
    start_time: str
    end_time: str
    is_enabled: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def check_hhmm(cls, value: str) -> str:
        parse_hhmm(value)
        return value

    @model_validator(mode="after")
    def check_order(self) -> "WorkingHours":
        if self.is_enabled and self.start_minute >= self.end_minute:
            raise ValueError(
                f"start_time {self.start_time} must be before end_time {self.end_time}"
            )
        return self

    @property
    def start_minute(self) -> int:
        return parse_hhmm(self.start_time)

    @property
    def end_minute(self) -> int:
        return parse_hhmm(self.end_time)


class AvailabilityBlock(BaseModel):
    """Ad-hoc blackout range such as a holiday; blocks [start_date, end_date)."""

    id: str
    start_date: datetime
    end_date: datetime
    reason: Optional[str] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def to_utc(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @model_validator(mode="after")
    def check_order(self) -> "AvailabilityBlock":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start_date, self.end_date)


class Meeting(BaseModel):
    """A persisted reservation. Never physically deleted."""

    id: str
    lead_id: Optional[str] = None
    customer_id: Optional[str] = None
    event_id: str
    meet_url: str
    title: str
    description: Optional[str] = None
    scheduled_at: datetime
    duration: int = Field(gt=0)
    status: MeetingStatus = MeetingStatus.SCHEDULED
    timezone: str = "UTC"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("scheduled_at")
    @classmethod
    def to_utc(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @model_validator(mode="after")
    def single_attendee(self) -> "Meeting":
        if self.lead_id and self.customer_id:
            raise ValueError("A meeting belongs to a lead or a customer, not both")
        return self

    @property
    def window(self) -> TimeWindow:
        return TimeWindow.from_duration(self.scheduled_at, self.duration)

    @property
    def is_active(self) -> bool:
        return self.status != MeetingStatus.CANCELLED
