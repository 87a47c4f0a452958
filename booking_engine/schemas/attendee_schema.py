"""Lead and customer records referenced by meetings."""

from enum import Enum

from pydantic import BaseModel


class AttendeeType(str, Enum):
    LEAD = "lead"
    CUSTOMER = "customer"


class LeadStatus(str, Enum):
    NEW = "NEW"
    CONTACTED = "CONTACTED"
    MEETING_SCHEDULED = "MEETING_SCHEDULED"
    MEETING_COMPLETED = "MEETING_COMPLETED"
    CONVERTED = "CONVERTED"
    CLOSED = "CLOSED"


class Lead(BaseModel):
    """Prospect captured by the intake flow."""
    id: str
    name: str
    email: str
    status: LeadStatus = LeadStatus.NEW


class Customer(BaseModel):
    """Existing client with a portal account."""
    id: str
    name: str
    email: str


class AttendeeRef(BaseModel):
    """Points a booking at either a lead or a customer."""
    type: AttendeeType = AttendeeType.LEAD
    id: str


class Attendee(BaseModel):
    """Resolved name/email pair for whoever the meeting is with."""
    ref: AttendeeRef
    name: str
    email: str

    @property
    def is_lead(self) -> bool:
        return self.ref.type == AttendeeType.LEAD
