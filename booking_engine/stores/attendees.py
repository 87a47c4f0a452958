"""
In-memory lead and customer directory.

In production leads come from the intake survey and customers from the
client portal; both live in the relational store. The booking engine only
needs to resolve a name/email pair and to advance a lead's status.
"""

import logging
from typing import Optional

from booking_engine.errors import NotFoundError
from booking_engine.schemas.attendee_schema import (
    Attendee,
    AttendeeRef,
    AttendeeType,
    Customer,
    Lead,
    LeadStatus,
)

logger = logging.getLogger(__name__)


class AttendeeDirectory:
    def __init__(self) -> None:
        self._leads: dict[str, Lead] = {}
        self._customers: dict[str, Customer] = {}

    def add_lead(self, lead: Lead) -> Lead:
        self._leads[lead.id] = lead
        logger.debug("Lead registered: %s", lead.id)
        return lead

    def add_customer(self, customer: Customer) -> Customer:
        self._customers[customer.id] = customer
        logger.debug("Customer registered: %s", customer.id)
        return customer

    def get_lead(self, lead_id: str) -> Optional[Lead]:
        return self._leads.get(lead_id)

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        return self._customers.get(customer_id)

    def resolve(self, ref: AttendeeRef) -> Attendee:
        """Look up the name and email behind an attendee reference.

        Raises:
            NotFoundError: If no lead or customer matches.
        """
        if ref.type == AttendeeType.LEAD:
            record = self._leads.get(ref.id)
            label = "Lead"
        else:
            record = self._customers.get(ref.id)
            label = "Customer"
        if record is None:
            raise NotFoundError(f"{label} not found")
        return Attendee(ref=ref, name=record.name, email=record.email)

    def set_lead_status(self, lead_id: str, status: LeadStatus) -> Lead:
        lead = self._leads.get(lead_id)
        if lead is None:
            raise NotFoundError("Lead not found")
        updated = lead.model_copy(update={"status": status})
        self._leads[lead_id] = updated
        logger.info("Lead %s status: %s -> %s", lead_id, lead.status.value, status.value)
        return updated

    def reset(self) -> None:
        self._leads.clear()
        self._customers.clear()
