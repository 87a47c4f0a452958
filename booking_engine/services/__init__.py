from booking_engine.services.admin import MeetingAdminService
from booking_engine.services.availability import AvailabilityService
from booking_engine.services.booking import BookingOrchestrator
from booking_engine.services.cancel import CancelOrchestrator
from booking_engine.services.engine import BookingEngine, build_calendar_adapter
from booking_engine.services.reschedule import RescheduleOrchestrator
from booking_engine.services.validation import SlotValidator, utc_now

__all__ = [
    "MeetingAdminService",
    "AvailabilityService",
    "BookingOrchestrator",
    "CancelOrchestrator",
    "BookingEngine",
    "build_calendar_adapter",
    "RescheduleOrchestrator",
    "SlotValidator",
    "utc_now",
]
