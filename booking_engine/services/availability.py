"""
Read path: which slots are open in a date range.

No side effects; safe to call concurrently or cache.
"""

from datetime import tzinfo

from booking_engine.calendar_sync.sync import CalendarSync
from booking_engine.logging_context import get_request_logger, with_request_id
from booking_engine.scheduling.conflict_resolver import annotate
from booking_engine.scheduling.slot_generator import generate_slots
from booking_engine.scheduling.time_window import TimeWindow
from booking_engine.schemas.booking_schema import AvailabilityQuery, AvailabilityResponse, DaySlots
from booking_engine.services.validation import Clock, utc_now
from booking_engine.stores.availability_blocks import AvailabilityBlockStore
from booking_engine.stores.meetings import MeetingStore
from booking_engine.stores.working_hours import WorkingHoursStore

logger = get_request_logger(__name__)


class AvailabilityService:
    def __init__(
        self,
        working_hours: WorkingHoursStore,
        blocks: AvailabilityBlockStore,
        meetings: MeetingStore,
        sync: CalendarSync,
        tz: tzinfo,
        tz_name: str,
        clock: Clock = utc_now,
    ) -> None:
        self._working_hours = working_hours
        self._blocks = blocks
        self._meetings = meetings
        self._sync = sync
        self._tz = tz
        self._tz_name = tz_name
        self._clock = clock

    @with_request_id
    async def get_availability(self, query: AvailabilityQuery) -> AvailabilityResponse:
        """Every candidate slot per day in the range, flagged available or not."""
        range_window = TimeWindow.for_days(query.start_date, query.end_date, self._tz)

        meetings = self._meetings.active_in(range_window)
        blocks = self._blocks.overlapping(range_window)
        busy = await self._sync.free_busy(range_window)
        now = self._clock()

        days = generate_slots(
            query.start_date,
            query.end_date,
            query.duration,
            self._working_hours.enabled_days(),
            self._tz,
        )
        slots = [
            DaySlots(
                date=day.day.isoformat(),
                times=[annotate(c, meetings, blocks, busy, now) for c in day.slots],
            )
            for day in days
        ]
        logger.info(
            "Availability %s..%s (%d min): %d open of %d slot(s)",
            query.start_date.isoformat(), query.end_date.isoformat(), query.duration,
            sum(1 for d in slots for t in d.times if t.available),
            sum(len(d.times) for d in slots),
        )
        return AvailabilityResponse(slots=slots, timezone=self._tz_name)
