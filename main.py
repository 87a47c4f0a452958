"""
Command-line entry point for the discovery-call booking engine.

Every run uses fresh in-memory stores seeded with Monday to Friday
09:00-17:00 working hours and one sample lead, so the commands are
usable without a database.

Usage:
    Availability: python main.py availability --start 2030-11-04 --end 2030-11-08
    Book:         python main.py book --lead-id lead_demo --date 2030-11-04 --time 10:00
    Demo:         python main.py demo
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import timedelta
from typing import Any, Optional

from pydantic import ValidationError

from booking_engine.calendar_sync.base import CalendarSyncAdapter
from booking_engine.config import settings
from booking_engine.errors import BookingError
from booking_engine.logging_context import set_request_id
from booking_engine.schemas.attendee_schema import AttendeeRef, Lead
from booking_engine.schemas.booking_schema import AvailabilityQuery, BookingRequest
from booking_engine.schemas.calendar_schema import WorkingHours
from booking_engine.services.engine import BookingEngine
from booking_engine.services.validation import utc_now

logger = logging.getLogger(__name__)

DEMO_LEAD = Lead(id="lead_demo", name="Ada Lovelace", email="ada@example.com")


def build_engine(adapter: Optional[CalendarSyncAdapter] = None) -> BookingEngine:
    engine = BookingEngine(adapter=adapter)
    for day in range(1, 6):
        engine.working_hours.set_day(
            WorkingHours(day_of_week=day, start_time="09:00", end_time="17:00")
        )
    engine.attendees.add_lead(DEMO_LEAD)
    return engine


def _emit(payload: Any) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, default=str) + "\n")


async def _availability(engine: BookingEngine, args: argparse.Namespace) -> dict:
    fields = {"start_date": args.start, "end_date": args.end}
    if args.duration is not None:
        fields["duration"] = args.duration
    response = await engine.get_availability(AvailabilityQuery(**fields))
    return response.model_dump(mode="json")


async def _book(engine: BookingEngine, args: argparse.Namespace) -> dict:
    fields = {
        "attendee": AttendeeRef(id=args.lead_id),
        "date": args.date,
        "start_time": args.time,
    }
    if args.duration is not None:
        fields["duration"] = args.duration
    confirmation = await engine.book(BookingRequest(**fields))
    return confirmation.model_dump(mode="json")


async def _demo(engine: BookingEngine, args: argparse.Namespace) -> dict:
    """Show next week's availability and book its first open slot."""
    today = utc_now().date()
    start = today + timedelta(days=7 - today.weekday())
    end = start + timedelta(days=4)
    availability = await engine.get_availability(
        AvailabilityQuery(start_date=start, end_date=end)
    )

    first_open = next(
        ((day.date, slot.start) for day in availability.slots for slot in day.times if slot.available),
        None,
    )
    if first_open is None:
        logger.warning("No open slot between %s and %s", start, end)
        return {"availability": availability.model_dump(mode="json"), "booking": None}

    confirmation = await engine.book(BookingRequest(
        attendee=AttendeeRef(id=DEMO_LEAD.id),
        date=first_open[0],
        start_time=first_open[1],
    ))
    return {
        "availability": availability.model_dump(mode="json"),
        "booking": confirmation.model_dump(mode="json"),
        "lead_status": engine.attendees.get_lead(DEMO_LEAD.id).status.value,
        "calendar": engine.calendar_status(),
    }


COMMANDS = {
    "availability": _availability,
    "book": _book,
    "demo": _demo,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Query availability and book discovery calls."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    availability = sub.add_parser("availability", help="List slots in a date range.")
    availability.add_argument("--start", required=True, help="First day, YYYY-MM-DD.")
    availability.add_argument("--end", required=True, help="Last day, YYYY-MM-DD.")
    availability.add_argument("--duration", type=int, default=None, help="Slot length in minutes.")

    book = sub.add_parser("book", help="Book a slot for a lead.")
    book.add_argument("--lead-id", required=True, help="Lead to book for.")
    book.add_argument("--date", required=True, help="Day, YYYY-MM-DD.")
    book.add_argument("--time", required=True, help="Start time, HH:mm.")
    book.add_argument("--duration", type=int, default=None, help="Meeting length in minutes.")

    sub.add_parser("demo", help="Seed sample data, show availability, book one slot.")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    set_request_id(f"CLI-{args.command}")
    logger.info("Running '%s' for %s", args.command, settings.service_name)

    engine = build_engine()
    try:
        result = asyncio.run(COMMANDS[args.command](engine, args))
    except BookingError as exc:
        _emit(exc.to_dict())
        return 1
    except ValidationError as exc:
        _emit({"code": "BAD_REQUEST", "message": str(exc)})
        return 1

    _emit(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
