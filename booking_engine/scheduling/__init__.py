from booking_engine.scheduling.time_window import (
    TimeWindow,
    day_of_week,
    format_minutes,
    parse_hhmm,
)

__all__ = [
    "TimeWindow",
    "day_of_week",
    "format_minutes",
    "parse_hhmm",
]
