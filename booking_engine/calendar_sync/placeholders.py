"""Locally generated event ids and meeting links used when calendar sync is unavailable."""

import random
import string
import time

PLACEHOLDER_EVENT_PREFIX = "evt_"
MEET_URL_BASE = "https://meet.google.com/"
MEET_CODE_SEGMENTS = (3, 4, 3)

_BASE36 = string.digits + string.ascii_lowercase


def generate_event_id() -> str:
    """``evt_<epoch-ms>_<9 base36 chars>``; never collides with provider ids."""
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"{PLACEHOLDER_EVENT_PREFIX}{int(time.time() * 1000)}_{suffix}"


def is_placeholder_event_id(event_id: str) -> bool:
    """True for ids that were never created in an external calendar."""
    return not event_id or event_id.startswith(PLACEHOLDER_EVENT_PREFIX)


def generate_meet_code() -> str:
    """Three dash-separated lowercase groups, e.g. ``abc-defg-hij``."""
    return "-".join(
        "".join(random.choices(string.ascii_lowercase, k=length))
        for length in MEET_CODE_SEGMENTS
    )


def generate_meet_url() -> str:
    return f"{MEET_URL_BASE}{generate_meet_code()}"
