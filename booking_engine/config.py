"""
Centralized configuration with environment variable overrides.

Scheduling limits, the operator's working-hours timezone and the Google
Calendar credentials are all configurable here. Nothing is hardcoded in
service or store logic.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from booking_engine.logging_context import request_id_handler

load_dotenv()

logger = logging.getLogger(__name__)

VALID_SEND_UPDATES = ("all", "externalOnly", "none")

LOG_FORMAT = "%(asctime)s [%(request_id)s] [%(name)s] %(levelname)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _optional(env_var: str) -> Optional[str]:
    """Read an env var, treating empty strings as unset."""
    value = os.getenv(env_var, "").strip()
    return value or None


@dataclass(frozen=True)
class SchedulingConfig:
    """Booking window limits and the operator's working-hours clock."""

    operator_timezone: str = os.getenv("OPERATOR_TIMEZONE", "UTC")
    default_duration_minutes: int = _safe_int("DEFAULT_MEETING_DURATION", "30")
    min_duration_minutes: int = _safe_int("MIN_MEETING_DURATION", "15")
    max_duration_minutes: int = _safe_int("MAX_MEETING_DURATION", "480")
    max_range_days: int = _safe_int("MAX_AVAILABILITY_RANGE_DAYS", "62")
    meeting_kind: str = os.getenv("MEETING_KIND", "Discovery call")

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.operator_timezone)


@dataclass(frozen=True)
class CalendarConfig:
    """Google Calendar credentials and sync behaviour."""

    client_id: Optional[str] = _optional("GOOGLE_CALENDAR_CLIENT_ID")
    client_secret: Optional[str] = _optional("GOOGLE_CALENDAR_CLIENT_SECRET")
    refresh_token: Optional[str] = _optional("GOOGLE_CALENDAR_REFRESH_TOKEN")
    calendar_id: Optional[str] = _optional("GOOGLE_CALENDAR_ID")
    token_uri: str = os.getenv("GOOGLE_CALENDAR_TOKEN_URI", "https://oauth2.googleapis.com/token")
    sync_timeout_sec: float = _safe_float("CALENDAR_SYNC_TIMEOUT", "10.0")
    send_updates: str = os.getenv("CALENDAR_SEND_UPDATES", "all")
    email_reminder_minutes: int = _safe_int("CALENDAR_EMAIL_REMINDER", "1440")
    popup_reminder_minutes: int = _safe_int("CALENDAR_POPUP_REMINDER", "30")

    @property
    def is_configured(self) -> bool:
        """True only when every credential needed to reach Google is present."""
        return all((self.client_id, self.client_secret, self.refresh_token, self.calendar_id))


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "discovery-booking")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    scheduling = config.scheduling
    try:
        ZoneInfo(scheduling.operator_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"OPERATOR_TIMEZONE must be an IANA timezone, got {scheduling.operator_timezone!r}"
        ) from None

    if scheduling.min_duration_minutes < 1:
        raise ValueError(
            f"MIN_MEETING_DURATION must be >= 1, got {scheduling.min_duration_minutes}"
        )
    if scheduling.max_duration_minutes < scheduling.min_duration_minutes:
        raise ValueError(
            "MAX_MEETING_DURATION must be >= MIN_MEETING_DURATION, "
            f"got {scheduling.max_duration_minutes}"
        )
    if not (
        scheduling.min_duration_minutes
        <= scheduling.default_duration_minutes
        <= scheduling.max_duration_minutes
    ):
        raise ValueError(
            "DEFAULT_MEETING_DURATION must be between MIN_MEETING_DURATION and "
            f"MAX_MEETING_DURATION, got {scheduling.default_duration_minutes}"
        )
    if scheduling.max_range_days < 1:
        raise ValueError(
            f"MAX_AVAILABILITY_RANGE_DAYS must be >= 1, got {scheduling.max_range_days}"
        )

    calendar = config.calendar
    if calendar.sync_timeout_sec <= 0:
        raise ValueError(
            f"CALENDAR_SYNC_TIMEOUT must be > 0, got {calendar.sync_timeout_sec}"
        )
    if calendar.send_updates not in VALID_SEND_UPDATES:
        raise ValueError(
            f"CALENDAR_SEND_UPDATES must be one of {VALID_SEND_UPDATES}, "
            f"got {calendar.send_updates!r}"
        )
    for name, minutes in [
        ("CALENDAR_EMAIL_REMINDER", calendar.email_reminder_minutes),
        ("CALENDAR_POPUP_REMINDER", calendar.popup_reminder_minutes),
    ]:
        if minutes < 0:
            raise ValueError(f"{name} must be >= 0, got {minutes}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        handlers=[request_id_handler(LOG_FORMAT, datefmt=LOG_DATEFMT)],
    )
    logger.info(
        "Configuration loaded for '%s' (operator timezone %s, calendar %s)",
        config.service_name,
        config.scheduling.operator_timezone,
        "configured" if config.calendar.is_configured else "not configured",
    )
    return config


# Singleton instance
settings = load_config()
