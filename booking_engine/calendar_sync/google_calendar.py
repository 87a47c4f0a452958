"""
Google Calendar adapter.

Creates events with a Google Meet conference, patches and deletes them,
and reads free/busy for the operator's calendar. Authenticates with a
long-lived OAuth refresh token. The discovery client is blocking, so
every ``execute()`` runs in a worker thread.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from booking_engine.calendar_sync.base import (
    CalendarEventResult,
    CalendarSyncAdapter,
    EventDetails,
    EventUpdate,
)
from booking_engine.config import CalendarConfig
from booking_engine.errors import CalendarSyncError
from booking_engine.scheduling.time_window import TimeWindow

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]
GONE_STATUSES = (404, 410)


def parse_rfc3339(raw: str) -> datetime:
    """Parse a Google timestamp (possibly with a trailing ``Z``) into UTC."""
    value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def extract_meet_url(event: dict[str, Any]) -> Optional[str]:
    """The video entry point of an event's conference, if it has one."""
    entry_points = (event.get("conferenceData") or {}).get("entryPoints") or []
    for entry in entry_points:
        if entry.get("entryPointType") == "video":
            return entry.get("uri")
    return None


def _event_time(value: datetime, tz_name: Optional[str]) -> dict[str, str]:
    return {"dateTime": value.isoformat(), "timeZone": tz_name or "UTC"}


def _attendees(email: Optional[str], name: Optional[str]) -> list[dict[str, str]]:
    if not email:
        return []
    attendee = {"email": email}
    if name:
        attendee["displayName"] = name
    return [attendee]


class GoogleCalendarAdapter(CalendarSyncAdapter):
    """CalendarSyncAdapter backed by the Google Calendar v3 API."""

    def __init__(self, config: CalendarConfig, service: Any = None) -> None:
        self._config = config
        self._service = service

    def is_configured(self) -> bool:
        return self._config.is_configured

    @property
    def calendar_id(self) -> str:
        return self._config.calendar_id or "primary"

    def _client(self) -> Any:
        if self._service is None:
            if not self.is_configured():
                raise CalendarSyncError("Google Calendar is not configured")
            creds = Credentials(
                token=None,
                refresh_token=self._config.refresh_token,
                token_uri=self._config.token_uri,
                client_id=self._config.client_id,
                client_secret=self._config.client_secret,
                scopes=SCOPES,
            )
            self._service = build("calendar", "v3", credentials=creds, cache_discovery=False)
            logger.info("Google Calendar client built for calendar %s", self.calendar_id)
        return self._service

    async def _execute(self, request: Any, action: str) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(request.execute) or {}
        except (RefreshError, TransportError, OSError) as exc:
            raise CalendarSyncError(f"Google Calendar {action} failed: {exc}", exc) from exc

    async def create_event(self, details: EventDetails) -> CalendarEventResult:
        body = {
            "summary": details.summary,
            "description": details.description,
            "start": _event_time(details.start, details.timezone),
            "end": _event_time(details.end, details.timezone),
            "attendees": _attendees(details.attendee_email, details.attendee_name),
            "conferenceData": {
                "createRequest": {
                    "requestId": f"meet-{uuid.uuid4().hex}",
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                },
            },
            "reminders": {
                "useDefault": False,
                "overrides": [
                    {"method": "email", "minutes": self._config.email_reminder_minutes},
                    {"method": "popup", "minutes": self._config.popup_reminder_minutes},
                ],
            },
        }
        request = self._client().events().insert(
            calendarId=self.calendar_id,
            body=body,
            conferenceDataVersion=1,
            sendUpdates=self._config.send_updates,
        )
        try:
            event = await self._execute(request, "create")
        except HttpError as exc:
            raise CalendarSyncError(f"Google Calendar create failed: {exc}", exc) from exc

        if not event.get("id"):
            raise CalendarSyncError("Google Calendar returned an event without an id")
        logger.info("Google Calendar event created: %s", event["id"])
        return CalendarEventResult(
            event_id=event["id"],
            meet_url=extract_meet_url(event),
            html_link=event.get("htmlLink"),
        )

    async def update_event(self, event_id: str, update: EventUpdate) -> CalendarEventResult:
        body: dict[str, Any] = {}
        if update.summary:
            body["summary"] = update.summary
        if update.description is not None:
            body["description"] = update.description
        if update.start:
            body["start"] = _event_time(update.start, update.timezone)
        if update.end:
            body["end"] = _event_time(update.end, update.timezone)
        if update.attendee_email:
            body["attendees"] = _attendees(update.attendee_email, update.attendee_name)

        request = self._client().events().patch(
            calendarId=self.calendar_id,
            eventId=event_id,
            body=body,
            sendUpdates=self._config.send_updates,
        )
        try:
            event = await self._execute(request, "update")
        except HttpError as exc:
            raise CalendarSyncError(f"Google Calendar update failed: {exc}", exc) from exc

        logger.info("Google Calendar event updated: %s", event_id)
        return CalendarEventResult(
            event_id=event.get("id") or event_id,
            meet_url=extract_meet_url(event),
            html_link=event.get("htmlLink"),
        )

    async def delete_event(self, event_id: str) -> bool:
        """Delete an event. Returns False if Google no longer has it."""
        request = self._client().events().delete(
            calendarId=self.calendar_id,
            eventId=event_id,
            sendUpdates=self._config.send_updates,
        )
        try:
            await self._execute(request, "delete")
        except HttpError as exc:
            if exc.resp is not None and exc.resp.status in GONE_STATUSES:
                logger.warning("Google Calendar event %s already gone", event_id)
                return False
            raise CalendarSyncError(f"Google Calendar delete failed: {exc}", exc) from exc
        logger.info("Google Calendar event deleted: %s", event_id)
        return True

    async def get_free_busy(self, start: datetime, end: datetime) -> list[TimeWindow]:
        body = {
            "timeMin": start.isoformat(),
            "timeMax": end.isoformat(),
            "items": [{"id": self.calendar_id}],
        }
        request = self._client().freebusy().query(body=body)
        try:
            response = await self._execute(request, "free/busy")
        except HttpError as exc:
            raise CalendarSyncError(f"Google Calendar free/busy failed: {exc}", exc) from exc

        calendar = (response.get("calendars") or {}).get(self.calendar_id) or {}
        if calendar.get("errors"):
            raise CalendarSyncError(f"Google Calendar free/busy errors: {calendar['errors']}")

        busy = []
        for interval in calendar.get("busy") or []:
            if not interval.get("start") or not interval.get("end"):
                continue
            start_at = parse_rfc3339(interval["start"])
            end_at = parse_rfc3339(interval["end"])
            if end_at > start_at:
                busy.append(TimeWindow(start_at, end_at))
        return busy
