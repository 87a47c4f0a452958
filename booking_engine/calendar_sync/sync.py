"""
Best-effort gateway between the orchestrators and a calendar adapter.

The local meeting store is the source of truth; the external calendar is
not. Every call here returns a tagged outcome instead of raising:
``Synced`` when the provider accepted the change, ``Unsynced`` with a
reason when it was skipped, failed or timed out. Orchestrators branch on
the outcome type and never check configuration themselves.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Optional, TypeVar, Union

from booking_engine.calendar_sync.base import (
    CalendarEventResult,
    CalendarSyncAdapter,
    EventDetails,
    EventUpdate,
)
from booking_engine.calendar_sync.placeholders import is_placeholder_event_id
from booking_engine.logging_context import get_request_logger
from booking_engine.scheduling.time_window import TimeWindow

logger = get_request_logger(__name__)

T = TypeVar("T")

NOT_CONFIGURED = "not_configured"
PLACEHOLDER_EVENT = "placeholder_event"
TIMEOUT = "timeout"
ERROR = "error"
NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Synced:
    event_id: str
    meet_url: Optional[str] = None
    html_link: Optional[str] = None

    @classmethod
    def from_result(cls, result: CalendarEventResult) -> "Synced":
        return cls(event_id=result.event_id, meet_url=result.meet_url, html_link=result.html_link)


@dataclass(frozen=True)
class Unsynced:
    reason: str
    error: Optional[BaseException] = None


SyncOutcome = Union[Synced, Unsynced]


class _Failed(Exception):
    def __init__(self, reason: str, error: Optional[BaseException] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.error = error


class CalendarSync:
    """Wraps one adapter with a timeout and failure capture."""

    def __init__(self, adapter: CalendarSyncAdapter, timeout_sec: float) -> None:
        self._adapter = adapter
        self._timeout = timeout_sec

    @property
    def configured(self) -> bool:
        return self._adapter.is_configured()

    async def _call(self, action: str, call: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("Calendar %s timed out after %.1fs", action, self._timeout)
            raise _Failed(TIMEOUT, exc) from exc
        except Exception as exc:
            logger.warning("Calendar %s failed: %s", action, exc)
            raise _Failed(ERROR, exc) from exc

    def _skip_reason(self, event_id: Optional[str] = None) -> Optional[str]:
        if not self._adapter.is_configured():
            return NOT_CONFIGURED
        if event_id is not None and is_placeholder_event_id(event_id):
            return PLACEHOLDER_EVENT
        return None

    async def create_event(self, details: EventDetails) -> SyncOutcome:
        skip = self._skip_reason()
        if skip:
            return Unsynced(skip)
        try:
            result = await self._call("create", self._adapter.create_event(details))
        except _Failed as failed:
            return Unsynced(failed.reason, failed.error)
        return Synced.from_result(result)

    async def update_event(self, event_id: str, update: EventUpdate) -> SyncOutcome:
        skip = self._skip_reason(event_id)
        if skip:
            return Unsynced(skip)
        try:
            result = await self._call("update", self._adapter.update_event(event_id, update))
        except _Failed as failed:
            return Unsynced(failed.reason, failed.error)
        return Synced.from_result(result)

    async def delete_event(self, event_id: str) -> SyncOutcome:
        skip = self._skip_reason(event_id)
        if skip:
            return Unsynced(skip)
        try:
            deleted = await self._call("delete", self._adapter.delete_event(event_id))
        except _Failed as failed:
            return Unsynced(failed.reason, failed.error)
        if not deleted:
            return Unsynced(NOT_FOUND)
        return Synced(event_id=event_id)

    async def free_busy(self, window: TimeWindow) -> list[TimeWindow]:
        """External busy intervals inside ``window``; empty when unavailable."""
        if self._skip_reason():
            return []
        try:
            return await self._call(
                "free/busy", self._adapter.get_free_busy(window.start, window.end)
            )
        except _Failed:
            return []
