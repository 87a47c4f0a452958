"""Request ID logging context for tracing a booking across modules.

Every engine operation runs under a correlation id held in a ContextVar.
``with_request_id`` wraps an operation so that it reuses the caller's id
when one is set (the CLI sets ``CLI-<command>``) and otherwise runs under
a fresh ``REQ-<hex>`` id that is dropped again when the operation returns.
``RequestIdFilter`` copies the id onto log records; ``load_config`` puts it
on the root handler so ``%(request_id)s`` appears in every log line.

Usage:
    from booking_engine.logging_context import get_request_logger, with_request_id

    logger = get_request_logger(__name__)

    @with_request_id
    async def book(...):
        logger.info("Booking slot")  # -> ... [REQ-3f2a9c01d4be] ... Booking slot
"""

import functools
import inspect
import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator, Optional, TypeVar

NO_REQUEST_ID = "NO_REQUEST_ID"

_request_id: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)

F = TypeVar("F", bound=Callable)


def set_request_id(request_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    return _request_id.get()


def new_request_id() -> str:
    return f"REQ-{uuid.uuid4().hex[:12]}"


@contextmanager
def request_scope(request_id: Optional[str] = None) -> Iterator[str]:
    """Run a block under ``request_id``, the caller's id, or a new one.

    An explicit id always wins. Without one, an id already set by the
    caller is kept. The previous value is restored on exit.
    """
    current = _request_id.get()
    if request_id is None:
        request_id = current if current != NO_REQUEST_ID else new_request_id()
    token = _request_id.set(request_id)
    try:
        yield request_id
    finally:
        _request_id.reset(token)


def with_request_id(func: F) -> F:
    """Decorate a sync or async operation so it runs inside ``request_scope``."""
    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            with request_scope():
                return await func(*args, **kwargs)
        return async_wrapper  # type: ignore[return-value]

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with request_scope():
            return func(*args, **kwargs)
    return wrapper  # type: ignore[return-value]


class RequestIdFilter(logging.Filter):
    """Stamps ``request_id`` on each record it sees."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return ``logging.getLogger(name)`` with a RequestIdFilter attached once."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger


def request_id_handler(fmt: str, datefmt: Optional[str] = None) -> logging.Handler:
    """A stderr handler that stamps every record, including third-party ones.

    Records from plain ``logging.getLogger`` loggers never pass through a
    logger-level RequestIdFilter, so the handler carries its own and the
    ``%(request_id)s`` field is always present.
    """
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler
