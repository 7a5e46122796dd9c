"""Request ID logging context for tracing booking writes across modules.

Provides a request_id-aware logger that attaches a correlation ID to every
log message, so a rejected or conflicting submission can be traced from the
form check through the write-time re-check.

Usage:
    from dayroom.logging_context import get_request_logger, request_context

    logger = get_request_logger(__name__)
    with request_context("REQ-abc123"):
        logger.info("Creating booking")  # record.request_id == "REQ-abc123"
"""

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_request_id: ContextVar[str] = ContextVar("request_id", default="NO_REQUEST_ID")


def get_request_id() -> str:
    """Retrieve the current correlation ID."""
    return _request_id.get()


@contextmanager
def request_context(request_id: Optional[str] = None) -> Iterator[str]:
    """Scope a correlation ID to one submission, generating one when not given.

    The previous ID is restored on exit, so nested submissions in the same
    thread keep their own IDs.
    """
    request_id = request_id or f"REQ-{uuid.uuid4().hex[:8]}"
    token = _request_id.set(request_id)
    try:
        yield request_id
    finally:
        _request_id.reset(token)


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached.

    The filter adds ``request_id`` to each record so formatters can
    include ``%(request_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger
