"""Centralised logging configuration for the task API."""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

LOGGER_NAME = "task_api"

# Set by the HTTP middleware for the duration of a request.
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    """Attach the current request id (or '-') to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


# PUBLIC_INTERFACE
def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the 'task_api' logger with a single stderr handler.

    Safe to call more than once: existing handlers are replaced, not stacked.
    Unknown level names fall back to INFO.
    """
    resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(resolved, int):
        resolved = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(resolved)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(request_id)s %(name)s: %(message)s",
        )
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(resolved)
    return logger
