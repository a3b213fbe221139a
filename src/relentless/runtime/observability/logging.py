"""Logging setup for the ``relentless`` logger hierarchy.

The library only emits through stdlib loggers (``relentless.retry``,
``relentless.cancellation``, ...). ``configure_logging`` attaches a handler
for applications that want that output, human-readable or JSON.

Example:
    >>> from relentless.runtime.observability import configure_logging
    >>> configure_logging(format="json", level="DEBUG")

    # Or from the environment:
    # RELENTLESS_LOG_FORMAT=json RELENTLESS_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TextIO

import orjson

from relentless.foundation.config import get_settings

ROOT_LOGGER = "relentless"

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_handler: logging.Handler | None = None


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, event (+ exc_info)."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str).decode()


def configure_logging(
    level: str | None = None,
    format: str | None = None,  # noqa: A002 - matches LoggingSettings.format
    *,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Attach a handler to the ``relentless`` logger, replacing a previous one.

    Unset arguments fall back to LoggingSettings (debug=True forces DEBUG).
    Format: "text" (human) or "json" (machine).
    """
    global _handler
    settings = get_settings()
    level = (level or ("DEBUG" if settings.debug else settings.logging.level)).upper()

    match format or settings.logging.format:
        case "text": formatter: logging.Formatter = logging.Formatter(_TEXT_FORMAT)
        case "json": formatter = JsonFormatter()
        case other: raise ValueError(f"Unknown format: {other}. Use 'text' or 'json'")

    logger = logging.getLogger(ROOT_LOGGER)
    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setFormatter(formatter)
    logger.addHandler(_handler)
    logger.setLevel(level)
    return _handler
