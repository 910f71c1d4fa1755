"""Structured JSON logger for notedown.

Every log record is emitted as a single-line JSON object so the host
application can ship editor diagnostics to whatever log pipeline it
already uses without additional parsing.

Typical structured output::

    {"ts": "2025-07-01T12:00:00.123456+00:00", "level": "DEBUG",
     "logger": "notedown.session", "message": "transaction committed",
     "steps": 3, "corrected": true, "doc_size": 118}

Usage::

    from notedown.observability import get_logger, log_event

    log = get_logger("notedown.normalize")
    log_event(log, logging.WARNING, "normalization skipped", pos=12)
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    The formatter produces a JSON object with the following guaranteed keys:

    * ``ts`` -- ISO-8601 UTC timestamp
    * ``level`` -- Python log level name (``DEBUG``, ``INFO``, ...)
    * ``logger`` -- Logger name
    * ``message`` -- Formatted log message

    Structured fields passed via ``extra={"extra_fields": {...}}`` (or
    :func:`log_event`) are merged into the top-level object.  Exception
    and stack information are serialised when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(
            record, "extra_fields", None
        )
        if extra_fields is not None:
            log_entry.update(extra_fields)

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(log_entry, default=str)


# One handler per logger name so repeated ``get_logger`` calls from
# different modules never stack duplicate handlers.
_configured_loggers: set[str] = set()


def get_logger(
    name: str = "notedown",
    *,
    level: int | str = logging.WARNING,
    stream: Any | None = None,
) -> logging.Logger:
    """Get or create a structured JSON logger.

    Parameters
    ----------
    name:
        Logger name.  Defaults to ``"notedown"``.  The editing core uses
        ``"notedown.normalize"``, ``"notedown.commands"`` and
        ``"notedown.session"``.
    level:
        Minimum log level for a newly configured logger.  Accepts an
        ``int`` or a case-insensitive string (``"DEBUG"``).  Editors call
        into the core on every keystroke, so the default is ``WARNING``;
        hosts lower it on the returned logger when diagnosing.
    stream:
        Output stream for the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        A logger with a :class:`StructuredFormatter` handler attached.
        Repeated calls with the same *name* return the same logger and do
        **not** add duplicate handlers.
    """
    logger = logging.getLogger(name)

    if name not in _configured_loggers:
        resolved_level = (
            logging.getLevelName(level.upper())
            if isinstance(level, str)
            else level
        )
        logger.setLevel(resolved_level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False

        _configured_loggers.add(name)

    return logger


def log_event(
    logger: logging.Logger,
    level: int,
    message: str,
    **fields: Any,
) -> None:
    """Log *message* at *level* with *fields* as structured extra data.

    The record is only built when the logger is enabled for *level*, so
    call sites on the per-keystroke path stay cheap.
    """
    if logger.isEnabledFor(level):
        logger.log(level, message, extra={"extra_fields": fields})
