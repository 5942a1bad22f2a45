"""Structured JSON logging for marktree.

All package loggers (``marktree.converter`` and friends) share a single
handler installed on the ``marktree`` logger, so the whole package is quiet
at ``WARNING`` until :func:`configure_logging` turns it up::

    import sys
    from marktree.observability import configure_logging

    configure_logging("debug", stream=sys.stdout)

Each record is one line of JSON::

    {"ts": "2026-10-19T12:00:00.123456+00:00", "level": "DEBUG",
     "logger": "marktree.converter", "message": "markdown imported",
     "op": "import", "blocks": 4, "warnings": 0, "chars": 118,
     "preview": "# Title\\n\\nSome text..."}

Long string fields, such as the document preview, are clipped.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

PACKAGE_LOGGER = "marktree"

DEFAULT_MAX_FIELD_LENGTH = 200


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Guaranteed keys are ``ts``, ``level``, ``logger`` and ``message``.
    Fields passed as ``extra={"extra_fields": {...}}`` are merged into the
    top-level object, string values clipped to *max_field_length*
    characters (``None`` keeps them whole).  ``exc_info`` and
    ``stack_info`` are serialised when present.
    """

    def __init__(self, max_field_length: int | None = DEFAULT_MAX_FIELD_LENGTH) -> None:
        super().__init__()
        self.max_field_length = max_field_length

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(record, "extra_fields", None)
        if extra_fields is not None:
            log_entry.update((key, self._clip(value)) for key, value in extra_fields.items())

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(log_entry, default=str)

    def _clip(self, value: Any) -> Any:
        limit = self.max_field_length
        if limit is None or not isinstance(value, str) or len(value) <= limit:
            return value
        return f"{value[:limit]}... [{len(value) - limit} more chars]"


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return logging.getLevelName(level.upper())
    return level


def _install_handler(logger: logging.Logger, level: int | str, stream: Any | None) -> None:
    for handler in list(logger.handlers):
        if isinstance(handler.formatter, StructuredFormatter):
            logger.removeHandler(handler)
    logger.setLevel(_resolve_level(level))
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False


# Names whose handler has been installed; get_logger never stacks handlers.
_configured_loggers: set[str] = set()


def _in_package(name: str) -> bool:
    return name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + ".")


def get_logger(
    name: str = PACKAGE_LOGGER,
    *,
    level: int | str = logging.WARNING,
    stream: Any | None = None,
) -> logging.Logger:
    """Get a structured JSON logger.

    Parameters
    ----------
    name:
        Logger name.  Defaults to ``"marktree"``.
    level:
        Minimum log level, as an ``int`` or a case-insensitive string.
        Only applied when the handler is first installed.
    stream:
        Output stream for the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        For names under ``marktree`` the returned logger has no handler of
        its own and propagates to the ``marktree`` logger, which receives
        the handler on first use.  Any other name gets its own handler.
        Repeated calls never add duplicate handlers.
    """
    target = PACKAGE_LOGGER if _in_package(name) else name
    if target not in _configured_loggers:
        _install_handler(logging.getLogger(target), level, stream)
        _configured_loggers.add(target)
    return logging.getLogger(name)


def configure_logging(
    level: int | str = logging.WARNING,
    stream: Any | None = None,
) -> logging.Logger:
    """Replace the package handler and set the level of every marktree logger.

    Returns the ``marktree`` logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    _install_handler(logger, level, stream)
    _configured_loggers.add(PACKAGE_LOGGER)
    return logger
