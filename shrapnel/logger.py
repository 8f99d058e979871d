"""
Logger configuration for shrapnel.

The library logs through a single package logger and stays silent unless
an application attaches a handler. The CLI calls ``setup_logger`` once.

Usage:
    from shrapnel.logger import logger
    logger.debug("accepted candidate", extra={"codec": "base64"})

Levels:
    DEBUG   - per-candidate decisions, skipped splices, skipped walk levels
    INFO    - command-level summaries (CLI only)
    WARNING - caller-imposed limits that cut a decomposition short
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, Optional


LOGGER_NAME = "shrapnel"

# Environment variable consulted when no explicit level is passed
LOG_LEVEL_ENV = "SHRAPNEL_LOG_LEVEL"

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """
    Format log records as single-line JSON objects.

    Fields passed through ``extra=`` are copied onto the object. Byte values
    are rendered with ``repr`` so binary fragments never break the output.
    """

    # Attributes every LogRecord carries; anything else came from extra=
    INTERNAL_KEYS = frozenset({
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "thread", "threadName",
        "taskName", "message",
    })

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key in self.INTERNAL_KEYS:
                continue
            log_obj[key] = repr(value) if isinstance(value, bytes) else value

        if record.exc_info:
            log_obj["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_obj, default=str)


def resolve_level(level: Optional[str | int] = None) -> int:
    """
    Resolve a log level from an explicit value or the environment.

    Falls back to WARNING when neither names a known level.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logger(
    level: Optional[str | int] = None,
    json_format: bool = False,
) -> logging.Logger:
    """
    Attach a stderr handler to the package logger.

    Calling this again replaces the handler rather than adding another.

    Args:
        level: Level name or number (defaults to $SHRAPNEL_LOG_LEVEL)
        json_format: Emit JSON lines instead of plain text

    Returns:
        The configured package logger
    """
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(resolve_level(level))

    for handler in list(log.handlers):
        if not isinstance(handler, logging.NullHandler):
            log.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    log.addHandler(handler)

    return log


# Package logger; silent until setup_logger() is called
logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())
