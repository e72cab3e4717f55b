"""
Logging configuration for moneypenny.

Components never fetch a process-wide logger on their own. They accept a
``logger`` argument satisfying the small ``Logger`` protocol below and fall
back to their module logger when none is given. ``configure_logging`` is meant
to be called by entrypoints such as the CLI, which then pass the returned
logger down.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Protocol

PACKAGE_LOGGER_NAME = "moneypenny"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}
_FORMATS = ("console", "json")


class Logger(Protocol):
    """Logging capability passed into components."""

    def debug(self, msg: str, *args, **kwargs) -> None: ...

    def info(self, msg: str, *args, **kwargs) -> None: ...

    def warning(self, msg: str, *args, **kwargs) -> None: ...

    def error(self, msg: str, *args, **kwargs) -> None: ...


class JSONFormatter(logging.Formatter):
    """Formats records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload = {
            "timestamp": timestamp.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "severity": record.levelname,
            "log-name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def parse_level(level: str) -> tuple[int, bool]:
    """Map a level name to a logging level; unknown names fall back to INFO."""
    numeric = _LEVELS.get(level.strip().lower())
    if numeric is None:
        return logging.INFO, False
    return numeric, True


def parse_format(fmt: str) -> tuple[str, bool]:
    """Validate a log format name; unknown names fall back to json."""
    fmt = fmt.strip().lower()
    if fmt not in _FORMATS:
        return "json", False
    return fmt, True


def configure_logging(
    level: str = "info",
    fmt: str = "console",
    stream: IO[str] | None = None,
) -> logging.Logger:
    """
    Configure the package logger and return it.

    Args:
        level: One of debug, info, warn, warning, error
        fmt: ``console`` for plain lines or ``json`` for structured output
        stream: Output stream, defaults to stdout

    Returns:
        The configured ``moneypenny`` logger
    """
    numeric_level, level_known = parse_level(level)
    log_format, format_known = parse_format(fmt)

    handler = logging.StreamHandler(stream or sys.stdout)
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(numeric_level)
    logger.propagate = False

    if not level_known:
        logger.warning(f"Unknown log level: {level}. Will default to info")
    if not format_known:
        logger.warning(f"Unknown log format: {fmt}. Will default to json")

    logger.debug("Logging is now set up")
    return logger
