"""Logging helpers for femtologging integration.

This module centralizes log level normalization and formatting so the digest
pipeline emits structured, pre-formatted log messages consistently.

Example:
>>> from slackdigest.logging import get_logger, log_info
>>> logger = get_logger(__name__)
>>> log_info(logger, "Fetched %d channels", 3)

"""

from __future__ import annotations

import datetime as dt
import enum
import typing as typ

from femtologging import basicConfig, get_logger


class LogLevel(enum.StrEnum):
    """Supported log levels for femtologging."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Normalize a log level string and report invalid inputs.

    Parameters
    ----------
    level : str | None
        Raw log level string to normalize.

    Returns
    -------
    tuple[str, bool]
        The normalized log level and a flag indicating invalid input.

    """
    if not level:
        return ("INFO", True)

    normalized = level.strip().upper()
    if normalized in LogLevel.__members__:
        return (normalized, False)

    return ("INFO", True)


def configure_logging(level: str | None, *, force: bool = False) -> tuple[str, bool]:
    """Configure femtologging and return the normalized level.

    Parameters
    ----------
    level : str | None
        Raw log level string to normalize.
    force : bool, optional
        Whether to replace any existing handler configuration.

    Returns
    -------
    tuple[str, bool]
        The normalized log level and a flag indicating invalid input.

    """
    normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


def format_log_message(template: str, *args: object) -> str:
    """Format a log message using percent-style interpolation."""
    return template % args


class _SupportsLog(typ.Protocol):
    """Protocol for femtologging-compatible loggers."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def _log_at_level(
    logger: _SupportsLog,
    level: str,
    message: str,
    *,
    exc_info: object | None = None,
) -> None:
    """Log a pre-formatted message at the specified level."""
    logger.log(
        level,
        message,
        exc_info=exc_info,
        stack_info=False,
    )


def log_debug(logger: _SupportsLog, template: str, *args: object) -> None:
    """Log a DEBUG message with percent-style formatting."""
    _log_at_level(logger, "DEBUG", format_log_message(template, *args))


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an INFO message with percent-style formatting.

    Parameters
    ----------
    logger : _SupportsLog
        Logger that receives the formatted message.
    template : str
        Message template using percent-style placeholders.
    *args : object
        Values to interpolate into the template.
    exc_info : object | None, optional
        Exception information to attach to the log record.

    """
    _log_at_level(
        logger,
        "INFO",
        format_log_message(template, *args),
        exc_info=exc_info,
    )


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log a WARNING message with percent-style formatting."""
    _log_at_level(
        logger,
        "WARNING",
        format_log_message(template, *args),
        exc_info=exc_info,
    )


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an ERROR message with percent-style formatting."""
    _log_at_level(
        logger,
        "ERROR",
        format_log_message(template, *args),
        exc_info=exc_info,
    )


def log_exception(logger: _SupportsLog, message: str, exc: BaseException) -> None:
    """Log an exception with exc_info wired into femtologging."""
    _log_at_level(logger, "ERROR", message, exc_info=exc)


def _format_field(value: object) -> str:
    if isinstance(value, dt.timedelta):
        return f"{value.total_seconds():.3f}"
    if isinstance(value, float):
        return f"{value:.3f}"
    if isinstance(value, dt.datetime):
        return value.isoformat()
    return str(value)


def format_event(event: str, /, **fields: object) -> str:
    """Render a structured event as ``[event] key=value ...``.

    Fields keep keyword order. Floats and timedeltas render with three
    decimals (timedeltas in seconds); datetimes render in ISO 8601.

    Examples
    --------
    >>> format_event("classification.run.completed", items=3, strategy="rules")
    '[classification.run.completed] items=3 strategy=rules'

    """
    if not fields:
        return f"[{event}]"
    rendered = " ".join(
        f"{key}={_format_field(value)}" for key, value in fields.items()
    )
    return f"[{event}] {rendered}"


def log_event(
    logger: _SupportsLog,
    level: str,
    event: str,
    /,
    *,
    exc_info: object | None = None,
    **fields: object,
) -> None:
    """Log a structured event built by :func:`format_event`."""
    _log_at_level(logger, level, format_event(event, **fields), exc_info=exc_info)


__all__ = [
    "LogLevel",
    "configure_logging",
    "format_event",
    "format_log_message",
    "get_logger",
    "log_debug",
    "log_error",
    "log_event",
    "log_exception",
    "log_info",
    "log_warning",
    "normalize_log_level",
]
