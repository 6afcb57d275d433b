"""Observability primitives for Slack ingestion runs.

Provides structured logging and error categorization for channel retrieval,
thread enrichment, and identity resolution. All events are emitted as
``[event.type] key=value`` log lines suitable for parsing by log aggregators.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

import httpx

from slackdigest.logging import get_logger, log_error, log_info, log_warning

from .errors import SlackAPIError, SlackConfigError, SlackResponseShapeError

if typ.TYPE_CHECKING:
    import datetime as dt

logger = get_logger(__name__)

_HTTP_SERVER_ERROR_THRESHOLD = 500
_HTTP_RATE_LIMITED = 429


class IngestionEventType(enum.StrEnum):
    """Structured log event types for ingestion observability."""

    RUN_STARTED = "ingestion.run.started"
    RUN_COMPLETED = "ingestion.run.completed"
    RUN_FAILED = "ingestion.run.failed"
    CHANNEL_FETCHED = "ingestion.channel.fetched"
    CHANNEL_SKIPPED = "ingestion.channel.skipped"
    THREAD_MISSING = "ingestion.thread.missing"
    IDENTITY_FALLBACK = "ingestion.identity.fallback"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    TRANSIENT = "transient"
    RATE_LIMITED = "rate_limited"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


@dataclasses.dataclass(frozen=True, slots=True)
class IngestionRunContext:
    """Shared context for a single ingestion run."""

    since: dt.datetime
    started_at: dt.datetime
    channel_filter: tuple[str, ...] | None = None


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (SlackResponseShapeError, ErrorCategory.SCHEMA_DRIFT),
    (SlackConfigError, ErrorCategory.CONFIGURATION),
    (httpx.TransportError, ErrorCategory.TRANSIENT),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception for alerting purposes.

    Returns:
        ErrorCategory indicating the type of failure for alert routing.

    """
    # Status codes distinguish transient from client errors
    if isinstance(exc, SlackAPIError):
        if exc.status_code == _HTTP_RATE_LIMITED:
            return ErrorCategory.RATE_LIMITED
        if exc.status_code is None and exc.error_code is None:
            return ErrorCategory.TRANSIENT
        if (
            exc.status_code is not None
            and exc.status_code >= _HTTP_SERVER_ERROR_THRESHOLD
        ):
            return ErrorCategory.TRANSIENT
        return ErrorCategory.CLIENT_ERROR

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    return ErrorCategory.UNKNOWN


def _format_filter(channel_filter: tuple[str, ...] | None) -> str:
    if channel_filter is None:
        return "*"
    return ",".join(channel_filter)


class IngestionEventLogger:
    """Emit structured ingestion events via femtologging.

    Events are emitted at INFO level for progress, WARNING for recoverable
    degradations (missing threads, identity fallbacks), and ERROR for
    failures.
    """

    def log_run_started(self, context: IngestionRunContext) -> None:
        """Log ingestion run start."""
        log_info(
            logger,
            "[%s] since=%s channel_filter=%s started_at=%s",
            IngestionEventType.RUN_STARTED,
            context.since.isoformat(),
            _format_filter(context.channel_filter),
            context.started_at.isoformat(),
        )

    def log_run_completed(
        self,
        context: IngestionRunContext,
        *,
        channels: int,
        messages: int,
        duration: dt.timedelta,
    ) -> None:
        """Log successful ingestion run completion with counts."""
        log_info(
            logger,
            "[%s] since=%s duration_seconds=%.3f channels=%d messages=%d",
            IngestionEventType.RUN_COMPLETED,
            context.since.isoformat(),
            duration.total_seconds(),
            channels,
            messages,
        )

    def log_run_failed(
        self,
        context: IngestionRunContext,
        error: BaseException,
        duration: dt.timedelta,
    ) -> None:
        """Log failed ingestion run with error categorization."""
        category = categorize_error(error)
        log_error(
            logger,
            "[%s] since=%s duration_seconds=%.3f "
            "error_type=%s error_category=%s error_message=%s",
            IngestionEventType.RUN_FAILED,
            context.since.isoformat(),
            duration.total_seconds(),
            type(error).__name__,
            category,
            str(error),
            exc_info=error,
        )

    def log_channel_fetched(
        self, *, channel_id: str, channel_name: str, messages: int, threads: int
    ) -> None:
        """Log a channel whose history yielded substantive messages."""
        log_info(
            logger,
            "[%s] channel_id=%s channel_name=%s messages=%d threads=%d",
            IngestionEventType.CHANNEL_FETCHED,
            channel_id,
            channel_name,
            messages,
            threads,
        )

    def log_channel_skipped(self, *, channel_id: str, channel_name: str) -> None:
        """Log a channel dropped because it had no substantive messages."""
        log_info(
            logger,
            "[%s] channel_id=%s channel_name=%s reason=no_messages",
            IngestionEventType.CHANNEL_SKIPPED,
            channel_id,
            channel_name,
        )

    def log_thread_missing(self, *, channel_id: str, parent_ts: str) -> None:
        """Log a thread that disappeared between history and replies calls."""
        log_warning(
            logger,
            "[%s] channel_id=%s parent_ts=%s",
            IngestionEventType.THREAD_MISSING,
            channel_id,
            parent_ts,
        )

    def log_identity_fallback(self, *, user_id: str, error: BaseException) -> None:
        """Log a user lookup that failed and was replaced by the raw id."""
        log_warning(
            logger,
            "[%s] user_id=%s error_type=%s error_category=%s error_message=%s",
            IngestionEventType.IDENTITY_FALLBACK,
            user_id,
            type(error).__name__,
            categorize_error(error),
            str(error),
        )
