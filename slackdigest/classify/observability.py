"""Emit structured observability events for classification runs."""

from __future__ import annotations

import enum
import typing as typ

from slackdigest.logging import get_logger, log_event

if typ.TYPE_CHECKING:
    import datetime as dt

logger = get_logger(__name__)


class ClassificationEventType(enum.StrEnum):
    """Structured log event types for classification runs."""

    RUN_COMPLETED = "classification.run.completed"
    CHUNK_DEGRADED = "classification.chunk.degraded"


class ClassificationEventLogger:
    """Emit structured classification events via femtologging."""

    def log_run_completed(  # noqa: PLR0913
        self,
        *,
        strategy: str,
        items: int,
        chunks: int,
        degraded_chunks: int,
        duration: dt.timedelta,
    ) -> None:
        """Log classification completion with chunk and item counts."""
        log_event(
            logger,
            "INFO",
            ClassificationEventType.RUN_COMPLETED,
            strategy=strategy,
            items=items,
            chunks=chunks,
            degraded_chunks=degraded_chunks,
            duration_seconds=duration,
        )

    def log_chunk_degraded(
        self,
        *,
        channel_name: str,
        chunk_size: int,
        error: BaseException,
    ) -> None:
        """Log a chunk re-classified with rules after a model failure.

        Parameters
        ----------
        channel_name
            Channel the chunk belongs to.
        chunk_size
            Number of messages in the chunk.
        error
            Failure that triggered the fallback.

        """
        log_event(
            logger,
            "WARNING",
            ClassificationEventType.CHUNK_DEGRADED,
            channel_name=channel_name,
            chunk_size=chunk_size,
            error_type=type(error).__name__,
            error_message=str(error),
        )
