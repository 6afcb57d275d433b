"""Capture femtologging output for assertions in tests."""

from __future__ import annotations

import contextlib
import dataclasses
import threading
import time
import typing as typ

from femtologging import get_logger


@dataclasses.dataclass(slots=True)
class FemtoLogRecord:
    """Captured femtologging record."""

    logger: str
    level: str
    message: str
    exc_info: object | None = None


class FemtoLogCapture:
    """Collect records delivered by the femtologging worker thread."""

    def __init__(self) -> None:
        """Initialise storage and the condition used to wait for records."""
        self.records: list[FemtoLogRecord] = []
        self._condition = threading.Condition()

    def handle(self, logger: str, level: str, message: str) -> None:
        """Handle a plain log record."""
        self._append(
            FemtoLogRecord(logger=str(logger), level=str(level), message=message)
        )

    def handle_record(self, record: dict[str, object]) -> None:
        """Handle a structured record payload."""
        self._append(
            FemtoLogRecord(
                logger=str(record.get("logger", "")),
                level=str(record.get("level", "")),
                message=str(record.get("message", "")),
                exc_info=record.get("exc_info"),
            )
        )

    def _append(self, record: FemtoLogRecord) -> None:
        with self._condition:
            self.records.append(record)
            self._condition.notify_all()

    def wait_for_count(self, count: int, timeout: float = 1.0) -> None:
        """Block until ``count`` records arrive or ``timeout`` elapses."""
        deadline = time.monotonic() + timeout
        with self._condition:
            while len(self.records) < count:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self._condition.wait(timeout=remaining)

        assert len(self.records) >= count, (
            f"Expected {count} records, got {len(self.records)}"
        )

    def messages(self, level: str | None = None) -> list[str]:
        """Return captured messages, optionally filtered by level."""
        with self._condition:
            return [
                record.message
                for record in self.records
                if level is None or record.level == level
            ]


@contextlib.contextmanager
def capture_femto_logs(
    logger_name: str,
    *,
    level: str = "TRACE",
) -> typ.Iterator[FemtoLogCapture]:
    """Attach a capturing handler to the named logger for the block."""
    logger = get_logger(logger_name)
    previous_level = logger.level
    previous_propagate = logger.propagate

    logger.set_level(level)
    logger.set_propagate(False)
    handler = FemtoLogCapture()
    logger.add_handler(handler)
    try:
        yield handler
    finally:
        logger.remove_handler(handler)
        logger.set_level(previous_level)
        logger.set_propagate(previous_propagate)
