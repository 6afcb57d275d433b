"""Unit tests for femtologging integration helpers.

Run with:
    pytest tests/unit/test_logging.py
"""

from __future__ import annotations

import datetime as dt

import pytest

from slackdigest.logging import (
    configure_logging,
    format_event,
    format_log_message,
    log_debug,
    log_event,
    log_exception,
    log_warning,
    normalize_log_level,
)


class _FakeLogger:
    """Collects log calls for assertions."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, object | None, bool]] = []

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str:
        self.calls.append((level, message, exc_info, stack_info))
        return message


@pytest.mark.parametrize(
    ("input_level", "expected_level", "expected_invalid"),
    [
        ("warning", "WARNING", False),
        (" debug ", "DEBUG", False),
        (None, "INFO", True),
        ("", "INFO", True),
        ("verbose", "INFO", True),
    ],
)
def test_normalize_log_level(
    input_level: str | None,
    expected_level: str,
    *,
    expected_invalid: bool,
) -> None:
    """Normalize log levels and flag invalid inputs."""
    level, invalid = normalize_log_level(input_level)

    assert level == expected_level, (
        f"Expected {input_level!r} to normalize to {expected_level}."
    )
    assert invalid is expected_invalid, (
        f"Expected invalid flag to be {expected_invalid} for {input_level!r}."
    )


def test_format_log_message_uses_percent_formatting() -> None:
    """Percent formatting produces the expected message."""
    assert format_log_message("fetched %d of %s", 3, "engineering") == (
        "fetched 3 of engineering"
    )


def test_log_debug_formats_message() -> None:
    """log_debug formats messages and emits DEBUG level."""
    logger = _FakeLogger()

    log_debug(logger, "page %d", 2)

    assert logger.calls == [("DEBUG", "page 2", None, False)]


def test_log_warning_forwards_exc_info() -> None:
    """log_warning forwards exc_info to the logger."""
    logger = _FakeLogger()
    exc = ValueError("boom")

    log_warning(logger, "warning: %s", "oops", exc_info=exc)

    assert logger.calls == [("WARNING", "warning: oops", exc, False)]


def test_log_exception_passes_exc_info() -> None:
    """log_exception forwards the exception payload to the logger."""
    logger = _FakeLogger()
    exc = RuntimeError("boom")

    log_exception(logger, "failed", exc)

    assert logger.calls == [("ERROR", "failed", exc, False)]


class TestFormatEvent:
    """Tests for structured event rendering."""

    def test_fields_keep_keyword_order(self) -> None:
        """Fields render as key=value pairs in the order given."""
        message = format_event("ingestion.channel.fetched", channel="general", n=2)

        assert message == "[ingestion.channel.fetched] channel=general n=2"

    def test_durations_and_floats_use_three_decimals(self) -> None:
        """Timedeltas render as seconds and floats with three decimals."""
        message = format_event(
            "run",
            duration_seconds=dt.timedelta(milliseconds=1500),
            ratio=0.5,
        )

        assert message == "[run] duration_seconds=1.500 ratio=0.500"

    def test_datetimes_render_iso(self) -> None:
        """Datetimes render in ISO 8601."""
        moment = dt.datetime(2024, 7, 8, 9, 30, tzinfo=dt.UTC)

        assert format_event("run", since=moment) == (
            "[run] since=2024-07-08T09:30:00+00:00"
        )

    def test_event_without_fields(self) -> None:
        """An event without fields renders only its tag."""
        assert format_event("run") == "[run]"


def test_log_event_passes_level_and_exc_info() -> None:
    """log_event forwards level and exc_info with the rendered event."""
    logger = _FakeLogger()
    exc = ValueError("bad")

    log_event(logger, "WARNING", "chunk.degraded", exc_info=exc, chunk_size=25)

    assert logger.calls == [("WARNING", "[chunk.degraded] chunk_size=25", exc, False)]


@pytest.mark.parametrize(
    ("input_level", "expected_normalized", "expected_invalid"),
    [
        ("DEBUG", "DEBUG", False),
        ("nope", "INFO", True),
    ],
)
def test_configure_logging(
    monkeypatch: pytest.MonkeyPatch,
    input_level: str,
    expected_normalized: str,
    *,
    expected_invalid: bool,
) -> None:
    """configure_logging normalizes input levels and flags invalid values."""
    captured: dict[str, object] = {}

    def fake_basic_config(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr("slackdigest.logging.basicConfig", fake_basic_config)

    normalized, invalid = configure_logging(input_level)

    assert normalized == expected_normalized
    assert invalid is expected_invalid
    assert captured.get("level") == expected_normalized
    assert captured.get("force") is False, "Expected basicConfig to keep handlers."
