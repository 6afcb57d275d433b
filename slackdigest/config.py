"""Run-level configuration for the digest pipeline.

Usage
-----
Create a configuration with defaults:

>>> config = DigestConfig()
>>> config.hours_back
24.0

Or load from environment variables:

>>> import os
>>> os.environ["SLACKDIGEST_HOURS_BACK"] = "12"
>>> DigestConfig.from_env().hours_back
12.0

"""

from __future__ import annotations

import dataclasses as dc
import os
from pathlib import Path

from slackdigest.classify.constants import DEFAULT_CHUNK_SIZE
from slackdigest.slack.ratelimit import DEFAULT_MIN_INTERVAL_S

_DEFAULT_HOURS_BACK = 24.0
_DEFAULT_OUTPUT_DIR = Path("output")


class DigestConfigError(ValueError):
    """Raised when a run-level environment value is invalid."""

    @classmethod
    def not_a_number(cls, env_var: str, raw: str) -> DigestConfigError:
        """Create error for values that fail numeric parsing."""
        return cls(f"{env_var} must be a number, got: {raw!r}")

    @classmethod
    def not_positive(cls, env_var: str, raw: str) -> DigestConfigError:
        """Create error for values that must be strictly positive."""
        return cls(f"{env_var} must be positive, got: {raw!r}")


def parse_channel_list(raw: str | None) -> tuple[str, ...] | None:
    """Split a comma-separated channel list, returning None when empty."""
    if raw is None:
        return None
    names = tuple(name.strip() for name in raw.split(",") if name.strip())
    return names or None


@dc.dataclass(frozen=True, slots=True)
class DigestConfig:
    """Configuration for one digest run.

    Attributes
    ----------
    hours_back
        Length of the retrieval window in hours.
    channels
        Channel names to include; ``None`` includes every member channel.
    output_dir
        Directory receiving ``summary-{date}.md`` and ``latest.md``.
    chunk_size
        Messages per classification request.
    classify_concurrency
        Maximum classification requests in flight.
    rate_limit_interval_s
        Minimum spacing between Slack calls.
    log_level
        Raw log level; normalised when logging is configured.

    """

    hours_back: float = _DEFAULT_HOURS_BACK
    channels: tuple[str, ...] | None = None
    output_dir: Path = _DEFAULT_OUTPUT_DIR
    chunk_size: int = DEFAULT_CHUNK_SIZE
    classify_concurrency: int = 1
    rate_limit_interval_s: float = DEFAULT_MIN_INTERVAL_S
    log_level: str | None = None

    @staticmethod
    def _parse_positive_int(env_var: str, default: int) -> int:
        """Read a positive integer env var, falling back to a default."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = int(raw)
        except ValueError as exc:
            raise DigestConfigError.not_a_number(env_var, raw) from exc
        if value < 1:
            raise DigestConfigError.not_positive(env_var, raw)
        return value

    @staticmethod
    def _parse_float(
        env_var: str, default: float, *, allow_zero: bool = False
    ) -> float:
        """Read a positive float env var, falling back to a default."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            value = float(raw)
        except ValueError as exc:
            raise DigestConfigError.not_a_number(env_var, raw) from exc
        if value < 0 or (value == 0 and not allow_zero):
            raise DigestConfigError.not_positive(env_var, raw)
        return value

    @classmethod
    def from_env(cls) -> DigestConfig:
        """Create configuration from environment variables.

        Reads the following environment variables:

        - ``SLACKDIGEST_HOURS_BACK``: Window length in hours (default 24).
        - ``SLACKDIGEST_CHANNELS``: Comma-separated channel names.
        - ``SLACKDIGEST_OUTPUT_DIR``: Digest directory (default ``output``).
        - ``SLACKDIGEST_CHUNK_SIZE``: Messages per model request (default 25).
        - ``SLACKDIGEST_CLASSIFY_CONCURRENCY``: Parallel model requests
          (default 1).
        - ``SLACKDIGEST_RATE_LIMIT_INTERVAL_S``: Seconds between Slack calls
          (default 1.1; zero disables spacing).
        - ``SLACKDIGEST_LOG_LEVEL``: Log level name.

        Raises
        ------
        DigestConfigError
            If a numeric value is malformed or out of range.

        """
        raw_output_dir = os.environ.get("SLACKDIGEST_OUTPUT_DIR", "").strip()
        return cls(
            hours_back=cls._parse_float("SLACKDIGEST_HOURS_BACK", _DEFAULT_HOURS_BACK),
            channels=parse_channel_list(os.environ.get("SLACKDIGEST_CHANNELS")),
            output_dir=Path(raw_output_dir) if raw_output_dir else _DEFAULT_OUTPUT_DIR,
            chunk_size=cls._parse_positive_int(
                "SLACKDIGEST_CHUNK_SIZE", DEFAULT_CHUNK_SIZE
            ),
            classify_concurrency=cls._parse_positive_int(
                "SLACKDIGEST_CLASSIFY_CONCURRENCY", 1
            ),
            rate_limit_interval_s=cls._parse_float(
                "SLACKDIGEST_RATE_LIMIT_INTERVAL_S",
                DEFAULT_MIN_INTERVAL_S,
                allow_zero=True,
            ),
            log_level=os.environ.get("SLACKDIGEST_LOG_LEVEL"),
        )
