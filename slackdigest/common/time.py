"""Common time utilities.

Slack identifies messages by their ``ts`` string: epoch seconds with a
microsecond suffix (``"1712345678.000200"``). These helpers convert between
that representation and aware UTC datetimes.
"""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def ensure_tzaware(value: dt.datetime, *, field: str) -> dt.datetime:
    """Return ``value`` in UTC, rejecting naive datetimes."""
    if value.tzinfo is None:
        msg = f"{field} must be timezone-aware"
        raise ValueError(msg)
    return value.astimezone(dt.UTC)


def to_epoch_seconds(value: dt.datetime | float) -> float:
    """Normalise a datetime or epoch value to epoch seconds."""
    if isinstance(value, dt.datetime):
        return ensure_tzaware(value, field="since").timestamp()
    return float(value)


def parse_slack_ts(ts: str) -> dt.datetime:
    """Convert a Slack ``ts`` string into an aware UTC datetime."""
    return dt.datetime.fromtimestamp(float(ts), tz=dt.UTC)


def hours_ago(hours: float, *, now: dt.datetime | None = None) -> dt.datetime:
    """Return the aware UTC datetime ``hours`` before ``now``."""
    reference = ensure_tzaware(now, field="now") if now is not None else utcnow()
    return reference - dt.timedelta(hours=hours)
