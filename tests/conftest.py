"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import datetime as dt
import os
import typing as typ

import pytest

from slackdigest.models import Channel, ChannelMessages, Identity, Message, Reply

if typ.TYPE_CHECKING:
    import collections.abc as cabc

FIXED_NOW = dt.datetime(2024, 7, 8, 9, 30, tzinfo=dt.UTC)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop SLACKDIGEST_* variables so host configuration cannot leak in."""
    for name in list(os.environ):
        if name.startswith("SLACKDIGEST_"):
            monkeypatch.delenv(name)


@pytest.fixture
def now() -> dt.datetime:
    """Return the reference time used across tests."""
    return FIXED_NOW


@pytest.fixture
def make_message() -> cabc.Callable[..., Message]:
    """Return a builder for enriched messages."""

    def _make(
        ts: str,
        text: str,
        *,
        author: str | None = "Jane",
        replies: tuple[tuple[str, str], ...] = (),
    ) -> Message:
        identity = (
            Identity(id=f"U-{author}", handle=author.lower(), display_name=author)
            if author is not None
            else None
        )
        return Message(
            id=ts,
            author=identity,
            text=text,
            timestamp=ts,
            thread_replies=tuple(
                Reply(
                    author=Identity(
                        id=f"U-{who}", handle=who.lower(), display_name=who
                    ),
                    text=body,
                    timestamp=f"{float(ts) + index + 1:.6f}",
                )
                for index, (who, body) in enumerate(replies)
            ),
        )

    return _make


@pytest.fixture
def make_channel_messages(
    make_message: cabc.Callable[..., Message],
) -> cabc.Callable[[str, list[str]], ChannelMessages]:
    """Return a builder producing one channel with plain-text messages."""

    def _make(name: str, texts: list[str]) -> ChannelMessages:
        return ChannelMessages(
            channel=Channel(id=f"C-{name}", name=name),
            messages=tuple(
                make_message(f"{1720000000 + index:.6f}", text)
                for index, text in enumerate(texts)
            ),
        )

    return _make
