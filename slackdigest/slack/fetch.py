"""Cursor-paginated channel and history retrieval."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ

from slackdigest.common.time import to_epoch_seconds
from slackdigest.models import Channel

from .errors import SlackAPIError
from .observability import IngestionEventLogger

if typ.TYPE_CHECKING:
    import datetime as dt

    from .client import (
        SlackChannelPayload,
        SlackMessagePayload,
        SlackPage,
        SlackWorkspaceClient,
    )
    from .ratelimit import RateLimiter


def normalize_channel_name(name: str) -> str:
    """Strip a leading ``#`` and lower-case a channel name."""
    return name.strip().removeprefix("#").lower()


async def _collect_pages[T](
    fetch_page: cabc.Callable[[str | None], cabc.Awaitable[SlackPage[T]]],
    rate_limiter: RateLimiter,
) -> list[T]:
    """Follow ``next_cursor`` until exhausted, gating every continuation."""
    items: list[T] = []
    cursor: str | None = None
    while True:
        page = await fetch_page(cursor)
        items.extend(page.items)
        if not page.next_cursor:
            return items
        cursor = page.next_cursor
        await rate_limiter.wait()


class ChannelFetcher:
    """List channels the credential belongs to."""

    def __init__(self, client: SlackWorkspaceClient, rate_limiter: RateLimiter) -> None:
        """Create a fetcher bound to a client and shared rate limiter."""
        self._client = client
        self._rate_limiter = rate_limiter

    async def list_channels(
        self, name_filter: cabc.Iterable[str] | None = None
    ) -> list[Channel]:
        """Return member channels in listing order.

        Parameters
        ----------
        name_filter
            Optional channel names; a leading ``#`` and letter case are
            ignored. Channels not named are dropped after retrieval.

        """

        async def fetch_page(cursor: str | None) -> SlackPage[SlackChannelPayload]:
            return await self._client.list_conversations(cursor=cursor)

        payloads = await _collect_pages(fetch_page, self._rate_limiter)
        channels = [
            Channel(id=payload.id, name=payload.name)
            for payload in payloads
            if payload.is_member
        ]
        if name_filter is None:
            return channels

        wanted = {normalize_channel_name(name) for name in name_filter}
        return [channel for channel in channels if channel.name.lower() in wanted]


class HistoryFetcher:
    """Fetch substantive channel history and thread replies."""

    def __init__(
        self,
        client: SlackWorkspaceClient,
        rate_limiter: RateLimiter,
        *,
        event_logger: IngestionEventLogger | None = None,
    ) -> None:
        """Create a fetcher bound to a client and shared rate limiter."""
        self._client = client
        self._rate_limiter = rate_limiter
        self._event_logger = event_logger or IngestionEventLogger()

    async def fetch_history(
        self, channel_id: str, since: dt.datetime | float
    ) -> list[SlackMessagePayload]:
        """Return human messages posted at or after ``since``, in API order."""
        oldest = to_epoch_seconds(since)

        async def fetch_page(cursor: str | None) -> SlackPage[SlackMessagePayload]:
            return await self._client.conversation_history(
                channel_id, oldest=oldest, cursor=cursor
            )

        messages = await _collect_pages(fetch_page, self._rate_limiter)
        return [
            message
            for message in messages
            if message.is_substantive and float(message.ts) >= oldest
        ]

    async def fetch_thread_replies(
        self, channel_id: str, parent_ts: str
    ) -> list[SlackMessagePayload]:
        """Return replies to ``parent_ts`` in thread order, parent excluded.

        A thread deleted after the history call yields an empty list.
        """

        async def fetch_page(cursor: str | None) -> SlackPage[SlackMessagePayload]:
            return await self._client.conversation_replies(
                channel_id, ts=parent_ts, cursor=cursor
            )

        try:
            messages = await _collect_pages(fetch_page, self._rate_limiter)
        except SlackAPIError as exc:
            if not exc.is_thread_not_found:
                raise
            self._event_logger.log_thread_missing(
                channel_id=channel_id, parent_ts=parent_ts
            )
            return []
        return [message for message in messages if message.ts != parent_ts]
