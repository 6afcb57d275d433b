"""Sequential retrieval of recent channel activity.

The orchestrator walks member channels in listing order, fetches substantive
history newer than a cut-off, resolves authors through the shared
:class:`~slackdigest.slack.identity.IdentityCache`, and attaches thread
replies. All remote calls pass through one
:class:`~slackdigest.slack.ratelimit.RateLimiter`.
"""

from __future__ import annotations

import collections.abc as cabc
import datetime as dt
import typing as typ

from slackdigest.common.time import ensure_tzaware, utcnow
from slackdigest.models import ChannelMessages, Message, Reaction, Reply

from .fetch import ChannelFetcher, HistoryFetcher, normalize_channel_name
from .identity import IdentityCache
from .observability import IngestionEventLogger, IngestionRunContext
from .ratelimit import RateLimiter

if typ.TYPE_CHECKING:
    from slackdigest.models import Channel, Identity

    from .client import SlackMessagePayload, SlackWorkspaceClient


def _since_as_datetime(since: dt.datetime | float) -> dt.datetime:
    if isinstance(since, dt.datetime):
        return ensure_tzaware(since, field="since")
    return dt.datetime.fromtimestamp(float(since), tz=dt.UTC)


class IngestionOrchestrator:
    """Assemble :class:`ChannelMessages` for every active member channel."""

    def __init__(
        self,
        channel_fetcher: ChannelFetcher,
        history_fetcher: HistoryFetcher,
        identity_cache: IdentityCache,
        rate_limiter: RateLimiter,
        *,
        event_logger: IngestionEventLogger | None = None,
    ) -> None:
        """Wire the orchestrator to its fetchers and shared run state."""
        self._channel_fetcher = channel_fetcher
        self._history_fetcher = history_fetcher
        self._identity_cache = identity_cache
        self._rate_limiter = rate_limiter
        self._event_logger = event_logger or IngestionEventLogger()

    @classmethod
    def for_client(
        cls,
        client: SlackWorkspaceClient,
        *,
        rate_limiter: RateLimiter | None = None,
        identity_cache: IdentityCache | None = None,
        event_logger: IngestionEventLogger | None = None,
    ) -> IngestionOrchestrator:
        """Build an orchestrator and its fetchers around a single client."""
        limiter = rate_limiter or RateLimiter()
        events = event_logger or IngestionEventLogger()
        return cls(
            ChannelFetcher(client, limiter),
            HistoryFetcher(client, limiter, event_logger=events),
            identity_cache or IdentityCache(client, event_logger=events),
            limiter,
            event_logger=events,
        )

    async def fetch_recent_messages(
        self,
        *,
        since: dt.datetime | float,
        channel_names: cabc.Iterable[str] | None = None,
    ) -> list[ChannelMessages]:
        """Return channels with at least one substantive message since ``since``.

        Channels keep listing order and messages keep API order. Channels
        without qualifying messages are omitted.

        Raises
        ------
        SlackError
            Propagated from any unrecoverable remote failure; no partial
            result is returned.

        """
        names = (
            tuple(normalize_channel_name(name) for name in channel_names)
            if channel_names is not None
            else None
        )
        started_at = utcnow()
        context = IngestionRunContext(
            since=_since_as_datetime(since),
            started_at=started_at,
            channel_filter=names,
        )
        self._event_logger.log_run_started(context)

        try:
            result = await self._fetch_inner(since, names)
        except BaseException as exc:
            self._event_logger.log_run_failed(context, exc, utcnow() - started_at)
            raise

        self._event_logger.log_run_completed(
            context,
            channels=len(result),
            messages=sum(len(entry.messages) for entry in result),
            duration=utcnow() - started_at,
        )
        return result

    async def _fetch_inner(
        self, since: dt.datetime | float, names: tuple[str, ...] | None
    ) -> list[ChannelMessages]:
        channels = await self._channel_fetcher.list_channels(names)
        result: list[ChannelMessages] = []
        for channel in channels:
            entry = await self._fetch_channel(channel, since)
            if entry is not None:
                result.append(entry)
        return result

    async def _fetch_channel(
        self, channel: Channel, since: dt.datetime | float
    ) -> ChannelMessages | None:
        await self._rate_limiter.wait()
        history = await self._history_fetcher.fetch_history(channel.id, since)
        if not history:
            self._event_logger.log_channel_skipped(
                channel_id=channel.id, channel_name=channel.name
            )
            return None

        messages = [await self._enrich(channel, payload) for payload in history]
        self._event_logger.log_channel_fetched(
            channel_id=channel.id,
            channel_name=channel.name,
            messages=len(messages),
            threads=sum(1 for message in messages if message.thread_replies),
        )
        return ChannelMessages(channel=channel, messages=tuple(messages))

    async def _enrich(self, channel: Channel, payload: SlackMessagePayload) -> Message:
        author = await self._resolve(payload.user)
        replies: tuple[Reply, ...] = ()
        if payload.reply_count > 0:
            await self._rate_limiter.wait()
            reply_payloads = await self._history_fetcher.fetch_thread_replies(
                channel.id, payload.ts
            )
            replies = tuple(
                [
                    Reply(
                        author=await self._resolve(reply.user),
                        text=reply.text,
                        timestamp=reply.ts,
                    )
                    for reply in reply_payloads
                ]
            )

        return Message(
            id=payload.ts,
            author=author,
            text=payload.text,
            timestamp=payload.ts,
            thread_replies=replies,
            reactions=tuple(
                Reaction(name=reaction.name, count=reaction.count)
                for reaction in payload.reactions
            ),
        )

    async def _resolve(self, user_id: str | None) -> Identity | None:
        if not user_id:
            return None
        return await self._identity_cache.resolve(user_id)
