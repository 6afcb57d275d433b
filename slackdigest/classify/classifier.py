"""Chunked classification of ingested messages into a ranked digest.

Each channel is split into chunks. A chunk is sent to the configured strategy;
when that strategy fails or leaves any message unanswered, the chunk alone is
re-classified with the rule-based strategy so the digest always holds exactly
one item per message.
"""

from __future__ import annotations

import asyncio
import dataclasses
import typing as typ

from slackdigest.common.time import utcnow
from slackdigest.models import ClassifiedItem, DigestResult, truncate_summary

from .constants import DEFAULT_CHUNK_SIZE
from .errors import ClassificationError, ClassifierResponseShapeError
from .models import ClassificationRequest
from .observability import ClassificationEventLogger
from .ranking import compute_stats, rank_items
from .rules import RuleBasedClassifier

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from slackdigest.models import Channel, ChannelMessages, Identity, Message

    from .models import Classification
    from .protocol import ClassificationStrategy

_UNKNOWN_AUTHOR = "unknown"


def _author_name(author: Identity | None) -> str:
    if author is None or not author.display_name:
        return _UNKNOWN_AUTHOR
    return author.display_name


def build_request(channel: Channel, message: Message) -> ClassificationRequest:
    """Flatten ``message`` into the request shape sent to strategies."""
    thread = (
        "\n".join(
            f"{_author_name(reply.author)}: {reply.text}"
            for reply in message.thread_replies
        )
        if message.thread_replies
        else None
    )
    reactions = (
        ", ".join(
            f"{reaction.name} ({reaction.count})" for reaction in message.reactions
        )
        if message.reactions
        else None
    )
    return ClassificationRequest(
        id=message.id,
        channel=channel.name,
        user=_author_name(message.author),
        text=message.text,
        thread=thread,
        reactions=reactions,
    )


@dataclasses.dataclass(frozen=True, slots=True)
class _Chunk:
    channel: Channel
    messages: tuple[Message, ...]
    requests: tuple[ClassificationRequest, ...]


@dataclasses.dataclass(frozen=True, slots=True)
class _ChunkOutcome:
    items: list[ClassifiedItem]
    degraded: bool


def _index_by_id(
    classifications: cabc.Iterable[Classification],
) -> dict[str, Classification]:
    """Index classifications by id; the first answer for an id wins."""
    indexed: dict[str, Classification] = {}
    for classification in classifications:
        indexed.setdefault(classification.id, classification)
    return indexed


class Classifier:
    """Classify channel messages and rank the result.

    Parameters
    ----------
    strategy
        Strategy chosen for the whole run.
    fallback
        Rule-based strategy used for failed chunks.
    chunk_size
        Maximum messages per strategy call; chunks never span channels.
    max_concurrency
        Maximum chunks classified at once.
    event_logger
        Structured event sink.

    """

    def __init__(
        self,
        strategy: ClassificationStrategy,
        *,
        fallback: RuleBasedClassifier | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_concurrency: int = 1,
        event_logger: ClassificationEventLogger | None = None,
    ) -> None:
        """Configure the classifier."""
        if chunk_size < 1:
            msg = f"chunk_size must be positive, got {chunk_size}"
            raise ValueError(msg)
        if max_concurrency < 1:
            msg = f"max_concurrency must be positive, got {max_concurrency}"
            raise ValueError(msg)
        self._strategy = strategy
        self._fallback = fallback or RuleBasedClassifier()
        self._chunk_size = chunk_size
        self._max_concurrency = max_concurrency
        self._event_logger = event_logger or ClassificationEventLogger()

    @property
    def strategy(self) -> ClassificationStrategy:
        """Strategy chosen at construction."""
        return self._strategy

    async def classify(
        self, channel_messages: cabc.Sequence[ChannelMessages]
    ) -> DigestResult:
        """Classify every message and return the ranked digest.

        Raises
        ------
        Exception
            Only failures outside :class:`ClassificationError` propagate; a
            failing chunk degrades to rules instead.

        """
        started_at = utcnow()
        chunks = self._split(channel_messages)
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def run(chunk: _Chunk) -> _ChunkOutcome:
            async with semaphore:
                return await self._classify_chunk(chunk)

        outcomes = await asyncio.gather(*(run(chunk) for chunk in chunks))
        items = [item for outcome in outcomes for item in outcome.items]
        ranked = rank_items(items)

        self._event_logger.log_run_completed(
            strategy=self._strategy.name,
            items=len(ranked),
            chunks=len(chunks),
            degraded_chunks=sum(1 for outcome in outcomes if outcome.degraded),
            duration=utcnow() - started_at,
        )
        return DigestResult(
            items=tuple(ranked),
            stats=compute_stats(channel_messages, ranked),
        )

    def _split(
        self, channel_messages: cabc.Sequence[ChannelMessages]
    ) -> list[_Chunk]:
        chunks: list[_Chunk] = []
        for entry in channel_messages:
            for start in range(0, len(entry.messages), self._chunk_size):
                messages = entry.messages[start : start + self._chunk_size]
                chunks.append(
                    _Chunk(
                        channel=entry.channel,
                        messages=messages,
                        requests=tuple(
                            build_request(entry.channel, message)
                            for message in messages
                        ),
                    )
                )
        return chunks

    async def _classify_chunk(self, chunk: _Chunk) -> _ChunkOutcome:
        strategy_name = self._strategy.name
        degraded = False
        try:
            answered = _index_by_id(
                await self._strategy.classify_batch(chunk.requests)
            )
            missing = [
                request.id for request in chunk.requests if request.id not in answered
            ]
            if missing:
                raise ClassifierResponseShapeError.incomplete(missing)
        except ClassificationError as exc:
            self._event_logger.log_chunk_degraded(
                channel_name=chunk.channel.name,
                chunk_size=len(chunk.requests),
                error=exc,
            )
            answered = _index_by_id(
                await self._fallback.classify_batch(chunk.requests)
            )
            strategy_name = self._fallback.name
            degraded = True

        items = [
            self._build_item(
                chunk.channel, message, answered[message.id], strategy_name
            )
            for message in chunk.messages
        ]
        return _ChunkOutcome(items=items, degraded=degraded)

    @staticmethod
    def _build_item(
        channel: Channel,
        message: Message,
        classification: Classification,
        strategy_name: str,
    ) -> ClassifiedItem:
        return ClassifiedItem(
            id=message.id,
            category=classification.category,
            summary=truncate_summary(classification.summary or message.text),
            priority=classification.priority,
            assignee=classification.assignee,
            deadline=classification.deadline,
            channel=channel,
            source_message=message,
            timestamp=message.timestamp,
            strategy=strategy_name,
        )
