"""Unit tests for chunked classification with rule-based degradation."""

from __future__ import annotations

import asyncio
import typing as typ

import pytest

from slackdigest.classify import (
    Classification,
    ClassificationStrategy,
    Classifier,
    ClassifierAPIError,
    build_request,
)
from slackdigest.models import (
    Category,
    Channel,
    ChannelMessages,
    Identity,
    Message,
    Priority,
    Reaction,
    Reply,
)
from tests.helpers.femtologging_capture import capture_femto_logs

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from slackdigest.classify import ClassificationRequest

type ChannelBuilder = cabc.Callable[[str, list[str]], ChannelMessages]


class _ScriptedStrategy:
    """Strategy answering every request with a fixed category."""

    name = "model"

    def __init__(
        self,
        *,
        category: Category = Category.FYI,
        priority: Priority = Priority.LOW,
        fail_channels: frozenset[str] = frozenset(),
        skip_ids: frozenset[str] = frozenset(),
    ) -> None:
        self.category = category
        self.priority = priority
        self.fail_channels = fail_channels
        self.skip_ids = skip_ids
        self.batches: list[list[str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def classify_batch(
        self, requests: cabc.Sequence[ClassificationRequest]
    ) -> list[Classification]:
        self.batches.append([request.id for request in requests])
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if requests and requests[0].channel in self.fail_channels:
                raise ClassifierAPIError.http_error(500)
            return [
                Classification(
                    id=request.id,
                    category=self.category,
                    summary=f"model: {request.text}",
                    priority=self.priority,
                )
                for request in requests
                if request.id not in self.skip_ids
            ]
        finally:
            self.in_flight -= 1


def test_build_request_flattens_thread_and_reactions() -> None:
    """Threads become name: text lines and reactions name (count)."""
    message = Message(
        id="1.0",
        author=None,
        text="Deploy?",
        timestamp="1.0",
        thread_replies=(
            Reply(
                author=Identity(id="U2", handle="bob", display_name="Bob"),
                text="Ja",
                timestamp="2.0",
            ),
            Reply(author=None, text="ok", timestamp="3.0"),
        ),
        reactions=(Reaction(name="eyes", count=2), Reaction(name="+1", count=1)),
    )

    request = build_request(Channel(id="C1", name="eng"), message)

    assert request.user == "unknown"
    assert request.channel == "eng"
    assert request.thread == "Bob: Ja\nunknown: ok"
    assert request.reactions == "eyes (2), +1 (1)"


def test_build_request_uses_none_without_context(
    make_message: cabc.Callable[..., Message],
) -> None:
    """Messages without replies or reactions send null context."""
    request = build_request(Channel(id="C1", name="eng"), make_message("1.0", "hi"))

    assert request.thread is None
    assert request.reactions is None
    assert request.user == "Jane"


@pytest.mark.asyncio
async def test_one_item_per_message_in_chunks_of_configured_size(
    make_channel_messages: ChannelBuilder,
) -> None:
    """Chunks never exceed the size and never span channels."""
    strategy = _ScriptedStrategy()
    channels = [
        make_channel_messages("eng", [f"e{i}" for i in range(5)]),
        make_channel_messages("ops", ["o0"]),
    ]

    result = await Classifier(strategy, chunk_size=2).classify(channels)

    assert [len(batch) for batch in strategy.batches] == [2, 2, 1, 1]
    assert len(result.items) == 6
    assert {item.strategy for item in result.items} == {"model"}
    assert result.items[0].summary == "model: e0"


@pytest.mark.asyncio
async def test_failing_chunk_degrades_to_rules_only_for_that_chunk(
    make_channel_messages: ChannelBuilder,
) -> None:
    """A failed chunk is re-classified with rules; others keep model output."""
    strategy = _ScriptedStrategy(fail_channels=frozenset({"eng"}))
    channels = [
        make_channel_messages("eng", ["Kun je dit vandaag dringend deployen?"]),
        make_channel_messages("ops", ["nothing to see"]),
    ]

    with capture_femto_logs("slackdigest.classify.observability") as capture:
        result = await Classifier(strategy).classify(channels)
        capture.wait_for_count(2)

    by_channel = {item.channel.name: item for item in result.items}
    assert by_channel["eng"].strategy == "rules"
    assert by_channel["eng"].category is Category.ACTION_ITEM
    assert by_channel["eng"].priority is Priority.HIGH
    assert by_channel["ops"].strategy == "model"
    degraded = [
        r for r in capture.records if "classification.chunk.degraded" in r.message
    ]
    assert degraded, "Expected a degradation event"
    assert "channel_name=eng" in degraded[0].message


@pytest.mark.asyncio
async def test_thirty_message_failure_yields_thirty_rule_items(
    make_channel_messages: ChannelBuilder,
) -> None:
    """Every message of a failing run still produces exactly one item."""
    strategy = _ScriptedStrategy(fail_channels=frozenset({"eng"}))
    channels = [make_channel_messages("eng", [f"update {i}" for i in range(30)])]

    result = await Classifier(strategy).classify(channels)

    assert len(result.items) == 30
    assert len({item.id for item in result.items}) == 30
    assert {item.strategy for item in result.items} == {"rules"}
    assert [len(batch) for batch in strategy.batches] == [25, 5]


@pytest.mark.asyncio
async def test_incomplete_answer_degrades_chunk(
    make_channel_messages: ChannelBuilder,
) -> None:
    """An answer that skips an id sends the whole chunk to rules."""
    channel = make_channel_messages("eng", ["a", "b"])
    skipped = channel.messages[1].id
    strategy = _ScriptedStrategy(skip_ids=frozenset({skipped}))

    result = await Classifier(strategy).classify([channel])

    assert len(result.items) == 2
    assert {item.strategy for item in result.items} == {"rules"}


@pytest.mark.asyncio
async def test_ranks_by_priority_then_category(
    make_channel_messages: ChannelBuilder,
) -> None:
    """High priority first, then category precedence, ties in input order."""

    class _ByText(_ScriptedStrategy):
        answers: typ.ClassVar[dict[str, tuple[Category, Priority]]] = {
            "fyi-low": (Category.FYI, Priority.LOW),
            "question-medium": (Category.QUESTION, Priority.MEDIUM),
            "decision-medium": (Category.DECISION, Priority.MEDIUM),
            "action-high": (Category.ACTION_ITEM, Priority.HIGH),
            "announce-high": (Category.ANNOUNCEMENT, Priority.HIGH),
            "action-medium": (Category.ACTION_ITEM, Priority.MEDIUM),
        }

        async def classify_batch(
            self, requests: cabc.Sequence[ClassificationRequest]
        ) -> list[Classification]:
            return [
                Classification(
                    id=request.id,
                    category=self.answers[request.text][0],
                    summary=request.text,
                    priority=self.answers[request.text][1],
                )
                for request in requests
            ]

    channels = [
        make_channel_messages("a", ["fyi-low", "question-medium", "action-medium"]),
        make_channel_messages("b", ["decision-medium", "announce-high", "action-high"]),
    ]

    result = await Classifier(_ByText()).classify(channels)

    assert [item.summary for item in result.items] == [
        "action-high",
        "announce-high",
        "action-medium",
        "decision-medium",
        "question-medium",
        "fyi-low",
    ]


@pytest.mark.asyncio
async def test_stats_cover_all_categories(
    make_message: cabc.Callable[..., Message],
) -> None:
    """Counts include zero entries and threads are counted per message."""
    channel = ChannelMessages(
        channel=Channel(id="C1", name="eng"),
        messages=(
            make_message("1.0", "a", replies=(("Bob", "ok"),)),
            make_message("2.0", "b"),
        ),
    )
    strategy = _ScriptedStrategy(category=Category.DECISION, priority=Priority.MEDIUM)

    result = await Classifier(strategy).classify([channel])

    stats = result.stats
    assert stats.total_messages == 2
    assert stats.total_channels == 1
    assert stats.total_threads == 1
    assert stats.decisions == 2
    assert stats.action_items == 0
    assert set(stats.category_counts) == set(Category)


@pytest.mark.asyncio
async def test_empty_input_yields_empty_digest() -> None:
    """No channels produce an empty result without calling the strategy."""
    strategy = _ScriptedStrategy()

    result = await Classifier(strategy).classify([])

    assert result.is_empty
    assert result.stats.total_messages == 0
    assert strategy.batches == []


@pytest.mark.asyncio
async def test_classification_is_idempotent(
    make_channel_messages: ChannelBuilder,
) -> None:
    """Classifying the same input twice yields equal results."""
    channels = [make_channel_messages("eng", ["Todo: fix", "fyi: nieuws", "ok?"])]
    classifier = Classifier(_ScriptedStrategy(fail_channels=frozenset({"eng"})))

    first = await classifier.classify(channels)
    second = await classifier.classify(channels)

    assert first == second


@pytest.mark.asyncio
async def test_concurrency_is_bounded(make_channel_messages: ChannelBuilder) -> None:
    """No more than max_concurrency chunks are in flight at once."""
    strategy = _ScriptedStrategy()
    channels = [make_channel_messages(f"c{i}", ["x", "y"]) for i in range(6)]

    result = await Classifier(strategy, chunk_size=1, max_concurrency=3).classify(
        channels
    )

    assert 1 < strategy.max_in_flight <= 3
    assert [item.channel.name for item in result.items] == [
        name for i in range(6) for name in (f"c{i}", f"c{i}")
    ]


@pytest.mark.parametrize("field", ["chunk_size", "max_concurrency"])
def test_rejects_non_positive_settings(field: str) -> None:
    """Chunk size and concurrency must be positive."""
    with pytest.raises(ValueError, match=field):
        Classifier(_ScriptedStrategy(), **{field: 0})


def test_scripted_strategy_satisfies_protocol() -> None:
    """Test doubles satisfy ClassificationStrategy structurally."""
    assert isinstance(_ScriptedStrategy(), ClassificationStrategy)
