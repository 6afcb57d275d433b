"""Deterministic ordering and aggregate statistics for classified items."""

from __future__ import annotations

import typing as typ

from slackdigest.models import Category, DigestStats, Priority

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from slackdigest.models import ChannelMessages, ClassifiedItem

PRIORITY_ORDER: typ.Final[dict[Priority, int]] = {
    Priority.HIGH: 0,
    Priority.MEDIUM: 1,
    Priority.LOW: 2,
}

CATEGORY_ORDER: typ.Final[dict[Category, int]] = {
    Category.ACTION_ITEM: 0,
    Category.DECISION: 1,
    Category.QUESTION: 2,
    Category.ANNOUNCEMENT: 3,
    Category.FYI: 4,
}


def ranking_key(item: ClassifiedItem) -> tuple[int, int]:
    """Return the sort key of ``item``: priority, then category precedence."""
    return (PRIORITY_ORDER[item.priority], CATEGORY_ORDER[item.category])


def rank_items(items: cabc.Iterable[ClassifiedItem]) -> list[ClassifiedItem]:
    """Return ``items`` sorted by priority then category.

    The sort is stable, so ties keep their input order (channel listing
    order, then message order).
    """
    return sorted(items, key=ranking_key)


def compute_stats(
    channel_messages: cabc.Sequence[ChannelMessages],
    items: cabc.Iterable[ClassifiedItem],
) -> DigestStats:
    """Fold ingestion output and classified items into :class:`DigestStats`.

    Every category appears in ``category_counts``, zero when unused.
    """
    counts = dict.fromkeys(CATEGORY_ORDER, 0)
    for item in items:
        counts[item.category] += 1

    messages = [message for entry in channel_messages for message in entry.messages]
    return DigestStats(
        total_messages=len(messages),
        total_channels=sum(1 for entry in channel_messages if entry.messages),
        total_threads=sum(1 for message in messages if message.thread_replies),
        category_counts=counts,
    )
