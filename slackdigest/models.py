"""Domain structures shared by ingestion, classification, and rendering.

Ingestion produces :class:`ChannelMessages`; classification consumes them and
returns a :class:`DigestResult`. Every structure is an immutable
``msgspec.Struct`` so results can be handed to collaborators (renderers,
exporters) without defensive copying.
"""

from __future__ import annotations

import datetime as dt  # noqa: TC003
import enum
import typing as typ

import msgspec

from slackdigest.common.time import parse_slack_ts

SUMMARY_MAX_LENGTH = 100
_ELLIPSIS = "..."


class Category(enum.StrEnum):
    """Semantic category assigned to each message."""

    ACTION_ITEM = "ACTION_ITEM"
    DECISION = "DECISION"
    ANNOUNCEMENT = "ANNOUNCEMENT"
    QUESTION = "QUESTION"
    FYI = "FYI"


class Priority(enum.StrEnum):
    """Priority assigned to each classified message."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Channel(msgspec.Struct, kw_only=True, frozen=True):
    """Slack channel the credential is a member of."""

    id: str
    name: str


class Identity(msgspec.Struct, kw_only=True, frozen=True):
    """Resolved display identity for a Slack user id.

    Attributes
    ----------
    id
        Opaque Slack user id (``U012AB3CD``).
    handle
        Slack username.
    display_name
        Profile display name, falling back to real name then handle.

    """

    id: str
    handle: str
    display_name: str

    @classmethod
    def fallback(cls, user_id: str) -> Identity:
        """Return the identity used when a lookup fails."""
        return cls(id=user_id, handle=user_id, display_name=user_id)


class Reaction(msgspec.Struct, kw_only=True, frozen=True):
    """Emoji reaction and how many people added it."""

    name: str
    count: int


class Reply(msgspec.Struct, kw_only=True, frozen=True):
    """Thread reply attached to a parent message."""

    author: Identity | None
    text: str
    timestamp: str


class Message(msgspec.Struct, kw_only=True, frozen=True):
    """Substantive, enriched channel message.

    Attributes
    ----------
    id
        Slack ``ts`` of the message; unique within its channel.
    author
        Resolved author, or ``None`` for system messages without a user.
    text
        Raw message text.
    timestamp
        Slack ``ts`` string.
    thread_replies
        Replies in thread order, parent excluded.
    reactions
        Reactions on the message.

    """

    id: str
    author: Identity | None
    text: str
    timestamp: str
    thread_replies: tuple[Reply, ...] = ()
    reactions: tuple[Reaction, ...] = ()

    @property
    def posted_at(self) -> dt.datetime:
        """Return the aware UTC datetime of the message."""
        return parse_slack_ts(self.timestamp)


class ChannelMessages(msgspec.Struct, kw_only=True, frozen=True):
    """Messages of one channel in native API order."""

    channel: Channel
    messages: tuple[Message, ...] = ()


class CategoryMetadata(msgspec.Struct, kw_only=True, frozen=True):
    """Presentation hints for a category."""

    label: str
    emoji: str


CATEGORY_METADATA: typ.Final[dict[Category, CategoryMetadata]] = {
    Category.ACTION_ITEM: CategoryMetadata(label="Action items", emoji="✅"),
    Category.DECISION: CategoryMetadata(label="Decisions", emoji="🟢"),
    Category.ANNOUNCEMENT: CategoryMetadata(label="Announcements", emoji="📢"),
    Category.QUESTION: CategoryMetadata(label="Open questions", emoji="❓"),
    Category.FYI: CategoryMetadata(label="Worth remembering", emoji="📌"),
}


class ClassifiedItem(msgspec.Struct, kw_only=True, frozen=True):
    """Classification outcome for exactly one source message.

    Attributes
    ----------
    id
        Id of the source message.
    category
        Assigned category.
    summary
        One-line summary, at most 100 characters.
    priority
        Assigned priority.
    assignee
        Person the item is addressed to, when known.
    deadline
        Deadline mentioned in the message, when known.
    channel
        Channel the message was posted in.
    source_message
        The message that was classified.
    timestamp
        Slack ``ts`` of the source message.
    strategy
        Backend that produced the classification (``model`` or ``rules``).

    """

    id: str
    category: Category
    summary: str
    priority: Priority
    channel: Channel
    source_message: Message
    timestamp: str
    assignee: str | None = None
    deadline: str | None = None
    strategy: str = "rules"


class DigestStats(msgspec.Struct, kw_only=True, frozen=True):
    """Aggregate counts derived from ingestion output and classified items."""

    total_messages: int = 0
    total_channels: int = 0
    total_threads: int = 0
    category_counts: dict[Category, int] = msgspec.field(default_factory=dict)

    def count(self, category: Category) -> int:
        """Return the number of items in ``category``."""
        return self.category_counts.get(category, 0)

    @property
    def action_items(self) -> int:
        """Number of ACTION_ITEM items."""
        return self.count(Category.ACTION_ITEM)

    @property
    def decisions(self) -> int:
        """Number of DECISION items."""
        return self.count(Category.DECISION)

    @property
    def questions(self) -> int:
        """Number of QUESTION items."""
        return self.count(Category.QUESTION)

    @property
    def announcements(self) -> int:
        """Number of ANNOUNCEMENT items."""
        return self.count(Category.ANNOUNCEMENT)

    @property
    def fyi(self) -> int:
        """Number of FYI items."""
        return self.count(Category.FYI)


class DigestResult(msgspec.Struct, kw_only=True, frozen=True):
    """Ranked, categorized digest handed to renderers and exporters."""

    items: tuple[ClassifiedItem, ...] = ()
    stats: DigestStats = msgspec.field(default_factory=DigestStats)
    categories: dict[Category, CategoryMetadata] = msgspec.field(
        default_factory=lambda: dict(CATEGORY_METADATA)
    )

    @property
    def is_empty(self) -> bool:
        """Return True when the digest holds no items."""
        return not self.items

    def items_for(self, category: Category) -> tuple[ClassifiedItem, ...]:
        """Return items of ``category`` in ranked order."""
        return tuple(item for item in self.items if item.category == category)


def truncate_summary(text: str, limit: int = SUMMARY_MAX_LENGTH) -> str:
    """Truncate ``text`` to ``limit`` characters, ending with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[: limit - len(_ELLIPSIS)] + _ELLIPSIS


__all__ = [
    "CATEGORY_METADATA",
    "SUMMARY_MAX_LENGTH",
    "Category",
    "CategoryMetadata",
    "Channel",
    "ChannelMessages",
    "ClassifiedItem",
    "DigestResult",
    "DigestStats",
    "Identity",
    "Message",
    "Priority",
    "Reaction",
    "Reply",
    "truncate_summary",
]
