"""Structures exchanged between the classifier and its strategies."""

from __future__ import annotations

import msgspec

from slackdigest.models import Category, Priority  # noqa: TC001


class ClassificationRequest(msgspec.Struct, kw_only=True, frozen=True):
    """Flattened message view sent to a classification strategy.

    Attributes
    ----------
    id
        Source message id; unique within one request batch.
    channel
        Channel name.
    user
        Author display name, ``"unknown"`` for messages without a user.
    text
        Message text.
    thread
        Thread replies rendered as ``"name: text"`` lines, if any.
    reactions
        Reactions rendered as ``"name (count)"`` separated by commas, if any.

    """

    id: str
    channel: str
    user: str
    text: str
    thread: str | None = None
    reactions: str | None = None


class Classification(msgspec.Struct, kw_only=True, frozen=True):
    """Strategy output for one request."""

    id: str
    category: Category
    summary: str
    priority: Priority
    assignee: str | None = None
    deadline: str | None = None
