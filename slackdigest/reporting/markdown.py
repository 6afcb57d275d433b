"""Markdown renderer for Slack digests.

Transforms a :class:`~slackdigest.models.DigestResult` into a Markdown
document grouped by category in precedence order. The renderer only reads
the result, so any producer of that shape can be rendered.

Usage
-----
Render a digest as Markdown:

>>> from slackdigest.reporting.markdown import render_digest_markdown
>>> md = render_digest_markdown(result, generated_at=now, hours_back=24)

"""

from __future__ import annotations

import typing as typ

from slackdigest.classify.ranking import CATEGORY_ORDER
from slackdigest.models import CATEGORY_METADATA, Priority, truncate_summary

if typ.TYPE_CHECKING:
    import datetime as dt

    from slackdigest.models import Category, ClassifiedItem, DigestResult, Reply

EMPTY_STATE_MESSAGE = "No notable items found in this period."

_PRIORITY_BADGES: dict[Priority, str] = {
    Priority.HIGH: "🔴",
    Priority.MEDIUM: "🟡",
    Priority.LOW: "⚪",
}


def _format_date(value: dt.datetime) -> str:
    """Format a datetime as an ISO date string (YYYY-MM-DD)."""
    return value.strftime("%Y-%m-%d")


def _format_generated_at(value: dt.datetime) -> str:
    """Format a datetime as a human-readable UTC timestamp."""
    return value.strftime("%Y-%m-%d %H:%M UTC")


def _plural(count: int, singular: str, plural: str | None = None) -> str:
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {word}"


def _render_title(lines: list[str], generated_at: dt.datetime) -> None:
    """Append the level-1 heading with the digest date."""
    lines.append(f"# Slack digest {_format_date(generated_at)}")
    lines.append("")


def _render_stats(lines: list[str], result: DigestResult, hours_back: float) -> None:
    """Append the bold stats line and per-category counts."""
    stats = result.stats
    lines.append(
        f"**{_plural(stats.total_messages, 'message')}** in "
        f"{_plural(stats.total_channels, 'channel')} "
        f"({_plural(stats.total_threads, 'thread')}) "
        f"over the last {hours_back:g} hours"
    )
    lines.append("")
    counts = [
        f"{result.categories[category].emoji} {stats.count(category)}"
        for category in CATEGORY_ORDER
        if category in result.categories
    ]
    lines.append(" | ".join(counts))
    lines.append("")


def _format_time(value: dt.datetime) -> str:
    """Format a datetime as a UTC clock time (HH:MM)."""
    return value.strftime("%H:%M")


def _format_first_reply(replies: tuple[Reply, ...]) -> str:
    """Format the first thread reply with a count of the remaining ones."""
    first = replies[0]
    name = first.author.display_name if first.author is not None else "unknown"
    line = f"  - ↳ {name}: {truncate_summary(first.text)}"
    if len(replies) > 1:
        line += f" (+{_plural(len(replies) - 1, 'more reply', 'more replies')})"
    return line


def _format_item(item: ClassifiedItem) -> list[str]:
    """Format one classified item as a bullet and its first reply."""
    message = item.source_message
    parts = [
        f"{_PRIORITY_BADGES[item.priority]} {item.summary}",
        f"#{item.channel.name}",
        _format_time(message.posted_at),
    ]
    if message.author is not None:
        parts.append(f"by {message.author.display_name}")
    if item.assignee:
        parts.append(f"assignee: {item.assignee}")
    if item.deadline:
        parts.append(f"deadline: {item.deadline}")
    replies = len(message.thread_replies)
    if replies:
        parts.append(_plural(replies, "reply", "replies"))
    lines = ["- " + " · ".join(parts)]
    if message.thread_replies:
        lines.append(_format_first_reply(message.thread_replies))
    return lines


def _render_category_section(
    lines: list[str],
    result: DigestResult,
    category: Category,
) -> None:
    """Append a category section if it holds any items."""
    items = result.items_for(category)
    if not items:
        return
    metadata = result.categories.get(category, CATEGORY_METADATA[category])
    lines.append(f"## {metadata.emoji} {metadata.label} ({len(items)})")
    lines.append("")
    for item in items:
        lines.extend(_format_item(item))
    lines.append("")


def _render_footer(
    lines: list[str], generated_at: dt.datetime, hours_back: float
) -> None:
    """Append the horizontal rule and metadata footer."""
    lines.append("---")
    lines.append("")
    lines.append(
        f"*Generated at {_format_generated_at(generated_at)}"
        f" | Window: last {hours_back:g} hours*"
    )
    lines.append("")


def render_digest_markdown(
    result: DigestResult,
    *,
    generated_at: dt.datetime,
    hours_back: float,
) -> str:
    """Render a digest as a structured Markdown document.

    Parameters
    ----------
    result
        Ranked digest with items, stats, and category metadata.
    generated_at
        Timestamp shown in the title and footer.
    hours_back
        Length of the retrieval window in hours.

    Returns
    -------
    str
        A complete Markdown document. Digests without items contain
        :data:`EMPTY_STATE_MESSAGE` instead of category sections.

    """
    lines: list[str] = []
    _render_title(lines, generated_at)
    _render_stats(lines, result, hours_back)

    if result.is_empty:
        lines.append(f"_{EMPTY_STATE_MESSAGE}_")
        lines.append("")
    else:
        for category in CATEGORY_ORDER:
            _render_category_section(lines, result, category)

    _render_footer(lines, generated_at, hours_back)
    return "\n".join(lines)
