"""Unit tests for the Notion digest exporter."""

from __future__ import annotations

import contextlib
import datetime as dt
import json
import typing as typ

import httpx
import pytest

from slackdigest.export import (
    NotionConfig,
    NotionConfigError,
    NotionExporter,
    NotionExportError,
    build_digest_blocks,
)
from slackdigest.export.notion import MAX_CHILD_BLOCKS
from slackdigest.models import (
    Category,
    Channel,
    ClassifiedItem,
    DigestResult,
    DigestStats,
    Message,
    Priority,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

DIGEST_DATE = dt.date(2024, 7, 8)
CHANNEL = Channel(id="C1", name="engineering")


def _item(
    ts: str,
    category: Category,
    priority: Priority = Priority.MEDIUM,
    *,
    assignee: str | None = None,
) -> ClassifiedItem:
    return ClassifiedItem(
        id=ts,
        category=category,
        summary=f"summary {ts}",
        priority=priority,
        assignee=assignee,
        channel=CHANNEL,
        source_message=Message(id=ts, author=None, text="t", timestamp=ts),
        timestamp=ts,
    )


@pytest.fixture
def result() -> DigestResult:
    """Return a digest with one high action item and one FYI."""
    return DigestResult(
        items=(
            _item("1.0", Category.ACTION_ITEM, Priority.HIGH, assignee="Bob"),
            _item("2.0", Category.FYI, Priority.LOW),
        ),
        stats=DigestStats(
            total_messages=2,
            total_channels=1,
            category_counts={Category.ACTION_ITEM: 1, Category.FYI: 1},
        ),
    )


def test_blocks_hold_overview_sections_and_dividers(result: DigestResult) -> None:
    """The page opens with a heading, stats callout, and divider."""
    blocks = build_digest_blocks(result, digest_date=DIGEST_DATE)

    types = [block["type"] for block in blocks]
    assert types == [
        "heading_2",
        "callout",
        "divider",
        "heading_3",
        "to_do",
        "divider",
        "heading_3",
        "bulleted_list_item",
        "divider",
    ]
    callout = blocks[1]["callout"]["rich_text"][0]["text"]["content"]
    assert callout == "2 messages | 1 channels | 1 action items | 0 decisions"


def test_high_priority_items_are_bold(result: DigestResult) -> None:
    """High-priority summaries are bold and carry channel and assignee."""
    blocks = build_digest_blocks(result, digest_date=DIGEST_DATE)

    todo = blocks[4]["to_do"]
    summary, meta = todo["rich_text"]
    assert todo["checked"] is False
    assert summary["text"]["content"] == "[high] summary 1.0"
    assert summary["annotations"]["bold"] is True
    assert "#engineering" in meta["text"]["content"]
    assert "@Bob" in meta["text"]["content"]


def test_blocks_are_capped() -> None:
    """Large digests are truncated to the API's child-block limit."""
    items = tuple(_item(f"{i}.0", Category.FYI) for i in range(150))

    blocks = build_digest_blocks(DigestResult(items=items), digest_date=DIGEST_DATE)

    assert len(blocks) == MAX_CHILD_BLOCKS


@contextlib.asynccontextmanager
async def create_exporter(
    handler: cabc.Callable[[httpx.Request], httpx.Response],
    *,
    date_property: str | None = None,
) -> cabc.AsyncIterator[NotionExporter]:
    """Create a NotionExporter over a mock transport, handling cleanup."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    exporter = NotionExporter(
        NotionConfig(api_key="secret", database_id="db-1", date_property=date_property),
        http_client=client,
    )
    try:
        yield exporter
    finally:
        await exporter.aclose()
        await client.aclose()


@pytest.mark.asyncio
async def test_push_digest_creates_page(result: DigestResult) -> None:
    """A page is created under the database and its URL returned."""
    seen: list[dict[str, typ.Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/pages"
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"id": "p1", "url": "https://notion.so/p1"})

    async with create_exporter(handler, date_property="Date") as exporter:
        url = await exporter.push_digest(result, digest_date=DIGEST_DATE)

    assert url == "https://notion.so/p1"
    payload = seen[0]
    assert payload["parent"] == {"database_id": "db-1"}
    title = payload["properties"]["title"]["title"][0]["text"]["content"]
    assert title == "Slack digest 2024-07-08"
    assert payload["properties"]["Date"] == {"date": {"start": "2024-07-08"}}
    assert payload["children"][0]["type"] == "heading_2"


@pytest.mark.asyncio
async def test_date_property_is_optional(result: DigestResult) -> None:
    """Without a configured date property only the title is sent."""
    seen: list[dict[str, typ.Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"url": "https://notion.so/p2"})

    async with create_exporter(handler) as exporter:
        await exporter.push_digest(result, digest_date=DIGEST_DATE)

    assert list(seen[0]["properties"]) == ["title"]


@pytest.mark.parametrize(
    ("response", "error_match"),
    [
        (httpx.Response(400, json={"message": "validation"}), "HTTP error 400"),
        (httpx.Response(200, json={"id": "p1"}), "url"),
        (httpx.Response(200, text="not json"), "url"),
    ],
)
@pytest.mark.asyncio
async def test_push_digest_errors(
    result: DigestResult, response: httpx.Response, error_match: str
) -> None:
    """Failed or malformed responses raise NotionExportError."""

    def handler(request: httpx.Request) -> httpx.Response:
        return response

    async with create_exporter(handler) as exporter:
        with pytest.raises(NotionExportError, match=error_match):
            await exporter.push_digest(result, digest_date=DIGEST_DATE)


class TestNotionConfig:
    """Tests for environment-driven Notion configuration."""

    def test_not_configured_by_default(self) -> None:
        """Without variables the exporter is not configured."""
        assert not NotionConfig.is_configured()

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Token, database, and date property are read from the environment."""
        monkeypatch.setenv("SLACKDIGEST_NOTION_API_KEY", "secret")
        monkeypatch.setenv("SLACKDIGEST_NOTION_DATABASE_ID", "db-1")
        monkeypatch.setenv("SLACKDIGEST_NOTION_DATE_PROPERTY", "Date")

        config = NotionConfig.from_env()

        assert NotionConfig.is_configured()
        assert config.database_id == "db-1"
        assert config.date_property == "Date"

    def test_from_env_requires_database(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A token without a database raises NotionConfigError."""
        monkeypatch.setenv("SLACKDIGEST_NOTION_API_KEY", "secret")

        with pytest.raises(NotionConfigError, match="DATABASE_ID"):
            NotionConfig.from_env()
