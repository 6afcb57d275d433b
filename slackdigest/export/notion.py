"""Export a digest as a page in a Notion database.

The page holds a heading, a stats callout, a divider, and one section per
non-empty category. Action items become to-do blocks; every other item is a
bullet. High-priority summaries are bold.
"""

from __future__ import annotations

import json
import typing as typ

import httpx

from slackdigest.classify.ranking import CATEGORY_ORDER
from slackdigest.export.errors import NotionExportError
from slackdigest.models import CATEGORY_METADATA, Category, Priority

if typ.TYPE_CHECKING:
    import datetime as dt

    from slackdigest.export.config import NotionConfig
    from slackdigest.models import ClassifiedItem, DigestResult

type Block = dict[str, typ.Any]

_HTTP_ERROR_STATUS_THRESHOLD = 400
# Notion rejects page creation with more than 100 child blocks.
MAX_CHILD_BLOCKS = 100


def _text(content: str, **annotations: object) -> dict[str, typ.Any]:
    rich: dict[str, typ.Any] = {"type": "text", "text": {"content": content}}
    if annotations:
        rich["annotations"] = annotations
    return rich


def _block(block_type: str, body: dict[str, typ.Any]) -> Block:
    return {"object": "block", "type": block_type, block_type: body}


def _item_rich_text(item: ClassifiedItem) -> list[dict[str, typ.Any]]:
    parts = [
        _text(
            f"[{item.priority.value}] {item.summary}",
            bold=item.priority is Priority.HIGH,
        )
    ]
    meta = [f"#{item.channel.name}"]
    if item.assignee:
        meta.append(f"@{item.assignee}")
    if item.deadline:
        meta.append(f"📅 {item.deadline}")
    parts.append(_text(f"  ({'  '.join(meta)})", color="gray"))
    return parts


def _item_block(item: ClassifiedItem) -> Block:
    rich_text = _item_rich_text(item)
    if item.category is Category.ACTION_ITEM:
        return _block("to_do", {"checked": False, "rich_text": rich_text})
    return _block("bulleted_list_item", {"rich_text": rich_text})


def build_digest_blocks(result: DigestResult, *, digest_date: dt.date) -> list[Block]:
    """Build the child blocks of a digest page, capped at the API limit."""
    stats = result.stats
    blocks: list[Block] = [
        _block(
            "heading_2",
            {"rich_text": [_text(f"Overview {digest_date.isoformat()}")]},
        ),
        _block(
            "callout",
            {
                "icon": {"type": "emoji", "emoji": "📊"},
                "rich_text": [
                    _text(
                        f"{stats.total_messages} messages | "
                        f"{stats.total_channels} channels | "
                        f"{stats.action_items} action items | "
                        f"{stats.decisions} decisions"
                    )
                ],
            },
        ),
        _block("divider", {}),
    ]

    for category in CATEGORY_ORDER:
        items = result.items_for(category)
        if not items:
            continue
        metadata = result.categories.get(category, CATEGORY_METADATA[category])
        blocks.append(
            _block(
                "heading_3",
                {"rich_text": [_text(f"{metadata.emoji} {metadata.label}")]},
            )
        )
        blocks.extend(_item_block(item) for item in items)
        blocks.append(_block("divider", {}))

    return blocks[:MAX_CHILD_BLOCKS]


class NotionExporter:
    """Create digest pages through the Notion REST API.

    Parameters
    ----------
    config
        Notion token, database, and transport settings.
    http_client
        Optional httpx.AsyncClient for testing. If not provided,
        the instance creates and owns its own client.

    """

    def __init__(
        self,
        config: NotionConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the exporter with configuration."""
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Notion-Version": config.notion_version,
                "Content-Type": "application/json",
            },
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def push_digest(self, result: DigestResult, *, digest_date: dt.date) -> str:
        """Create one page for ``result`` and return its URL.

        Raises
        ------
        NotionExportError
            If the request fails or the response carries no page URL.

        """
        payload = self._build_payload(result, digest_date)
        response = await self._send_request(payload)
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise NotionExportError.http_error(response.status_code, response.text)
        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            raise NotionExportError.missing("url") from exc
        url = data.get("url") if isinstance(data, dict) else None
        if not isinstance(url, str):
            raise NotionExportError.missing("url")
        return url

    def _build_payload(
        self, result: DigestResult, digest_date: dt.date
    ) -> dict[str, object]:
        properties: dict[str, object] = {
            "title": {"title": [_text(f"Slack digest {digest_date.isoformat()}")]},
        }
        if self._config.date_property:
            properties[self._config.date_property] = {
                "date": {"start": digest_date.isoformat()}
            }
        return {
            "parent": {"database_id": self._config.database_id},
            "properties": properties,
            "children": build_digest_blocks(result, digest_date=digest_date),
        }

    async def _send_request(self, payload: dict[str, object]) -> httpx.Response:
        try:
            return await self._client.post(
                f"{self._config.endpoint}/pages", json=payload
            )
        except httpx.TimeoutException as exc:
            raise NotionExportError.timeout() from exc
        except httpx.RequestError as exc:
            raise NotionExportError.network_error(str(exc)) from exc
