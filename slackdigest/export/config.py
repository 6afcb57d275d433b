"""Configuration for the Notion digest exporter."""

from __future__ import annotations

import dataclasses
import os

from slackdigest.export.errors import NotionConfigError

_DEFAULT_ENDPOINT = "https://api.notion.com/v1"
_DEFAULT_NOTION_VERSION = "2022-06-28"
_DEFAULT_TIMEOUT_S = 30.0


@dataclasses.dataclass(frozen=True, slots=True)
class NotionConfig:
    """Configuration for creating digest pages in a Notion database.

    Attributes
    ----------
    api_key
        Internal integration token shared with the database.
    database_id
        Database that receives one page per digest.
    endpoint
        Base URL of the Notion API.
    notion_version
        Value of the ``Notion-Version`` header.
    timeout_s
        Request timeout in seconds.
    date_property
        Name of a date property to fill with the digest date, if the
        database has one.

    """

    api_key: str
    database_id: str
    endpoint: str = _DEFAULT_ENDPOINT
    notion_version: str = _DEFAULT_NOTION_VERSION
    timeout_s: float = _DEFAULT_TIMEOUT_S
    date_property: str | None = None

    @staticmethod
    def is_configured() -> bool:
        """Return True when both the token and database id are set."""
        return bool(
            os.environ.get("SLACKDIGEST_NOTION_API_KEY", "").strip()
            and os.environ.get("SLACKDIGEST_NOTION_DATABASE_ID", "").strip()
        )

    @classmethod
    def from_env(cls) -> NotionConfig:
        """Build configuration from environment variables.

        Reads ``SLACKDIGEST_NOTION_API_KEY`` and
        ``SLACKDIGEST_NOTION_DATABASE_ID`` (both required) plus the optional
        ``SLACKDIGEST_NOTION_DATE_PROPERTY``.

        Raises
        ------
        NotionConfigError
            If the token or database id is missing.

        """
        api_key = os.environ.get("SLACKDIGEST_NOTION_API_KEY", "").strip()
        if not api_key:
            raise NotionConfigError.missing_api_key()
        database_id = os.environ.get("SLACKDIGEST_NOTION_DATABASE_ID", "").strip()
        if not database_id:
            raise NotionConfigError.missing_database_id()
        date_property = os.environ.get("SLACKDIGEST_NOTION_DATE_PROPERTY", "").strip()
        return cls(
            api_key=api_key,
            database_id=database_id,
            date_property=date_property or None,
        )
