"""Errors raised while exporting digests to Notion."""

from __future__ import annotations

_CONTENT_PREVIEW_LIMIT = 100


class NotionExportError(Exception):
    """Raised when a digest page cannot be created.

    Attributes
    ----------
    status_code
        HTTP status code from the API response, if available.

    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise the error with message and optional status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, detail: str = "") -> NotionExportError:
        """Create error for HTTP error responses."""
        if len(detail) > _CONTENT_PREVIEW_LIMIT:
            detail = detail[:_CONTENT_PREVIEW_LIMIT] + "..."
        msg = f"Notion API HTTP error {status_code}"
        if detail:
            msg = f"{msg}: {detail}"
        return cls(msg, status_code=status_code)

    @classmethod
    def timeout(cls) -> NotionExportError:
        """Create error for request timeouts."""
        return cls("Notion API request timed out")

    @classmethod
    def network_error(cls, detail: str) -> NotionExportError:
        """Create error for network failures (DNS, connection, TLS, etc.)."""
        return cls(f"Notion API network error: {detail}")

    @classmethod
    def missing(cls, field: str) -> NotionExportError:
        """Create error for a missing response field."""
        return cls(f"Notion response missing expected field: {field}")


class NotionConfigError(Exception):
    """Raised when Notion export configuration is incomplete."""

    @classmethod
    def missing_api_key(cls) -> NotionConfigError:
        """Create error for a missing integration token."""
        return cls("SLACKDIGEST_NOTION_API_KEY environment variable is required")

    @classmethod
    def missing_database_id(cls) -> NotionConfigError:
        """Create error for a missing target database."""
        return cls("SLACKDIGEST_NOTION_DATABASE_ID environment variable is required")
