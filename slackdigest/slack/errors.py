"""Slack Web API errors."""

from __future__ import annotations

_THREAD_NOT_FOUND = "thread_not_found"
_CONTENT_PREVIEW_LIMIT = 100


class SlackError(Exception):
    """Base exception for Slack ingestion errors."""


class SlackAPIError(SlackError):
    """Raised when Slack returns an error response.

    Attributes
    ----------
    error_code
        Slack ``error`` field from an ``ok: false`` payload, if any.
    status_code
        HTTP status code of the response, if any.

    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialise with a message, Slack error code, and HTTP status."""
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_thread_not_found(self) -> bool:
        """Return True when the error reports a deleted or missing thread."""
        return self.error_code == _THREAD_NOT_FOUND

    @classmethod
    def http_error(cls, method: str, status_code: int) -> SlackAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(f"Slack {method} HTTP {status_code}", status_code=status_code)

    @classmethod
    def api_error(cls, method: str, error_code: str) -> SlackAPIError:
        """Return an error for ``ok: false`` payloads."""
        return cls(f"Slack {method} error: {error_code}", error_code=error_code)

    @classmethod
    def rate_limited(cls, method: str, retry_after: float | None) -> SlackAPIError:
        """Return an error once rate-limit retries are exhausted."""
        msg = f"Slack {method} rate limited"
        if retry_after is not None:
            msg = f"{msg}, retry after {retry_after:g}s"
        return cls(msg, error_code="ratelimited", status_code=429)

    @classmethod
    def timeout(cls, method: str) -> SlackAPIError:
        """Return an error for request timeouts."""
        return cls(f"Slack {method} request timed out")

    @classmethod
    def network_error(cls, method: str, detail: str) -> SlackAPIError:
        """Return an error for DNS, connection, and TLS failures."""
        return cls(f"Slack {method} network error: {detail}")


class SlackResponseShapeError(SlackError):
    """Raised when Slack responses are missing expected fields."""

    @classmethod
    def missing(cls, field: str) -> SlackResponseShapeError:
        """Return an error for a missing response field."""
        return cls(f"Slack response missing expected field: {field}")

    @classmethod
    def invalid_json(cls, method: str, content: str) -> SlackResponseShapeError:
        """Return an error for bodies that fail to decode."""
        if len(content) > _CONTENT_PREVIEW_LIMIT:
            content = content[:_CONTENT_PREVIEW_LIMIT] + "..."
        return cls(f"Slack {method} returned an undecodable body: {content}")


class SlackConfigError(SlackError):
    """Raised when Slack client configuration is invalid."""

    @classmethod
    def missing_token(cls) -> SlackConfigError:
        """Return an error when no Slack token is configured."""
        return cls("SLACKDIGEST_SLACK_TOKEN is required to read from Slack")

    @classmethod
    def empty_token(cls) -> SlackConfigError:
        """Return an error when the provided token is empty."""
        return cls("Slack token must be non-empty")

    @classmethod
    def invalid_parameter(
        cls, parameter_name: str, value: str, constraint: str
    ) -> SlackConfigError:
        """Return an error for an invalid configuration value."""
        return cls(f"Invalid {parameter_name} '{value}'. {constraint}")
