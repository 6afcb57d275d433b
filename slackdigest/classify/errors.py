"""Custom exceptions for message classification."""

from __future__ import annotations

import typing as typ

from slackdigest.classify.constants import MAX_TEMPERATURE, MIN_TEMPERATURE

if typ.TYPE_CHECKING:
    import collections.abc as cabc

# Content preview length for error messages
_CONTENT_PREVIEW_LIMIT = 100
_MISSING_IDS_PREVIEW = 5


def _preview(content: str) -> str:
    if len(content) > _CONTENT_PREVIEW_LIMIT:
        return content[:_CONTENT_PREVIEW_LIMIT] + "..."
    return content


class ClassificationError(Exception):
    """Base exception for classification failures.

    Any subclass raised by a model-backed strategy causes the affected chunk
    to be re-classified with the rule-based strategy.
    """


class ClassifierAPIError(ClassificationError):
    """Raised when the chat completions endpoint returns an error response.

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
    def http_error(cls, status_code: int) -> ClassifierAPIError:
        """Create error for HTTP error responses."""
        msg = f"Classifier API HTTP error {status_code}"
        return cls(msg, status_code=status_code)

    @classmethod
    def rate_limited(cls, retry_after: int | None = None) -> ClassifierAPIError:
        """Create error for rate limit (429) responses.

        Parameters
        ----------
        retry_after
            Seconds to wait before retrying, from Retry-After header.

        Returns
        -------
        ClassifierAPIError
            Error indicating rate limiting.

        """
        msg = "Classifier API rate limited"
        if retry_after is not None:
            msg = f"{msg}, retry after {retry_after}s"
        return cls(msg, status_code=429)

    @classmethod
    def timeout(cls) -> ClassifierAPIError:
        """Create error for request timeouts."""
        return cls("Classifier API request timed out")

    @classmethod
    def network_error(cls, detail: str) -> ClassifierAPIError:
        """Create error for network failures (DNS, connection, TLS, etc.)."""
        return cls(f"Classifier API network error: {detail}")


class ClassifierResponseShapeError(ClassificationError):
    """Raised when a model answer cannot be turned into classifications."""

    @classmethod
    def missing(cls, field: str) -> ClassifierResponseShapeError:
        """Create error for a missing response field."""
        return cls(f"Classifier response missing expected field: {field}")

    @classmethod
    def invalid_json(cls, content: str) -> ClassifierResponseShapeError:
        """Create error for content that fails to decode.

        Parameters
        ----------
        content
            The content that failed to parse as JSON.

        Returns
        -------
        ClassifierResponseShapeError
            Error with truncated content preview.

        """
        return cls(f"Failed to parse JSON from response: {_preview(content)}")

    @classmethod
    def no_array(cls, content: str) -> ClassifierResponseShapeError:
        """Create error for content without a JSON array."""
        return cls(f"No JSON array found in response: {_preview(content)}")

    @classmethod
    def empty(cls) -> ClassifierResponseShapeError:
        """Create error for an empty classification array."""
        return cls("Classifier returned an empty array")

    @classmethod
    def incomplete(
        cls, missing_ids: cabc.Sequence[str]
    ) -> ClassifierResponseShapeError:
        """Create error for answers that skip some requested ids."""
        shown = ", ".join(missing_ids[:_MISSING_IDS_PREVIEW])
        if len(missing_ids) > _MISSING_IDS_PREVIEW:
            shown = f"{shown}, ..."
        return cls(
            f"Classifier answer is missing {len(missing_ids)} message id(s): {shown}"
        )


class ClassifierConfigError(ClassificationError):
    """Raised when classifier configuration is invalid."""

    @classmethod
    def missing_api_key(cls) -> ClassifierConfigError:
        """Create error for missing API key environment variable."""
        return cls("SLACKDIGEST_OPENAI_API_KEY environment variable is required")

    @classmethod
    def empty_api_key(cls) -> ClassifierConfigError:
        """Create error for empty API key."""
        return cls("Classifier API key must be non-empty")

    @classmethod
    def invalid_parameter(
        cls, parameter_name: str, value: str, constraint: str
    ) -> ClassifierConfigError:
        """Create error for an invalid configuration parameter value.

        Parameters
        ----------
        parameter_name
            The name of the parameter that failed validation.
        value
            The invalid value that was provided.
        constraint
            A description of the valid value requirements.

        Returns
        -------
        ClassifierConfigError
            Error with formatted message describing the invalid parameter.

        """
        return cls(f"Invalid {parameter_name} '{value}'. {constraint}")

    @classmethod
    def invalid_temperature(cls, value: str) -> ClassifierConfigError:
        """Create error for invalid temperature value."""
        return cls.invalid_parameter(
            "temperature",
            value,
            f"Must be a float between {MIN_TEMPERATURE} and {MAX_TEMPERATURE}",
        )

    @classmethod
    def invalid_max_tokens(cls, value: str) -> ClassifierConfigError:
        """Create error for invalid max_tokens value."""
        return cls.invalid_parameter("max_tokens", value, "Must be a positive integer")
