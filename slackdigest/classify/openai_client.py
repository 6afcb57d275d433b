"""OpenAI-compatible implementation of the ClassificationStrategy protocol."""

from __future__ import annotations

import json
import typing as typ

import httpx
import msgspec

from slackdigest.classify.errors import (
    ClassifierAPIError,
    ClassifierConfigError,
    ClassifierResponseShapeError,
)
from slackdigest.classify.models import Classification
from slackdigest.classify.prompts import SYSTEM_PROMPT, build_user_prompt
from slackdigest.models import Category, Priority, truncate_summary

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from slackdigest.classify.config import OpenAIClassifierConfig
    from slackdigest.classify.models import ClassificationRequest

_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_RATE_LIMITED = 429


def _get_retry_after(response: httpx.Response) -> int | None:
    """Extract Retry-After header value if present and numeric."""
    retry_after = response.headers.get("Retry-After")
    if retry_after and retry_after.isdigit():
        return int(retry_after)
    return None


def _get_nested(data: dict[str, object], *keys: str) -> object:
    """Traverse nested dict path, returning None for missing keys."""
    current: object = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current_dict = typ.cast("dict[str, object]", current)
        current = current_dict.get(key)
    return current


class LLMClassification(msgspec.Struct, kw_only=True):
    """One entry of the JSON array returned by the model.

    Category and priority stay strings here so unknown values can be mapped
    instead of rejected.
    """

    id: str
    category: str
    summary: str = ""
    priority: str = "low"
    assignee: str | None = None
    deadline: str | None = None


def _parse_category(value: str) -> Category:
    """Parse a category string, mapping unknown values to FYI."""
    normalised = value.strip().upper().replace("-", "_").replace(" ", "_")
    try:
        return Category(normalised)
    except ValueError:
        return Category.FYI


def _parse_priority(value: str) -> Priority:
    """Parse a priority string, mapping unknown values to low."""
    try:
        return Priority(value.strip().lower())
    except ValueError:
        return Priority.LOW


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip()


def extract_json_array(content: str) -> str:
    """Return the span from the first ``[`` to the last ``]`` of ``content``.

    Raises
    ------
    ClassifierResponseShapeError
        If the content holds no bracketed span.

    """
    start = content.find("[")
    end = content.rfind("]")
    if start == -1 or end < start:
        raise ClassifierResponseShapeError.no_array(content)
    return content[start : end + 1]


class OpenAIClassificationModel:
    """OpenAI-compatible implementation of ClassificationStrategy.

    One chat completions request is issued per chunk. The answer must contain
    a JSON array of classifications; prose or code fences around the array
    are ignored.

    Parameters
    ----------
    config
        Configuration for the chat completions client.
    http_client
        Optional httpx.AsyncClient for testing. If not provided,
        the instance creates and owns its own client.

    Examples
    --------
    >>> import asyncio
    >>> from slackdigest.classify import OpenAIClassificationModel
    >>> from slackdigest.classify import OpenAIClassifierConfig
    >>> model = OpenAIClassificationModel(OpenAIClassifierConfig(api_key="sk-..."))
    >>> # classifications = asyncio.run(model.classify_batch(requests))
    >>> asyncio.run(model.aclose())

    """

    name = "model"

    def __init__(
        self,
        config: OpenAIClassifierConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with configuration."""
        if not config.api_key.strip():
            raise ClassifierConfigError.empty_api_key()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.api_key}",
                "Content-Type": "application/json",
            },
        )

    @property
    def config(self) -> OpenAIClassifierConfig:
        """Read-only access to the client configuration."""
        return self._config

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def classify_batch(
        self,
        requests: cabc.Sequence[ClassificationRequest],
    ) -> list[Classification]:
        """Classify one chunk with a single completion request.

        Raises
        ------
        ClassifierAPIError
            If the API returns an error response or times out.
        ClassifierResponseShapeError
            If the answer holds no usable, non-empty JSON array.

        """
        if not requests:
            return []
        content = await self._call_chat_completion(build_user_prompt(requests))
        parsed = self._parse_classifications(content)
        return [self._build_classification(entry) for entry in parsed]

    async def _call_chat_completion(self, user_prompt: str) -> str:
        """Call the chat completions endpoint and return assistant content."""
        payload = self._build_payload(user_prompt)
        response = await self._send_request(payload)
        self._check_response_errors(response)
        return self._parse_json_response(response)

    def _build_payload(self, user_prompt: str) -> dict[str, object]:
        # No response_format: JSON mode forbids a top-level array.
        return {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
        }

    async def _send_request(self, payload: dict[str, object]) -> httpx.Response:
        """Perform HTTP POST request to the chat completions endpoint.

        Raises
        ------
        ClassifierAPIError
            If a timeout or network error occurs.

        """
        try:
            return await self._client.post(self._config.endpoint, json=payload)
        except httpx.TimeoutException as exc:
            raise ClassifierAPIError.timeout() from exc
        except httpx.RequestError as exc:
            raise ClassifierAPIError.network_error(str(exc)) from exc

    def _check_response_errors(self, response: httpx.Response) -> None:
        if response.status_code == _HTTP_RATE_LIMITED:
            raise ClassifierAPIError.rate_limited(_get_retry_after(response))

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise ClassifierAPIError.http_error(response.status_code)

    def _parse_json_response(self, response: httpx.Response) -> str:
        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            raise ClassifierResponseShapeError.invalid_json(response.text) from exc
        if not isinstance(data, dict):
            raise ClassifierResponseShapeError.missing("choices")
        return self._extract_content(typ.cast("dict[str, object]", data))

    def _extract_content(self, data: dict[str, object]) -> str:
        """Extract assistant message content from API response.

        Raises
        ------
        ClassifierResponseShapeError
            If the response is missing expected fields.

        """
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ClassifierResponseShapeError.missing("choices")

        first_choice = choices[0]
        if not isinstance(first_choice, dict):
            raise ClassifierResponseShapeError.missing("choices[0]")

        first_choice_dict = typ.cast("dict[str, object]", first_choice)
        content = _get_nested(first_choice_dict, "message", "content")
        if not isinstance(content, str):
            raise ClassifierResponseShapeError.missing("choices[0].message.content")

        return content

    def _parse_classifications(self, content: str) -> list[LLMClassification]:
        """Decode the JSON array embedded in ``content``.

        Raises
        ------
        ClassifierResponseShapeError
            If no array is present, it fails to decode, or it is empty.

        """
        array = extract_json_array(content)
        try:
            parsed = msgspec.json.decode(array, type=list[LLMClassification])
        except msgspec.DecodeError as exc:
            raise ClassifierResponseShapeError.invalid_json(array) from exc
        if not parsed:
            raise ClassifierResponseShapeError.empty()
        return parsed

    def _build_classification(self, entry: LLMClassification) -> Classification:
        return Classification(
            id=entry.id,
            category=_parse_category(entry.category),
            summary=truncate_summary(entry.summary.strip()),
            priority=_parse_priority(entry.priority),
            assignee=_blank_to_none(entry.assignee),
            deadline=_blank_to_none(entry.deadline),
        )
