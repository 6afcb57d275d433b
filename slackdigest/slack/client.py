"""Slack Web API client implementations used by the ingestion fetchers."""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import dataclasses
import os
import typing as typ

import httpx
import msgspec

from .errors import SlackAPIError, SlackConfigError, SlackResponseShapeError

_DEFAULT_ENDPOINT = "https://slack.com/api"
_DEFAULT_TIMEOUT_S = 20.0
_DEFAULT_PAGE_SIZE = 200
_DEFAULT_MAX_RETRIES = 3
_DEFAULT_RETRY_AFTER_S = 1.0
_MAX_PAGE_SIZE = 1000

_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_RATE_LIMITED = 429

_CHANNEL_TYPES = "public_channel,private_channel"

type SleepFn = cabc.Callable[[float], cabc.Awaitable[None]]


class SlackReactionPayload(msgspec.Struct, kw_only=True, frozen=True):
    """Reaction entry attached to a Slack message."""

    name: str
    count: int = 0


class SlackMessagePayload(msgspec.Struct, kw_only=True, frozen=True):
    """Message as returned by ``conversations.history`` and ``.replies``."""

    ts: str
    text: str = ""
    user: str | None = None
    bot_id: str | None = None
    subtype: str | None = None
    thread_ts: str | None = None
    reply_count: int = 0
    reactions: tuple[SlackReactionPayload, ...] = ()

    @property
    def is_substantive(self) -> bool:
        """Return True for human-authored messages without a system subtype."""
        return self.bot_id is None and self.subtype is None


class SlackChannelPayload(msgspec.Struct, kw_only=True, frozen=True):
    """Conversation entry returned by ``conversations.list``."""

    id: str
    name: str = ""
    is_member: bool = False


class SlackUserProfile(msgspec.Struct, kw_only=True, frozen=True):
    """Profile block of a ``users.info`` response."""

    display_name: str = ""
    real_name: str = ""


class SlackUserPayload(msgspec.Struct, kw_only=True, frozen=True):
    """User returned by ``users.info``."""

    id: str
    name: str = ""
    real_name: str = ""
    profile: SlackUserProfile = msgspec.field(default_factory=SlackUserProfile)


class _ResponseMetadata(msgspec.Struct, kw_only=True, frozen=True):
    next_cursor: str = ""


class _SlackEnvelope(msgspec.Struct, kw_only=True, frozen=True):
    ok: bool
    error: str | None = None
    response_metadata: _ResponseMetadata | None = None

    @property
    def next_cursor(self) -> str | None:
        if self.response_metadata is None:
            return None
        return self.response_metadata.next_cursor or None


class _ConversationsResponse(_SlackEnvelope, kw_only=True, frozen=True):
    channels: list[SlackChannelPayload] = msgspec.field(default_factory=list)


class _MessagesResponse(_SlackEnvelope, kw_only=True, frozen=True):
    messages: list[SlackMessagePayload] = msgspec.field(default_factory=list)


class _UserResponse(_SlackEnvelope, kw_only=True, frozen=True):
    user: SlackUserPayload | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class SlackPage[T]:
    """One page of a cursor-paginated Slack listing."""

    items: tuple[T, ...]
    next_cursor: str | None = None


class SlackWorkspaceClient(typ.Protocol):
    """Narrow interface over the Slack Web API used for ingestion.

    Implementations return one page per call; pagination, rate limiting, and
    filtering live in the fetchers so transports stay swappable.
    """

    async def list_conversations(
        self, *, cursor: str | None = None
    ) -> SlackPage[SlackChannelPayload]:
        """Return one page of public and private conversations."""
        ...

    async def conversation_history(
        self, channel_id: str, *, oldest: float, cursor: str | None = None
    ) -> SlackPage[SlackMessagePayload]:
        """Return one page of channel messages posted at or after ``oldest``."""
        ...

    async def conversation_replies(
        self, channel_id: str, *, ts: str, cursor: str | None = None
    ) -> SlackPage[SlackMessagePayload]:
        """Return one page of a thread, parent message included."""
        ...

    async def user_info(self, user_id: str) -> SlackUserPayload:
        """Return profile information for ``user_id``."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class SlackWebConfig:
    """Configuration for the Slack Web API client.

    Attributes
    ----------
    token
        Bot or user token with ``channels:read``, ``groups:read``,
        ``channels:history``, ``groups:history``, and ``users:read``.
    endpoint
        Base URL of the Web API.
    timeout_s
        Per-request timeout in seconds.
    page_size
        ``limit`` sent with paginated calls.
    max_retries
        Retries after HTTP 429 before giving up.
    default_retry_after_s
        Wait used when a 429 response carries no ``Retry-After`` header.

    """

    token: str
    endpoint: str = _DEFAULT_ENDPOINT
    timeout_s: float = _DEFAULT_TIMEOUT_S
    page_size: int = _DEFAULT_PAGE_SIZE
    max_retries: int = _DEFAULT_MAX_RETRIES
    default_retry_after_s: float = _DEFAULT_RETRY_AFTER_S
    user_agent: str = "slackdigest/0.1"

    @staticmethod
    def _parse_timeout_from_env() -> float:
        raw_timeout = os.environ.get("SLACKDIGEST_SLACK_TIMEOUT_S")
        if raw_timeout is None or not raw_timeout.strip():
            return _DEFAULT_TIMEOUT_S
        try:
            timeout_s = float(raw_timeout)
        except ValueError as exc:
            raise SlackConfigError.invalid_parameter(
                "timeout_s", raw_timeout, "Must be a positive number"
            ) from exc
        if timeout_s <= 0:
            raise SlackConfigError.invalid_parameter(
                "timeout_s", raw_timeout, "Must be a positive number"
            )
        return timeout_s

    @classmethod
    def from_env(cls) -> SlackWebConfig:
        """Build configuration from environment variables.

        Reads ``SLACKDIGEST_SLACK_TOKEN`` (required),
        ``SLACKDIGEST_SLACK_ENDPOINT`` and ``SLACKDIGEST_SLACK_TIMEOUT_S``.

        Raises
        ------
        SlackConfigError
            If the token is missing or the timeout is invalid.

        """
        token = os.environ.get("SLACKDIGEST_SLACK_TOKEN", "").strip()
        if not token:
            raise SlackConfigError.missing_token()
        endpoint = os.environ.get("SLACKDIGEST_SLACK_ENDPOINT", _DEFAULT_ENDPOINT)
        return cls(
            token=token,
            endpoint=endpoint.rstrip("/"),
            timeout_s=cls._parse_timeout_from_env(),
        )


def _get_retry_after(response: httpx.Response) -> float | None:
    """Extract a numeric Retry-After header value if present."""
    retry_after = response.headers.get("Retry-After")
    if retry_after and retry_after.isdigit():
        return float(retry_after)
    return None


class SlackWebClient:
    """httpx implementation of :class:`SlackWorkspaceClient`."""

    def __init__(
        self,
        config: SlackWebConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise SlackConfigError.empty_token()

        self._config = config
        self._sleep = sleep
        self._page_size = min(max(config.page_size, 1), _MAX_PAGE_SIZE)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.token}",
                "User-Agent": config.user_agent,
                "Accept": "application/json",
            },
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def list_conversations(
        self, *, cursor: str | None = None
    ) -> SlackPage[SlackChannelPayload]:
        """Return one page of non-archived public and private conversations."""
        params: dict[str, str | int] = {
            "types": _CHANNEL_TYPES,
            "exclude_archived": "true",
            "limit": self._page_size,
        }
        if cursor:
            params["cursor"] = cursor
        payload = await self._call(
            "conversations.list", params, response_type=_ConversationsResponse
        )
        return SlackPage(items=tuple(payload.channels), next_cursor=payload.next_cursor)

    async def conversation_history(
        self, channel_id: str, *, oldest: float, cursor: str | None = None
    ) -> SlackPage[SlackMessagePayload]:
        """Return one page of channel history newer than ``oldest``."""
        params: dict[str, str | int] = {
            "channel": channel_id,
            "oldest": f"{oldest:.6f}",
            "inclusive": "true",
            "limit": self._page_size,
        }
        if cursor:
            params["cursor"] = cursor
        payload = await self._call(
            "conversations.history", params, response_type=_MessagesResponse
        )
        return SlackPage(items=tuple(payload.messages), next_cursor=payload.next_cursor)

    async def conversation_replies(
        self, channel_id: str, *, ts: str, cursor: str | None = None
    ) -> SlackPage[SlackMessagePayload]:
        """Return one page of a thread rooted at ``ts``."""
        params: dict[str, str | int] = {
            "channel": channel_id,
            "ts": ts,
            "limit": self._page_size,
        }
        if cursor:
            params["cursor"] = cursor
        payload = await self._call(
            "conversations.replies", params, response_type=_MessagesResponse
        )
        return SlackPage(items=tuple(payload.messages), next_cursor=payload.next_cursor)

    async def user_info(self, user_id: str) -> SlackUserPayload:
        """Return the ``users.info`` record for ``user_id``."""
        payload = await self._call(
            "users.info", {"user": user_id}, response_type=_UserResponse
        )
        if payload.user is None:
            raise SlackResponseShapeError.missing("user")
        return payload.user

    async def _call[R: _SlackEnvelope](
        self,
        method: str,
        params: dict[str, str | int],
        *,
        response_type: type[R],
    ) -> R:
        """Invoke a Web API method and return the decoded, successful payload."""
        response = await self._get_with_retries(method, params)
        try:
            payload = msgspec.json.decode(response.content, type=response_type)
        except msgspec.DecodeError as exc:
            raise SlackResponseShapeError.invalid_json(method, response.text) from exc
        if not payload.ok:
            raise SlackAPIError.api_error(method, payload.error or "unknown_error")
        return payload

    async def _get_with_retries(
        self, method: str, params: dict[str, str | int]
    ) -> httpx.Response:
        """GET ``method``, waiting out 429 responses up to ``max_retries``."""
        url = f"{self._config.endpoint}/{method}"
        attempt = 0
        while True:
            response = await self._send(method, url, params)
            if response.status_code != _HTTP_RATE_LIMITED:
                break
            retry_after = _get_retry_after(response)
            if attempt >= self._config.max_retries:
                raise SlackAPIError.rate_limited(method, retry_after)
            attempt += 1
            await self._sleep(
                retry_after
                if retry_after is not None
                else self._config.default_retry_after_s
            )

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise SlackAPIError.http_error(method, response.status_code)
        return response

    async def _send(
        self, method: str, url: str, params: dict[str, str | int]
    ) -> httpx.Response:
        try:
            return await self._client.get(url, params=params)
        except httpx.TimeoutException as exc:
            raise SlackAPIError.timeout(method) from exc
        except httpx.RequestError as exc:
            raise SlackAPIError.network_error(method, str(exc)) from exc
