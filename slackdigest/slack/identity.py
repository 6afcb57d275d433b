"""Per-run cache mapping Slack user ids to display identities."""

from __future__ import annotations

import typing as typ

import httpx

from slackdigest.models import Identity

from .errors import SlackError
from .observability import IngestionEventLogger

if typ.TYPE_CHECKING:
    from .client import SlackUserPayload, SlackWorkspaceClient


def identity_from_payload(user: SlackUserPayload) -> Identity:
    """Build an :class:`Identity` from a ``users.info`` record."""
    display_name = user.profile.display_name or user.real_name or user.name
    return Identity(
        id=user.id,
        handle=user.name or user.id,
        display_name=display_name or user.id,
    )


class IdentityCache:
    """Resolve user ids once per run, falling back to the raw id on failure.

    Entries are never evicted and failed lookups are cached as fallbacks, so
    each distinct id costs at most one ``users.info`` call per run.
    """

    def __init__(
        self,
        client: SlackWorkspaceClient,
        *,
        event_logger: IngestionEventLogger | None = None,
    ) -> None:
        """Bind the cache to a workspace client."""
        self._client = client
        self._event_logger = event_logger or IngestionEventLogger()
        self._entries: dict[str, Identity] = {}

    def __len__(self) -> int:
        """Return the number of cached identities."""
        return len(self._entries)

    def __contains__(self, user_id: object) -> bool:
        """Return True when ``user_id`` has been resolved."""
        return user_id in self._entries

    async def resolve(self, user_id: str) -> Identity:
        """Return the identity for ``user_id``, looking it up on first use."""
        cached = self._entries.get(user_id)
        if cached is not None:
            return cached

        try:
            user = await self._client.user_info(user_id)
        except (SlackError, httpx.HTTPError) as exc:
            self._event_logger.log_identity_fallback(user_id=user_id, error=exc)
            identity = Identity.fallback(user_id)
        else:
            identity = identity_from_payload(user)

        # Another coroutine may have resolved the same id meanwhile.
        return self._entries.setdefault(user_id, identity)
