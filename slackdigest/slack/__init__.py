"""Slack retrieval: web client, rate limiting, identities, and ingestion."""

from __future__ import annotations

from .client import (
    SlackChannelPayload,
    SlackMessagePayload,
    SlackPage,
    SlackReactionPayload,
    SlackUserPayload,
    SlackUserProfile,
    SlackWebClient,
    SlackWebConfig,
    SlackWorkspaceClient,
)
from .errors import SlackAPIError, SlackConfigError, SlackError, SlackResponseShapeError
from .fetch import ChannelFetcher, HistoryFetcher, normalize_channel_name
from .identity import IdentityCache
from .ingestion import IngestionOrchestrator
from .observability import ErrorCategory, IngestionEventLogger, categorize_error
from .ratelimit import RateLimiter

__all__ = [
    "ChannelFetcher",
    "ErrorCategory",
    "HistoryFetcher",
    "IdentityCache",
    "IngestionEventLogger",
    "IngestionOrchestrator",
    "RateLimiter",
    "SlackAPIError",
    "SlackChannelPayload",
    "SlackConfigError",
    "SlackError",
    "SlackMessagePayload",
    "SlackPage",
    "SlackReactionPayload",
    "SlackResponseShapeError",
    "SlackUserPayload",
    "SlackUserProfile",
    "SlackWebClient",
    "SlackWebConfig",
    "SlackWorkspaceClient",
    "categorize_error",
    "normalize_channel_name",
]
