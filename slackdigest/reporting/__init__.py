"""Digest rendering and storage adapters."""

from __future__ import annotations

from slackdigest.reporting.filesystem_sink import FilesystemDigestSink
from slackdigest.reporting.markdown import EMPTY_STATE_MESSAGE, render_digest_markdown
from slackdigest.reporting.sink import DigestMetadata, DigestSink

__all__ = [
    "EMPTY_STATE_MESSAGE",
    "DigestMetadata",
    "DigestSink",
    "FilesystemDigestSink",
    "render_digest_markdown",
]
