"""Optional export of digests to external workspaces."""

from __future__ import annotations

from slackdigest.export.config import NotionConfig
from slackdigest.export.errors import NotionConfigError, NotionExportError
from slackdigest.export.notion import NotionExporter, build_digest_blocks

__all__ = [
    "NotionConfig",
    "NotionConfigError",
    "NotionExportError",
    "NotionExporter",
    "build_digest_blocks",
]
