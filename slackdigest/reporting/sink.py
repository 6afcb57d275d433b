"""DigestSink protocol for writing rendered Markdown digests.

Adapters implement this protocol to persist digests to a backend. The
protocol is ``runtime_checkable`` to support ``isinstance`` checks for
dependency injection and testing scenarios.

Usage
-----
Type-check a concrete adapter:

>>> from slackdigest.reporting.sink import DigestSink
>>> from slackdigest.reporting.filesystem_sink import FilesystemDigestSink
>>> isinstance(FilesystemDigestSink(Path(".")), DigestSink)
True

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


@dc.dataclass(frozen=True, slots=True)
class DigestMetadata:
    """Identifying metadata for a rendered digest.

    Attributes
    ----------
    digest_date
        ISO date string (YYYY-MM-DD) used for the dated filename.
    hours_back
        Length of the retrieval window in hours.

    """

    digest_date: str
    hours_back: float = 24.0


@typ.runtime_checkable
class DigestSink(typ.Protocol):
    """Protocol for writing rendered Markdown digests to storage."""

    async def write_digest(
        self,
        markdown: str,
        *,
        metadata: DigestMetadata,
    ) -> Path:
        """Write a rendered digest and return the location of the dated copy.

        Parameters
        ----------
        markdown
            The rendered Markdown content.
        metadata
            Digest identification metadata.

        """
        ...
