r"""Filesystem adapter for the DigestSink protocol.

Writes rendered Markdown digests with a predictable layout::

    {base_path}/summary-{date}.md
    {base_path}/latest.md

Usage
-----
Create a sink and write a digest:

>>> import asyncio
>>> from pathlib import Path
>>> from slackdigest.reporting.filesystem_sink import FilesystemDigestSink
>>> from slackdigest.reporting.sink import DigestMetadata
>>>
>>> sink = FilesystemDigestSink(Path("output"))
>>> meta = DigestMetadata(digest_date="2024-07-08")
>>> path = asyncio.run(sink.write_digest("# Digest\n", metadata=meta))

"""

from __future__ import annotations

import asyncio
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

    from slackdigest.reporting.sink import DigestMetadata


class FilesystemDigestSink:
    """Write digests to the local filesystem.

    Parameters
    ----------
    base_path
        Directory for digest files; created on first write.

    """

    def __init__(self, base_path: Path) -> None:
        """Initialise the sink with a base directory path."""
        self._base_path = base_path

    @property
    def base_path(self) -> Path:
        """Directory digests are written to."""
        return self._base_path

    async def write_digest(
        self,
        markdown: str,
        *,
        metadata: DigestMetadata,
    ) -> Path:
        """Write Markdown to a dated file and ``latest.md``.

        Returns
        -------
        Path
            Path of the dated ``summary-{date}.md`` file.

        """
        await asyncio.to_thread(self._base_path.mkdir, parents=True, exist_ok=True)

        dated_path = self._base_path / f"summary-{metadata.digest_date}.md"
        latest_path = self._base_path / "latest.md"

        await asyncio.to_thread(dated_path.write_text, markdown, "utf-8")
        await asyncio.to_thread(latest_path.write_text, markdown, "utf-8")
        return dated_path
