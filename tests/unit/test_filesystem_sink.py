"""Unit tests for FilesystemDigestSink."""

from __future__ import annotations

import asyncio
import typing as typ

import pytest

from slackdigest.reporting import DigestMetadata, DigestSink, FilesystemDigestSink

if typ.TYPE_CHECKING:
    from pathlib import Path


class TestFilesystemDigestSink:
    """Tests for the filesystem digest sink adapter."""

    @pytest.fixture
    def base_path(self, tmp_path: Path) -> Path:
        """Return a temporary, not yet existing, output directory."""
        return tmp_path / "output" / "digests"

    @pytest.fixture
    def sink(self, base_path: Path) -> FilesystemDigestSink:
        """Return a FilesystemDigestSink writing to the temp directory."""
        return FilesystemDigestSink(base_path)

    def _write(
        self,
        sink: FilesystemDigestSink,
        markdown: str = "# Slack digest\n",
        digest_date: str = "2024-07-08",
    ) -> Path:
        """Run the async write_digest synchronously."""
        return asyncio.run(
            sink.write_digest(
                markdown, metadata=DigestMetadata(digest_date=digest_date)
            )
        )

    def test_creates_missing_directory(
        self, sink: FilesystemDigestSink, base_path: Path
    ) -> None:
        """The output directory is created on first write."""
        self._write(sink)

        assert base_path.is_dir()

    def test_writes_dated_and_latest_copies(
        self, sink: FilesystemDigestSink, base_path: Path
    ) -> None:
        """Both summary-{date}.md and latest.md hold the document."""
        path = self._write(sink, "# Digest\n\nbody")

        assert path == base_path / "summary-2024-07-08.md"
        assert path.read_text(encoding="utf-8") == "# Digest\n\nbody"
        latest = base_path / "latest.md"
        assert latest.read_text(encoding="utf-8") == "# Digest\n\nbody"

    def test_latest_tracks_most_recent_write(
        self, sink: FilesystemDigestSink, base_path: Path
    ) -> None:
        """A later digest replaces latest.md and keeps earlier dated files."""
        self._write(sink, "first", "2024-07-07")
        self._write(sink, "second", "2024-07-08")

        assert (base_path / "summary-2024-07-07.md").read_text(encoding="utf-8") == (
            "first"
        )
        assert (base_path / "latest.md").read_text(encoding="utf-8") == "second"

    def test_same_day_overwrites(
        self, sink: FilesystemDigestSink, base_path: Path
    ) -> None:
        """A second run on the same date replaces the dated file."""
        self._write(sink, "morning")
        self._write(sink, "evening")

        assert (base_path / "summary-2024-07-08.md").read_text(encoding="utf-8") == (
            "evening"
        )

    def test_writes_unicode(self, sink: FilesystemDigestSink) -> None:
        """Emoji and accented text survive the round trip."""
        path = self._write(sink, "✅ Café 🔴")

        assert path.read_text(encoding="utf-8") == "✅ Café 🔴"

    def test_satisfies_protocol(self, sink: FilesystemDigestSink) -> None:
        """The adapter is a DigestSink."""
        assert isinstance(sink, DigestSink)
