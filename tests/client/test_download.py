"""Tests for FileDownloader."""

from __future__ import annotations

from pathlib import Path

import pytest

from ncbridge.client.download import FileDownloader
from ncbridge.client.webdav import NextcloudClient
from ncbridge.core.errors import HTTPStatusError, LocalIOError, NotFoundError


class TestFileDownloader:
    """Tests for atomic downloads."""

    def test_download_creates_parents(self, nc_client: NextcloudClient, dav, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        """Should write the file and create missing directories."""
        dav.add_file("docs/report.pdf", b"%PDF-1.7")
        target = tmp_path / "out" / "nested" / "report.pdf"

        written = FileDownloader(nc_client).download_file("docs/report.pdf", target)

        assert written == target
        assert target.read_bytes() == b"%PDF-1.7"
        assert not (target.parent / "report.pdf.tmp").exists()

    def test_download_replaces_existing(self, nc_client: NextcloudClient, dav, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        """Should overwrite an existing local file."""
        dav.add_file("a.txt", b"new")
        target = tmp_path / "a.txt"
        target.write_bytes(b"old content")

        nc_client.download_to_file("a.txt", target)

        assert target.read_bytes() == b"new"

    def test_missing_remote_leaves_nothing(self, nc_client: NextcloudClient, tmp_path: Path) -> None:
        """Should keep the NotFoundError and leave no temp file."""
        target = tmp_path / "missing.txt"

        with pytest.raises(NotFoundError):
            FileDownloader(nc_client).download_file("missing.txt", target)

        assert not target.exists()
        assert list(tmp_path.iterdir()) == []

    def test_server_error(self, nc_client: NextcloudClient, dav, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        """Should raise download_failed on a 5xx answer."""
        dav.add_file("a.txt", b"abc")
        dav.fail("GET", "/a.txt", 502)

        with pytest.raises(HTTPStatusError) as exc:
            FileDownloader(nc_client).download_file("a.txt", tmp_path / "a.txt")
        assert exc.value.code == "download_failed"

    def test_unwritable_target(self, nc_client: NextcloudClient, dav, tmp_path: Path) -> None:  # type: ignore[no-untyped-def]
        """Should raise write_failed when the destination cannot be created."""
        dav.add_file("a.txt", b"abc")
        blocker = tmp_path / "file"
        blocker.write_bytes(b"")

        with pytest.raises(LocalIOError) as exc:
            FileDownloader(nc_client).download_file("a.txt", blocker / "a.txt")
        assert exc.value.code == "write_failed"
