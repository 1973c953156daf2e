"""Tests for fetcher module."""

from __future__ import annotations

import hashlib
import io
import tarfile
import urllib.error
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from git.exc import GitCommandError, GitCommandNotFound

from copm.errors import DownloadFailed
from copm.fetcher import CLONE_URL, TARBALL_URL, SourceFetcher
from copm.types import IntegrityScheme


def make_tarball(files: dict[str, str]) -> bytes:
    """Build a gzip tarball in memory from {member_name: content}."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def mock_response(body: bytes) -> MagicMock:
    """Create a urlopen context manager yielding body."""
    response = MagicMock()
    response.read.return_value = body
    response.__enter__.return_value = response
    return response


@pytest.fixture
def fetcher() -> SourceFetcher:
    """Create a fetcher with default endpoints."""
    return SourceFetcher.create_default()


class TestFetchTarball:
    """Tests for SourceFetcher.fetch_tarball."""

    def test_extracts_single_root(self, fetcher: SourceFetcher, tmp_path: Path) -> None:
        """Test the archive's one top-level directory becomes the root."""
        body = make_tarball({"blader-humanizer-abc123/SKILL.md": "skill"})

        with patch("copm.fetcher.urllib.request.urlopen", return_value=mock_response(body)):
            result = fetcher.fetch_tarball("blader", "humanizer", tmp_path)

        assert result.extracted_root == tmp_path / "blader-humanizer-abc123"
        assert (result.extracted_root / "SKILL.md").read_text() == "skill"
        assert result.integrity.scheme == IntegrityScheme.SHA256
        assert result.integrity.value == hashlib.sha256(body).hexdigest()

    def test_request_headers(self, fetcher: SourceFetcher, tmp_path: Path) -> None:
        """Test the request targets the archive endpoint with a user agent."""
        body = make_tarball({"root/a.md": ""})

        with patch(
            "copm.fetcher.urllib.request.urlopen", return_value=mock_response(body)
        ) as urlopen:
            fetcher.fetch_tarball("blader", "humanizer", tmp_path)

        request = urlopen.call_args.args[0]
        assert request.full_url == TARBALL_URL.format(owner="blader", repo="humanizer")
        assert request.get_header("User-agent").startswith("copm/")

    def test_empty_archive(self, fetcher: SourceFetcher, tmp_path: Path) -> None:
        """Test an archive with no entries fails."""
        body = make_tarball({})

        with patch("copm.fetcher.urllib.request.urlopen", return_value=mock_response(body)):
            with pytest.raises(DownloadFailed, match="Empty tarball"):
                fetcher.fetch_tarball("o", "r", tmp_path)

    def test_multiple_roots(self, fetcher: SourceFetcher, tmp_path: Path) -> None:
        """Test more than one top-level entry fails."""
        body = make_tarball({"one/a.md": "", "two/b.md": ""})

        with patch("copm.fetcher.urllib.request.urlopen", return_value=mock_response(body)):
            with pytest.raises(DownloadFailed, match="found 2 entries"):
                fetcher.fetch_tarball("o", "r", tmp_path)

    def test_http_error(self, fetcher: SourceFetcher, tmp_path: Path) -> None:
        """Test a non-success status maps to DownloadFailed."""
        error = urllib.error.HTTPError("https://x", 404, "Not Found", {}, None)

        with patch("copm.fetcher.urllib.request.urlopen", side_effect=error):
            with pytest.raises(DownloadFailed, match="404 Not Found"):
                fetcher.fetch_tarball("o", "r", tmp_path)

    def test_url_error(self, fetcher: SourceFetcher, tmp_path: Path) -> None:
        """Test transport errors map to DownloadFailed."""
        error = urllib.error.URLError("no route")

        with patch("copm.fetcher.urllib.request.urlopen", side_effect=error):
            with pytest.raises(DownloadFailed, match="no route"):
                fetcher.fetch_tarball("o", "r", tmp_path)


class TestFetchClone:
    """Tests for SourceFetcher.fetch_clone."""

    @patch("copm.fetcher.Repo")
    def test_shallow_clone(self, mock_repo: MagicMock, fetcher: SourceFetcher, tmp_path: Path) -> None:
        """Test a depth-1 clone with the commit as integrity."""
        mock_repo.clone_from.return_value.head.commit.hexsha = "deadbeef"

        result = fetcher.fetch_clone("blader", "humanizer", tmp_path)

        mock_repo.clone_from.assert_called_once_with(
            CLONE_URL.format(owner="blader", repo="humanizer"),
            tmp_path / "humanizer",
            depth=1,
        )
        assert result.extracted_root == tmp_path / "humanizer"
        assert str(result.integrity) == "git-deadbeef"

    @patch("copm.fetcher.Repo")
    def test_clone_failure(self, mock_repo: MagicMock, fetcher: SourceFetcher, tmp_path: Path) -> None:
        """Test git errors map to DownloadFailed."""
        mock_repo.clone_from.side_effect = GitCommandError("clone", 128)

        with pytest.raises(DownloadFailed, match="git clone failed"):
            fetcher.fetch_clone("o", "r", tmp_path)

    @patch("copm.fetcher.Repo")
    def test_git_not_installed(
        self, mock_repo: MagicMock, fetcher: SourceFetcher, tmp_path: Path
    ) -> None:
        """Test a missing git executable maps to DownloadFailed."""
        mock_repo.clone_from.side_effect = GitCommandNotFound("git", "not found")

        with pytest.raises(DownloadFailed, match="git clone failed"):
            fetcher.fetch_clone("o", "r", tmp_path)


class TestFetch:
    """Tests for the tarball-then-clone sequence."""

    def test_prefers_tarball(self, fetcher: SourceFetcher, tmp_path: Path) -> None:
        """Test a working tarball never triggers a clone."""
        body = make_tarball({"root/SKILL.md": ""})

        with (
            patch("copm.fetcher.urllib.request.urlopen", return_value=mock_response(body)),
            patch("copm.fetcher.Repo") as mock_repo,
        ):
            result = fetcher.fetch("o", "r", tmp_path)

        mock_repo.clone_from.assert_not_called()
        assert result.integrity.scheme == IntegrityScheme.SHA256

    def test_falls_back_to_clone(self, fetcher: SourceFetcher, tmp_path: Path) -> None:
        """Test any tarball failure falls back to cloning."""
        error = urllib.error.HTTPError("https://x", 403, "rate limited", {}, None)

        with (
            patch("copm.fetcher.urllib.request.urlopen", side_effect=error),
            patch("copm.fetcher.Repo") as mock_repo,
        ):
            mock_repo.clone_from.return_value.head.commit.hexsha = "cafe"
            result = fetcher.fetch("o", "r", tmp_path)

        assert str(result.integrity) == "git-cafe"

    def test_both_fail(self, fetcher: SourceFetcher, tmp_path: Path) -> None:
        """Test the clone's error surfaces when both transports fail."""
        with (
            patch(
                "copm.fetcher.urllib.request.urlopen",
                side_effect=urllib.error.URLError("offline"),
            ),
            patch("copm.fetcher.Repo") as mock_repo,
        ):
            mock_repo.clone_from.side_effect = GitCommandError("clone", 128)
            with pytest.raises(DownloadFailed, match="git clone failed"):
                fetcher.fetch("o", "r", tmp_path)
