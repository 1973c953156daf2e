"""Repository snapshot fetching: tarball first, shallow clone as fallback."""

from __future__ import annotations

import hashlib
import io
import logging
import ssl
import tarfile
import urllib.error
import urllib.request
from pathlib import Path

from git import Repo
from git.exc import GitError

from copm import __version__
from copm.errors import DownloadFailed
from copm.types import FetchResult, Integrity, IntegrityScheme

logger = logging.getLogger(__name__)

TARBALL_URL = "https://api.github.com/repos/{owner}/{repo}/tarball/HEAD"
CLONE_URL = "https://github.com/{owner}/{repo}.git"

# Seconds before the tarball request is abandoned
DEFAULT_TIMEOUT = 60


class SourceFetcher:
    """Fetches a repository snapshot into a working directory."""

    def __init__(
        self,
        tarball_url: str = TARBALL_URL,
        clone_url: str = CLONE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the fetcher.

        Args:
            tarball_url: Format string for the archive endpoint.
            clone_url: Format string for the clone endpoint.
            timeout: Tarball request timeout in seconds.

        Note:
            Prefer using factory method `create_default()` for construction.
        """
        self.tarball_url = tarball_url
        self.clone_url = clone_url
        self.timeout = timeout

    @classmethod
    def create_default(cls) -> SourceFetcher:
        """Create a fetcher pointed at GitHub.

        Returns:
            SourceFetcher with default endpoints.
        """
        return cls()

    def fetch(self, owner: str, repo: str, dest_dir: Path) -> FetchResult:
        """Fetch a repository, trying the tarball before a shallow clone.

        Args:
            owner: Repository owner.
            repo: Repository name.
            dest_dir: Existing empty working directory for this operation.

        Returns:
            FetchResult with the extracted root and its integrity fingerprint.

        Raises:
            DownloadFailed: If the clone fallback also fails.
        """
        try:
            return self.fetch_tarball(owner, repo, dest_dir)
        except Exception as e:
            logger.debug("Tarball fetch for %s/%s failed, falling back to clone: %s", owner, repo, e)
        return self.fetch_clone(owner, repo, dest_dir)

    def fetch_tarball(self, owner: str, repo: str, dest_dir: Path) -> FetchResult:
        """Download the default-branch archive and unpack it.

        The archive must unpack into exactly one top-level directory.

        Args:
            owner: Repository owner.
            repo: Repository name.
            dest_dir: Directory to unpack into.

        Returns:
            FetchResult with a sha256 fingerprint of the received bytes.

        Raises:
            DownloadFailed: On a non-success status or an unexpected archive layout.
        """
        url = self.tarball_url.format(owner=owner, repo=repo)
        data = self._download(url)
        integrity = Integrity(IntegrityScheme.SHA256, hashlib.sha256(data).hexdigest())

        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
            archive.extractall(dest_dir, filter="data")

        entries = list(dest_dir.iterdir())
        if not entries:
            raise DownloadFailed("Empty tarball")
        if len(entries) != 1 or not entries[0].is_dir():
            raise DownloadFailed(
                f"Expected one top-level directory in archive, found {len(entries)} entries"
            )

        logger.debug("Extracted %s to %s", url, entries[0])
        return FetchResult(extracted_root=entries[0], integrity=integrity)

    def fetch_clone(self, owner: str, repo: str, dest_dir: Path) -> FetchResult:
        """Shallow-clone the repository into dest_dir/repo.

        Args:
            owner: Repository owner.
            repo: Repository name.
            dest_dir: Parent directory for the clone.

        Returns:
            FetchResult with a git revision fingerprint.

        Raises:
            DownloadFailed: If the clone fails, including when git is not installed.
        """
        url = self.clone_url.format(owner=owner, repo=repo)
        clone_dir = dest_dir / repo
        try:
            cloned = Repo.clone_from(url, clone_dir, depth=1)
            rev = cloned.head.commit.hexsha
        except (GitError, ValueError) as e:
            raise DownloadFailed(f"git clone failed: {e}") from e

        logger.debug("Cloned %s at %s", url, rev)
        return FetchResult(
            extracted_root=clone_dir,
            integrity=Integrity(IntegrityScheme.GIT, rev),
        )

    def _download(self, url: str) -> bytes:
        """Perform the archive request.

        Args:
            url: Archive URL.

        Returns:
            Response body.

        Raises:
            DownloadFailed: On HTTP or transport errors.
        """
        request = urllib.request.Request(
            url,
            headers={
                "Accept": "application/vnd.github+json",
                "User-Agent": f"copm/{__version__}",
            },
        )
        try:
            with urllib.request.urlopen(
                request, timeout=self.timeout, context=ssl.create_default_context()
            ) as response:
                return response.read()
        except urllib.error.HTTPError as e:
            raise DownloadFailed(f"{e.code} {e.reason} for {url}") from e
        except urllib.error.URLError as e:
            raise DownloadFailed(f"{e.reason} for {url}") from e
