"""Protocol definitions for core abstractions.

This module defines abstract interfaces (Protocols) for the core services.
Designing to interfaces enables:
- Loose coupling between components
- Easy substitution of test doubles
- Clear contracts for implementations

All concrete implementations satisfy these protocols structurally (duck typing).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from copm.types import FetchResult, PackageManifest

if TYPE_CHECKING:
    from copm.registry import LockFile, ProjectConfig


@runtime_checkable
class PackageFetcher(Protocol):
    """Protocol for retrieving repository snapshots."""

    def fetch(self, owner: str, repo: str, dest_dir: Path) -> FetchResult:
        """Fetch a repository into dest_dir.

        Args:
            owner: Repository owner.
            repo: Repository name.
            dest_dir: Working directory owned by the current operation.

        Returns:
            FetchResult with the extracted root and integrity fingerprint.
        """
        ...


@runtime_checkable
class PackageClassifier(Protocol):
    """Protocol for turning a fetched tree into a manifest."""

    def detect(self, root: Path, subpath: str | None, source: str) -> PackageManifest:
        """Detect the single installable target.

        Args:
            root: Extracted package root.
            subpath: Optional directory or file within root.
            source: Original reference, for messages.

        Returns:
            PackageManifest with exactly one target.
        """
        ...


@runtime_checkable
class ProjectRegistry(Protocol):
    """Protocol for project config and ledger persistence."""

    project_root: Path

    def config_exists(self) -> bool:
        """Check whether the project config exists."""
        ...

    def load_config(self) -> ProjectConfig:
        """Load the project config, failing if it is missing."""
        ...

    def load_config_or_default(self) -> ProjectConfig:
        """Load the project config, or defaults if it is missing."""
        ...

    def save_config(self, config: ProjectConfig) -> None:
        """Rewrite the project config."""
        ...

    def load_lock(self) -> LockFile:
        """Load the ledger, empty if missing."""
        ...

    def save_lock(self, lock: LockFile) -> None:
        """Rewrite the ledger."""
        ...


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for filesystem operations.

    Enables testing without real I/O by substituting a mock implementation.
    """

    def exists(self, path: Path) -> bool:
        """Check if a path exists."""
        ...

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        ...

    def is_file(self, path: Path) -> bool:
        """Check if a path is a regular file."""
        ...

    def iterdir(self, path: Path) -> list[Path]:
        """List immediate entries of a directory, sorted by name."""
        ...

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory."""
        ...

    def unlink(self, path: Path) -> None:
        """Remove a file."""
        ...

    def rmtree(self, path: Path) -> None:
        """Remove a directory tree."""
        ...

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy one file, overwriting dst."""
        ...

    def copytree(self, src: Path, dst: Path) -> None:
        """Copy a directory tree."""
        ...
