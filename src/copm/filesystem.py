"""Filesystem abstraction for testability.

Installers write through this seam so tests can record operations with a
mock instead of touching disk. RealFileSystem wraps pathlib and shutil.
"""

from __future__ import annotations

import shutil
from pathlib import Path


class RealFileSystem:
    """Production filesystem implementation.

    Wraps standard library Path and shutil operations.
    Satisfies the FileSystem protocol structurally.
    """

    def exists(self, path: Path) -> bool:
        """Check if a path exists."""
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        return path.is_dir()

    def is_file(self, path: Path) -> bool:
        """Check if a path is a regular file."""
        return path.is_file()

    def iterdir(self, path: Path) -> list[Path]:
        """List immediate entries of a directory, sorted by name."""
        return sorted(path.iterdir())

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory."""
        path.mkdir(parents=parents, exist_ok=exist_ok)

    def unlink(self, path: Path) -> None:
        """Remove a file."""
        path.unlink()

    def rmtree(self, path: Path) -> None:
        """Remove a directory tree."""
        shutil.rmtree(path)

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy one file, overwriting dst."""
        shutil.copyfile(src, dst)

    def copytree(self, src: Path, dst: Path) -> None:
        """Copy a directory tree."""
        shutil.copytree(src, dst)
