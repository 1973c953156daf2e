"""Base platform implementation with shared behavior.

Each platform owns one directory per scope: a project-relative one for
local installs and a home-relative one for global installs. Subclasses
name those directories and the artifact locations beneath them.

Pattern: Template Method - base class resolves the scope, subclasses
provide the directory names.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from copm.types import Scope


class BasePlatform(ABC):
    """Base class for platform implementations.

    Paths are pure functions of (project_root, home, scope); nothing here
    touches the filesystem.
    """

    name: str

    def __init__(self, project_root: Path, home: Path) -> None:
        """Initialize platform paths.

        Args:
            project_root: Root for local (project) installs.
            home: Root for global (user) installs.
        """
        self.project_root = project_root
        self.home = home

    @property
    @abstractmethod
    def local_dirname(self) -> str:
        """Directory under the project root, e.g. ".github"."""
        ...

    @property
    @abstractmethod
    def global_dirname(self) -> str:
        """Directory under home, e.g. ".copilot"."""
        ...

    def base_dir(self, scope: Scope) -> Path:
        """Get the platform's base directory for a scope."""
        if scope == Scope.GLOBAL:
            return self.home / self.global_dirname
        return self.project_root / self.local_dirname

    def skills_root(self, scope: Scope) -> Path:
        """Get the directory holding all skills for a scope."""
        return self.base_dir(scope) / "skills"

    def skill_dir(self, name: str, scope: Scope) -> Path:
        """Get the install directory for one skill."""
        return self.skills_root(scope) / name
