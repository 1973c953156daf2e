"""Project config (copm.json) and install ledger (copm.lock) management.

Both files are read, mutated in memory and rewritten wholesale. There is no
inter-process locking: concurrent invocations against one project are not
safe and the last writer wins.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from copm.errors import ConfigNotFound, CorruptFile
from copm.types import Integrity

CONFIG_FILENAME = "copm.json"
LOCK_FILENAME = "copm.lock"
LOCK_VERSION = 1
DEFAULT_TOOLS = ["copilot"]


class Dependency(BaseModel):
    """A dependency entry in copm.json."""

    model_config = ConfigDict(populate_by_name=True)

    source: str
    version: str
    sub_path: str | None = Field(default=None, alias="subPath")

    @property
    def spec(self) -> str:
        """The reference string that reinstalls this dependency."""
        if self.sub_path:
            return f"{self.source}:{self.sub_path}"
        return self.source


class ProjectConfig(BaseModel):
    """Contents of copm.json."""

    tools: list[str] = Field(default_factory=lambda: list(DEFAULT_TOOLS))
    dependencies: dict[str, Dependency] = Field(default_factory=dict)

    @field_validator("tools")
    @classmethod
    def _tools_not_empty(cls, tools: list[str]) -> list[str]:
        deduped = list(dict.fromkeys(tools))
        if not deduped:
            raise ValueError("tools must name at least one tool")
        return deduped

    def add_dependency(
        self, name: str, source: str, version: str, sub_path: str | None = None
    ) -> None:
        """Insert or replace a dependency entry."""
        self.dependencies[name] = Dependency(source=source, version=version, subPath=sub_path)

    def remove_dependency(self, name: str) -> bool:
        """Remove a dependency entry.

        Returns:
            True if removed, False if not found.
        """
        return self.dependencies.pop(name, None) is not None


class LockedSource(BaseModel):
    """Where a locked package came from."""

    model_config = ConfigDict(populate_by_name=True)

    source_type: str = Field(default="github", alias="type")
    repo: str
    rev: str | None = None
    sub_path: str | None = Field(default=None, alias="subPath")


class LockedPackage(BaseModel):
    """One installed package as recorded in copm.lock."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    version: str
    source: LockedSource
    integrity: str | None = None
    targets: list[str] = Field(default_factory=list)
    installed_files: list[str] = Field(default_factory=list, alias="installedFiles")

    @field_validator("integrity")
    @classmethod
    def _integrity_tagged(cls, integrity: str | None) -> str | None:
        if integrity is not None:
            Integrity.parse(integrity)
        return integrity

    @property
    def fingerprint(self) -> Integrity | None:
        """The integrity value as a tagged fingerprint, if recorded."""
        if self.integrity is None:
            return None
        return Integrity.parse(self.integrity)


class LockFile(BaseModel):
    """Contents of copm.lock: the ordered install ledger."""

    version: int = LOCK_VERSION
    packages: list[LockedPackage] = Field(default_factory=list)

    def get_package(self, name: str) -> LockedPackage | None:
        """Get a record by package name."""
        for package in self.packages:
            if package.name == name:
                return package
        return None

    def upsert_package(self, package: LockedPackage) -> None:
        """Replace the record with the same name in place, or append."""
        for index, existing in enumerate(self.packages):
            if existing.name == package.name:
                self.packages[index] = package
                return
        self.packages.append(package)

    def remove_package(self, name: str) -> bool:
        """Remove a record by name.

        Returns:
            True if removed, False if not found.
        """
        original_count = len(self.packages)
        self.packages = [p for p in self.packages if p.name != name]
        return len(self.packages) < original_count


def _read_json(path: Path) -> dict:
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise CorruptFile(path, f"line {e.lineno}, column {e.colno}: {e.msg}") from e


def _write_json(path: Path, data: dict) -> None:
    path.write_text(json.dumps(data, indent=2) + "\n")


class RegistryManager:
    """Loads and saves copm.json and copm.lock for one project."""

    def __init__(self, project_root: Path | None = None) -> None:
        """Initialize the registry manager.

        Args:
            project_root: Directory holding copm.json and copm.lock.
                Defaults to the current working directory.

        Note:
            Prefer using factory methods `create()` or `create_default()` for construction.
        """
        self.project_root = project_root or Path.cwd()
        self.config_file = self.project_root / CONFIG_FILENAME
        self.lock_file = self.project_root / LOCK_FILENAME

    @classmethod
    def create(cls, project_root: Path) -> RegistryManager:
        """Create a registry manager for a specific project.

        Args:
            project_root: Directory holding copm.json and copm.lock.

        Returns:
            Configured RegistryManager instance.
        """
        return cls(project_root=project_root)

    @classmethod
    def create_default(cls) -> RegistryManager:
        """Create a registry manager for the current directory.

        Returns:
            RegistryManager rooted at cwd.
        """
        return cls()

    def config_exists(self) -> bool:
        """Check whether copm.json exists."""
        return self.config_file.exists()

    def load_config(self) -> ProjectConfig:
        """Load copm.json.

        Returns:
            Parsed ProjectConfig.

        Raises:
            ConfigNotFound: If copm.json does not exist.
            CorruptFile: If copm.json is not valid JSON.
            pydantic.ValidationError: If the file content is invalid.
        """
        if not self.config_file.exists():
            raise ConfigNotFound(self.config_file)
        data = _read_json(self.config_file)
        return ProjectConfig.model_validate(data)

    def load_config_or_default(self) -> ProjectConfig:
        """Load copm.json, or defaults if it does not exist."""
        if not self.config_file.exists():
            return ProjectConfig()
        return self.load_config()

    def save_config(self, config: ProjectConfig) -> None:
        """Write copm.json with dependencies sorted by name.

        Args:
            config: ProjectConfig to save.
        """
        data = config.model_dump(by_alias=True, exclude_none=True)
        data["dependencies"] = dict(sorted(data["dependencies"].items()))
        _write_json(self.config_file, data)

    def load_lock(self) -> LockFile:
        """Load copm.lock.

        Returns:
            LockFile, empty if the file does not exist.

        Raises:
            CorruptFile: If copm.lock is not valid JSON.
        """
        if not self.lock_file.exists():
            return LockFile()
        data = _read_json(self.lock_file)
        return LockFile.model_validate(data)

    def save_lock(self, lock: LockFile) -> None:
        """Write copm.lock.

        Args:
            lock: LockFile to save.
        """
        _write_json(self.lock_file, lock.model_dump(by_alias=True, exclude_none=True))
