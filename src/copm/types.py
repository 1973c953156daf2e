"""Shared data types for copm."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

__all__ = [
    "ArtifactType",
    "FetchResult",
    "InstallReport",
    "Integrity",
    "IntegrityScheme",
    "PackageManifest",
    "Scope",
    "Target",
    "UninstallReport",
    "PLACEHOLDER_VERSION",
]

# No tag or revision negotiation exists yet
PLACEHOLDER_VERSION = "0.0.0"


class ArtifactType(str, Enum):
    """Closed set of installable artifact kinds.

    Values are the strings persisted in copm.lock.
    """

    SKILL = "skill"
    COPILOT_INSTRUCTIONS = "copilot-instructions"
    COPILOT_CUSTOM_INSTRUCTIONS = "copilot-custom-instructions"
    COPILOT_AGENTS = "copilot-agents"
    COPILOT_PROMPTS = "copilot-prompts"
    CLAUDE_COMMAND = "claude-command"
    LEGACY_CLAUDE_PLUGIN = "claude-plugin"

    def __str__(self) -> str:
        return self.value


class Scope(str, Enum):
    """Install location: project-relative or home-relative."""

    LOCAL = "local"
    GLOBAL = "global"

    @classmethod
    def from_flag(cls, global_: bool) -> Scope:
        return cls.GLOBAL if global_ else cls.LOCAL


class IntegrityScheme(str, Enum):
    """How an integrity value was derived. Schemes never compare equal."""

    SHA256 = "sha256"
    GIT = "git"


@dataclass(frozen=True)
class Integrity:
    """Tagged integrity fingerprint.

    Attributes:
        scheme: SHA256 for a hash of the downloaded archive bytes,
            GIT for the commit id of a shallow clone.
        value: Hex digest or commit sha.
    """

    scheme: IntegrityScheme
    value: str

    def __str__(self) -> str:
        return f"{self.scheme.value}-{self.value}"

    @classmethod
    def parse(cls, text: str) -> Integrity:
        """Parse the rendered form back into a tagged value.

        Args:
            text: String like "sha256-<hex>" or "git-<sha>".

        Returns:
            The tagged Integrity.

        Raises:
            ValueError: If the scheme prefix is unknown or the value is empty.
        """
        scheme, sep, value = text.partition("-")
        if not sep or not value:
            raise ValueError(f"Malformed integrity value: {text}")
        try:
            return cls(scheme=IntegrityScheme(scheme), value=value)
        except ValueError as e:
            raise ValueError(f"Unknown integrity scheme: {scheme}") from e


@dataclass
class FetchResult:
    """A fetched repository snapshot, valid for one operation."""

    extracted_root: Path
    integrity: Integrity


@dataclass(frozen=True)
class Target:
    """One classified, installable unit within a fetched package.

    Attributes:
        type: Artifact type.
        path: "." for the root, or a '/'-separated path relative to the
            extracted root naming a directory or a single file.
    """

    type: ArtifactType
    path: str


@dataclass(frozen=True)
class PackageManifest:
    """What one classification produced. Read-only once derived."""

    name: str
    version: str = PLACEHOLDER_VERSION
    targets: tuple[Target, ...] = ()


@dataclass
class InstallReport:
    """Result of installing one package.

    Attributes:
        name: Derived package name.
        source: Package reference without subpath (owner/repo).
        manifest: The classified manifest.
        installed_paths: Every path written, in write order.
        ledger_updated: True if copm.json and copm.lock were rewritten.
    """

    name: str
    source: str
    manifest: PackageManifest
    installed_paths: list[Path] = field(default_factory=list)
    ledger_updated: bool = False

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.name:
            raise ValueError("name cannot be empty")


@dataclass
class UninstallReport:
    """Result of uninstalling one package.

    Attributes:
        name: Package name.
        removed_paths: Paths removed via the recorded file list. Empty when the
            type-based fallback ran or nothing was recorded.
        used_fallback: True if type-based removal ran instead.
        ledger_updated: True if copm.json and copm.lock were rewritten.
    """

    name: str
    removed_paths: list[Path] = field(default_factory=list)
    used_fallback: bool = False
    ledger_updated: bool = False
