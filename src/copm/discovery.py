"""Classification of fetched packages into installable targets.

A directory is classified from its immediate entries only, by walking an
ordered list of (predicate, ArtifactType) rules; the first match wins.
Detection looks at most one level below the scan root and never returns more
than one target. Ambiguity is an error, never resolved by preference.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from copm.errors import AmbiguousTargets, NoTargetsDetected, UnrecognizedFileType
from copm.types import ArtifactType, PackageManifest, Target

logger = logging.getLogger(__name__)

SKILL_FILE = "SKILL.md"
COPILOT_INSTRUCTIONS_FILE = "copilot-instructions.md"
AGENT_SUFFIX = ".agent.md"
PROMPT_SUFFIX = ".prompt.md"
INSTRUCTIONS_SUFFIX = ".instructions.md"


@dataclass(frozen=True)
class DirListing:
    """Snapshot of a directory's immediate entries."""

    files: frozenset[str]
    subdirs: tuple[Path, ...]

    @classmethod
    def read(cls, directory: Path) -> DirListing:
        files: set[str] = set()
        subdirs: list[Path] = []
        for entry in directory.iterdir():
            if entry.is_file():
                files.add(entry.name)
            elif entry.is_dir():
                subdirs.append(entry)
        return cls(files=frozenset(files), subdirs=tuple(sorted(subdirs)))

    def has_file(self, name: str) -> bool:
        return name in self.files

    def has_suffix(self, suffix: str) -> bool:
        return any(name.endswith(suffix) for name in self.files)

    def has_skill_subdir(self) -> bool:
        return any((sub / SKILL_FILE).is_file() for sub in self.subdirs)


Rule = tuple[Callable[[DirListing], bool], ArtifactType]

# Skill collections are checked last: inspecting subdirectories is costlier
# and less specific than suffix matching.
DIRECTORY_RULES: tuple[Rule, ...] = (
    (lambda d: d.has_file(SKILL_FILE), ArtifactType.SKILL),
    (lambda d: d.has_file(COPILOT_INSTRUCTIONS_FILE), ArtifactType.COPILOT_INSTRUCTIONS),
    (lambda d: d.has_suffix(AGENT_SUFFIX), ArtifactType.COPILOT_AGENTS),
    (lambda d: d.has_suffix(PROMPT_SUFFIX), ArtifactType.COPILOT_PROMPTS),
    (lambda d: d.has_suffix(INSTRUCTIONS_SUFFIX), ArtifactType.COPILOT_CUSTOM_INSTRUCTIONS),
    (lambda d: d.has_skill_subdir(), ArtifactType.SKILL),
)

FILE_RULES: tuple[tuple[str, ArtifactType], ...] = (
    (PROMPT_SUFFIX, ArtifactType.COPILOT_PROMPTS),
    (AGENT_SUFFIX, ArtifactType.COPILOT_AGENTS),
    (INSTRUCTIONS_SUFFIX, ArtifactType.COPILOT_CUSTOM_INSTRUCTIONS),
)


def classify_dir(directory: Path) -> ArtifactType | None:
    """Classify a directory from its immediate entries.

    Args:
        directory: Directory to inspect.

    Returns:
        The first matching artifact type, or None if nothing matches.
    """
    listing = DirListing.read(directory)
    for predicate, artifact_type in DIRECTORY_RULES:
        if predicate(listing):
            return artifact_type
    return None


def classify_file(path: Path) -> ArtifactType | None:
    """Classify a single file by suffix.

    Args:
        path: File to classify.

    Returns:
        The matching artifact type, or None.
    """
    for suffix, artifact_type in FILE_RULES:
        if path.name.endswith(suffix):
            return artifact_type
    return None


class Classifier:
    """Turns a fetched package into a single-target manifest."""

    @classmethod
    def create(cls) -> Classifier:
        """Create a classifier instance.

        Returns:
            Configured Classifier instance.
        """
        return cls()

    def detect(self, root: Path, subpath: str | None, source: str) -> PackageManifest:
        """Detect the one installable target in a package.

        Args:
            root: Extracted package root.
            subpath: Optional '/'-separated path scoping detection to a
                directory or a single file.
            source: Original reference (owner/repo), used in messages.

        Returns:
            PackageManifest with exactly one target.

        Raises:
            UnrecognizedFileType: If subpath names a file of unknown type.
            NoTargetsDetected: If nothing recognizable is found.
            AmbiguousTargets: If several subdirectories classify and no subpath
                was given.
        """
        if subpath is not None:
            target = self._detect_scoped(root, subpath, source)
        else:
            target = self._detect_unscoped(root, source)

        logger.debug("Classified %s as %s at %s", source, target.type, target.path)
        return PackageManifest(name=root.name or "unknown", targets=(target,))

    def _detect_scoped(self, root: Path, subpath: str, source: str) -> Target:
        scoped = root / subpath
        if scoped.is_file():
            artifact_type = classify_file(scoped)
            if artifact_type is None:
                raise UnrecognizedFileType(f"{source}:{subpath}")
            return Target(artifact_type, subpath)

        if not scoped.is_dir():
            raise NoTargetsDetected(f"{source}:{subpath} does not exist")

        artifact_type = classify_dir(scoped)
        if artifact_type is None:
            raise NoTargetsDetected(f"No recognizable content found in {source}:{subpath}")
        return Target(artifact_type, subpath)

    def _detect_unscoped(self, root: Path, source: str) -> Target:
        candidates = self.scan(root)
        if not candidates:
            raise NoTargetsDetected(
                f"No recognizable targets found in {source}. "
                f"Try specifying a sub-path: copm install {source}:<subpath>"
            )
        if len(candidates) > 1:
            raise AmbiguousTargets(
                source, [(target.path, target.type.value) for target in candidates]
            )
        return candidates[0]

    def scan(self, root: Path) -> list[Target]:
        """List candidate targets at a package root.

        The root itself is classified first; if it matches, subdirectories
        are never scanned.

        Args:
            root: Extracted package root.

        Returns:
            Candidates sorted by path. Empty if nothing classifies.
        """
        root_type = classify_dir(root)
        if root_type is not None:
            return [Target(root_type, ".")]

        candidates = []
        for subdir in DirListing.read(root).subdirs:
            artifact_type = classify_dir(subdir)
            if artifact_type is not None:
                candidates.append(Target(artifact_type, subdir.name))
        return sorted(candidates, key=lambda target: target.path)
