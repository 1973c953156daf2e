"""Error taxonomy for copm.

Every error is terminal for the operation that raised it. Library code raises
these; only the CLI turns them into exit codes.
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "AmbiguousTargets",
    "ConfigAlreadyExists",
    "ConfigNotFound",
    "CorruptFile",
    "CopmError",
    "DownloadFailed",
    "InvalidSpec",
    "NoTargetsDetected",
    "NotInstalled",
    "SourceFileNotFound",
    "UnrecognizedFileType",
    "UnsupportedTargetType",
]


class CopmError(Exception):
    """Base class for all copm errors."""

    pass


class InvalidSpec(CopmError):
    """Package reference string could not be parsed."""

    def __init__(self, spec: str) -> None:
        self.spec = spec
        super().__init__(f"Invalid package specifier: {spec}")


class DownloadFailed(CopmError):
    """Both the tarball and the clone transport failed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to download package: {reason}")


class NoTargetsDetected(CopmError):
    """Nothing recognizable was found at the scan location."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class AmbiguousTargets(CopmError):
    """More than one subdirectory classified; a subpath is required."""

    def __init__(self, package: str, candidates: list[tuple[str, str]]) -> None:
        """Initialize with the offending package and its candidates.

        Args:
            package: Package reference as given by the user (owner/repo).
            candidates: (relative_path, target_type) pairs, sorted by path.
        """
        self.package = package
        self.candidates = candidates
        listing = "\n".join(f"  {path:<20} ({kind})" for path, kind in candidates)
        super().__init__(
            f"Multiple targets detected in {package}:\n{listing}\n"
            f"Use: copm install {package}:<subpath>"
        )


class UnsupportedTargetType(CopmError):
    """Target type string has no installer."""

    def __init__(self, target_type: str) -> None:
        self.target_type = target_type
        super().__init__(f"Unsupported target type: {target_type}")


class UnrecognizedFileType(CopmError):
    """A single-file subpath does not carry a known artifact suffix."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"Unrecognized file type: {path} "
            "(expected .prompt.md, .agent.md or .instructions.md)"
        )


class NotInstalled(CopmError):
    """A legacy installation expected on disk is missing."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Package '{name}' is not installed")


class ConfigNotFound(CopmError):
    """copm.json is required but missing."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"copm.json not found in {path.parent}")


class CorruptFile(CopmError):
    """copm.json or copm.lock is not valid JSON."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path.name} is not valid JSON ({reason}): {path}")


class ConfigAlreadyExists(CopmError):
    """copm init was run where copm.json already exists."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"copm.json already exists at {path}")


class SourceFileNotFound(CopmError):
    """The classified target lacks the file its installer needs."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)
