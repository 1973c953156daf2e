"""Application context for dependency injection.

This module separates object creation from object use, enabling testability
and reducing coupling in CLI commands.

Dependencies are typed using Protocols (abstract interfaces) rather than
concrete implementations, so test doubles can be injected without inheritance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from copm.install import Installer
from copm.protocols import FileSystem, PackageClassifier, PackageFetcher, ProjectRegistry
from copm.targets import TargetInstaller


def _default_filesystem() -> FileSystem:
    """Create the default filesystem implementation."""
    from copm.filesystem import RealFileSystem
    return RealFileSystem()


@dataclass
class AppContext:
    """Container for application dependencies.

    Provides a single injection point for all services used by CLI commands.
    """

    registry: ProjectRegistry
    fetcher: PackageFetcher
    classifier: PackageClassifier
    targets: TargetInstaller
    installer: Installer
    filesystem: FileSystem = field(default_factory=_default_filesystem)


def create_context(
    project_root: Path | None = None,
    home: Path | None = None,
) -> AppContext:
    """Factory for application dependencies.

    Creates all services with proper wiring. Use this in production code.
    For tests, construct AppContext directly with test doubles.

    Args:
        project_root: Override project directory (defaults to cwd).
        home: Override home directory for global installs.

    Returns:
        Configured AppContext with all dependencies.
    """
    from copm.discovery import Classifier
    from copm.fetcher import SourceFetcher
    from copm.filesystem import RealFileSystem
    from copm.platforms import DestinationResolver
    from copm.registry import RegistryManager

    project_root = project_root or Path.cwd()
    home = home or Path.home()

    registry = RegistryManager.create(project_root)
    fetcher = SourceFetcher.create_default()
    classifier = Classifier.create()
    filesystem = RealFileSystem()
    targets = TargetInstaller(DestinationResolver(project_root, home), filesystem)
    installer = Installer(
        registry=registry, fetcher=fetcher, classifier=classifier, targets=targets
    )

    return AppContext(
        registry=registry,
        fetcher=fetcher,
        classifier=classifier,
        targets=targets,
        installer=installer,
        filesystem=filesystem,
    )
