"""Install and uninstall operations: fetch, classify, copy, record."""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from copm.errors import CopmError
from copm.protocols import PackageClassifier, PackageFetcher, ProjectRegistry
from copm.registry import LockedPackage, LockedSource
from copm.spec import parse_package_spec
from copm.targets import TargetInstaller
from copm.types import InstallReport, Scope, UninstallReport

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one entry in `copm install` with no package argument.

    Attributes:
        name: Dependency name from copm.json.
        spec: Reference string that was installed.
        report: InstallReport on success, None on failure.
        error: Error message on failure, None on success.
    """

    name: str
    spec: str
    report: InstallReport | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if (self.report is None) == (self.error is None):
            raise ValueError("exactly one of report or error must be set")

    @property
    def success(self) -> bool:
        return self.report is not None


class Installer:
    """Runs install and uninstall operations for one project.

    Follows Separate Use from Creation: constructor requires all dependencies.
    Use `copm.context.create_context()` for production wiring.
    """

    def __init__(
        self,
        registry: ProjectRegistry,
        fetcher: PackageFetcher,
        classifier: PackageClassifier,
        targets: TargetInstaller,
    ) -> None:
        """Initialize installer with required dependencies.

        Args:
            registry: Project config and ledger persistence.
            fetcher: Repository fetcher.
            classifier: Target classifier.
            targets: Target installer.
        """
        self.registry = registry
        self.fetcher = fetcher
        self.classifier = classifier
        self.targets = targets

    def install_package(self, spec: str, scope: Scope = Scope.LOCAL) -> InstallReport:
        """Install one package by reference.

        Config and ledger are updated only for local installs in a project
        that already has a copm.json.

        Args:
            spec: Reference like "owner/repo" or "owner/repo:subpath".
            scope: Local or global.

        Returns:
            InstallReport describing what was written.

        Raises:
            CopmError: On any parse, fetch, classification or install failure.
        """
        package = parse_package_spec(spec)
        config = self.registry.load_config_or_default()
        name = package.name

        with tempfile.TemporaryDirectory(prefix="copm-", ignore_cleanup_errors=True) as tmp:
            logger.debug("Fetching %s into %s", package.source, tmp)
            fetched = self.fetcher.fetch(package.owner, package.repo, Path(tmp))
            manifest = self.classifier.detect(
                fetched.extracted_root, package.subpath, package.source
            )
            installed_paths, target_types = self.targets.install_targets(
                fetched.extracted_root, manifest, name, config.tools, scope
            )

        report = InstallReport(
            name=name,
            source=package.source,
            manifest=manifest,
            installed_paths=installed_paths,
        )

        if scope == Scope.LOCAL and self.registry.config_exists():
            config = self.registry.load_config()
            config.add_dependency(name, package.source, manifest.version, package.subpath)
            self.registry.save_config(config)

            lock = self.registry.load_lock()
            lock.upsert_package(
                LockedPackage(
                    name=name,
                    version=manifest.version,
                    source=LockedSource(repo=package.source, subPath=package.subpath),
                    integrity=str(fetched.integrity),
                    targets=target_types,
                    installedFiles=[self._record_path(p) for p in installed_paths],
                )
            )
            self.registry.save_lock(lock)
            report.ledger_updated = True

        return report

    def iter_install_all(self) -> Iterator[BatchResult]:
        """Install every dependency listed in copm.json, one at a time.

        A failing entry is yielded with its error and the batch continues.
        Nothing is retried or rolled back.

        Yields:
            One BatchResult per dependency, in name order.

        Raises:
            ConfigNotFound: If copm.json does not exist.
        """
        config = self.registry.load_config()
        for name, dependency in sorted(config.dependencies.items()):
            spec = dependency.spec
            try:
                report = self.install_package(spec, Scope.LOCAL)
            except (CopmError, OSError) as e:
                logger.debug("Install of %s failed", name, exc_info=True)
                yield BatchResult(name=name, spec=spec, error=str(e))
            else:
                yield BatchResult(name=name, spec=spec, report=report)

    def uninstall_package(self, name: str, scope: Scope = Scope.LOCAL) -> UninstallReport:
        """Uninstall a package by name.

        Removes exactly the recorded installed files when the ledger has
        them, otherwise applies each recorded type's removal rule. A package
        absent from the ledger is a no-op.

        Args:
            name: Package name.
            scope: Local or global.

        Returns:
            UninstallReport describing what was removed.
        """
        lock = self.registry.load_lock()
        record = lock.get_package(name)
        report = UninstallReport(name=name)

        if record is not None and record.installed_files:
            paths = [self._resolve_recorded(p) for p in record.installed_files]
            report.removed_paths = self.targets.uninstall_files(paths)
        else:
            target_types = record.targets if record is not None else []
            self.targets.uninstall_by_types(name, target_types, scope)
            report.used_fallback = True

        if scope == Scope.LOCAL and self.registry.config_exists():
            config = self.registry.load_config()
            config.remove_dependency(name)
            self.registry.save_config(config)
            if lock.remove_package(name):
                self.registry.save_lock(lock)
            report.ledger_updated = True

        return report

    def _record_path(self, path: Path) -> str:
        """Store paths under the project root relative to it."""
        try:
            return path.relative_to(self.registry.project_root).as_posix()
        except ValueError:
            return str(path)

    def _resolve_recorded(self, recorded: str) -> Path:
        path = Path(recorded)
        if path.is_absolute():
            return path
        return self.registry.project_root / path
