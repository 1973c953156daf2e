"""Copying classified targets to their tool-specific destinations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from copm.discovery import (
    AGENT_SUFFIX,
    COPILOT_INSTRUCTIONS_FILE,
    INSTRUCTIONS_SUFFIX,
    PROMPT_SUFFIX,
    SKILL_FILE,
)
from copm.errors import NotInstalled, SourceFileNotFound, UnsupportedTargetType
from copm.frontmatter import read_description
from copm.platforms import PLATFORMS, SKILL_TOOLS, DestinationResolver
from copm.protocols import FileSystem
from copm.types import ArtifactType, PackageManifest, Scope, Target

logger = logging.getLogger(__name__)

COMMAND_SUFFIX = ".md"


@dataclass
class ListedEntry:
    """One installed entry shown by `copm list`."""

    name: str
    description: str = ""


@dataclass
class ListedGroup:
    """Installed entries found at one destination."""

    label: str
    location: Path
    entries: list[ListedEntry] = field(default_factory=list)


def _coerce_type(target_type: ArtifactType | str) -> ArtifactType:
    try:
        return ArtifactType(target_type)
    except ValueError as e:
        raise UnsupportedTargetType(str(target_type)) from e


class TargetInstaller:
    """Installs one target at a time and removes what was installed.

    Follows Separate Use from Creation: constructor requires all dependencies.
    """

    def __init__(self, resolver: DestinationResolver, filesystem: FileSystem) -> None:
        """Initialize with required dependencies.

        Args:
            resolver: Destination resolver for all install locations.
            filesystem: Filesystem abstraction.
        """
        self.resolver = resolver
        self.fs = filesystem

    def install_targets(
        self,
        root: Path,
        manifest: PackageManifest,
        name: str,
        tools: list[str],
        scope: Scope,
    ) -> tuple[list[Path], list[str]]:
        """Install every target of a manifest.

        Args:
            root: Extracted package root.
            manifest: Classified manifest.
            name: Package name.
            tools: Configured tools.
            scope: Local or global.

        Returns:
            (paths written, target type strings) in manifest order.
        """
        all_paths: list[Path] = []
        target_types: list[str] = []
        for target in manifest.targets:
            all_paths.extend(self.install_target(root, target, name, tools, scope))
            target_types.append(_coerce_type(target.type).value)
        return all_paths, target_types

    def install_target(
        self,
        root: Path,
        target: Target,
        name: str,
        tools: list[str],
        scope: Scope,
    ) -> list[Path]:
        """Install a single target.

        Args:
            root: Extracted package root.
            target: Target to install; its path may name a directory or a file.
            name: Package name, used for skill and plugin directories.
            tools: Configured tools; decides where skills go.
            scope: Local or global.

        Returns:
            Every path written. Empty if the type has no destination in scope.

        Raises:
            UnsupportedTargetType: If the target type is unknown.
        """
        artifact_type = _coerce_type(target.type)
        source = root if target.path == "." else root / target.path

        if artifact_type == ArtifactType.COPILOT_INSTRUCTIONS:
            return self._install_instructions(source, scope)
        if artifact_type == ArtifactType.SKILL:
            return self._install_skill(source, name, tools, scope)
        if artifact_type == ArtifactType.LEGACY_CLAUDE_PLUGIN:
            dest = self.resolver.resolve(artifact_type, scope, name=name)
            self._replace_tree(source, dest)
            return [dest]

        suffix = {
            ArtifactType.COPILOT_CUSTOM_INSTRUCTIONS: INSTRUCTIONS_SUFFIX,
            ArtifactType.COPILOT_AGENTS: AGENT_SUFFIX,
            ArtifactType.COPILOT_PROMPTS: PROMPT_SUFFIX,
            ArtifactType.CLAUDE_COMMAND: COMMAND_SUFFIX,
        }[artifact_type]
        dest_dir = self.resolver.resolve(artifact_type, scope)
        if dest_dir is None:
            logger.debug("%s has no %s destination, skipping", artifact_type, scope.value)
            return []
        return self._install_file_collection(source, suffix, dest_dir)

    def _install_instructions(self, source: Path, scope: Scope) -> list[Path]:
        dest = self.resolver.resolve(ArtifactType.COPILOT_INSTRUCTIONS, scope)
        if dest is None:
            logger.debug("copilot-instructions has no %s destination, skipping", scope.value)
            return []

        if self.fs.is_file(source):
            source_file = source
        elif self.fs.exists(source / COPILOT_INSTRUCTIONS_FILE):
            source_file = source / COPILOT_INSTRUCTIONS_FILE
        else:
            md_files = [
                p for p in self.fs.iterdir(source) if self.fs.is_file(p) and p.name.endswith(".md")
            ]
            if len(md_files) != 1:
                raise SourceFileNotFound(f"No {COPILOT_INSTRUCTIONS_FILE} found in {source}")
            source_file = md_files[0]

        self.fs.mkdir(dest.parent, parents=True, exist_ok=True)
        self.fs.copy_file(source_file, dest)
        logger.debug("Copied %s to %s", source_file, dest)
        return [dest]

    def _install_file_collection(self, source: Path, suffix: str, dest_dir: Path) -> list[Path]:
        """Copy matching files into dest_dir, overwriting same-named files.

        A file source is copied on its own, never its siblings.
        """
        if self.fs.is_file(source):
            files = [source]
        else:
            files = [
                p for p in self.fs.iterdir(source) if self.fs.is_file(p) and p.name.endswith(suffix)
            ]

        self.fs.mkdir(dest_dir, parents=True, exist_ok=True)
        installed = []
        for src_file in files:
            dest_file = dest_dir / src_file.name
            self.fs.copy_file(src_file, dest_file)
            logger.debug("Copied %s to %s", src_file, dest_file)
            installed.append(dest_file)
        return installed

    def _install_skill(self, source: Path, name: str, tools: list[str], scope: Scope) -> list[Path]:
        """Install a single skill, or each skill of a collection under its own name."""
        if self.fs.exists(source / SKILL_FILE):
            skills = [(source, name)]
        else:
            skills = [
                (sub, sub.name)
                for sub in self.fs.iterdir(source)
                if self.fs.is_dir(sub) and self.fs.exists(sub / SKILL_FILE)
            ]

        skill_tools = []
        for tool in dict.fromkeys(tools):
            if tool in SKILL_TOOLS:
                skill_tools.append(tool)
            else:
                logger.debug("Tool %s has no skill location, skipping", tool)

        installed: list[Path] = []
        for skill_dir, skill_name in skills:
            for tool in skill_tools:
                dest = self.resolver.resolve(ArtifactType.SKILL, scope, tool=tool, name=skill_name)
                self._replace_tree(skill_dir, dest)
                installed.append(dest)
        return installed

    def _replace_tree(self, src: Path, dest: Path) -> None:
        if self.fs.exists(dest):
            self.fs.rmtree(dest)
        self.fs.mkdir(dest.parent, parents=True, exist_ok=True)
        self.fs.copytree(src, dest)
        logger.debug("Copied tree %s to %s", src, dest)

    def uninstall_files(self, files: list[Path]) -> list[Path]:
        """Remove exactly the given paths.

        Args:
            files: Files and directories to remove.

        Returns:
            Paths that existed and were removed.
        """
        removed = []
        for path in files:
            if self.fs.is_dir(path):
                self.fs.rmtree(path)
            elif self.fs.exists(path):
                self.fs.unlink(path)
            else:
                continue
            logger.debug("Removed %s", path)
            removed.append(path)
        return removed

    def uninstall_by_types(self, name: str, target_types: list[str], scope: Scope) -> None:
        """Remove a package using each recorded type's fixed removal rule.

        Used for ledger records written before installed files were tracked.
        Unknown types are skipped.

        Raises:
            NotInstalled: If a legacy plugin directory is missing.
        """
        for target_type in target_types:
            if target_type == ArtifactType.LEGACY_CLAUDE_PLUGIN.value:
                plugin_dir = self.resolver.resolve(
                    ArtifactType.LEGACY_CLAUDE_PLUGIN, scope, name=name
                )
                if not self.fs.exists(plugin_dir):
                    raise NotInstalled(name)
                self.fs.rmtree(plugin_dir)
            elif target_type == ArtifactType.COPILOT_INSTRUCTIONS.value:
                path = self.resolver.resolve(ArtifactType.COPILOT_INSTRUCTIONS, Scope.LOCAL)
                if self.fs.exists(path):
                    self.fs.unlink(path)
            elif target_type == ArtifactType.COPILOT_CUSTOM_INSTRUCTIONS.value:
                self._remove_custom_instructions(name)
            else:
                logger.debug("No type-based removal rule for %s, skipping", target_type)

    def _remove_custom_instructions(self, name: str) -> None:
        directory = self.resolver.resolve(ArtifactType.COPILOT_CUSTOM_INSTRUCTIONS, Scope.LOCAL)
        exact = directory / f"{name}{INSTRUCTIONS_SUFFIX}"
        if self.fs.exists(exact):
            self.fs.unlink(exact)
            return
        if not self.fs.is_dir(directory):
            return
        for path in self.fs.iterdir(directory):
            if path.name.startswith(name) and path.name.endswith(INSTRUCTIONS_SUFFIX):
                self.fs.unlink(path)

    def list_installed(self, scope: Scope) -> list[ListedGroup]:
        """Report what is installed at each destination of a scope.

        Args:
            scope: Local or global.

        Returns:
            Non-empty groups, in a fixed order, entries sorted by name.
        """
        groups: list[ListedGroup] = []

        instructions = self.resolver.resolve(ArtifactType.COPILOT_INSTRUCTIONS, scope)
        if instructions is not None and self.fs.is_file(instructions):
            groups.append(
                ListedGroup("copilot-instructions", instructions, [ListedEntry(instructions.name)])
            )

        for artifact_type, suffix in (
            (ArtifactType.COPILOT_CUSTOM_INSTRUCTIONS, INSTRUCTIONS_SUFFIX),
            (ArtifactType.COPILOT_AGENTS, AGENT_SUFFIX),
            (ArtifactType.COPILOT_PROMPTS, PROMPT_SUFFIX),
        ):
            directory = self.resolver.resolve(artifact_type, scope)
            self._add_file_group(groups, artifact_type.value, directory, suffix)

        for tool in PLATFORMS:
            skills_root = self.resolver.get_platform(tool).skills_root(scope)
            if not self.fs.is_dir(skills_root):
                continue
            entries = [
                ListedEntry(f"{sub.name}/", read_description(sub / SKILL_FILE))
                for sub in self.fs.iterdir(skills_root)
                if self.fs.is_dir(sub)
            ]
            if entries:
                groups.append(ListedGroup(f"skill → {tool}", skills_root, entries))

        commands = self.resolver.resolve(ArtifactType.CLAUDE_COMMAND, scope)
        self._add_file_group(groups, ArtifactType.CLAUDE_COMMAND.value, commands, COMMAND_SUFFIX)
        return groups

    def _add_file_group(
        self, groups: list[ListedGroup], label: str, directory: Path | None, suffix: str
    ) -> None:
        if directory is None or not self.fs.is_dir(directory):
            return
        entries = [
            ListedEntry(p.name)
            for p in self.fs.iterdir(directory)
            if self.fs.is_file(p) and p.name.endswith(suffix)
        ]
        if entries:
            groups.append(ListedGroup(label, directory, entries))
