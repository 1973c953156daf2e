"""Platform-specific destinations and the destination resolver."""

from __future__ import annotations

from pathlib import Path

from copm.platforms.base import BasePlatform
from copm.platforms.claude import ClaudePlatform
from copm.platforms.copilot import CopilotPlatform
from copm.types import ArtifactType, Scope

__all__ = [
    "BasePlatform",
    "ClaudePlatform",
    "CopilotPlatform",
    "DestinationResolver",
    "PLATFORMS",
    "SKILL_TOOLS",
]


PLATFORMS: dict[str, type[BasePlatform]] = {
    "copilot": CopilotPlatform,
    "claude": ClaudePlatform,
}

# Tools with a skill location; others in the configured tools are skipped
SKILL_TOOLS = ("copilot", "claude")


class DestinationResolver:
    """Maps (artifact type, scope, tool) to an install destination.

    All install locations flow through here so tests can point both roots
    at a temporary directory.
    """

    def __init__(self, project_root: Path, home: Path) -> None:
        """Initialize the resolver.

        Args:
            project_root: Root for local installs.
            home: Root for global installs.
        """
        self.project_root = project_root
        self.home = home
        self.copilot = CopilotPlatform(project_root, home)
        self.claude = ClaudePlatform(project_root, home)

    @classmethod
    def create_default(cls) -> DestinationResolver:
        """Create a resolver for the current directory and user home.

        Returns:
            DestinationResolver rooted at cwd and Path.home().
        """
        return cls(project_root=Path.cwd(), home=Path.home())

    def get_platform(self, tool: str) -> BasePlatform:
        """Get a platform instance by tool name.

        Args:
            tool: Tool name (copilot, claude).

        Returns:
            Platform instance sharing this resolver's roots.

        Raises:
            ValueError: If tool is not supported.
        """
        if tool not in PLATFORMS:
            raise ValueError(f"Unknown tool: {tool}. Supported: {list(PLATFORMS.keys())}")
        return self.copilot if tool == "copilot" else self.claude

    def resolve(
        self,
        artifact_type: ArtifactType,
        scope: Scope,
        tool: str | None = None,
        name: str | None = None,
    ) -> Path | None:
        """Resolve the destination for an artifact type.

        Args:
            artifact_type: Kind of artifact.
            scope: Local or global.
            tool: Tool name; only consulted for skills.
            name: Package or skill name; required for skills and plugins.

        Returns:
            A file path (copilot-instructions), a directory, or None if the
            type has no destination for this scope or tool.

        Raises:
            ValueError: If a name is required but missing.
        """
        if artifact_type == ArtifactType.COPILOT_INSTRUCTIONS:
            return self.copilot.instructions_file(scope)
        if artifact_type == ArtifactType.COPILOT_CUSTOM_INSTRUCTIONS:
            return self.copilot.custom_instructions_dir(scope)
        if artifact_type == ArtifactType.COPILOT_AGENTS:
            return self.copilot.agents_dir(scope)
        if artifact_type == ArtifactType.COPILOT_PROMPTS:
            return self.copilot.prompts_dir(scope)
        if artifact_type == ArtifactType.CLAUDE_COMMAND:
            return self.claude.commands_dir(scope)

        if not name:
            raise ValueError(f"{artifact_type} destinations require a name")
        if artifact_type == ArtifactType.LEGACY_CLAUDE_PLUGIN:
            return self.claude.plugin_dir(name, scope)
        if tool not in PLATFORMS:
            return None
        return self.get_platform(tool).skill_dir(name, scope)
