"""GitHub Copilot platform paths."""

from __future__ import annotations

from pathlib import Path

from copm.platforms.base import BasePlatform
from copm.types import Scope


class CopilotPlatform(BasePlatform):
    """GitHub Copilot destinations.

    Local installs live under .github/, global ones under ~/.copilot/.
    Instructions, agents and prompts have no global location.
    """

    name = "copilot"
    local_dirname = ".github"
    global_dirname = ".copilot"

    def instructions_file(self, scope: Scope) -> Path | None:
        """Get the path to copilot-instructions.md.

        Returns:
            .github/copilot-instructions.md, or None for global scope.
        """
        if scope == Scope.GLOBAL:
            return None
        return self.base_dir(scope) / "copilot-instructions.md"

    def custom_instructions_dir(self, scope: Scope) -> Path:
        """Get the *.instructions.md directory.

        Returns:
            .github/instructions/ or ~/.copilot/instructions/
        """
        return self.base_dir(scope) / "instructions"

    def agents_dir(self, scope: Scope) -> Path | None:
        """Get the agents directory.

        Returns:
            .github/agents/, or None for global scope.
        """
        if scope == Scope.GLOBAL:
            return None
        return self.base_dir(scope) / "agents"

    def prompts_dir(self, scope: Scope) -> Path | None:
        """Get the prompts directory.

        Returns:
            .github/prompts/, or None for global scope.
        """
        if scope == Scope.GLOBAL:
            return None
        return self.base_dir(scope) / "prompts"
