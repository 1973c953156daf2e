"""Claude Code platform paths."""

from __future__ import annotations

from pathlib import Path

from copm.platforms.base import BasePlatform
from copm.types import Scope


class ClaudePlatform(BasePlatform):
    """Claude Code destinations under .claude/ and ~/.claude/."""

    name = "claude"
    local_dirname = ".claude"
    global_dirname = ".claude"

    def commands_dir(self, scope: Scope) -> Path:
        """Get the commands directory.

        Returns:
            .claude/commands/ or ~/.claude/commands/
        """
        return self.base_dir(scope) / "commands"

    def plugin_dir(self, name: str, scope: Scope) -> Path:
        """Get the legacy plugin directory for a package.

        Returns:
            .claude/plugins/<name>/ or ~/.claude/plugins/copm-packages/<name>/
        """
        if scope == Scope.GLOBAL:
            return self.base_dir(scope) / "plugins" / "copm-packages" / name
        return self.base_dir(scope) / "plugins" / name
