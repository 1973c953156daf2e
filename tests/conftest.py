"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from copm.filesystem import RealFileSystem
from copm.platforms import DestinationResolver
from copm.targets import TargetInstaller


@pytest.fixture
def temp_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Override home directory for testing."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    return home


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Create an empty project directory."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def package_root(tmp_path: Path) -> Path:
    """Create an empty extracted package root."""
    root = tmp_path / "owner-repo-abc123"
    root.mkdir()
    return root


@pytest.fixture
def resolver(project_root: Path, temp_home: Path) -> DestinationResolver:
    """Create a resolver rooted at temporary project and home directories."""
    return DestinationResolver(project_root=project_root, home=temp_home)


@pytest.fixture
def target_installer(resolver: DestinationResolver) -> TargetInstaller:
    """Create a TargetInstaller writing to the real (temporary) filesystem."""
    return TargetInstaller(resolver, RealFileSystem())


@pytest.fixture
def write_files():
    """Return a helper that creates files (with parents) under a root."""

    def _write(root: Path, files: dict[str, str]) -> Path:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return root

    return _write


# ============================================================================
# Mock FileSystem Fixture
# ============================================================================


@pytest.fixture
def mock_filesystem() -> MagicMock:
    """Create a mock FileSystem for testing.

    The mock tracks all filesystem operations without touching real files.
    """
    fs = MagicMock()
    fs.exists.return_value = False
    fs.is_dir.return_value = False
    fs.is_file.return_value = False
    fs.iterdir.return_value = []
    return fs


# ============================================================================
# Sample Content Fixtures
# ============================================================================


@pytest.fixture
def sample_skill_content() -> str:
    """Sample skill SKILL.md content."""
    return """---
name: humanizer
description: Rewrites text to sound natural
---

# Humanizer Skill

Removes signs of AI-generated writing.
"""


@pytest.fixture
def sample_agent_content() -> str:
    """Sample Copilot agent file content."""
    return """---
name: architect
description: Plans system changes
tools:
  - read
  - search
---

# Architect Agent
"""


@pytest.fixture
def sample_prompt_content() -> str:
    """Sample Copilot prompt file content."""
    return """---
mode: agent
description: Update llms.txt
---

Update the llms.txt file for this repository.
"""
