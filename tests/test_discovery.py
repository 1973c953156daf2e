"""Tests for discovery module."""

from __future__ import annotations

from pathlib import Path

import pytest

from copm.discovery import Classifier, classify_dir, classify_file
from copm.errors import AmbiguousTargets, NoTargetsDetected, UnrecognizedFileType
from copm.types import PLACEHOLDER_VERSION, ArtifactType, Target


@pytest.fixture
def classifier() -> Classifier:
    """Create a Classifier instance."""
    return Classifier.create()


class TestClassifyDir:
    """Tests for the directory rule table."""

    def test_skill_file(self, package_root: Path, write_files) -> None:
        """Test SKILL.md marks a skill."""
        write_files(package_root, {"SKILL.md": "# Skill"})
        assert classify_dir(package_root) == ArtifactType.SKILL

    def test_copilot_instructions(self, package_root: Path, write_files) -> None:
        """Test copilot-instructions.md marks repository instructions."""
        write_files(package_root, {"copilot-instructions.md": "Be nice"})
        assert classify_dir(package_root) == ArtifactType.COPILOT_INSTRUCTIONS

    def test_skill_beats_instructions(self, package_root: Path, write_files) -> None:
        """Test SKILL.md has priority over copilot-instructions.md."""
        write_files(package_root, {"SKILL.md": "", "copilot-instructions.md": ""})
        assert classify_dir(package_root) == ArtifactType.SKILL

    def test_agents(self, package_root: Path, write_files) -> None:
        """Test *.agent.md files mark agents."""
        write_files(package_root, {"architect.agent.md": "", "README.md": ""})
        assert classify_dir(package_root) == ArtifactType.COPILOT_AGENTS

    def test_prompts(self, package_root: Path, write_files) -> None:
        """Test *.prompt.md files mark prompts."""
        write_files(package_root, {"review.prompt.md": ""})
        assert classify_dir(package_root) == ArtifactType.COPILOT_PROMPTS

    def test_custom_instructions(self, package_root: Path, write_files) -> None:
        """Test *.instructions.md files mark custom instructions."""
        write_files(package_root, {"python.instructions.md": ""})
        assert classify_dir(package_root) == ArtifactType.COPILOT_CUSTOM_INSTRUCTIONS

    def test_suffix_priority(self, package_root: Path, write_files) -> None:
        """Test agents beat prompts beat instructions on coincidental overlap."""
        write_files(
            package_root,
            {"a.instructions.md": "", "b.prompt.md": "", "c.agent.md": ""},
        )
        assert classify_dir(package_root) == ArtifactType.COPILOT_AGENTS

        (package_root / "c.agent.md").unlink()
        assert classify_dir(package_root) == ArtifactType.COPILOT_PROMPTS

    def test_skill_collection(self, package_root: Path, write_files) -> None:
        """Test a directory of skill subdirectories is a skill."""
        write_files(package_root, {"one/SKILL.md": "", "two/SKILL.md": ""})
        assert classify_dir(package_root) == ArtifactType.SKILL

    def test_suffix_beats_skill_collection(self, package_root: Path, write_files) -> None:
        """Test suffix matches are checked before subdirectory skills."""
        write_files(package_root, {"one/SKILL.md": "", "x.prompt.md": ""})
        assert classify_dir(package_root) == ArtifactType.COPILOT_PROMPTS

    def test_only_immediate_entries(self, package_root: Path, write_files) -> None:
        """Test files two levels down are ignored."""
        write_files(package_root, {"a/b/SKILL.md": "", "a/b/x.agent.md": ""})
        assert classify_dir(package_root) is None

    def test_directory_with_suffix_name_ignored(self, package_root: Path) -> None:
        """Test a directory named like an agent file does not count."""
        (package_root / "weird.agent.md").mkdir()
        assert classify_dir(package_root) is None

    def test_empty(self, package_root: Path) -> None:
        """Test an empty directory classifies as nothing."""
        assert classify_dir(package_root) is None


class TestClassifyFile:
    """Tests for the single-file rule table."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("update-llms.prompt.md", ArtifactType.COPILOT_PROMPTS),
            ("architect.agent.md", ArtifactType.COPILOT_AGENTS),
            ("python.instructions.md", ArtifactType.COPILOT_CUSTOM_INSTRUCTIONS),
            ("README.md", None),
        ],
    )
    def test_suffixes(self, name: str, expected: ArtifactType | None) -> None:
        """Test each suffix maps to its type."""
        assert classify_file(Path(name)) == expected


class TestDetect:
    """Tests for Classifier.detect."""

    def test_skill_at_root(self, classifier: Classifier, package_root: Path, write_files) -> None:
        """Test a root with only SKILL.md yields one skill target at '.'."""
        write_files(package_root, {"SKILL.md": "# Humanizer"})

        manifest = classifier.detect(package_root, None, "blader/humanizer")

        assert manifest.targets == (Target(ArtifactType.SKILL, "."),)
        assert manifest.version == PLACEHOLDER_VERSION
        assert manifest.name == package_root.name

    def test_agent_at_root(self, classifier: Classifier, package_root: Path, write_files) -> None:
        """Test a root with an agent file yields one agents target at '.'."""
        write_files(package_root, {"architect.agent.md": ""})

        manifest = classifier.detect(package_root, None, "owner/repo")

        assert manifest.targets == (Target(ArtifactType.COPILOT_AGENTS, "."),)

    def test_root_preempts_subdirectories(
        self, classifier: Classifier, package_root: Path, write_files
    ) -> None:
        """Test root classification wins even when subdirectories would classify."""
        write_files(
            package_root,
            {"SKILL.md": "", "agents/a.agent.md": "", "prompts/b.prompt.md": ""},
        )

        manifest = classifier.detect(package_root, None, "owner/repo")

        assert manifest.targets == (Target(ArtifactType.SKILL, "."),)

    def test_single_subdirectory(
        self, classifier: Classifier, package_root: Path, write_files
    ) -> None:
        """Test one classifiable subdirectory becomes the target."""
        write_files(
            package_root,
            {"README.md": "", "skills/planning/SKILL.md": "", "docs/guide.txt": ""},
        )

        manifest = classifier.detect(package_root, None, "owner/repo")

        assert manifest.targets == (Target(ArtifactType.SKILL, "skills"),)

    def test_ambiguous(self, classifier: Classifier, package_root: Path, write_files) -> None:
        """Test two classifiable subdirectories fail with both candidates named."""
        write_files(package_root, {"prompts/b.prompt.md": "", "agents/a.agent.md": ""})

        with pytest.raises(AmbiguousTargets) as exc_info:
            classifier.detect(package_root, None, "owner/repo")

        err = exc_info.value
        assert err.candidates == [
            ("agents", "copilot-agents"),
            ("prompts", "copilot-prompts"),
        ]
        message = str(err)
        assert "Multiple targets detected in owner/repo" in message
        assert "Use: copm install owner/repo:<subpath>" in message
        assert message.index("agents") < message.index("prompts")

    def test_empty_root(self, classifier: Classifier, package_root: Path) -> None:
        """Test an empty root fails NoTargetsDetected."""
        with pytest.raises(NoTargetsDetected, match="No recognizable targets"):
            classifier.detect(package_root, None, "owner/repo")

    def test_unrecognized_root(
        self, classifier: Classifier, package_root: Path, write_files
    ) -> None:
        """Test a root of unrelated files suggests a subpath."""
        write_files(package_root, {"README.md": "", "src/main.py": ""})

        with pytest.raises(NoTargetsDetected, match="owner/repo:<subpath>"):
            classifier.detect(package_root, None, "owner/repo")

    def test_subpath_directory(
        self, classifier: Classifier, package_root: Path, write_files
    ) -> None:
        """Test a directory subpath disambiguates."""
        write_files(package_root, {"prompts/b.prompt.md": "", "agents/a.agent.md": ""})

        manifest = classifier.detect(package_root, "agents", "owner/repo")

        assert manifest.targets == (Target(ArtifactType.COPILOT_AGENTS, "agents"),)

    def test_subpath_missing(self, classifier: Classifier, package_root: Path) -> None:
        """Test a missing subpath fails NoTargetsDetected."""
        with pytest.raises(NoTargetsDetected, match="owner/repo:nope does not exist"):
            classifier.detect(package_root, "nope", "owner/repo")

    def test_subpath_unrecognized_directory(
        self, classifier: Classifier, package_root: Path, write_files
    ) -> None:
        """Test a subpath directory with nothing recognizable fails."""
        write_files(package_root, {"docs/guide.md": ""})

        with pytest.raises(NoTargetsDetected, match="No recognizable content"):
            classifier.detect(package_root, "docs", "owner/repo")

    def test_subpath_file(self, classifier: Classifier, package_root: Path, write_files) -> None:
        """Test a single prompt file subpath keeps the exact file path."""
        write_files(
            package_root,
            {"prompts/update-llms.prompt.md": "", "prompts/other.prompt.md": ""},
        )

        manifest = classifier.detect(
            package_root, "prompts/update-llms.prompt.md", "github/awesome-copilot"
        )

        assert manifest.targets == (
            Target(ArtifactType.COPILOT_PROMPTS, "prompts/update-llms.prompt.md"),
        )

    def test_subpath_unrecognized_file(
        self, classifier: Classifier, package_root: Path, write_files
    ) -> None:
        """Test a single file without a known suffix fails."""
        write_files(package_root, {"docs/README.md": ""})

        with pytest.raises(UnrecognizedFileType, match="Unrecognized file type"):
            classifier.detect(package_root, "docs/README.md", "owner/repo")


class TestScan:
    """Tests for Classifier.scan."""

    def test_sorted_by_path(self, classifier: Classifier, package_root: Path, write_files) -> None:
        """Test candidates come back sorted by name."""
        write_files(
            package_root,
            {"zeta/x.prompt.md": "", "alpha/SKILL.md": "", "mid/y.instructions.md": ""},
        )

        assert [t.path for t in classifier.scan(package_root)] == ["alpha", "mid", "zeta"]

    def test_deterministic(self, classifier: Classifier, package_root: Path, write_files) -> None:
        """Test repeated scans give identical results."""
        write_files(package_root, {"a/SKILL.md": "", "b/c.agent.md": ""})

        assert classifier.scan(package_root) == classifier.scan(package_root)
