"""YAML frontmatter reading for installed markdown artifacts."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


class FrontmatterResult:
    """Result of parsing frontmatter from content."""

    __slots__ = ("data", "errors", "success")

    def __init__(self, data: dict | None = None, errors: list[str] | None = None) -> None:
        """Initialize frontmatter result.

        Args:
            data: The parsed frontmatter mapping.
            errors: List of parsing errors encountered.
        """
        self.data = data or {}
        self.errors = errors or []
        self.success = len(self.errors) == 0


def parse_frontmatter(content: str) -> FrontmatterResult:
    """Parse YAML frontmatter from markdown content.

    Extracts the block between the opening and closing '---' delimiters and
    loads it as YAML.

    Args:
        content: The full markdown content with optional frontmatter.

    Returns:
        FrontmatterResult with the parsed mapping and any errors.

    Example:
        >>> result = parse_frontmatter("---\\nname: test\\n---\\nBody")
        >>> result.data
        {'name': 'test'}
    """
    if not content.startswith("---"):
        return FrontmatterResult(errors=["Content must have YAML frontmatter"])

    try:
        end_idx = content.index("---", 3)
    except ValueError:
        return FrontmatterResult(errors=["Invalid frontmatter: missing closing ---"])

    try:
        data = yaml.safe_load(content[3:end_idx])
    except yaml.YAMLError as e:
        return FrontmatterResult(errors=[f"Invalid YAML in frontmatter: {e}"])

    if data is None:
        return FrontmatterResult()
    if not isinstance(data, dict):
        return FrontmatterResult(errors=["Frontmatter must be a mapping"])
    return FrontmatterResult(data=data)


def read_description(path: Path) -> str:
    """Read the 'description' field from a markdown file's frontmatter.

    Args:
        path: Markdown file, typically a SKILL.md.

    Returns:
        The description, or "" if the file or field is missing or unparsable.
    """
    if not path.is_file():
        return ""
    result = parse_frontmatter(path.read_text(encoding="utf-8", errors="replace"))
    if not result.success:
        logger.debug("Skipping frontmatter of %s: %s", path, "; ".join(result.errors))
        return ""
    description = result.data.get("description", "")
    return str(description).strip() if description else ""
