"""Package reference parsing and package-name derivation."""

from __future__ import annotations

from dataclasses import dataclass

from copm.errors import InvalidSpec

__all__ = ["PackageSpec", "package_name", "parse_package_spec"]

# Order matters: the generic ".md" must come last
_MD_SUFFIXES = (".prompt.md", ".agent.md", ".instructions.md", ".md")


@dataclass(frozen=True)
class PackageSpec:
    """A parsed "owner/repo[:subpath]" reference."""

    owner: str
    repo: str
    subpath: str | None = None

    @property
    def source(self) -> str:
        """The reference without subpath, e.g. "github/awesome-copilot"."""
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        if self.subpath is None:
            return self.source
        return f"{self.source}:{self.subpath}"

    @property
    def name(self) -> str:
        """Package name used for install directories and ledger keys."""
        return package_name(self.repo, self.subpath)


def parse_package_spec(spec: str) -> PackageSpec:
    """Parse a package reference.

    The string is split on the first ':' into repo part and subpath, then the
    repo part on the first '/' into owner and repo. No character-set checks
    are made beyond non-emptiness.

    Args:
        spec: Reference like "owner/repo" or "owner/repo:sub/path".

    Returns:
        The parsed PackageSpec.

    Raises:
        InvalidSpec: If there is no '/', owner or repo is empty, or a ':' is
            present with nothing after it.

    Example:
        >>> parse_package_spec("github/awesome-copilot:agents")
        PackageSpec(owner='github', repo='awesome-copilot', subpath='agents')
    """
    repo_part, sep, subpath = spec.partition(":")
    if sep and not subpath:
        raise InvalidSpec(spec)

    owner, slash, repo = repo_part.partition("/")
    if not slash or not owner or not repo:
        raise InvalidSpec(spec)

    return PackageSpec(owner=owner, repo=repo, subpath=subpath if sep else None)


def _strip_md_suffix(name: str) -> str:
    for suffix in _MD_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def package_name(repo: str, subpath: str | None = None) -> str:
    """Derive a package name from a repo and optional subpath.

    Examples:
        >>> package_name("humanizer")
        'humanizer'
        >>> package_name("awesome-copilot", "agents")
        'awesome-copilot-agents'
        >>> package_name("awesome-copilot", "prompts/update-llms.prompt.md")
        'awesome-copilot-update-llms'
    """
    if subpath is None:
        return repo
    last = subpath.rstrip("/").split("/")[-1] or subpath
    stem = _strip_md_suffix(last)
    if repo.endswith(stem):
        return repo
    return f"{repo}-{stem}"
