"""Package manager for AI coding assistant skills, agents, prompts and instructions."""

__version__ = "0.1.0"

# Export protocol interfaces for type hints and dependency injection
from copm.protocols import (
    FileSystem,
    PackageClassifier,
    PackageFetcher,
    ProjectRegistry,
)

__all__ = [
    "__version__",
    "FileSystem",
    "PackageClassifier",
    "PackageFetcher",
    "ProjectRegistry",
]
