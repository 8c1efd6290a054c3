"""Abstract interface for materializing cached artifacts in a workspace."""

from abc import ABC, abstractmethod
from pathlib import Path

from arca.models import Artifact


class Projector(ABC):
    """Materializes a cached artifact at a workspace path.

    Callers guarantee the cached path is complete and hashed before
    projection is invoked.
    """

    @abstractmethod
    def project(self, cached_path: Path, target: str, artifact: Artifact) -> Path:
        """Make `target` (relative to the workspace root) point at `cached_path`.

        Any existing file, directory or link at the target is replaced, and the
        target is excluded from version control.

        Returns:
            Absolute path of the projection
        """
        ...

    @abstractmethod
    def remove(self, target: str) -> None:
        """Delete a projection if it exists."""
        ...
