"""Fake projector for tests."""

from pathlib import Path

from arca.gateway.projection.abc import Projector
from arca.models import Artifact


class FakeProjector(Projector):
    """Records projections instead of touching the filesystem.

    Call Tracking:
    -------------
    - projections: List of (cached_path, target, artifact) tuples
    - removed: List of removed targets
    """

    def __init__(self, workspace_root: Path, *, failing_targets: set[str] | None = None) -> None:
        self._workspace_root = workspace_root
        self._failing_targets = failing_targets or set()
        self._projections: list[tuple[Path, str, Artifact]] = []
        self._removed: list[str] = []

    def project(self, cached_path: Path, target: str, artifact: Artifact) -> Path:
        if target in self._failing_targets:
            raise OSError(f"cannot project to {target}")
        self._projections.append((cached_path, target, artifact))
        return self._workspace_root / target

    def remove(self, target: str) -> None:
        self._removed.append(target)

    @property
    def projections(self) -> list[tuple[Path, str, Artifact]]:
        return list(self._projections)

    @property
    def removed(self) -> list[str]:
        return list(self._removed)
