"""Symlink-based projection with .gitignore bookkeeping."""

import logging
import shutil
from pathlib import Path

from arca.gateway.projection.abc import Projector
from arca.models import Artifact, DirectoryArtifact

logger = logging.getLogger(__name__)

GITIGNORE_MARKER = "# ARCA managed assets"


def ensure_gitignored(workspace_root: Path, absolute_target: Path) -> bool:
    """Append a workspace-relative path to .gitignore unless already listed.

    Returns:
        True if .gitignore was modified, False if the path was already ignored
    """
    gitignore_path = workspace_root / ".gitignore"
    relative = absolute_target.relative_to(workspace_root).as_posix()

    content = ""
    if gitignore_path.exists():
        content = gitignore_path.read_text(encoding="utf-8")
    if any(line.strip() == relative for line in content.splitlines()):
        return False

    additions: list[str] = []
    if content and not content.endswith("\n"):
        additions.append("")
    if GITIGNORE_MARKER not in content:
        if content:
            additions.append("")
        additions.append(GITIGNORE_MARKER)
    additions.append(relative)

    with open(gitignore_path, "a", encoding="utf-8") as f:
        f.write("\n".join(additions) + "\n")
    return True


class SymlinkProjector(Projector):
    """Projects cached artifacts as symlinks inside the workspace."""

    def __init__(self, workspace_root: Path) -> None:
        self._workspace_root = workspace_root

    def project(self, cached_path: Path, target: str, artifact: Artifact) -> Path:
        absolute_target = self._workspace_root / target
        absolute_target.parent.mkdir(parents=True, exist_ok=True)

        # Check is_symlink too for broken symlinks
        if absolute_target.is_symlink() or absolute_target.is_file():
            absolute_target.unlink()
        elif absolute_target.exists():
            shutil.rmtree(absolute_target)

        is_directory = isinstance(artifact, DirectoryArtifact)
        absolute_target.symlink_to(cached_path, target_is_directory=is_directory)
        if ensure_gitignored(self._workspace_root, absolute_target):
            logger.debug("Added %s to .gitignore", target)
        return absolute_target

    def remove(self, target: str) -> None:
        absolute_target = self._workspace_root / target
        if absolute_target.is_symlink() or absolute_target.is_file():
            absolute_target.unlink()
        elif absolute_target.exists():
            shutil.rmtree(absolute_target)
