"""Content fetching from a local directory source."""

import stat
from pathlib import Path

from arca.errors import PathNotFoundError, SourceUnreachableError
from arca.gateway.fetch.abc import ContentFetcher
from arca.gateway.fetch.types import FetchedFile
from arca.models import LOCAL_REVISION, Source


def copy_directory_contents(source_dir: Path, target_dir: Path) -> int:
    """Copy directory contents recursively, returning count of files copied.

    Failures reading the source raise SourceUnreachableError; failures
    writing under target_dir propagate as OSError.
    """
    target_dir.mkdir(parents=True, exist_ok=True)
    try:
        source_paths = sorted(source_dir.rglob("*"))
    except OSError as e:
        raise SourceUnreachableError(str(source_dir), str(e)) from e

    count = 0
    for source_path in source_paths:
        relative = source_path.relative_to(source_dir)
        if ".git" in relative.parts or not source_path.is_file():
            continue
        try:
            content = source_path.read_bytes()
            mode = stat.S_IMODE(source_path.stat().st_mode)
        except OSError as e:
            raise SourceUnreachableError(str(source_path), str(e)) from e
        target_path = target_dir / relative
        target_path.parent.mkdir(parents=True, exist_ok=True)
        target_path.write_bytes(content)
        target_path.chmod(mode)
        count += 1
    return count


def resolve_inside(root: Path, relative: str) -> Path | None:
    """Join a manifest path onto a root, refusing paths that escape it."""
    candidate = (root / relative).resolve()
    if not candidate.is_relative_to(root.resolve()):
        return None
    return candidate


class LocalContentFetcher(ContentFetcher):
    """Reads assets straight from a directory on disk.

    There is no version-control identity, so every read reports the
    synthetic revision "local" and the requested revision is ignored.
    """

    def __init__(self, workspace_root: Path) -> None:
        """Initialize with the workspace root used to anchor relative source paths."""
        self._workspace_root = workspace_root

    def _source_root(self, source: Source) -> Path:
        root = Path(source.path or "")
        if not root.is_absolute():
            root = self._workspace_root / root
        if not root.is_dir():
            raise SourceUnreachableError(str(root), "local source directory does not exist")
        return root

    def fetch_file(self, source: Source, path: str, revision: str | None) -> FetchedFile:
        root = self._source_root(source)
        file_path = resolve_inside(root, path)
        if file_path is None or not file_path.is_file():
            raise PathNotFoundError(path, LOCAL_REVISION)
        try:
            content = file_path.read_bytes()
        except OSError as e:
            raise SourceUnreachableError(str(file_path), str(e)) from e
        return FetchedFile(content=content, revision_id=LOCAL_REVISION)

    def fetch_directory(
        self, source: Source, path: str, revision: str | None, destination: Path
    ) -> str:
        root = self._source_root(source)
        dir_path = resolve_inside(root, path)
        if dir_path is None or not dir_path.is_dir():
            raise PathNotFoundError(path, LOCAL_REVISION)
        copy_directory_contents(dir_path, destination)
        return LOCAL_REVISION
