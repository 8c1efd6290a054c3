"""Fake implementation of content fetching for testing."""

import threading
from pathlib import Path

from arca.errors import PathNotFoundError, SourceUnreachableError
from arca.gateway.fetch.abc import ContentFetcher
from arca.gateway.fetch.types import FetchedFile
from arca.models import LOCAL_REVISION, Source

DEFAULT_FAKE_COMMIT = "0" * 40


class FakeContentFetcher(ContentFetcher):
    """In-memory fake implementation of content fetching.

    This fake accepts pre-configured state in its constructor and tracks
    calls for test assertions.

    Constructor Injection:
    ---------------------
    - trees: Mapping of source location -> {relative path: bytes} at head
    - head_revisions: Mapping of source location -> commit reported at head
    - pinned_trees: Mapping of (source location, revision) -> tree; requests for
      a revision with no pinned tree fall back to head, like the git fetcher
    - unreachable: Source locations that raise SourceUnreachableError
    - failing_paths: Mapping of path -> exception raised when it is fetched
    - transient_failures: Mapping of path -> number of SourceUnreachableErrors
      raised before the path succeeds

    Call Tracking:
    -------------
    - fetch_calls: List of (location, path, revision) tuples
    """

    def __init__(
        self,
        *,
        trees: dict[str, dict[str, bytes]] | None = None,
        head_revisions: dict[str, str] | None = None,
        pinned_trees: dict[tuple[str, str], dict[str, bytes]] | None = None,
        unreachable: set[str] | None = None,
        failing_paths: dict[str, Exception] | None = None,
        transient_failures: dict[str, int] | None = None,
    ) -> None:
        self._trees = trees or {}
        self._head_revisions = head_revisions or {}
        self._pinned_trees = pinned_trees or {}
        self._unreachable = unreachable or set()
        self._failing_paths = failing_paths or {}
        self._transient_failures = dict(transient_failures or {})
        self._lock = threading.Lock()
        self._fetch_calls: list[tuple[str, str, str | None]] = []

    def _tree_at(
        self, source: Source, path: str, revision: str | None
    ) -> tuple[dict[str, bytes], str]:
        location = source.location
        with self._lock:
            self._fetch_calls.append((location, path, revision))
            remaining = self._transient_failures.get(path, 0)
            if remaining > 0:
                self._transient_failures[path] = remaining - 1
                raise SourceUnreachableError(location, "transient failure")
        if location in self._unreachable:
            raise SourceUnreachableError(location, "unreachable")
        if path in self._failing_paths:
            raise self._failing_paths[path]

        if source.kind == "local":
            return self._trees.get(location, {}), LOCAL_REVISION
        if revision is not None and (location, revision) in self._pinned_trees:
            return self._pinned_trees[(location, revision)], revision
        return self._trees.get(location, {}), self._head_revisions.get(
            location, DEFAULT_FAKE_COMMIT
        )

    def fetch_file(self, source: Source, path: str, revision: str | None) -> FetchedFile:
        tree, revision_id = self._tree_at(source, path, revision)
        if path not in tree:
            raise PathNotFoundError(path, revision_id)
        return FetchedFile(content=tree[path], revision_id=revision_id)

    def fetch_directory(
        self, source: Source, path: str, revision: str | None, destination: Path
    ) -> str:
        tree, revision_id = self._tree_at(source, path, revision)
        prefix = path.rstrip("/") + "/"
        files = {
            name[len(prefix) :]: data for name, data in tree.items() if name.startswith(prefix)
        }
        if not files:
            raise PathNotFoundError(path, revision_id)
        destination.mkdir(parents=True, exist_ok=True)
        for relative, data in files.items():
            target = destination / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        return revision_id

    @property
    def fetch_calls(self) -> list[tuple[str, str, str | None]]:
        """Read-only access to fetch calls for test assertions.

        Returns list of (location, path, revision) tuples.
        """
        with self._lock:
            return list(self._fetch_calls)
