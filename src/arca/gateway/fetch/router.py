"""Dispatch fetches to the implementation for each source kind."""

from pathlib import Path

from arca.gateway.fetch.abc import ContentFetcher
from arca.gateway.fetch.types import FetchedFile
from arca.models import Source


class SourceRouter(ContentFetcher):
    """ContentFetcher that delegates on `source.kind`."""

    def __init__(self, *, local: ContentFetcher, git: ContentFetcher) -> None:
        self._by_kind: dict[str, ContentFetcher] = {"local": local, "git": git}

    def _for(self, source: Source) -> ContentFetcher:
        if source.kind not in self._by_kind:
            raise ValueError(f"Unsupported source type: {source.kind}")
        return self._by_kind[source.kind]

    def fetch_file(self, source: Source, path: str, revision: str | None) -> FetchedFile:
        return self._for(source).fetch_file(source, path, revision)

    def fetch_directory(
        self, source: Source, path: str, revision: str | None, destination: Path
    ) -> str:
        return self._for(source).fetch_directory(source, path, revision, destination)
