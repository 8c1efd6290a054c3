"""Abstract base class for content fetching.

Every source kind exposes the same two capabilities: read one file, or copy
one directory tree into a destination. Both report the revision they read.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from arca.gateway.fetch.types import FetchedFile
from arca.models import Source


class ContentFetcher(ABC):
    """Abstract interface for retrieving asset content from a source.

    All implementations (local, git, router, fake) must implement this interface.
    """

    @abstractmethod
    def fetch_file(self, source: Source, path: str, revision: str | None) -> FetchedFile:
        """Read a single file from a source.

        Args:
            source: Source to read from
            path: Path of the file relative to the source root
            revision: Branch, tag or commit to read at; None for the default

        Returns:
            File content and the revision identifier it was read at

        Raises:
            SourceUnreachableError: If the source cannot be reached
            PathNotFoundError: If the file does not exist at the revision
        """
        ...

    @abstractmethod
    def fetch_directory(
        self, source: Source, path: str, revision: str | None, destination: Path
    ) -> str:
        """Copy a directory tree from a source into destination.

        Relative structure under `path` is preserved under `destination`.

        Returns:
            Revision identifier the tree was read at

        Raises:
            SourceUnreachableError: If the source cannot be reached
            PathNotFoundError: If the directory does not exist at the revision
        """
        ...
