"""Result types for content fetching."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FetchedFile:
    """Bytes of one file plus the revision they were read at."""

    content: bytes
    revision_id: str  # commit SHA, or "local" for local sources
