"""Exception hierarchy for arca.

Resolution errors are always fatal to the operation that triggered them.
Fetch errors are terminal for an install but isolated per asset during a sync.
"""

from pathlib import Path


class ArcaError(Exception):
    """Base class for all arca errors."""


class ResolutionError(ArcaError):
    """A constraint could not be resolved against a manifest."""


class AssetNotFoundError(ResolutionError):
    def __init__(self, asset_id: str) -> None:
        self.asset_id = asset_id
        super().__init__(f"Asset '{asset_id}' not found in manifest")


class NoMatchingVersionError(ResolutionError):
    def __init__(self, asset_id: str, constraint: str) -> None:
        self.asset_id = asset_id
        self.constraint = constraint
        super().__init__(f"No version of '{asset_id}' matches '{constraint}'")


class VersionNotFoundError(ResolutionError):
    def __init__(self, asset_id: str, version: str) -> None:
        self.asset_id = asset_id
        self.version = version
        super().__init__(f"Version '{version}' of '{asset_id}' not found in manifest")


class FetchError(ArcaError):
    """Content could not be retrieved from a source."""


class SourceUnreachableError(FetchError):
    """Network, authentication or clone failure.

    The only error kind that is worth retrying.
    """

    def __init__(self, location: str, detail: str) -> None:
        self.location = location
        self.detail = detail
        super().__init__(f"Source unreachable: {location}\n{detail}")


class PathNotFoundError(FetchError):
    def __init__(self, path: str, revision: str) -> None:
        self.path = path
        self.revision = revision
        super().__init__(f"Path '{path}' not found at revision {revision}")


class CacheUnwritableError(ArcaError):
    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        super().__init__(f"Cannot write cache entry {path}: {detail}")


class InvalidCacheKeyError(ArcaError):
    def __init__(self, segment: str) -> None:
        self.segment = segment
        super().__init__(f"Invalid cache key segment: {segment!r}")


class LockfileCorruptError(ArcaError):
    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        super().__init__(f"Lockfile {path} is corrupt: {detail}")


class ManifestError(ArcaError):
    """A source manifest is missing or malformed."""


class WorkspaceConfigError(ArcaError):
    """The workspace configuration file is malformed."""


class UnknownSourceError(ArcaError):
    def __init__(self, alias: str) -> None:
        self.alias = alias
        super().__init__(f"Source '{alias}' is not registered in the workspace config")


class ProjectionError(ArcaError):
    def __init__(self, target: str, detail: str) -> None:
        self.target = target
        super().__init__(f"Cannot project to {target}: {detail}")
