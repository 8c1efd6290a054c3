"""Data models for sources, manifests, resolution results and the lockfile."""

from dataclasses import dataclass, field
from typing import Any, Literal

SourceKind = Literal["git", "local"]
AssetKind = Literal["prompt", "skill", "instruction"]

ASSET_KINDS: tuple[AssetKind, ...] = ("prompt", "skill", "instruction")

# Kinds that are materialized as a directory bundle rather than a single file
DIRECTORY_KINDS: frozenset[str] = frozenset({"skill"})

# Revision identifier reported for sources without version control
LOCAL_REVISION = "local"


@dataclass(frozen=True)
class Source:
    """A named origin of assets registered in the workspace config."""

    kind: SourceKind
    url: str | None = None
    path: str | None = None
    provider: str | None = None  # cosmetic grouping only (github, azure, ...)

    @property
    def location(self) -> str:
        """URL for git sources, filesystem path for local sources."""
        if self.kind == "git":
            return self.url or ""
        return self.path or ""


@dataclass(frozen=True)
class ManifestVersion:
    """Metadata for one published version of an asset."""

    path: str
    ref: str | None = None
    # Opaque to arca; passed through to consumers unmodified
    runtime: dict[str, Any] | None = None


@dataclass(frozen=True)
class ManifestAsset:
    """An asset declared in a source manifest."""

    kind: AssetKind
    versions: dict[str, ManifestVersion]
    description: str = ""
    dependencies: dict[str, str] = field(default_factory=dict)

    @property
    def is_directory(self) -> bool:
        return self.kind in DIRECTORY_KINDS


@dataclass(frozen=True)
class Manifest:
    """Publisher-authored arca-manifest.yaml."""

    schema: str
    assets: dict[str, ManifestAsset]
    version_template: str | None = None


@dataclass(frozen=True)
class FileArtifact:
    """Single-file asset, cached as `<asset_id>.md`."""

    extension: str = ".md"


@dataclass(frozen=True)
class DirectoryArtifact:
    """Directory bundle asset, cached as a full tree."""


Artifact = FileArtifact | DirectoryArtifact


def artifact_for_kind(kind: str) -> Artifact:
    """Map an asset kind to the shape it takes on disk."""
    if kind in DIRECTORY_KINDS:
        return DirectoryArtifact()
    return FileArtifact()


@dataclass(frozen=True)
class ResolvedNode:
    """One asset id's chosen version plus its retrieval metadata."""

    asset_id: str
    version: str
    metadata: ManifestVersion
    kind: AssetKind

    @property
    def artifact(self) -> Artifact:
        return artifact_for_kind(self.kind)


@dataclass(frozen=True)
class LockedAsset:
    """A lockfile record: exactly what was fetched for a (source, asset) pair."""

    asset_id: str
    version: str
    source: str
    commit: str  # LOCAL_REVISION for local sources
    sha256: str
    resolved_at: str  # ISO 8601 timestamp


@dataclass(frozen=True)
class Lockfile:
    """Ordered collection of locked assets (.arca-assets.lock)."""

    assets: tuple[LockedAsset, ...] = ()


@dataclass(frozen=True)
class AssetEntry:
    """An asset the workspace asked for, with where to project it."""

    asset_id: str
    source: str  # source alias
    version: str  # constraint as requested (e.g. "latest", "^1.0.0")
    projections: dict[str, str] = field(default_factory=dict)  # name -> workspace path


@dataclass(frozen=True)
class WorkspaceConfig:
    """Consumer-side declaration (.arca-assets.yaml)."""

    schema: str
    sources: dict[str, Source]
    assets: tuple[AssetEntry, ...] = ()
