"""Workspace configuration (.arca-assets.yaml) load, save and editing."""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

import yaml

from arca.errors import UnknownSourceError, WorkspaceConfigError
from arca.models import AssetEntry, Source, SourceKind, WorkspaceConfig
from arca.yaml_loader import load_yaml, scalar_text

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".arca-assets.yaml"
DEFAULT_SCHEMA = "1.0"
DEFAULT_PROJECTION_NAME = "default"

# Substring of a git URL -> provider label
_PROVIDER_HOSTS = (
    ("github.com", "github"),
    ("azure.com", "azure"),
)


def get_config_path(workspace_root: Path) -> Path:
    """Get path to the workspace configuration file."""
    return workspace_root / CONFIG_FILE_NAME


def empty_config() -> WorkspaceConfig:
    return WorkspaceConfig(schema=DEFAULT_SCHEMA, sources={}, assets=())


def _source_from_dict(alias: str, data: Any, path: Path) -> Source:
    if not isinstance(data, dict):
        raise WorkspaceConfigError(f"{path}: source '{alias}' must be a mapping")
    kind = data.get("type")
    if kind not in ("git", "local"):
        raise WorkspaceConfigError(f"{path}: source '{alias}' has invalid type {kind!r}")
    url = data.get("url")
    source_path = data.get("path")
    if kind == "git" and not url:
        raise WorkspaceConfigError(f"{path}: git source '{alias}' has no url")
    if kind == "local" and not source_path:
        raise WorkspaceConfigError(f"{path}: local source '{alias}' has no path")
    provider = data.get("provider")
    return Source(
        kind=kind,
        url=scalar_text(url) if url else None,
        path=scalar_text(source_path) if source_path else None,
        provider=scalar_text(provider) if provider else None,
    )


def _entry_from_dict(index: int, data: Any, path: Path) -> AssetEntry:
    if not isinstance(data, dict):
        raise WorkspaceConfigError(f"{path}: assets[{index}] must be a mapping")
    asset_id = data.get("id")
    source = data.get("source")
    if not asset_id or not source:
        raise WorkspaceConfigError(f"{path}: assets[{index}] needs both 'id' and 'source'")
    projections = data.get("projections") or {}
    if not isinstance(projections, dict):
        raise WorkspaceConfigError(f"{path}: assets[{index}].projections must be a mapping")
    return AssetEntry(
        asset_id=scalar_text(asset_id),
        source=scalar_text(source),
        version=scalar_text(data.get("version")),
        projections={scalar_text(k): scalar_text(v) for k, v in projections.items()},
    )


def load_workspace_config(workspace_root: Path) -> WorkspaceConfig:
    """Load .arca-assets.yaml, returning an empty config if it does not exist.

    Raises:
        WorkspaceConfigError: If the file is not valid YAML or has the wrong shape
    """
    path = get_config_path(workspace_root)
    if not path.exists():
        return empty_config()

    try:
        data = load_yaml(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise WorkspaceConfigError(f"{path}: invalid YAML: {e}") from e

    if data is None:
        return empty_config()
    if not isinstance(data, dict):
        raise WorkspaceConfigError(f"{path}: expected a mapping at the top level")

    raw_sources = data.get("sources") or {}
    raw_assets = data.get("assets") or []
    if not isinstance(raw_sources, dict):
        raise WorkspaceConfigError(f"{path}: 'sources' must be a mapping")
    if not isinstance(raw_assets, list):
        raise WorkspaceConfigError(f"{path}: 'assets' must be a list")

    sources = {
        scalar_text(alias): _source_from_dict(scalar_text(alias), value, path)
        for alias, value in raw_sources.items()
    }
    assets = tuple(_entry_from_dict(i, value, path) for i, value in enumerate(raw_assets))
    schema = scalar_text(data.get("schema")) or DEFAULT_SCHEMA
    return WorkspaceConfig(schema=schema, sources=sources, assets=assets)


def _source_to_dict(source: Source) -> dict[str, str]:
    result = {"type": source.kind}
    if source.provider:
        result["provider"] = source.provider
    if source.url:
        result["url"] = source.url
    if source.path:
        result["path"] = source.path
    return result


def save_workspace_config(workspace_root: Path, config: WorkspaceConfig) -> None:
    """Write .arca-assets.yaml, preserving source and asset order."""
    data = {
        "schema": config.schema,
        "sources": {alias: _source_to_dict(s) for alias, s in config.sources.items()},
        "assets": [
            {
                "id": entry.asset_id,
                "source": entry.source,
                "version": entry.version,
                "projections": dict(entry.projections),
            }
            for entry in config.assets
        ],
    }
    content = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    get_config_path(workspace_root).write_text(content, encoding="utf-8")
    logger.debug("Saved workspace config with %d assets", len(config.assets))


def derive_alias(location: str, workspace_root: Path | None = None) -> str:
    """Last path segment of a URL or path, without a trailing .git.

    With a workspace root the location is a local directory and is resolved
    against the root first, so "." and "../" name the directory they point at.
    """
    if workspace_root is not None:
        name = (workspace_root / location).resolve().name
    else:
        clean = location.replace("\\", "/").rstrip("/")
        name = clean.rsplit("/", 1)[-1]
        name = name.removesuffix(".git")
        # Drop scp-style host prefixes such as "git@host:repo"
        name = name.rsplit(":", 1)[-1]
    if name in ("", ".", ".."):
        return "source"
    return name


def infer_provider(url: str) -> str | None:
    for host, provider in _PROVIDER_HOSTS:
        if host in url:
            return provider
    return None


def detect_source_kind(location: str, workspace_root: Path) -> SourceKind:
    """An existing directory is a local source; anything else is treated as git."""
    if (workspace_root / location).is_dir():
        return "local"
    return "git"


def new_source(location: str, kind: SourceKind) -> Source:
    """Build an unregistered source for a URL or path."""
    if kind == "git":
        return Source(kind="git", url=location, provider=infer_provider(location))
    return Source(kind="local", path=location)


def ensure_source(
    config: WorkspaceConfig,
    location: str,
    kind: SourceKind,
    workspace_root: Path | None = None,
) -> tuple[WorkspaceConfig, str]:
    """Register a source unless an identical one exists.

    Local locations are named after the directory they resolve to under
    workspace_root, when one is given.

    Returns:
        Tuple of (possibly updated config, alias of the source)
    """
    for alias, existing in config.sources.items():
        if existing.kind == kind and existing.location == location:
            return config, alias

    base_alias = derive_alias(location, workspace_root if kind == "local" else None)
    alias = base_alias
    counter = 1
    while alias in config.sources:
        alias = f"{base_alias}-{counter}"
        counter += 1

    source = new_source(location, kind)
    logger.debug("Registered source %s -> %s", alias, location)
    sources = {**config.sources, alias: source}
    return replace(config, sources=sources), alias


def add_asset(config: WorkspaceConfig, entry: AssetEntry) -> WorkspaceConfig:
    """Insert or replace the entry with the same (asset id, source)."""
    assets = list(config.assets)
    for index, existing in enumerate(assets):
        if existing.asset_id == entry.asset_id and existing.source == entry.source:
            assets[index] = entry
            return replace(config, assets=tuple(assets))
    assets.append(entry)
    return replace(config, assets=tuple(assets))


def source_for_entry(config: WorkspaceConfig, entry: AssetEntry) -> Source:
    """Look up the registered source an asset entry refers to.

    Raises:
        UnknownSourceError: If the alias is not registered
    """
    if entry.source not in config.sources:
        raise UnknownSourceError(entry.source)
    return config.sources[entry.source]


def default_projection_target(source_alias: str, asset_id: str, is_directory: bool) -> str:
    """Workspace-relative default projection path for an installed asset."""
    extension = "" if is_directory else ".md"
    return f".arca/assets/{source_alias}/{asset_id}{extension}"
