"""Parsing and loading of publisher manifests (arca-manifest.yaml)."""

import logging
from typing import Any

import yaml

from arca.errors import ManifestError, PathNotFoundError
from arca.gateway.fetch.abc import ContentFetcher
from arca.models import ASSET_KINDS, Manifest, ManifestAsset, ManifestVersion, Source
from arca.yaml_loader import load_yaml, scalar_text

logger = logging.getLogger(__name__)

MANIFEST_FILE = "arca-manifest.yaml"


def _parse_version(asset_id: str, version: str, data: Any, origin: str) -> ManifestVersion:
    if not isinstance(data, dict):
        raise ManifestError(f"{origin}: version '{version}' of '{asset_id}' must be a mapping")
    path = data.get("path")
    if not isinstance(path, str) or not path:
        raise ManifestError(f"{origin}: version '{version}' of '{asset_id}' has no path")
    runtime = data.get("runtime")
    if runtime is not None and not isinstance(runtime, dict):
        raise ManifestError(
            f"{origin}: runtime of '{asset_id}@{version}' must be a mapping"
        )
    ref = data.get("ref")
    return ManifestVersion(
        path=path,
        ref=scalar_text(ref) if ref is not None else None,
        runtime=runtime,
    )


def _parse_asset(asset_id: str, data: Any, origin: str) -> ManifestAsset:
    if not isinstance(data, dict):
        raise ManifestError(f"{origin}: asset '{asset_id}' must be a mapping")

    kind = data.get("kind")
    if kind not in ASSET_KINDS:
        raise ManifestError(
            f"{origin}: asset '{asset_id}' has invalid kind {kind!r} "
            f"(expected one of: {', '.join(ASSET_KINDS)})"
        )

    raw_versions = data.get("versions") or {}
    if not isinstance(raw_versions, dict):
        raise ManifestError(f"{origin}: versions of '{asset_id}' must be a mapping")
    versions = {
        scalar_text(key): _parse_version(asset_id, scalar_text(key), value, origin)
        for key, value in raw_versions.items()
    }

    raw_dependencies = data.get("dependencies") or {}
    if not isinstance(raw_dependencies, dict):
        raise ManifestError(f"{origin}: dependencies of '{asset_id}' must be a mapping")
    # A bare key (no constraint) means any version
    dependencies = {
        scalar_text(dep_id): scalar_text(constraint)
        for dep_id, constraint in raw_dependencies.items()
    }

    return ManifestAsset(
        kind=kind,
        versions=versions,
        description=scalar_text(data.get("description")),
        dependencies=dependencies,
    )


def parse_manifest(text: str, origin: str) -> Manifest:
    """Parse manifest YAML.

    Args:
        text: Raw YAML content
        origin: Human-readable location used in error messages

    Raises:
        ManifestError: If the YAML is invalid or does not describe a manifest
    """
    try:
        data = load_yaml(text)
    except yaml.YAMLError as e:
        raise ManifestError(f"{origin}: invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError(f"{origin}: manifest must be a mapping")

    raw_assets = data.get("assets") or {}
    if not isinstance(raw_assets, dict):
        raise ManifestError(f"{origin}: 'assets' must be a mapping")

    template = None
    strategy = data.get("version-strategy")
    if strategy is not None:
        if not isinstance(strategy, dict):
            raise ManifestError(f"{origin}: 'version-strategy' must be a mapping")
        if strategy.get("template"):
            template = scalar_text(strategy["template"])

    assets = {
        scalar_text(asset_id): _parse_asset(scalar_text(asset_id), value, origin)
        for asset_id, value in raw_assets.items()
    }
    return Manifest(
        schema=scalar_text(data.get("schema")),
        assets=assets,
        version_template=template,
    )


def load_manifest(
    fetcher: ContentFetcher, source: Source, revision: str | None
) -> tuple[Manifest, str]:
    """Fetch and parse the manifest at the root of a source.

    Args:
        fetcher: Fetcher used to read the manifest file
        source: Source to read from
        revision: Revision to read at; None means the source's head

    Returns:
        Tuple of (manifest, revision id the manifest was read at)

    Raises:
        ManifestError: If the source has no manifest or it is malformed
        SourceUnreachableError: If the source cannot be contacted
    """
    try:
        fetched = fetcher.fetch_file(source, MANIFEST_FILE, revision)
    except PathNotFoundError as e:
        raise ManifestError(f"{source.location}: no {MANIFEST_FILE} at {e.revision}") from e

    origin = f"{source.location}:{MANIFEST_FILE}"
    try:
        text = fetched.content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ManifestError(f"{origin}: not valid UTF-8") from e

    manifest = parse_manifest(text, origin)
    logger.debug(
        "Loaded manifest %s at %s (%d assets)", origin, fetched.revision_id, len(manifest.assets)
    )
    return manifest, fetched.revision_id
