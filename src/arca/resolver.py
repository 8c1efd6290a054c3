"""Version and dependency-graph resolution against a manifest.

Both functions are pure: they read the manifest and never touch the network
or the filesystem.
"""

import logging
from collections import deque
from dataclasses import replace

from arca.errors import AssetNotFoundError, NoMatchingVersionError, VersionNotFoundError
from arca.models import Manifest, ManifestVersion, ResolvedNode
from arca.versions import SemVer, parse_range, parse_version

logger = logging.getLogger(__name__)

LATEST = "latest"
VERSION_PLACEHOLDER = "{{version}}"


def _highest(candidates: list[tuple[SemVer, str]]) -> str | None:
    if not candidates:
        return None
    # Ties between equal versions spelled differently ("1.0" vs "1.0.0")
    # are broken by the key itself so the choice is stable.
    return max(candidates)[1]


def _select_version(manifest: Manifest, asset_id: str, constraint: str) -> str:
    asset = manifest.assets[asset_id]

    version_range = parse_range(constraint)
    if version_range is not None:
        matching: list[tuple[SemVer, str]] = []
        for key in asset.versions:
            parsed = parse_version(key)
            if parsed is not None and version_range.contains(parsed):
                matching.append((parsed, key))
        selected = _highest(matching)
        if selected is None:
            raise NoMatchingVersionError(asset_id, constraint)
        return selected

    if constraint == LATEST:
        parsed_keys: list[tuple[SemVer, str]] = []
        for key in asset.versions:
            parsed = parse_version(key)
            if parsed is not None:
                parsed_keys.append((parsed, key))
        selected = _highest(parsed_keys)
        if selected is not None:
            return selected
        # No key parses as a version: fall back to plain string ordering,
        # which does not necessarily reflect release recency.
        if not asset.versions:
            raise NoMatchingVersionError(asset_id, constraint)
        return max(asset.versions)

    if constraint not in asset.versions:
        raise VersionNotFoundError(asset_id, constraint)
    return constraint


def resolve_version(
    manifest: Manifest, asset_id: str, constraint: str
) -> tuple[str, ManifestVersion]:
    """Pick exactly one version of an asset for a constraint.

    Args:
        manifest: Manifest declaring the asset
        asset_id: Asset to resolve
        constraint: Range expression, "latest", or an exact version key

    Returns:
        Tuple of (version key, version metadata). When the metadata has no
        explicit ref and the manifest declares a version template, the ref is
        synthesized from the template.

    Raises:
        AssetNotFoundError: If the asset is not declared
        NoMatchingVersionError: If no version satisfies the range
        VersionNotFoundError: If an exact version key is absent
    """
    if asset_id not in manifest.assets:
        raise AssetNotFoundError(asset_id)

    version = _select_version(manifest, asset_id, constraint)
    metadata = manifest.assets[asset_id].versions[version]

    if not metadata.ref and manifest.version_template:
        metadata = replace(
            metadata, ref=manifest.version_template.replace(VERSION_PLACEHOLDER, version)
        )

    return version, metadata


def resolve_graph(
    manifest: Manifest, root_id: str, root_constraint: str
) -> dict[str, ResolvedNode]:
    """Resolve an asset and its transitive dependencies breadth-first.

    The first constraint seen for an asset id wins; later requests for the same
    id with a different constraint are ignored. There is no constraint
    unification, so a dependent may receive a version that does not satisfy
    its own constraint. The visited set makes dependency cycles terminate.

    Returns:
        Mapping of asset id to resolved node, in visitation order

    Raises:
        ResolutionError: For any node that cannot be resolved; no partial
            graph is returned
    """
    resolved: dict[str, ResolvedNode] = {}
    queue: deque[tuple[str, str]] = deque([(root_id, root_constraint)])

    while queue:
        asset_id, constraint = queue.popleft()
        if asset_id in resolved:
            existing = resolved[asset_id]
            logger.debug(
                "Skipping %s@%s: already resolved at %s", asset_id, constraint, existing.version
            )
            continue

        version, metadata = resolve_version(manifest, asset_id, constraint)
        asset = manifest.assets[asset_id]
        resolved[asset_id] = ResolvedNode(
            asset_id=asset_id,
            version=version,
            metadata=metadata,
            kind=asset.kind,
        )
        logger.debug("Resolved %s@%s -> %s", asset_id, constraint, version)

        for dep_id in sorted(asset.dependencies):
            queue.append((dep_id, asset.dependencies[dep_id]))

    return resolved
