"""Resolve, fetch, cache, hash and lock: the install and sync flows.

Both flows resolve the full dependency graph before any fetch begins. Nodes
are then fetched in breadth-first order, or through a thread pool when the
context allows more than one worker. Every node that finishes is upserted
into a shared LockfileReconciler straight away, so a later failure never
discards work already done.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path

from arca.context import ArcaContext
from arca.errors import ArcaError, CacheUnwritableError, ProjectionError
from arca.hashing import hash_artifact
from arca.lockfile import LockfileReconciler, load_lockfile, save_lockfile
from arca.manifest import load_manifest
from arca.models import (
    AssetEntry,
    DirectoryArtifact,
    LockedAsset,
    Manifest,
    ResolvedNode,
    Source,
)
from arca.resolver import LATEST, resolve_graph
from arca.retry import with_source_retry
from arca.workspace import (
    DEFAULT_PROJECTION_NAME,
    add_asset,
    default_projection_target,
    detect_source_kind,
    ensure_source,
    load_workspace_config,
    new_source,
    save_workspace_config,
    source_for_entry,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeOutcome:
    """Result of fetching one resolved node: a lock record or an error."""

    node: ResolvedNode
    locked: LockedAsset | None = None
    cached_path: Path | None = None
    error: ArcaError | None = None


@dataclass(frozen=True)
class InstallResult:
    source_alias: str
    locked: tuple[LockedAsset, ...]
    target: str
    projected_path: Path

    @property
    def root(self) -> LockedAsset:
        return self.locked[0]


@dataclass(frozen=True)
class SyncFailure:
    asset_id: str
    source: str
    message: str


@dataclass(frozen=True)
class SyncReport:
    synced: tuple[LockedAsset, ...]
    failures: tuple[SyncFailure, ...]
    reclaimed: int = 0

    @property
    def ok(self) -> bool:
        return not self.failures


def load_source_manifest(
    ctx: ArcaContext, source: Source, revision: str | None
) -> tuple[Manifest, str]:
    """Load a source manifest, retrying while the source is unreachable."""
    return with_source_retry(
        ctx.time,
        f"load manifest from {source.location}",
        lambda: load_manifest(ctx.fetcher, source, revision),
        ctx.retry_attempts,
    )


def load_remote_manifest(ctx: ArcaContext, location: str) -> Manifest:
    """Load the manifest of a source that need not be registered."""
    source = new_source(location, detect_source_kind(location, ctx.workspace_root))
    manifest, _ = load_source_manifest(ctx, source, None)
    return manifest


def _fetch_into_cache(
    ctx: ArcaContext, source_alias: str, source: Source, node: ResolvedNode, revision: str | None
) -> tuple[Path, str]:
    """Fetch one node's content into its cache entry.

    Returns:
        Tuple of (cached artifact path, revision id the content came from)
    """
    metadata = node.metadata
    artifact = node.artifact
    if isinstance(artifact, DirectoryArtifact):
        entry = ctx.cache.entry_dir(source_alias, node.asset_id, node.version)
        with ctx.cache.staged_directory(source_alias, node.asset_id, node.version) as staging:
            try:
                revision_id = ctx.fetcher.fetch_directory(
                    source, metadata.path, revision, staging
                )
            except OSError as e:
                raise CacheUnwritableError(entry, str(e)) from e
    else:
        fetched = ctx.fetcher.fetch_file(source, metadata.path, revision)
        ctx.cache.store_file(source_alias, node.asset_id, node.version, fetched.content)
        revision_id = fetched.revision_id

    return ctx.cache.path(source_alias, node.asset_id, node.version, artifact), revision_id


def fetch_node(
    ctx: ArcaContext,
    source_alias: str,
    source: Source,
    node: ResolvedNode,
    manifest_revision: str | None,
) -> tuple[LockedAsset, Path]:
    """Fetch, cache and hash one resolved node.

    The node's explicit (or template-derived) ref wins; otherwise the content
    is read at the revision its manifest was loaded from.

    Returns:
        Tuple of (lock record, cached artifact path)
    """
    revision = node.metadata.ref or manifest_revision
    with ctx.cache.entry_lock(source_alias, node.asset_id, node.version):
        cached_path, revision_id = with_source_retry(
            ctx.time,
            f"fetch {node.asset_id}@{node.version}",
            lambda: _fetch_into_cache(ctx, source_alias, source, node, revision),
            ctx.retry_attempts,
        )
        digest = hash_artifact(cached_path, node.artifact)

    logger.debug(
        "Cached %s@%s at %s (sha256 %s)", node.asset_id, node.version, cached_path, digest
    )
    locked = LockedAsset(
        asset_id=node.asset_id,
        version=node.version,
        source=source_alias,
        commit=revision_id,
        sha256=digest,
        resolved_at=ctx.time.now().isoformat(),
    )
    return locked, cached_path


def _fetch_nodes(
    ctx: ArcaContext,
    source_alias: str,
    source: Source,
    nodes: list[ResolvedNode],
    manifest_revision: str | None,
    reconciler: LockfileReconciler,
    *,
    stop_on_error: bool,
) -> list[NodeOutcome]:
    """Fetch resolved nodes, upserting each success into the reconciler.

    Domain errors become failed outcomes, except CacheUnwritableError which
    is terminal and propagates. With stop_on_error, nodes after the first
    failure are not fetched.
    """

    def attempt(node: ResolvedNode) -> NodeOutcome:
        try:
            locked, cached_path = fetch_node(ctx, source_alias, source, node, manifest_revision)
        except CacheUnwritableError:
            raise
        except ArcaError as e:
            logger.warning("Failed to fetch %s@%s: %s", node.asset_id, node.version, e)
            return NodeOutcome(node=node, error=e)
        reconciler.upsert(locked)
        return NodeOutcome(node=node, locked=locked, cached_path=cached_path)

    outcomes: list[NodeOutcome] = []
    if ctx.max_workers <= 1 or len(nodes) <= 1:
        for node in nodes:
            outcome = attempt(node)
            outcomes.append(outcome)
            if outcome.error is not None and stop_on_error:
                break
        return outcomes

    with ThreadPoolExecutor(max_workers=ctx.max_workers) as executor:
        futures: list[Future[NodeOutcome]] = [executor.submit(attempt, node) for node in nodes]
        try:
            for future in futures:
                outcome = future.result()
                outcomes.append(outcome)
                if outcome.error is not None and stop_on_error:
                    break
        finally:
            for future in futures:
                future.cancel()
    return outcomes


def _project(ctx: ArcaContext, cached_path: Path, target: str, node: ResolvedNode) -> Path:
    try:
        return ctx.projector.project(cached_path, target, node.artifact)
    except OSError as e:
        raise ProjectionError(target, str(e)) from e


def install_asset(
    ctx: ArcaContext,
    location: str,
    asset_id: str,
    constraint: str = LATEST,
    *,
    target: str | None = None,
    projection_name: str = DEFAULT_PROJECTION_NAME,
) -> InstallResult:
    """Install one asset and its dependencies from a source.

    Any failure aborts the install: neither the workspace config nor the
    lockfile is written unless every node was fetched, cached, hashed and
    projected.

    Args:
        ctx: Application context
        location: Git URL or local directory of the source
        asset_id: Asset to install
        constraint: Range expression, "latest" or an exact version
        target: Workspace-relative projection path; defaults to
            .arca/assets/<alias>/<asset id>[.md]
        projection_name: Name recorded for the projection in the config

    Raises:
        ArcaError: On the first failure of any step
    """
    root = ctx.workspace_root
    config = load_workspace_config(root)
    reconciler = LockfileReconciler(load_lockfile(root))

    config, alias = ensure_source(config, location, detect_source_kind(location, root), root)
    source = config.sources[alias]
    logger.debug("Installing %s@%s from %s (%s)", asset_id, constraint, location, alias)

    manifest, manifest_revision = load_source_manifest(ctx, source, None)
    nodes = list(resolve_graph(manifest, asset_id, constraint).values())
    revision = manifest_revision if source.kind == "git" else None

    outcomes = _fetch_nodes(
        ctx, alias, source, nodes, revision, reconciler, stop_on_error=True
    )
    for outcome in outcomes:
        if outcome.error is not None:
            raise outcome.error

    root_node = nodes[0]
    cached_path = ctx.cache.path(alias, root_node.asset_id, root_node.version, root_node.artifact)
    if target is None:
        target = default_projection_target(
            alias, asset_id, isinstance(root_node.artifact, DirectoryArtifact)
        )
    projected_path = _project(ctx, cached_path, target, root_node)

    projections: dict[str, str] = {}
    for existing in config.assets:
        if existing.asset_id == asset_id and existing.source == alias:
            projections.update(existing.projections)
    projections[projection_name] = target
    config = add_asset(
        config,
        AssetEntry(asset_id=asset_id, source=alias, version=constraint, projections=projections),
    )

    save_workspace_config(root, config)
    save_lockfile(root, reconciler.snapshot())

    locked = tuple(o.locked for o in outcomes if o.locked is not None)
    return InstallResult(
        source_alias=alias, locked=locked, target=target, projected_path=projected_path
    )


def _load_pinned_manifest(
    ctx: ArcaContext,
    entry: AssetEntry,
    source: Source,
    reconciler: LockfileReconciler,
) -> tuple[Manifest, str]:
    """Load the manifest at the entry's locked commit, falling back to head."""
    pinned = None
    if source.kind == "git":
        pinned = reconciler.pinned_commit(entry.source, entry.asset_id)
    if pinned is not None:
        try:
            return load_source_manifest(ctx, source, pinned)
        except ArcaError as e:
            logger.warning(
                "Could not load manifest for %s at pinned commit %s, using head: %s",
                entry.asset_id,
                pinned,
                e,
            )
    return load_source_manifest(ctx, source, None)


def _sync_entry(
    ctx: ArcaContext,
    entry: AssetEntry,
    source: Source,
    reconciler: LockfileReconciler,
) -> tuple[list[LockedAsset], list[SyncFailure]]:
    manifest, manifest_revision = _load_pinned_manifest(ctx, entry, source, reconciler)
    nodes = list(resolve_graph(manifest, entry.asset_id, entry.version).values())
    revision = manifest_revision if source.kind == "git" else None

    outcomes = _fetch_nodes(
        ctx, entry.source, source, nodes, revision, reconciler, stop_on_error=False
    )

    synced: list[LockedAsset] = []
    failures: list[SyncFailure] = []
    for outcome in outcomes:
        if outcome.error is not None:
            failures.append(SyncFailure(outcome.node.asset_id, entry.source, str(outcome.error)))
        elif outcome.locked is not None:
            synced.append(outcome.locked)

    root_outcome = outcomes[0]
    if root_outcome.cached_path is not None:
        for name in sorted(entry.projections):
            target = entry.projections[name]
            try:
                _project(ctx, root_outcome.cached_path, target, root_outcome.node)
            except ProjectionError as e:
                logger.warning("Failed to project %s (%s): %s", entry.asset_id, name, e)
                failures.append(SyncFailure(entry.asset_id, entry.source, str(e)))
    return synced, failures


def sync_workspace(ctx: ArcaContext) -> SyncReport:
    """Re-resolve and fetch every asset in the workspace config.

    Failures are isolated per configured asset and per resolved node: each
    is logged, reported and skipped. The lockfile is saved with every entry
    that succeeded, also when a CacheUnwritableError aborts the run.

    Raises:
        WorkspaceConfigError: If the config cannot be read
        LockfileCorruptError: If the existing lockfile cannot be read
        CacheUnwritableError: If the cache cannot be written
    """
    root = ctx.workspace_root
    config = load_workspace_config(root)
    if not config.assets:
        return SyncReport(synced=(), failures=())

    reconciler = LockfileReconciler(load_lockfile(root))
    reclaimed = ctx.cache.reclaim_partial()

    synced: list[LockedAsset] = []
    failures: list[SyncFailure] = []
    try:
        for entry in config.assets:
            try:
                source = source_for_entry(config, entry)
                entry_synced, entry_failures = _sync_entry(ctx, entry, source, reconciler)
            except CacheUnwritableError:
                raise
            except ArcaError as e:
                logger.warning("Skipping %s from %s: %s", entry.asset_id, entry.source, e)
                failures.append(SyncFailure(entry.asset_id, entry.source, str(e)))
                continue
            synced.extend(entry_synced)
            failures.extend(entry_failures)
    finally:
        save_lockfile(root, reconciler.snapshot())

    return SyncReport(synced=tuple(synced), failures=tuple(failures), reclaimed=reclaimed)


def with_max_workers(ctx: ArcaContext, max_workers: int | None) -> ArcaContext:
    """Return ctx with a different worker count, or ctx itself for None."""
    if max_workers is None:
        return ctx
    return replace(ctx, max_workers=max(max_workers, 1))
