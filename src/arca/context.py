"""Application context with dependency injection."""

from dataclasses import dataclass
from pathlib import Path

from arca.cache import AssetCache
from arca.gateway.fetch.abc import ContentFetcher
from arca.gateway.fetch.auth import EnvironmentCredentialProvider
from arca.gateway.fetch.git import GitContentFetcher
from arca.gateway.fetch.local import LocalContentFetcher
from arca.gateway.fetch.router import SourceRouter
from arca.gateway.projection.abc import Projector
from arca.gateway.projection.real import SymlinkProjector
from arca.gateway.time.abc import Time
from arca.gateway.time.real import RealTime

DEFAULT_RETRY_ATTEMPTS = 3


@dataclass(frozen=True)
class ArcaContext:
    """Immutable context holding all dependencies for arca operations.

    Created at CLI entry point and threaded through the pipeline.
    Frozen to prevent accidental modification at runtime.
    """

    workspace_root: Path
    fetcher: ContentFetcher
    cache: AssetCache
    projector: Projector
    time: Time
    max_workers: int = 1
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS

    @staticmethod
    def for_test(
        workspace_root: Path,
        fetcher: ContentFetcher | None = None,
        cache: AssetCache | None = None,
        projector: Projector | None = None,
        time: Time | None = None,
        max_workers: int = 1,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
    ) -> "ArcaContext":
        """Create test context with fakes for any unspecified dependency.

        Args:
            workspace_root: Workspace directory (usually a pytest tmp_path)
            fetcher: If None, an empty FakeContentFetcher
            cache: If None, an AssetCache under workspace_root/"cache"
            projector: If None, a FakeProjector
            time: If None, a FakeTime

        Example:
            >>> fetcher = FakeContentFetcher(trees={"/src": {"arca-manifest.yaml": b"..."}})
            >>> ctx = ArcaContext.for_test(tmp_path, fetcher=fetcher)
        """
        from arca.gateway.fetch.fake import FakeContentFetcher
        from arca.gateway.projection.fake import FakeProjector
        from arca.gateway.time.fake import FakeTime

        return ArcaContext(
            workspace_root=workspace_root,
            fetcher=fetcher if fetcher is not None else FakeContentFetcher(),
            cache=cache if cache is not None else AssetCache(workspace_root / "cache"),
            projector=projector if projector is not None else FakeProjector(workspace_root),
            time=time if time is not None else FakeTime(),
            max_workers=max_workers,
            retry_attempts=retry_attempts,
        )


def create_context(*, cwd: Path, cache_root: Path) -> ArcaContext:
    """Create production context with real implementations.

    Args:
        cwd: Workspace root; relative local sources and projections resolve here
        cache_root: Root of the asset cache
    """
    fetcher = SourceRouter(
        local=LocalContentFetcher(cwd),
        git=GitContentFetcher(EnvironmentCredentialProvider()),
    )
    return ArcaContext(
        workspace_root=cwd,
        fetcher=fetcher,
        cache=AssetCache(cache_root),
        projector=SymlinkProjector(cwd),
        time=RealTime(),
    )
