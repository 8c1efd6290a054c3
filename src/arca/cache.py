"""Content-addressable cache of fetched assets.

Layout: `<root>/<source alias>/<asset id>/<version>/` holds either
`<asset id>.md` (single-file assets) or the asset's directory tree itself.
Entries are written through a temporary file or staging directory and renamed
into place, so a reader never observes a half-written entry.
"""

import logging
import os
import shutil
import tempfile
import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from arca.errors import CacheUnwritableError, InvalidCacheKeyError
from arca.models import Artifact, DirectoryArtifact, FileArtifact

logger = logging.getLogger(__name__)

STAGING_PREFIX = ".arca-staging-"
DEFAULT_CACHE_DIRNAME = ".arca-cache"

_FILE = FileArtifact()


class _EntryLock:
    """Weakly referenceable holder for the lock of one cache entry."""

    def __init__(self) -> None:
        self.mutex = threading.Lock()


def default_cache_root() -> Path:
    """Conventional cache location under the user's home directory."""
    return Path.home() / DEFAULT_CACHE_DIRNAME


def _check_segment(segment: str) -> str:
    if not segment or segment in (".", "..") or "/" in segment or "\\" in segment:
        raise InvalidCacheKeyError(segment)
    if segment.startswith(STAGING_PREFIX):
        raise InvalidCacheKeyError(segment)
    return segment


class AssetCache:
    """Maps (source alias, asset id, version) to a stable on-disk location."""

    def __init__(self, root: Path) -> None:
        """Initialize AssetCache.

        Args:
            root: Cache root directory; created lazily on first write
        """
        self._root = root
        # Locks live only while a writer holds or waits on them
        self._entry_locks: weakref.WeakValueDictionary[Path, _EntryLock] = (
            weakref.WeakValueDictionary()
        )
        self._entry_locks_guard = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    def entry_dir(self, source_alias: str, asset_id: str, version: str) -> Path:
        """Directory holding one cached (source, asset, version)."""
        return (
            self._root
            / _check_segment(source_alias)
            / _check_segment(asset_id)
            / _check_segment(version)
        )

    def path(self, source_alias: str, asset_id: str, version: str, artifact: Artifact) -> Path:
        """Location of the cached artifact itself. Pure function of its inputs."""
        entry = self.entry_dir(source_alias, asset_id, version)
        if isinstance(artifact, DirectoryArtifact):
            return entry
        return entry / f"{asset_id}{artifact.extension}"

    def ensure(self, source_alias: str, asset_id: str, version: str) -> Path:
        """Create the entry directory and its parents if missing.

        Raises:
            CacheUnwritableError: On permission or disk errors
        """
        entry = self.entry_dir(source_alias, asset_id, version)
        try:
            entry.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheUnwritableError(entry, str(e)) from e
        return entry

    @contextmanager
    def entry_lock(self, source_alias: str, asset_id: str, version: str) -> Iterator[None]:
        """Serialize writers of the same entry within this process."""
        entry = self.entry_dir(source_alias, asset_id, version)
        with self._entry_locks_guard:
            lock = self._entry_locks.get(entry)
            if lock is None:
                lock = _EntryLock()
                self._entry_locks[entry] = lock
        with lock.mutex:
            yield

    def store_file(self, source_alias: str, asset_id: str, version: str, content: bytes) -> Path:
        """Write a single-file artifact into its entry via atomic rename.

        Returns:
            Path of the cached file
        """
        entry = self.ensure(source_alias, asset_id, version)
        target = self.path(source_alias, asset_id, version, _FILE)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=entry, prefix=STAGING_PREFIX)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(content)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CacheUnwritableError(target, str(e)) from e
        logger.debug("Cached %s (%d bytes)", target, len(content))
        return target

    @contextmanager
    def staged_directory(self, source_alias: str, asset_id: str, version: str) -> Iterator[Path]:
        """Yield an empty staging directory that replaces the entry on success.

        The staging directory lives next to the entry so the final rename
        stays on one filesystem. If the block raises, the staging directory is
        removed and the existing entry (if any) is left untouched.
        """
        entry = self.entry_dir(source_alias, asset_id, version)
        try:
            entry.parent.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(dir=entry.parent, prefix=STAGING_PREFIX))
        except OSError as e:
            raise CacheUnwritableError(entry, str(e)) from e

        try:
            yield staging
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise

        try:
            self._swap_into_place(staging, entry)
        except OSError as e:
            shutil.rmtree(staging, ignore_errors=True)
            raise CacheUnwritableError(entry, str(e)) from e
        logger.debug("Cached directory %s", entry)

    def _swap_into_place(self, staging: Path, entry: Path) -> None:
        if not entry.exists():
            os.replace(staging, entry)
            return
        retired = Path(tempfile.mkdtemp(dir=entry.parent, prefix=STAGING_PREFIX))
        retired.rmdir()
        os.replace(entry, retired)
        os.replace(staging, entry)
        shutil.rmtree(retired, ignore_errors=True)

    def reclaim_partial(self) -> int:
        """Delete staging leftovers from interrupted writes.

        Returns:
            Number of leftovers removed
        """
        if not self._root.exists():
            return 0
        removed = 0
        for leftover in sorted(self._root.rglob(f"{STAGING_PREFIX}*")):
            if not leftover.exists():
                continue  # nested inside a leftover removed earlier
            if leftover.is_dir() and not leftover.is_symlink():
                shutil.rmtree(leftover, ignore_errors=True)
            else:
                leftover.unlink(missing_ok=True)
            removed += 1
        if removed:
            logger.debug("Reclaimed %d partial cache writes under %s", removed, self._root)
        return removed

    def clear(self) -> None:
        """Remove the entire cache root."""
        if self._root.exists():
            shutil.rmtree(self._root)

