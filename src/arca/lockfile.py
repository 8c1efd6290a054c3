"""Lockfile I/O and reconciliation for .arca-assets.lock."""

import json
import logging
import os
import tempfile
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any

from arca.errors import LockfileCorruptError
from arca.models import LockedAsset, Lockfile

logger = logging.getLogger(__name__)

LOCK_FILE_NAME = ".arca-assets.lock"

_REQUIRED_KEYS = ("id", "version", "source", "commit", "sha256", "resolvedAt")


def get_lockfile_path(workspace_root: Path) -> Path:
    """Get path to the lockfile."""
    return workspace_root / LOCK_FILE_NAME


def upsert(lock: Lockfile, entry: LockedAsset) -> Lockfile:
    """Insert or replace the record for (entry.source, entry.asset_id).

    A matching record is replaced at its existing position; otherwise the
    entry is appended. The order of all other records is preserved.
    """
    assets = list(lock.assets)
    for index, existing in enumerate(assets):
        if existing.source == entry.source and existing.asset_id == entry.asset_id:
            assets[index] = entry
            return replace(lock, assets=tuple(assets))
    assets.append(entry)
    return replace(lock, assets=tuple(assets))


def find_locked(lock: Lockfile, source: str, asset_id: str) -> LockedAsset | None:
    """Return the record for (source, asset_id), or None if not locked."""
    for existing in lock.assets:
        if existing.source == source and existing.asset_id == asset_id:
            return existing
    return None


class LockfileReconciler:
    """Accumulates lock records from one install or sync run.

    Upserts are serialized so concurrent fetch workers can report results
    directly; the scan-then-replace in `upsert` is not safe unguarded.
    """

    def __init__(self, lock: Lockfile) -> None:
        self._lock = lock
        self._mutex = threading.Lock()

    def upsert(self, entry: LockedAsset) -> None:
        with self._mutex:
            self._lock = upsert(self._lock, entry)

    def pinned_commit(self, source: str, asset_id: str) -> str | None:
        """Commit recorded when (source, asset_id) was last fetched."""
        with self._mutex:
            locked = find_locked(self._lock, source, asset_id)
        if locked is None:
            return None
        return locked.commit

    def snapshot(self) -> Lockfile:
        with self._mutex:
            return self._lock


def _entry_from_dict(data: Any) -> LockedAsset:
    if not isinstance(data, dict):
        raise ValueError(f"expected an object, got {type(data).__name__}")
    missing = [key for key in _REQUIRED_KEYS if key not in data]
    if missing:
        raise ValueError(f"entry missing keys: {', '.join(missing)}")
    for key in _REQUIRED_KEYS:
        if not isinstance(data[key], str):
            raise ValueError(f"entry key '{key}' must be a string")
    return LockedAsset(
        asset_id=data["id"],
        version=data["version"],
        source=data["source"],
        commit=data["commit"],
        sha256=data["sha256"],
        resolved_at=data["resolvedAt"],
    )


def _entry_to_dict(entry: LockedAsset) -> dict[str, str]:
    return {
        "id": entry.asset_id,
        "version": entry.version,
        "source": entry.source,
        "commit": entry.commit,
        "sha256": entry.sha256,
        "resolvedAt": entry.resolved_at,
    }


def load_lockfile(workspace_root: Path) -> Lockfile:
    """Load the lockfile, returning an empty one if it does not exist.

    Raises:
        LockfileCorruptError: If the file is not valid JSON or has the wrong
            shape. The original parse error is chained; the file is never
            silently discarded.
    """
    path = get_lockfile_path(workspace_root)
    if not path.exists():
        return Lockfile()

    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LockfileCorruptError(path, str(e)) from e

    if not isinstance(data, dict):
        raise LockfileCorruptError(path, "expected a JSON object")
    raw_assets = data.get("assets")
    if raw_assets is None:
        raw_assets = []
    if not isinstance(raw_assets, list):
        raise LockfileCorruptError(path, "'assets' must be a list")

    entries: list[LockedAsset] = []
    for index, raw in enumerate(raw_assets):
        try:
            entries.append(_entry_from_dict(raw))
        except ValueError as e:
            raise LockfileCorruptError(path, f"assets[{index}]: {e}") from e
    return Lockfile(assets=tuple(entries))


def save_lockfile(workspace_root: Path, lock: Lockfile) -> None:
    """Write the lockfile as indented JSON, replacing the old file atomically."""
    path = get_lockfile_path(workspace_root)
    data = {"assets": [_entry_to_dict(entry) for entry in lock.assets]}
    text = json.dumps(data, indent=2) + "\n"

    fd, tmp_name = tempfile.mkstemp(dir=workspace_root, prefix=f"{LOCK_FILE_NAME}.")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("Saved %d lock entries to %s", len(lock.assets), path)
