"""Integrity hashing for cached assets.

Digests are bare lowercase SHA-256 hex strings. Content is LF-normalized before
hashing so the same logical asset hashes identically regardless of the line
ending convention of the machine that checked it out.
"""

import hashlib
from pathlib import Path

from arca.models import Artifact, DirectoryArtifact


def normalize_lf(content: bytes) -> bytes:
    """Rewrite every CRLF sequence to LF."""
    return content.replace(b"\r\n", b"\n")


def hash_content(content: bytes) -> str:
    """Compute SHA-256 of LF-normalized content.

    Args:
        content: Raw bytes to hash

    Returns:
        64-character hex digest
    """
    return hashlib.sha256(normalize_lf(content)).hexdigest()


def hash_file(file_path: Path) -> str:
    """Compute SHA-256 of a file's LF-normalized content."""
    return hash_content(file_path.read_bytes())


def _sorted_relative_files(root: Path) -> list[tuple[str, Path]]:
    files: list[tuple[str, Path]] = []
    for path in root.rglob("*"):
        if path.is_file():
            files.append((path.relative_to(root).as_posix(), path))
    files.sort(key=lambda item: item[0])
    return files


def hash_tree(root: Path) -> str:
    """Compute a deterministic SHA-256 over a directory tree.

    For every regular file, in lexicographic order of its forward-slash
    relative path, the hash is fed the relative path bytes followed by the
    LF-normalized content. The digest depends only on the set of relative
    paths and their normalized content.

    Args:
        root: Directory to hash

    Returns:
        64-character hex digest
    """
    digest = hashlib.sha256()
    for relative, path in _sorted_relative_files(root):
        digest.update(relative.encode("utf-8"))
        digest.update(normalize_lf(path.read_bytes()))
    return digest.hexdigest()


def hash_artifact(path: Path, artifact: Artifact) -> str:
    """Hash a cached artifact according to its shape."""
    if isinstance(artifact, DirectoryArtifact):
        return hash_tree(path)
    return hash_file(path)
