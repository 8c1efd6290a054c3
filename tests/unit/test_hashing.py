"""Tests for integrity hashing."""

import hashlib
from pathlib import Path

from arca.hashing import hash_artifact, hash_content, hash_file, hash_tree, normalize_lf
from arca.models import DirectoryArtifact, FileArtifact


def test_normalize_lf_rewrites_crlf_only() -> None:
    """CRLF becomes LF; lone CR and LF are untouched."""
    assert normalize_lf(b"a\r\nb\rc\n") == b"a\nb\rc\n"


def test_hash_content_is_line_ending_independent() -> None:
    """CRLF and LF spellings of the same text hash identically."""
    assert hash_content(b"line one\r\nline two\r\n") == hash_content(b"line one\nline two\n")


def test_hash_content_is_plain_sha256_of_normalized_bytes() -> None:
    """Digest is the lowercase hex SHA-256 of the LF-normalized content."""
    expected = hashlib.sha256(b"hello\n").hexdigest()
    assert hash_content(b"hello\r\n") == expected
    assert len(expected) == 64


def test_hash_file_matches_hash_content(tmp_path: Path) -> None:
    """Hashing a file hashes its bytes."""
    file_path = tmp_path / "asset.md"
    file_path.write_bytes(b"# Title\r\nbody\r\n")

    assert hash_file(file_path) == hash_content(b"# Title\nbody\n")


def _write_tree(root: Path, files: dict[str, bytes]) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)


def test_hash_tree_independent_of_creation_order(tmp_path: Path) -> None:
    """Two trees with the same files created in different orders hash equally."""
    first = tmp_path / "first"
    second = tmp_path / "second"
    _write_tree(first, {"b.md": b"B", "a/z.md": b"Z", "a/a.md": b"A"})
    _write_tree(second, {"a/a.md": b"A", "b.md": b"B", "a/z.md": b"Z"})

    assert hash_tree(first) == hash_tree(second)


def test_hash_tree_independent_of_line_endings(tmp_path: Path) -> None:
    """CRLF content inside a tree does not change its digest."""
    lf = tmp_path / "lf"
    crlf = tmp_path / "crlf"
    _write_tree(lf, {"SKILL.md": b"one\ntwo\n", "ref/notes.md": b"x\n"})
    _write_tree(crlf, {"SKILL.md": b"one\r\ntwo\r\n", "ref/notes.md": b"x\r\n"})

    assert hash_tree(lf) == hash_tree(crlf)


def test_hash_tree_feeds_forward_slash_paths_then_content(tmp_path: Path) -> None:
    """Digest is path bytes then content, per file, in sorted path order."""
    _write_tree(tmp_path, {"sub/b.md": b"B\r\n", "a.md": b"A"})

    expected = hashlib.sha256()
    expected.update(b"a.md")
    expected.update(b"A")
    expected.update(b"sub/b.md")
    expected.update(b"B\n")

    assert hash_tree(tmp_path) == expected.hexdigest()


def test_hash_tree_changes_when_a_file_is_renamed(tmp_path: Path) -> None:
    """Relative paths are part of the digest."""
    first = tmp_path / "first"
    second = tmp_path / "second"
    _write_tree(first, {"a.md": b"same"})
    _write_tree(second, {"b.md": b"same"})

    assert hash_tree(first) != hash_tree(second)


def test_hash_tree_ignores_empty_directories(tmp_path: Path) -> None:
    """Only regular files contribute to the digest."""
    first = tmp_path / "first"
    second = tmp_path / "second"
    _write_tree(first, {"a.md": b"A"})
    _write_tree(second, {"a.md": b"A"})
    (second / "empty").mkdir()

    assert hash_tree(first) == hash_tree(second)


def test_hash_artifact_dispatches_on_shape(tmp_path: Path) -> None:
    """File artifacts hash as files, directory artifacts as trees."""
    _write_tree(tmp_path, {"bundle/SKILL.md": b"skill", "prompt.md": b"prompt"})

    assert hash_artifact(tmp_path / "prompt.md", FileArtifact()) == hash_content(b"prompt")
    assert hash_artifact(tmp_path / "bundle", DirectoryArtifact()) == hash_tree(
        tmp_path / "bundle"
    )
