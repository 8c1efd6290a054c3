"""Tests for LocalContentFetcher."""

from pathlib import Path

import pytest

from arca.errors import PathNotFoundError, SourceUnreachableError
from arca.gateway.fetch.local import LocalContentFetcher
from arca.models import LOCAL_REVISION, Source


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    root = tmp_path / "assets"
    (root / "prompts").mkdir(parents=True)
    (root / "prompts" / "p1.md").write_bytes(b"hello\r\n")
    (root / "skills" / "reviewer" / "refs").mkdir(parents=True)
    (root / "skills" / "reviewer" / "SKILL.md").write_text("skill", encoding="utf-8")
    (root / "skills" / "reviewer" / "refs" / "notes.md").write_text("notes", encoding="utf-8")
    (root / "skills" / "reviewer" / ".git").mkdir()
    (root / "skills" / "reviewer" / ".git" / "HEAD").write_text("ref", encoding="utf-8")
    return root


def test_fetch_file_reads_raw_bytes(tmp_path: Path, source_dir: Path) -> None:
    fetcher = LocalContentFetcher(tmp_path)

    fetched = fetcher.fetch_file(Source(kind="local", path=str(source_dir)), "prompts/p1.md", None)

    assert fetched.content == b"hello\r\n"
    assert fetched.revision_id == LOCAL_REVISION


def test_relative_source_resolves_against_workspace(tmp_path: Path, source_dir: Path) -> None:
    fetcher = LocalContentFetcher(tmp_path)

    fetched = fetcher.fetch_file(Source(kind="local", path="assets"), "prompts/p1.md", "ignored")

    assert fetched.content == b"hello\r\n"


def test_fetch_directory_copies_tree(tmp_path: Path, source_dir: Path) -> None:
    fetcher = LocalContentFetcher(tmp_path)
    destination = tmp_path / "out"

    revision = fetcher.fetch_directory(
        Source(kind="local", path=str(source_dir)), "skills/reviewer", None, destination
    )

    assert revision == LOCAL_REVISION
    assert (destination / "SKILL.md").read_text(encoding="utf-8") == "skill"
    assert (destination / "refs" / "notes.md").read_text(encoding="utf-8") == "notes"
    assert not (destination / ".git").exists()


def test_missing_path(tmp_path: Path, source_dir: Path) -> None:
    fetcher = LocalContentFetcher(tmp_path)
    source = Source(kind="local", path=str(source_dir))

    with pytest.raises(PathNotFoundError):
        fetcher.fetch_file(source, "prompts/missing.md", None)
    with pytest.raises(PathNotFoundError):
        fetcher.fetch_directory(source, "skills/missing", None, tmp_path / "out")


def test_path_escaping_source_is_not_found(tmp_path: Path, source_dir: Path) -> None:
    (tmp_path / "secret.md").write_text("secret", encoding="utf-8")
    fetcher = LocalContentFetcher(tmp_path)

    with pytest.raises(PathNotFoundError):
        fetcher.fetch_file(Source(kind="local", path=str(source_dir)), "../secret.md", None)


def test_missing_source_directory_is_unreachable(tmp_path: Path) -> None:
    fetcher = LocalContentFetcher(tmp_path)

    with pytest.raises(SourceUnreachableError):
        fetcher.fetch_file(Source(kind="local", path="nowhere"), "a.md", None)


def test_unreadable_source_file_is_unreachable_not_a_write_failure(
    tmp_path: Path, source_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A read error on the source side must not look like a cache write error."""
    original_read_bytes = Path.read_bytes

    def read_bytes(self: Path) -> bytes:
        if self.name == "notes.md":
            raise PermissionError(13, "Permission denied", str(self))
        return original_read_bytes(self)

    monkeypatch.setattr(Path, "read_bytes", read_bytes)
    fetcher = LocalContentFetcher(tmp_path)

    with pytest.raises(SourceUnreachableError, match="notes.md"):
        fetcher.fetch_directory(
            Source(kind="local", path="assets"), "skills/reviewer", None, tmp_path / "out"
        )
