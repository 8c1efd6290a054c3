"""Tests for SourceRouter dispatch."""

from pathlib import Path

import pytest

from arca.gateway.fetch.fake import FakeContentFetcher
from arca.gateway.fetch.router import SourceRouter
from arca.models import Source


def test_dispatches_on_source_kind(tmp_path: Path) -> None:
    local = FakeContentFetcher(trees={"/assets": {"p.md": b"local"}})
    git = FakeContentFetcher(trees={"https://example.com/r.git": {"p.md": b"git"}})
    router = SourceRouter(local=local, git=git)

    local_file = router.fetch_file(Source(kind="local", path="/assets"), "p.md", None)
    git_file = router.fetch_file(Source(kind="git", url="https://example.com/r.git"), "p.md", None)

    assert local_file.content == b"local"
    assert git_file.content == b"git"
    assert len(local.fetch_calls) == 1
    assert len(git.fetch_calls) == 1


def test_unknown_kind_is_rejected() -> None:
    router = SourceRouter(local=FakeContentFetcher(), git=FakeContentFetcher())

    with pytest.raises(ValueError, match="Unsupported source type"):
        router.fetch_file(Source(kind="svn", url="x"), "p.md", None)  # type: ignore[arg-type]
