"""Tests for manifest parsing and loading."""

import pytest

from arca.errors import ManifestError, SourceUnreachableError
from arca.gateway.fetch.fake import FakeContentFetcher
from arca.manifest import MANIFEST_FILE, load_manifest, parse_manifest
from arca.models import Source

MANIFEST = """\
schema: "1.0"
version-strategy:
  template: "v{{version}}"
assets:
  greeting:
    kind: prompt
    description: Says hello
    versions:
      1.0.0:
        path: prompts/p1.md
      2.0.0:
        path: prompts/p2.md
        ref: main
        runtime:
          llm:
            - provider: openai
              models: [gpt-4o]
    dependencies:
      footer: ^1.0.0
      signature:
  reviewer:
    kind: skill
    versions:
      1.10:
        path: skills/reviewer
"""


def test_parse_manifest_fields() -> None:
    manifest = parse_manifest(MANIFEST, "test")

    assert manifest.schema == "1.0"
    assert manifest.version_template == "v{{version}}"
    greeting = manifest.assets["greeting"]
    assert greeting.kind == "prompt"
    assert greeting.description == "Says hello"
    assert greeting.versions["1.0.0"].path == "prompts/p1.md"
    assert greeting.versions["1.0.0"].ref is None
    assert greeting.versions["2.0.0"].ref == "main"
    assert greeting.dependencies == {"footer": "^1.0.0", "signature": ""}


def test_runtime_is_passed_through_unmodified() -> None:
    manifest = parse_manifest(MANIFEST, "test")

    runtime = manifest.assets["greeting"].versions["2.0.0"].runtime

    assert runtime == {"llm": [{"provider": "openai", "models": ["gpt-4o"]}]}


def test_version_keys_stay_text() -> None:
    manifest = parse_manifest(MANIFEST, "test")

    reviewer = manifest.assets["reviewer"]
    assert list(reviewer.versions) == ["1.10"]
    assert reviewer.is_directory


def test_manifest_without_template_or_assets() -> None:
    manifest = parse_manifest('schema: "1.0"\n', "test")

    assert manifest.version_template is None
    assert manifest.assets == {}


@pytest.mark.parametrize(
    "text",
    [
        "assets: [unclosed",
        "- just\n- a list\n",
        "assets:\n  a:\n    kind: video\n    versions: {}\n",
        "assets:\n  a:\n    kind: prompt\n    versions:\n      1.0.0: {ref: main}\n",
        "assets:\n  a:\n    kind: prompt\n    versions: [1.0.0]\n",
        "assets:\n  a:\n    kind: prompt\n    versions:\n      1.0.0: {path: a.md, runtime: 3}\n",
    ],
)
def test_malformed_manifests(text: str) -> None:
    with pytest.raises(ManifestError):
        parse_manifest(text, "test")


def test_load_manifest_reports_revision() -> None:
    fetcher = FakeContentFetcher(
        trees={"https://example.com/repo.git": {MANIFEST_FILE: MANIFEST.encode()}},
        head_revisions={"https://example.com/repo.git": "f" * 40},
    )
    source = Source(kind="git", url="https://example.com/repo.git")

    manifest, revision = load_manifest(fetcher, source, None)

    assert revision == "f" * 40
    assert "greeting" in manifest.assets


def test_load_manifest_missing_file() -> None:
    fetcher = FakeContentFetcher(trees={"/src": {}})

    with pytest.raises(ManifestError, match="no arca-manifest.yaml"):
        load_manifest(fetcher, Source(kind="local", path="/src"), None)


def test_load_manifest_propagates_unreachable_source() -> None:
    fetcher = FakeContentFetcher(unreachable={"/src"})

    with pytest.raises(SourceUnreachableError):
        load_manifest(fetcher, Source(kind="local", path="/src"), None)
