"""Tests for version and dependency-graph resolution."""

import pytest

from arca.errors import AssetNotFoundError, NoMatchingVersionError, VersionNotFoundError
from arca.models import Manifest, ManifestAsset, ManifestVersion
from arca.resolver import resolve_graph, resolve_version


def _asset(
    versions: dict[str, str],
    *,
    kind: str = "prompt",
    dependencies: dict[str, str] | None = None,
    refs: dict[str, str] | None = None,
) -> ManifestAsset:
    refs = refs or {}
    return ManifestAsset(
        kind=kind,  # type: ignore[arg-type]
        versions={v: ManifestVersion(path=p, ref=refs.get(v)) for v, p in versions.items()},
        dependencies=dependencies or {},
    )


def _manifest(assets: dict[str, ManifestAsset], template: str | None = None) -> Manifest:
    return Manifest(schema="1.0", assets=assets, version_template=template)


def test_caret_picks_highest_compatible_version() -> None:
    manifest = _manifest({"a": _asset({"1.0.0": "a1", "1.1.0": "a11", "2.0.0": "a2"})})

    version, metadata = resolve_version(manifest, "a", "^1.0.0")

    assert version == "1.1.0"
    assert metadata.path == "a11"


def test_latest_picks_highest_semantic_version() -> None:
    """1.10.0 beats 1.9.0 even though it sorts lower as a string."""
    manifest = _manifest({"a": _asset({"1.9.0": "old", "1.10.0": "new", "1.2.0": "older"})})

    assert resolve_version(manifest, "a", "latest")[0] == "1.10.0"


def test_latest_is_deterministic() -> None:
    manifest = _manifest({"a": _asset({"2.0.0": "x", "1.0.0": "y"})})

    results = {resolve_version(manifest, "a", "latest")[0] for _ in range(5)}

    assert results == {"2.0.0"}


def test_latest_falls_back_to_string_order_when_nothing_parses() -> None:
    manifest = _manifest({"a": _asset({"alpha": "x", "gamma": "y", "beta": "z"})})

    assert resolve_version(manifest, "a", "latest")[0] == "gamma"


def test_latest_without_versions_has_no_match() -> None:
    manifest = _manifest({"a": _asset({})})

    with pytest.raises(NoMatchingVersionError):
        resolve_version(manifest, "a", "latest")


def test_numeric_suffix_is_a_prerelease() -> None:
    """1.0.0-1 precedes 1.0.0 and is not picked by a plain caret range."""
    manifest = _manifest({"a": _asset({"1.0.0": "rel", "1.0.0-1": "pre"})})

    assert resolve_version(manifest, "a", "latest")[0] == "1.0.0"
    assert resolve_version(manifest, "a", "^1.0.0")[0] == "1.0.0"


def test_latest_considers_semver_prereleases() -> None:
    manifest = _manifest({"a": _asset({"1.0.0": "old", "2.0.0-alpha.beta": "next"})})

    assert resolve_version(manifest, "a", "latest")[0] == "2.0.0-alpha.beta"


def test_prerelease_range_orders_identifiers() -> None:
    manifest = _manifest(
        {
            "a": _asset(
                {
                    "1.0.0-alpha": "a",
                    "1.0.0-alpha.1": "a1",
                    "1.0.0-beta.2": "b2",
                    "1.0.0-beta.11": "b11",
                    "1.0.0-SNAPSHOT": "snap",
                }
            )
        }
    )

    # Numeric identifiers compare numerically; uppercase sorts below lowercase
    assert resolve_version(manifest, "a", ">=1.0.0-alpha <1.0.0-rc")[0] == "1.0.0-beta.11"
    assert resolve_version(manifest, "a", "<1.0.0-alpha.1 >=1.0.0-SNAPSHOT")[0] == "1.0.0-alpha"


def test_build_metadata_does_not_change_precedence() -> None:
    manifest = _manifest({"a": _asset({"1.0.0+build.9": "b", "1.1.0": "new"})})

    assert resolve_version(manifest, "a", "latest")[0] == "1.1.0"
    assert resolve_version(manifest, "a", "1.0.0")[0] == "1.0.0+build.9"


def test_exact_non_semver_key() -> None:
    manifest = _manifest({"a": _asset({"stable": "s", "edge": "e"})})

    assert resolve_version(manifest, "a", "stable")[1].path == "s"


def test_missing_exact_key_raises_version_not_found() -> None:
    manifest = _manifest({"a": _asset({"stable": "x"})})

    with pytest.raises(VersionNotFoundError) as exc_info:
        resolve_version(manifest, "a", "nightly")

    assert exc_info.value.version == "nightly"


def test_unsatisfiable_range_raises_no_matching_version() -> None:
    manifest = _manifest({"a": _asset({"1.0.0": "x"})})

    with pytest.raises(NoMatchingVersionError) as exc_info:
        resolve_version(manifest, "a", "^2.0.0")

    assert exc_info.value.constraint == "^2.0.0"


def test_unknown_asset_raises_asset_not_found() -> None:
    with pytest.raises(AssetNotFoundError):
        resolve_version(_manifest({}), "missing", "latest")


def test_template_synthesizes_missing_ref() -> None:
    manifest = _manifest({"a": _asset({"2.0.0": "p"})}, template="v{{version}}")

    _, metadata = resolve_version(manifest, "a", "2.0.0")

    assert metadata.ref == "v2.0.0"


def test_explicit_ref_is_kept_over_template() -> None:
    manifest = _manifest(
        {"a": _asset({"2.0.0": "p"}, refs={"2.0.0": "release-2"})}, template="v{{version}}"
    )

    assert resolve_version(manifest, "a", "2.0.0")[1].ref == "release-2"


def test_resolution_does_not_mutate_manifest() -> None:
    manifest = _manifest({"a": _asset({"2.0.0": "p"})}, template="v{{version}}")

    resolve_version(manifest, "a", "latest")

    assert manifest.assets["a"].versions["2.0.0"].ref is None


def test_graph_includes_transitive_dependencies_in_bfs_order() -> None:
    manifest = _manifest(
        {
            "root": _asset({"1.0.0": "r"}, dependencies={"b": "^1.0.0", "a": ""}),
            "a": _asset({"1.0.0": "a"}, dependencies={"c": "latest"}),
            "b": _asset({"1.0.0": "b", "1.5.0": "b15"}),
            "c": _asset({"3.0.0": "c"}),
        }
    )

    nodes = resolve_graph(manifest, "root", "latest")

    assert list(nodes) == ["root", "a", "b", "c"]
    assert nodes["b"].version == "1.5.0"
    assert nodes["c"].kind == "prompt"


def test_graph_terminates_on_cycles_with_one_node_per_id() -> None:
    manifest = _manifest(
        {
            "a": _asset({"1.0.0": "a"}, dependencies={"b": "^1.0.0"}),
            "b": _asset({"1.0.0": "b"}, dependencies={"a": "^1.0.0"}),
        }
    )

    nodes = resolve_graph(manifest, "a", "latest")

    assert sorted(nodes) == ["a", "b"]


def test_graph_first_constraint_wins() -> None:
    """A later, conflicting constraint for an already resolved id is ignored."""
    manifest = _manifest(
        {
            "root": _asset({"1.0.0": "r"}, dependencies={"lib": "^1.0.0", "mid": ""}),
            "mid": _asset({"1.0.0": "m"}, dependencies={"lib": "^2.0.0"}),
            "lib": _asset({"1.0.0": "l1", "2.0.0": "l2"}),
        }
    )

    nodes = resolve_graph(manifest, "root", "latest")

    assert nodes["lib"].version == "1.0.0"


def test_graph_failure_aborts_whole_resolution() -> None:
    manifest = _manifest({"a": _asset({"1.0.0": "a"}, dependencies={"ghost": "latest"})})

    with pytest.raises(AssetNotFoundError):
        resolve_graph(manifest, "a", "latest")


def test_graph_node_kind_selects_artifact_shape() -> None:
    manifest = _manifest({"bundle": _asset({"1.0.0": "skills/bundle"}, kind="skill")})

    node = resolve_graph(manifest, "bundle", "latest")["bundle"]

    assert node.metadata.path == "skills/bundle"
    assert type(node.artifact).__name__ == "DirectoryArtifact"
