"""List the assets a source publishes."""

import json

import click

from arca.cli.core import exit_on_arca_error
from arca.context import ArcaContext
from arca.output import machine_output, user_output
from arca.pipeline import load_remote_manifest
from arca.versions import parse_version


def _sorted_versions(versions: list[str]) -> list[str]:
    """Parseable versions in semver order, then the rest alphabetically."""
    parsed = sorted((v for v in versions if parse_version(v) is not None), key=parse_version)
    rest = sorted(v for v in versions if parse_version(v) is None)
    return parsed + rest


@click.command("list-remote")
@click.argument("source")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_remote_cmd(ctx: ArcaContext, source: str, as_json: bool) -> None:
    """List assets available in the manifest of SOURCE."""
    with exit_on_arca_error():
        manifest = load_remote_manifest(ctx, source)

    if as_json:
        data = {
            "schema": manifest.schema,
            "assets": {
                asset_id: {
                    "kind": asset.kind,
                    "description": asset.description,
                    "versions": _sorted_versions(list(asset.versions)),
                    "dependencies": dict(asset.dependencies),
                }
                for asset_id, asset in sorted(manifest.assets.items())
            },
        }
        machine_output(json.dumps(data, indent=2))
        return

    if not manifest.assets:
        user_output(f"No assets in {source}")
        return

    user_output(click.style(f"Assets in {source}:", bold=True))
    for asset_id, asset in sorted(manifest.assets.items()):
        user_output(f"  {asset_id} ({asset.kind})")
        if asset.description:
            user_output(click.style(f"    {asset.description}", dim=True))
        versions = ", ".join(_sorted_versions(list(asset.versions)))
        user_output(click.style(f"    Versions: {versions}", dim=True))
