"""List assets declared in the workspace, with their lock state."""

import json

import click

from arca.cli.core import exit_on_arca_error
from arca.context import ArcaContext
from arca.lockfile import find_locked, load_lockfile
from arca.output import machine_output, user_output
from arca.workspace import load_workspace_config


@click.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_cmd(ctx: ArcaContext, as_json: bool) -> None:
    """List installed assets in the current workspace."""
    with exit_on_arca_error():
        config = load_workspace_config(ctx.workspace_root)
        lock = load_lockfile(ctx.workspace_root)

    rows = []
    for entry in config.assets:
        locked = find_locked(lock, entry.source, entry.asset_id)
        rows.append(
            {
                "id": entry.asset_id,
                "source": entry.source,
                "version": entry.version,
                "locked": locked.version if locked is not None else None,
                "commit": locked.commit if locked is not None else None,
                "projections": dict(entry.projections),
            }
        )

    if as_json:
        machine_output(json.dumps(rows, indent=2))
        return

    if not rows:
        user_output("No assets installed.")
        return

    user_output(click.style(f"Installed assets ({len(rows)}):", bold=True))
    for row in rows:
        if row["locked"] is None:
            state = click.style("unlocked", fg="yellow")
        else:
            state = f"locked at {row['locked']}"
        user_output(f"  {row['id']} from {row['source']}")
        user_output(click.style(f"    Version: {row['version']} ({state})", dim=True))
        for name, path in row["projections"].items():
            user_output(click.style(f"    {name} -> {path}", dim=True))
