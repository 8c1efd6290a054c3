"""Install one asset (and its dependencies) from a source."""

import click

from arca.cli.core import exit_on_arca_error, jobs_option
from arca.context import ArcaContext
from arca.output import user_output
from arca.pipeline import install_asset, with_max_workers
from arca.resolver import LATEST
from arca.workspace import DEFAULT_PROJECTION_NAME


@click.command("install")
@click.argument("source")
@click.argument("asset_id")
@click.argument("constraint", required=False, default=LATEST)
@click.option(
    "--target",
    "-t",
    default=None,
    help="Projection path inside the workspace (default: .arca/assets/<source>/<id>)",
)
@click.option(
    "--name",
    "-n",
    "projection_name",
    default=DEFAULT_PROJECTION_NAME,
    show_default=True,
    help="Name recorded for this projection",
)
@jobs_option
@click.pass_obj
def install_cmd(
    ctx: ArcaContext,
    source: str,
    asset_id: str,
    constraint: str,
    target: str | None,
    projection_name: str,
    jobs: int | None,
) -> None:
    """Install ASSET_ID from SOURCE (a git URL or local directory).

    CONSTRAINT may be a semver range (^1.0.0, ~1.2, >=1.0 <2.0), an exact
    version, or "latest" (the default).

    Examples:

    \b
      # Latest version from a git repository
      arca install https://github.com/acme/prompts.git greeting

    \b
      # Any 1.x version from a local checkout, projected to a custom path
      arca install ../prompts greeting ^1.0.0 -t .github/prompts/greeting.md
    """
    user_output(f"Resolving {asset_id} ({constraint}) from {source}...")
    with exit_on_arca_error():
        result = install_asset(
            with_max_workers(ctx, jobs),
            source,
            asset_id,
            constraint,
            target=target,
            projection_name=projection_name,
        )

    root = result.root
    user_output(click.style("✓", fg="green") + f" Installed {root.asset_id}@{root.version}")
    for locked in result.locked[1:]:
        user_output(f"  + {locked.asset_id}@{locked.version} (dependency)")
    user_output(f"Projected to {result.target}")
