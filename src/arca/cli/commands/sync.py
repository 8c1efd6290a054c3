"""Sync every asset declared in the workspace config."""

import click

from arca.cli.core import exit_on_arca_error, jobs_option
from arca.context import ArcaContext
from arca.output import user_output
from arca.pipeline import sync_workspace, with_max_workers
from arca.workspace import CONFIG_FILE_NAME


@click.command("sync")
@jobs_option
@click.pass_obj
def sync_cmd(ctx: ArcaContext, jobs: int | None) -> None:
    """Re-resolve and fetch all assets in .arca-assets.yaml.

    A failing asset is reported and skipped; the lockfile still records every
    asset that synced. Exits with status 1 if anything failed.
    """
    with exit_on_arca_error():
        report = sync_workspace(with_max_workers(ctx, jobs))

    if not report.synced and not report.failures:
        user_output(f"No assets defined in {CONFIG_FILE_NAME}")
        return

    if report.reclaimed:
        user_output(f"Cleaned up {report.reclaimed} interrupted cache write(s)")
    for locked in report.synced:
        user_output(click.style("✓", fg="green") + f" {locked.asset_id}@{locked.version}")
    for failure in report.failures:
        detail = f" {failure.asset_id} ({failure.source}): {failure.message}"
        user_output(click.style("✗", fg="red") + detail)

    if not report.ok:
        user_output(f"Sync finished with {len(report.failures)} failure(s)")
        raise SystemExit(1)
    user_output("Sync complete.")
