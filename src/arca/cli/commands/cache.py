"""Cache maintenance commands."""

import click

from arca.context import ArcaContext
from arca.output import user_output


@click.group("cache")
def cache_group() -> None:
    """Manage the local asset cache."""


@cache_group.command("clear")
@click.pass_obj
def clear_cmd(ctx: ArcaContext) -> None:
    """Delete every cached asset."""
    ctx.cache.clear()
    user_output(f"Cleared cache at {ctx.cache.root}")
