import logging
from pathlib import Path

import click

from arca.cache import default_cache_root
from arca.cli.commands.cache import cache_group
from arca.cli.commands.install import install_cmd
from arca.cli.commands.list_cmd import list_cmd
from arca.cli.commands.list_remote import list_remote_cmd
from arca.cli.commands.sync import sync_cmd
from arca.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="arca")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="ARCA_CACHE_DIR",
    default=None,
    help="Asset cache directory (default: ~/.arca-cache)",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, cache_dir: Path | None) -> None:
    """Resolve, fetch and lock versioned prompts, skills and instructions."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        cache_root = cache_dir if cache_dir is not None else default_cache_root()
        ctx.obj = create_context(cwd=Path.cwd(), cache_root=cache_root)


cli.add_command(cache_group)
cli.add_command(install_cmd)
cli.add_command(list_cmd)
cli.add_command(list_remote_cmd)
cli.add_command(sync_cmd)


def main() -> None:
    """CLI entry point used by the `arca` console script."""
    cli()
