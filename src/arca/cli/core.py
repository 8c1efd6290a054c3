"""Shared helpers for arca CLI commands."""

from collections.abc import Iterator
from contextlib import contextmanager

import click

from arca.errors import ArcaError
from arca.output import user_output

jobs_option = click.option(
    "--jobs",
    "-j",
    type=click.IntRange(min=1),
    default=None,
    help="Number of assets to fetch in parallel (default: 1)",
)


@contextmanager
def exit_on_arca_error() -> Iterator[None]:
    """Report an ArcaError as a one-line message and exit with status 1."""
    try:
        yield
    except ArcaError as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from None
