"""User-facing output routed to stderr, keeping stdout for machine output."""

from typing import Any

import click


def user_output(message: Any = "", nl: bool = True) -> None:
    """Print a progress or status message for humans (stderr)."""
    click.echo(message, nl=nl, err=True)


def machine_output(message: Any = "", nl: bool = True) -> None:
    """Print data meant to be consumed by other programs (stdout)."""
    click.echo(message, nl=nl)
