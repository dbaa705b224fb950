"""CLI entry point."""

from __future__ import annotations

import click

from fenceline.cli.helpers import configure_logging


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log parse diagnostics to stderr.")
def cli(verbose: bool) -> None:
    """Fenceline: extract typed artifacts from assistant text streams."""
    configure_logging(verbose)


# ---------------------------------------------------------------------------
# Register command modules (must be after cli group is defined)
# ---------------------------------------------------------------------------
from fenceline.cli import parse_cmds as _parse_cmds  # noqa: E402, F401

if __name__ == "__main__":
    cli()
