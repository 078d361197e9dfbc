from __future__ import annotations

from typing import Annotated

import typer

from ledgerlock.utils.logging import setup_logging

from .commands.info import register as register_info
from .commands.init import register as register_init
from .commands.set_state import register as register_set
from .commands.status import register as register_status
from .commands.watch import register as register_watch

app = typer.Typer(
    help="ledgerlock - follow ledger-backed access-control devices",
    no_args_is_help=True,
)

register_init(app)
register_info(app)
register_watch(app)
register_status(app)
register_set(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
) -> None:
    """ledgerlock CLI."""
    setup_logging()

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"ledgerlock version {get_version('ledgerlock')}")
        raise typer.Exit()
