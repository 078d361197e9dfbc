from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from ledgerlock.cli.common import build_registry, load_settings_or_exit
from ledgerlock.config import Settings
from ledgerlock.core.ledger import TRANSPORT_ERRORS
from ledgerlock.models import DeviceStatus


async def _collect_status(settings: Settings) -> list[DeviceStatus]:
    registry = build_registry()
    registry.reconfigure(settings.ledger, observe=False)
    try:
        return await registry.status()
    finally:
        registry.shutdown()


def status() -> None:
    """Read the live open state and user of every device from the ledger."""
    settings = load_settings_or_exit()
    console = Console()

    if not settings.ledger.devices:
        console.print("No devices configured.")
        return

    try:
        rows = asyncio.run(_collect_status(settings))
    except TRANSPORT_ERRORS as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from None

    table = Table()
    table.add_column("Device", style="cyan")
    table.add_column("Open")
    table.add_column("User", style="green")
    table.add_column("Watch")

    for row in rows:
        table.add_row(
            row.id,
            "[green]open[/green]" if row.open else "closed",
            row.user,
            row.strategy.value,
        )

    console.print(table)


def register(app: typer.Typer) -> None:
    app.command()(status)
