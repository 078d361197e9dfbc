from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from ledgerlock.cli.common import build_agent, load_settings_or_exit, reload_settings


def watch() -> None:
    """Watch every configured device until interrupted.

    Send SIGHUP to re-read the configuration without restarting.
    """
    settings = load_settings_or_exit()
    console = Console()

    if not settings.ledger.devices:
        console.print("[yellow]![/yellow] No devices configured, nothing to watch.")
        raise typer.Exit(1)

    console.print(
        f"Watching {len(settings.ledger.devices)} device(s) "
        f"via {settings.ledger.client}..."
    )
    console.print("Press Ctrl+C to stop.\n")

    agent = build_agent(settings)
    try:
        asyncio.run(agent.run(load_settings=reload_settings))
    except KeyboardInterrupt:
        console.print("\n[green]Stopped watching.[/green]")


def register(app: typer.Typer) -> None:
    app.command()(watch)
