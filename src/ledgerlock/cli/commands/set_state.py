from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.console import Console

from ledgerlock.cli.common import build_registry, load_settings_or_exit
from ledgerlock.config import Settings
from ledgerlock.core import CHANGE_STATE, NotificationBus
from ledgerlock.core.ledger import TRANSPORT_ERRORS
from ledgerlock.models import StateChangeNotification


async def _send(
    settings: Settings, device: str, value: str, force: bool
) -> tuple[str, list[StateChangeNotification]]:
    bus = NotificationBus()
    changes: list[StateChangeNotification] = []
    bus.on(CHANGE_STATE, changes.append)

    registry = build_registry(bus)
    registry.reconfigure(settings.ledger, observe=False)
    try:
        result = await registry.set_state(device, value, force=force)
        await bus.drain()
    finally:
        registry.shutdown()
    return result, [change for change in changes if change.id == device]


def set_state(
    device: Annotated[str, typer.Argument(help="Device id from the configuration")],
    value: Annotated[str, typer.Argument(help="'open' or 'close'")],
    force: Annotated[
        bool,
        typer.Option("--force", help="Emit the change without any ledger checks"),
    ] = False,
) -> None:
    """Open or close a device on behalf of its current user."""
    settings = load_settings_or_exit()
    console = Console()

    try:
        result, changes = asyncio.run(_send(settings, device, value, force))
    except TRANSPORT_ERRORS as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from None

    if device not in settings.ledger.devices:
        console.print(f"[yellow]![/yellow] {result}")
        raise typer.Exit(1)

    console.print(result)
    if not changes:
        console.print("[yellow]![/yellow] The device did not accept the command")
        return

    for change in changes:
        state = "open" if change.open else "closed"
        console.print(f"[green]✓[/green] {change.id} is now {state}")


def register(app: typer.Typer) -> None:
    app.command("set")(set_state)
