from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from ledgerlock.cli.common import load_settings_or_exit, resolve_config_path_or_exit
from ledgerlock.models import ObservationStrategy


def register(app: typer.Typer) -> None:
    @app.command()
    def info() -> None:
        """Show the configuration and the configured devices."""
        settings = load_settings_or_exit()
        config_path, config_exists = resolve_config_path_or_exit(allow_missing=True)
        ledger = settings.ledger

        console = Console()

        console.print("[bold]ledgerlock Info[/bold]\n")
        console.print(f"Config file: {config_path if config_exists else 'defaults'}")
        console.print(f"Ledger client: {ledger.client}")
        console.print(f"Request timeout: {ledger.request_timeout}s")

        if not ledger.devices:
            console.print("\nNo devices configured.")
            console.print(f"Add [ledger.devices.<id>] tables to {config_path}")
            return

        table = Table()
        table.add_column("Device", style="cyan")
        table.add_column("Address", style="green")
        table.add_column("Watch")
        table.add_column("Messages only")
        table.add_column("Stop on error")

        for device_id, device in sorted(ledger.devices.items()):
            strategy = ObservationStrategy.for_config(device)
            watch = strategy.value
            if strategy is ObservationStrategy.STORAGE:
                watch = f"{watch} every {device.interval}s"
            table.add_row(
                device_id,
                device.address,
                watch,
                "yes" if device.use_message else "",
                "yes" if device.stop_on_error else "",
            )

        console.print(table)
