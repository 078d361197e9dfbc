from __future__ import annotations

from pathlib import Path

import typer

from ledgerlock.config import Settings, get_settings, resolve_config_path
from ledgerlock.core import (
    Agent,
    NotificationBus,
    WatcherRegistry,
    default_client_factory,
)


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def build_registry(bus: NotificationBus | None = None) -> WatcherRegistry:
    return WatcherRegistry(bus or NotificationBus(), default_client_factory)


def build_agent(settings: Settings) -> Agent:
    return Agent(settings, client_factory=default_client_factory)
