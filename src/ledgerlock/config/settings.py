from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .paths import default_config_path, expand_path

CONFIG_ENV_VAR = "LEDGERLOCK_CONFIG"


class DeviceConfig(BaseModel):
    """Watch settings for a single ledger-backed device."""

    model_config = {"frozen": True, "extra": "forbid"}

    address: str = Field(min_length=1)
    use_storage: bool = False
    ignore_events: bool = False
    interval: float = Field(default=1.0, gt=0)
    use_message: bool = False
    stop_on_error: bool = False


class LedgerConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    client: str = "localhost:8545"
    request_timeout: float = Field(default=10.0, gt=0)
    filter_poll_interval: float = Field(default=1.0, gt=0)
    devices: dict[str, DeviceConfig] = Field(default_factory=dict)


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    ledger: LedgerConfig = Field(default_factory=LedgerConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def _toml_string(value: str) -> str:
    return json.dumps(value)


def _toml_bool(value: bool) -> str:
    return "true" if value else "false"


def render_settings_toml(settings: Settings) -> str:
    ledger = settings.ledger
    lines = [
        "# ledgerlock configuration",
        "",
        "[ledger]",
        f"client = {_toml_string(ledger.client)}",
        f"request_timeout = {ledger.request_timeout}",
        f"filter_poll_interval = {ledger.filter_poll_interval}",
        "",
    ]

    for device_id, device in sorted(ledger.devices.items()):
        lines.extend(
            [
                f"[ledger.devices.{_toml_string(device_id)}]",
                f"address = {_toml_string(device.address)}",
                f"use_storage = {_toml_bool(device.use_storage)}",
                f"ignore_events = {_toml_bool(device.ignore_events)}",
                f"interval = {device.interval}",
                f"use_message = {_toml_bool(device.use_message)}",
                f"stop_on_error = {_toml_bool(device.stop_on_error)}",
                "",
            ]
        )

    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
