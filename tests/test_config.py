from __future__ import annotations

import pytest
from fakes import DEVICE
from pydantic import ValidationError

from ledgerlock.config import (
    DeviceConfig,
    LedgerConfig,
    Settings,
    get_settings,
    load_settings,
    render_settings_toml,
    resolve_config_path,
    write_settings,
)


def test_device_defaults():
    device = DeviceConfig(address=DEVICE)

    assert device.use_storage is False
    assert device.ignore_events is False
    assert device.interval == 1.0
    assert device.use_message is False
    assert device.stop_on_error is False


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"address": ""},
        {"address": DEVICE, "interval": 0},
        {"address": DEVICE, "gpio": 17},
    ],
)
def test_device_config_is_validated(data):
    with pytest.raises(ValidationError):
        DeviceConfig.model_validate(data)


def test_config_roundtrip(tmp_path):
    path = tmp_path / "config.toml"
    settings = Settings(
        ledger=LedgerConfig(
            client="10.0.0.2:8545",
            devices={
                "front door": DeviceConfig(address=DEVICE, use_message=True),
                "garage": DeviceConfig(address=DEVICE, use_storage=True, interval=2.5),
            },
        )
    )
    write_settings(settings, path)

    loaded = load_settings(path)

    assert loaded == settings


def test_render_without_devices():
    text = render_settings_toml(Settings())

    assert "[ledger]" in text
    assert 'client = "localhost:8545"' in text
    assert "devices" not in text


def test_invalid_toml(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[ledger\n")

    with pytest.raises(ValueError, match="Invalid TOML"):
        load_settings(path)


def test_unknown_key(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("[ledger]\nprovider = 'x'\n")

    with pytest.raises(ValueError, match="Invalid config file"):
        load_settings(path)


def test_env_var_points_to_missing_file(tmp_path, monkeypatch):
    monkeypatch.setenv("LEDGERLOCK_CONFIG", str(tmp_path / "missing.toml"))

    with pytest.raises(FileNotFoundError):
        resolve_config_path()

    path, exists = resolve_config_path(allow_missing=True)
    assert path == tmp_path / "missing.toml"
    assert exists is False


def test_get_settings_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    assert get_settings() == Settings()


def test_get_settings_reads_env_file(tmp_path, monkeypatch):
    path = tmp_path / "config.toml"
    path.write_text(
        '[ledger]\nclient = "node:8545"\n\n'
        f'[ledger.devices.door]\naddress = "{DEVICE}"\n'
    )
    monkeypatch.setenv("LEDGERLOCK_CONFIG", str(path))

    settings = get_settings()

    assert settings.ledger.client == "node:8545"
    assert settings.ledger.devices["door"].address == DEVICE
