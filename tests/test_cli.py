from __future__ import annotations

import pytest
from fakes import DEVICE, FakeLedgerClient
from typer.testing import CliRunner

import ledgerlock.cli.common as cli_common
from ledgerlock import __version__
from ledgerlock.cli import app
from ledgerlock.config import DeviceConfig, LedgerConfig, Settings, write_settings

runner = CliRunner()


@pytest.fixture
def configured(tmp_path, monkeypatch, ledger: FakeLedgerClient) -> FakeLedgerClient:
    path = tmp_path / "config.toml"
    write_settings(
        Settings(
            ledger=LedgerConfig(
                devices={
                    "door": DeviceConfig(address=DEVICE),
                    "gate": DeviceConfig(address=DEVICE, use_storage=True, interval=30),
                }
            )
        ),
        path,
    )
    monkeypatch.setenv("LEDGERLOCK_CONFIG", str(path))
    monkeypatch.setattr(cli_common, "default_client_factory", lambda config: ledger)
    return ledger


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"ledgerlock version {__version__}" in result.stdout


def test_init_writes_config(tmp_path, monkeypatch):
    path = tmp_path / "config.toml"
    monkeypatch.setenv("LEDGERLOCK_CONFIG", str(path))

    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0
    assert path.exists()

    again = runner.invoke(app, ["init"])
    assert again.exit_code == 0
    assert "Config exists" in again.stdout


def test_info_lists_devices(configured):
    result = runner.invoke(app, ["info"])

    assert result.exit_code == 0
    assert "door" in result.stdout
    assert "gate" in result.stdout
    assert "30.0s" in result.stdout


def test_invalid_config_exits(tmp_path, monkeypatch):
    path = tmp_path / "config.toml"
    path.write_text("[ledger]\nbogus = 1\n")
    monkeypatch.setenv("LEDGERLOCK_CONFIG", str(path))

    result = runner.invoke(app, ["info"])

    assert result.exit_code == 1


def test_status_shows_live_state(configured):
    configured.set_open(DEVICE, True)

    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "door" in result.stdout
    assert "open" in result.stdout


def test_forced_set(configured):
    result = runner.invoke(app, ["set", "door", "open", "--force"])

    assert result.exit_code == 0
    assert "sent open event to door" in result.stdout
    assert "door is now open" in result.stdout


def test_set_through_message(configured):
    configured.set_open(DEVICE, True)

    result = runner.invoke(app, ["set", "door", "close"])

    assert result.exit_code == 0
    assert "door is now closed" in result.stdout


def test_set_rejected_while_closed(configured):
    result = runner.invoke(app, ["set", "door", "open"])

    assert result.exit_code == 0
    assert "did not accept" in result.stdout


def test_set_unknown_device(configured):
    result = runner.invoke(app, ["set", "nope", "open"])

    assert result.exit_code == 1
    assert "nope not found" in result.stdout


def test_set_reports_only_the_commanded_change(configured):
    configured.set_open(DEVICE, True)

    result = runner.invoke(app, ["set", "gate", "close"])

    assert result.exit_code == 0
    assert "gate is now closed" in result.stdout
    assert "gate is now open" not in result.stdout


def test_status_does_not_subscribe_to_logs(configured):
    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert configured.subscriptions == {}
    assert configured.unsubscribed == []
