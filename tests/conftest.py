from __future__ import annotations

import pytest
from fakes import DEVICE, FakeLedgerClient

from ledgerlock.config import get_settings
from ledgerlock.core import NotificationBus


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("LEDGERLOCK_CONFIG", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def ledger() -> FakeLedgerClient:
    client = FakeLedgerClient()
    client.set_device(DEVICE)
    return client


@pytest.fixture
def bus() -> NotificationBus:
    return NotificationBus()
