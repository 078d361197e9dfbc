"""ledgerlock - follow ledger-backed access-control devices."""

from __future__ import annotations

from importlib.metadata import version

from .config import DeviceConfig, LedgerConfig, Settings, get_settings
from .core import (
    Agent,
    DeviceWatcher,
    MessageRouter,
    NotificationBus,
    WatcherRegistry,
    normalize_address,
)
from .errors import LedgerlockError, LedgerTransportError, WatcherError
from .models import OpenState, RemoteControlMessage, StateChangeNotification

__all__ = [
    "Agent",
    "DeviceConfig",
    "DeviceWatcher",
    "LedgerConfig",
    "LedgerTransportError",
    "LedgerlockError",
    "MessageRouter",
    "NotificationBus",
    "OpenState",
    "RemoteControlMessage",
    "Settings",
    "StateChangeNotification",
    "WatcherError",
    "WatcherRegistry",
    "__version__",
    "get_settings",
    "normalize_address",
]

__version__ = version("ledgerlock")
