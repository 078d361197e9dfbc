from __future__ import annotations

from .address import normalize_address
from .agent import Agent, default_client_factory
from .bus import (
    ADMIN_ADD_COMMAND,
    CHANGE_STATE,
    EXIT,
    MESSAGE,
    WATCH_DEVICE,
    NotificationBus,
)
from .ledger import LedgerClient, LedgerStateReader, is_open_word
from .registry import WatcherRegistry
from .router import MessageRouter
from .watcher import DeviceWatcher
from .web3_client import Web3LedgerClient

__all__ = [
    "ADMIN_ADD_COMMAND",
    "CHANGE_STATE",
    "EXIT",
    "MESSAGE",
    "WATCH_DEVICE",
    "Agent",
    "DeviceWatcher",
    "LedgerClient",
    "LedgerStateReader",
    "MessageRouter",
    "NotificationBus",
    "WatcherRegistry",
    "Web3LedgerClient",
    "default_client_factory",
    "is_open_word",
    "normalize_address",
]
