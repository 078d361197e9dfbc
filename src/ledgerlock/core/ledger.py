from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol

from ledgerlock.errors import LedgerTransportError
from ledgerlock.models import EventKind, LogEvent

OWNER_SLOT = 0
USER_SLOT = 3
OPEN_FLAG_SLOT = 4

LogCallback = Callable[[LogEvent | None, Exception | None], None]
Unsubscribe = Callable[[], None]

# Failures a watcher treats as transient.
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    LedgerTransportError,
    ConnectionError,
    OSError,
    TimeoutError,
    asyncio.TimeoutError,
)


class LedgerClient(Protocol):
    async def get_storage_at(self, address: str, slot: int) -> str: ...

    def subscribe(
        self, address: str, kind: EventKind, callback: LogCallback
    ) -> Unsubscribe: ...


def is_open_word(word: str | None) -> bool:
    """Whether a raw open-flag storage word is set.

    ``"0x"``, ``"0x0"`` and any all-zero word count as closed.
    """
    if not word:
        return False
    digits = word.strip().lower()
    if digits.startswith("0x"):
        digits = digits[2:]
    return digits.strip("0") != ""


class LedgerStateReader:
    """Reads the owner, current user and open flag of a device record."""

    def __init__(self, client: LedgerClient, address: str) -> None:
        self._client = client
        self.address = address

    async def owner(self) -> str:
        return await self._client.get_storage_at(self.address, OWNER_SLOT)

    async def current_user(self) -> str:
        return await self._client.get_storage_at(self.address, USER_SLOT)

    async def open_flag(self) -> str:
        return await self._client.get_storage_at(self.address, OPEN_FLAG_SLOT)

    async def is_open(self) -> bool:
        return is_open_word(await self.open_flag())
