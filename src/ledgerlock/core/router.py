from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ledgerlock.models import RemoteControlMessage

from .address import normalize_address
from .ledger import TRANSPORT_ERRORS
from .watcher import DeviceWatcher

logger = logging.getLogger(__name__)

OPEN_TOKEN = "open"


class MessageRouter:
    """Forwards authorized remote-control messages to device watchers.

    Only devices whose live open flag is set accept commands, and only from
    the device's current user or owner. Anything else is dropped silently.
    """

    def __init__(self, watchers: Callable[[], Iterable[DeviceWatcher]]) -> None:
        self._watchers = watchers

    async def route(self, message: RemoteControlMessage) -> int:
        """Deliver ``message`` and return the number of devices it changed."""
        target = normalize_address(message.to)
        wants_open = OPEN_TOKEN in message.msg
        delivered = 0

        for watcher in tuple(self._watchers()):
            if normalize_address(watcher.config.address) != target:
                continue

            try:
                if not await watcher.is_open():
                    logger.debug("Dropping message for %s: device closed", watcher.id)
                    continue
                if not await watcher.is_authorized(message.sender):
                    logger.debug(
                        "Dropping message for %s: %s not allowed",
                        watcher.id,
                        message.sender,
                    )
                    continue
            except TRANSPORT_ERRORS as exc:
                logger.debug("Dropping message for %s: %s", watcher.id, exc)
                continue

            if not watcher.active:
                continue

            watcher.change_state(wants_open, from_message=True)
            delivered += 1

        return delivered
