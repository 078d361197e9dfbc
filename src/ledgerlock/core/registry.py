from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from ledgerlock.config import LedgerConfig
from ledgerlock.models import (
    AdminCommand,
    DeviceStatus,
    RemoteControlMessage,
    StateChangeNotification,
)

from .bus import ADMIN_ADD_COMMAND, CHANGE_STATE, MESSAGE, NotificationBus
from .ledger import LedgerClient
from .router import OPEN_TOKEN, MessageRouter
from .watcher import DeviceWatcher

logger = logging.getLogger(__name__)

ClientFactory = Callable[[LedgerConfig], LedgerClient]


class WatcherRegistry:
    """Owns the device watchers of the active configuration."""

    def __init__(self, bus: NotificationBus, client_factory: ClientFactory) -> None:
        self._bus = bus
        self._client_factory = client_factory
        self._client: LedgerClient | None = None
        self._watchers: tuple[DeviceWatcher, ...] = ()
        self._router = MessageRouter(lambda: self._watchers)
        self._unsubscribe_messages: Callable[[], None] | None = None

    @property
    def watchers(self) -> tuple[DeviceWatcher, ...]:
        return self._watchers

    @property
    def router(self) -> MessageRouter:
        return self._router

    @property
    def client(self) -> LedgerClient | None:
        return self._client

    def get(self, device_id: str) -> DeviceWatcher | None:
        for watcher in self._watchers:
            if watcher.id == device_id:
                return watcher
        return None

    def reconfigure(
        self,
        config: LedgerConfig,
        old_config: LedgerConfig | None = None,
        observe: bool = True,
    ) -> None:
        """Replace every watcher with one per device in ``config``.

        The new generation is built completely before it is swapped in, so
        readers of :attr:`watchers` see either the old tuple or the new one.
        If building fails, the watchers started so far are stopped and the
        registry is left empty. ``observe=False`` activates the watchers
        without polling or subscribing, see :meth:`DeviceWatcher.start`.
        """
        logger.info("Init devices for client %s", config.client)

        if self._unsubscribe_messages is None:
            self._unsubscribe_messages = self._bus.on(MESSAGE, self._on_message)
            self._publish_admin_commands()

        for watcher in self._watchers:
            watcher.stop()
        self._watchers = ()

        endpoint_changed = old_config is None or config.client != old_config.client
        if self._client is None or endpoint_changed:
            self._client = self._client_factory(config)

        watchers: list[DeviceWatcher] = []
        try:
            for device_id, device_config in config.devices.items():
                watcher = DeviceWatcher(
                    device_id, device_config, self._client, self._bus
                )
                watchers.append(watcher)
                watcher.start(observe=observe)
        except Exception:
            for watcher in watchers:
                watcher.stop()
            raise

        self._watchers = tuple(watchers)

    def shutdown(self) -> None:
        for watcher in self._watchers:
            watcher.stop()
        self._watchers = ()

        if self._unsubscribe_messages is not None:
            self._unsubscribe_messages()
            self._unsubscribe_messages = None

    async def _on_message(
        self, payload: RemoteControlMessage | Mapping[str, Any]
    ) -> None:
        if isinstance(payload, RemoteControlMessage):
            message = payload
        else:
            try:
                message = RemoteControlMessage.model_validate(payload)
            except ValidationError as exc:
                logger.debug("Ignoring malformed message: %s", exc)
                return
        await self._router.route(message)

    async def status(self) -> list[DeviceStatus]:
        rows: list[DeviceStatus] = []
        for watcher in self._watchers:
            rows.append(
                DeviceStatus(
                    id=watcher.id,
                    address=watcher.config.address,
                    open=await watcher.is_open(),
                    user=await watcher.current_user(),
                    strategy=watcher.strategy,
                )
            )
        return rows

    async def set_state(self, device_id: str, value: str, force: bool = False) -> str:
        """Drive ``device_id`` open or closed on behalf of an operator.

        With ``force`` the change is emitted directly. Otherwise a
        remote-control message is sent from the device's current user and
        goes through the usual routing checks.
        """
        watcher = self.get(device_id)
        if watcher is None:
            return (
                f"{device_id} not found in devices. "
                "See available devices with 'devices'"
            )

        if force:
            self._bus.emit(
                CHANGE_STATE,
                StateChangeNotification(
                    open=OPEN_TOKEN in value,
                    id=device_id,
                    config=watcher.config,
                    sender=self,
                ),
            )
        else:
            user = await watcher.current_user()
            self._bus.emit(
                MESSAGE,
                RemoteControlMessage(to=watcher.config.address, sender=user, msg=value),
            )
        return f"sent {value} event to {device_id}"

    async def describe(self) -> str:
        lines = ["all devices:"]
        for row in await self.status():
            lines.append(f"{row.id}: open={row.open} user={row.user}")
        return "\n".join(lines)

    def _publish_admin_commands(self) -> None:
        self._bus.emit(
            ADMIN_ADD_COMMAND,
            AdminCommand(
                name="devices",
                comment="lists all devices and their status",
                handler=self.describe,
            ),
        )
        self._bus.emit(
            ADMIN_ADD_COMMAND,
            AdminCommand(
                name="set",
                comment="sets the status of a device: set <DEV> open/close {force}",
                handler=self.set_state,
            ),
        )
