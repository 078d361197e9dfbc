from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Callable

from ledgerlock.config import LedgerConfig, Settings
from ledgerlock.models import StateChangeNotification

from .bus import CHANGE_STATE, NotificationBus
from .ledger import LedgerClient
from .registry import ClientFactory, WatcherRegistry
from .web3_client import Web3LedgerClient

logger = logging.getLogger(__name__)


def default_client_factory(config: LedgerConfig) -> LedgerClient:
    return Web3LedgerClient(
        config.client,
        request_timeout=config.request_timeout,
        poll_interval=config.filter_poll_interval,
    )


def _log_change(notification: StateChangeNotification) -> None:
    logger.info(
        "%s -> %s", notification.id, "open" if notification.open else "closed"
    )


class Agent:
    """Long-running process that keeps a registry in line with its settings."""

    def __init__(
        self,
        settings: Settings,
        bus: NotificationBus | None = None,
        client_factory: ClientFactory = default_client_factory,
    ) -> None:
        self.settings = settings
        self.bus = bus or NotificationBus()
        self.registry = WatcherRegistry(self.bus, client_factory)
        self._unsubscribe_log: Callable[[], None] | None = None

    def start(self) -> None:
        self._unsubscribe_log = self.bus.on(CHANGE_STATE, _log_change)
        self.registry.reconfigure(self.settings.ledger)

    def reload(self, settings: Settings) -> None:
        old, self.settings = self.settings, settings
        logger.info("Reloading configuration")
        self.registry.reconfigure(settings.ledger, old.ledger)

    def stop(self) -> None:
        self.registry.shutdown()
        self.bus.cancel_pending()
        if self._unsubscribe_log is not None:
            self._unsubscribe_log()
            self._unsubscribe_log = None

    async def run(
        self,
        stop_event: asyncio.Event | None = None,
        load_settings: Callable[[], Settings] | None = None,
    ) -> None:
        """Watch until ``stop_event`` is set or the task is cancelled.

        With ``load_settings``, SIGHUP re-reads the settings and reconfigures.
        """
        stop_event = stop_event or asyncio.Event()
        loop = asyncio.get_running_loop()
        hangup = getattr(signal, "SIGHUP", None)
        if load_settings is not None and hangup is not None:
            loop.add_signal_handler(hangup, lambda: self._reload_from(load_settings))

        self.start()
        try:
            await stop_event.wait()
        finally:
            if load_settings is not None and hangup is not None:
                loop.remove_signal_handler(hangup)
            self.stop()
            await self.bus.drain()

    def _reload_from(self, load_settings: Callable[[], Settings]) -> None:
        try:
            settings = load_settings()
        except (FileNotFoundError, ValueError) as exc:
            logger.error("Keeping current configuration: %s", exc)
            return
        self.reload(settings)
