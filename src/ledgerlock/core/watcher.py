from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from functools import partial

from ledgerlock.config import DeviceConfig
from ledgerlock.errors import WatcherError
from ledgerlock.models import (
    EventKind,
    EventSignature,
    LogEvent,
    ObservationStrategy,
    OpenState,
    StateChangeNotification,
)

from .address import normalize_address
from .bus import CHANGE_STATE, EXIT, WATCH_DEVICE, NotificationBus
from .ledger import TRANSPORT_ERRORS, LedgerClient, LedgerStateReader

logger = logging.getLogger(__name__)

# Error text the ledger node uses for malformed requests; retrying never helps.
PROTOCOL_ERROR_MARKER = "INVALID_PARAMS"


class DeviceWatcher:
    """Tracks the open/closed state of one device contract.

    The watcher observes the ledger with exactly one strategy, chosen when it
    starts: storage polling, log subscription, or nothing at all when the
    device is only driven by remote-control messages. Every accepted change
    goes through :meth:`change_state`, the single place notifications are
    emitted from.
    """

    def __init__(
        self,
        device_id: str,
        config: DeviceConfig,
        client: LedgerClient,
        bus: NotificationBus,
    ) -> None:
        self.id = device_id
        self.config = config
        self.strategy = ObservationStrategy.for_config(config)
        self.reader = LedgerStateReader(client, config.address)
        self.last_open = OpenState.UNKNOWN
        self.last_event_signature: EventSignature | None = None
        self.last_event_number = 0

        self._client = client
        self._bus = bus
        self._active = False
        self._poll_task: asyncio.Task[None] | None = None
        self._unsubscribes: tuple[Callable[[], None], ...] = ()

    def __repr__(self) -> str:
        return f"DeviceWatcher(id={self.id!r}, strategy={self.strategy.value})"

    @property
    def active(self) -> bool:
        return self._active

    def start(self, observe: bool = True) -> None:
        """Activate the watcher.

        Without ``observe`` no poll task or log subscription is set up. The
        watcher then only reacts to remote-control messages and direct
        :meth:`change_state` calls, which suits one-shot commands.
        """
        if self._active:
            raise WatcherError(f"Device '{self.id}' is already being watched")

        self._active = True
        if not observe:
            logger.debug("Activated %s without observing the ledger", self.id)
            return

        logger.info("Start watching %s (%s)", self.id, self.strategy.value)
        if self.strategy is ObservationStrategy.STORAGE:
            self._poll_task = asyncio.get_running_loop().create_task(
                self._poll_storage(), name=f"ledgerlock-poll-{self.id}"
            )
        elif self.strategy is ObservationStrategy.EVENTS:
            for kind in (EventKind.OPEN, EventKind.CLOSE):
                unsubscribe = self._client.subscribe(
                    self.config.address, kind, partial(self.on_log_event, kind)
                )
                self._unsubscribes += (unsubscribe,)

        self._bus.emit(WATCH_DEVICE, self)

    def stop(self) -> None:
        if not self._active:
            return

        logger.info("Stop watching %s", self.id)
        self._active = False

        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None

        unsubscribes, self._unsubscribes = self._unsubscribes, ()
        for unsubscribe in unsubscribes:
            unsubscribe()

    async def _poll_storage(self) -> None:
        while self._active:
            await self.on_storage_tick()
            await asyncio.sleep(self.config.interval)

    async def on_storage_tick(self) -> None:
        """Re-read the open flag and emit when it differs from the last value."""
        try:
            is_open = await self.reader.is_open()
        except TRANSPORT_ERRORS as exc:
            logger.warning("Error reading storage of %s: %s", self.id, exc)
            return

        if not self._active:
            return

        state = OpenState.from_bool(is_open)
        if state is self.last_open:
            return

        previous, self.last_open = self.last_open, state
        # Closed is the assumed starting state, so a first closed read says nothing.
        if previous is OpenState.UNKNOWN and not is_open:
            return
        self.change_state(is_open)

    def on_log_event(
        self,
        kind: EventKind,
        event: LogEvent | None,
        error: Exception | None = None,
    ) -> None:
        if not self._active:
            return

        if error is not None:
            logger.warning("Error with %s: %s", self.id, error)
            if self.config.stop_on_error and PROTOCOL_ERROR_MARKER in str(error):
                logger.error("Stopping on protocol error from %s", self.id)
                self._bus.emit(EXIT, self)
                raise SystemExit(1)
            return

        if event is None:
            return

        signature: EventSignature = (kind, event.hash)
        if signature == self.last_event_signature:
            logger.debug("Ignoring redelivered %s event %s", kind.value, event.hash)
            return

        is_open = kind is EventKind.OPEN
        # Devices are assumed closed until an Open event says otherwise.
        if not is_open and self.last_open is not OpenState.OPEN:
            return

        self.last_event_signature = signature
        self.last_event_number = event.number
        self.last_open = OpenState.from_bool(is_open)
        self.change_state(is_open)

    def change_state(self, is_open: bool, from_message: bool = False) -> None:
        if self.config.use_message and not from_message:
            logger.debug("Ignoring ledger change of %s, device uses messages", self.id)
            return

        self.last_open = OpenState.from_bool(is_open)
        logger.info("Device %s is now %s", self.id, "open" if is_open else "closed")
        self._bus.emit(
            CHANGE_STATE,
            StateChangeNotification(
                open=is_open, id=self.id, config=self.config, sender=self
            ),
        )

    async def is_authorized(self, candidate: str) -> bool:
        """Whether ``candidate`` is the device's current user or its owner."""
        wanted = normalize_address(candidate)
        if normalize_address(await self.reader.current_user()) == wanted:
            return True
        return normalize_address(await self.reader.owner()) == wanted

    async def is_open(self) -> bool:
        return await self.reader.is_open()

    async def current_user(self) -> str:
        return await self.reader.current_user()
