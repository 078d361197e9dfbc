from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

CHANGE_STATE = "change_state"
MESSAGE = "message"
EXIT = "exit"
WATCH_DEVICE = "watch_device"
ADMIN_ADD_COMMAND = "admin_add_command"

Handler = Callable[[Any], Any]


class NotificationBus:
    """Topic based publish/subscribe within one event loop.

    Handlers run synchronously inside ``emit``. A handler returning an
    awaitable has it scheduled as a task on the running loop.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._tasks: set[asyncio.Task[Any]] = set()

    def on(self, topic: str, handler: Handler) -> Callable[[], None]:
        handlers = self._handlers.setdefault(topic, [])
        if handler not in handlers:
            handlers.append(handler)
        return lambda: self.off(topic, handler)

    def off(self, topic: str, handler: Handler) -> bool:
        handlers = self._handlers.get(topic, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def listeners(self, topic: str) -> int:
        return len(self._handlers.get(topic, []))

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def emit(self, topic: str, payload: Any) -> None:
        for handler in list(self._handlers.get(topic, [])):
            result = handler(payload)
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._tasks.add(task)
                task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Bus handler failed: %s", exc, exc_info=exc)

    def cancel_pending(self) -> None:
        for task in list(self._tasks):
            task.cancel()

    async def drain(self) -> None:
        """Wait for every scheduled handler task, including ones they schedule."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
