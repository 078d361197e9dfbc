from __future__ import annotations

import asyncio

from ledgerlock.core import NotificationBus


def test_handlers_run_synchronously_in_order():
    bus = NotificationBus()
    seen: list[tuple[str, int]] = []
    bus.on("topic", lambda payload: seen.append(("a", payload)))
    bus.on("topic", lambda payload: seen.append(("b", payload)))

    bus.emit("topic", 1)
    bus.emit("other", 2)

    assert seen == [("a", 1), ("b", 1)]


def test_unsubscribe():
    bus = NotificationBus()
    seen: list[int] = []
    unsubscribe = bus.on("topic", seen.append)
    bus.on("topic", seen.append)

    assert bus.listeners("topic") == 1
    unsubscribe()
    bus.emit("topic", 1)

    assert seen == []
    assert bus.off("topic", seen.append) is False


def test_coroutine_handlers_are_scheduled():
    bus = NotificationBus()
    seen: list[int] = []

    async def handler(payload: int) -> None:
        await asyncio.sleep(0)
        seen.append(payload)
        if payload < 3:
            bus.emit("topic", payload + 1)

    async def failing(payload: int) -> None:
        raise RuntimeError("boom")

    bus.on("topic", handler)
    bus.on("topic", failing)

    async def scenario() -> None:
        bus.emit("topic", 1)
        assert seen == []
        await bus.drain()

    asyncio.run(scenario())

    assert seen == [1, 2, 3]


def test_cancel_pending_handlers():
    bus = NotificationBus()
    finished: list[int] = []

    async def handler(payload: int) -> None:
        await asyncio.Event().wait()
        finished.append(payload)

    bus.on("topic", handler)

    async def scenario() -> int:
        bus.emit("topic", 1)
        await asyncio.sleep(0)
        pending = bus.pending
        bus.cancel_pending()
        await bus.drain()
        return pending

    assert asyncio.run(scenario()) == 1
    assert bus.pending == 0
    assert finished == []
