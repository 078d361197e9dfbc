from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ledgerlock.config import DeviceConfig


class OpenState(Enum):
    UNKNOWN = "unknown"
    CLOSED = "closed"
    OPEN = "open"

    @classmethod
    def from_bool(cls, is_open: bool) -> OpenState:
        return cls.OPEN if is_open else cls.CLOSED


class EventKind(Enum):
    """Log events published by a device contract."""

    OPEN = "Open"
    CLOSE = "Close"


class ObservationStrategy(Enum):
    STORAGE = "storage"
    EVENTS = "events"
    NONE = "none"

    @classmethod
    def for_config(cls, config: DeviceConfig) -> ObservationStrategy:
        if config.use_storage:
            return cls.STORAGE
        if not config.ignore_events:
            return cls.EVENTS
        return cls.NONE


EventSignature = tuple[EventKind, str]


@dataclass(frozen=True)
class LogEvent:
    kind: EventKind
    hash: str
    number: int = 0


@dataclass(frozen=True)
class StateChangeNotification:
    open: bool
    id: str
    config: DeviceConfig
    sender: Any


class RemoteControlMessage(BaseModel):
    """Inbound remote-control request addressed to a device contract."""

    model_config = {"frozen": True, "extra": "forbid", "populate_by_name": True}

    to: str
    sender: str = Field(alias="from")
    msg: str


@dataclass(frozen=True)
class DeviceStatus:
    id: str
    address: str
    open: bool
    user: str
    strategy: ObservationStrategy


@dataclass(frozen=True)
class AdminCommand:
    name: str
    comment: str
    handler: Callable[..., Awaitable[str]]
