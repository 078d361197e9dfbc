"""Data models for ledgerlock."""

from ledgerlock.models.device import (
    AdminCommand,
    DeviceStatus,
    EventKind,
    EventSignature,
    LogEvent,
    ObservationStrategy,
    OpenState,
    RemoteControlMessage,
    StateChangeNotification,
)

__all__ = [
    "AdminCommand",
    "DeviceStatus",
    "EventKind",
    "EventSignature",
    "LogEvent",
    "ObservationStrategy",
    "OpenState",
    "RemoteControlMessage",
    "StateChangeNotification",
]
