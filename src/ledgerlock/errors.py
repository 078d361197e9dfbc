from __future__ import annotations


class LedgerlockError(Exception):
    """Base class for ledgerlock errors."""


class WatcherError(LedgerlockError):
    """A device watcher was driven through an invalid lifecycle step."""


class LedgerTransportError(LedgerlockError):
    """A ledger read or log subscription failed."""
