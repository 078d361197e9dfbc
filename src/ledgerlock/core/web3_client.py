from __future__ import annotations

import asyncio
import logging
from typing import Any

from aiohttp import ClientError
from web3 import AsyncWeb3
from web3.exceptions import Web3Exception

from ledgerlock.errors import LedgerTransportError
from ledgerlock.models import EventKind, LogEvent

from .ledger import LogCallback, Unsubscribe

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_POLL_INTERVAL = 1.0

# Errors raised by web3 and its HTTP stack for a failed request.
REQUEST_ERRORS = (
    Web3Exception,
    ClientError,
    ValueError,
    OSError,
    asyncio.TimeoutError,
)


def endpoint_url(endpoint: str) -> str:
    if "://" in endpoint:
        return endpoint
    return f"http://{endpoint}"


def event_topic(kind: EventKind) -> str:
    """Log topic of a parameterless contract event such as ``Open()``."""
    return "0x" + bytes(AsyncWeb3.keccak(text=f"{kind.value}()")).hex()


def _hex(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


class Web3LedgerClient:
    """Ledger client backed by a JSON-RPC node over HTTP.

    Log subscriptions are node-side log filters, polled for new entries by
    one task per subscription.
    """

    def __init__(
        self,
        endpoint: str,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.endpoint = endpoint_url(endpoint)
        self._request_timeout = request_timeout
        self._poll_interval = poll_interval
        self._w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(self.endpoint))

    async def get_storage_at(self, address: str, slot: int) -> str:
        try:
            word = await asyncio.wait_for(
                self._w3.eth.get_storage_at(
                    AsyncWeb3.to_checksum_address(address), slot
                ),
                timeout=self._request_timeout,
            )
        except REQUEST_ERRORS as exc:
            raise LedgerTransportError(
                f"Reading slot {slot} of {address} failed: {exc}"
            ) from exc
        return _hex(word)

    def subscribe(
        self, address: str, kind: EventKind, callback: LogCallback
    ) -> Unsubscribe:
        task = asyncio.get_running_loop().create_task(
            self._watch_logs(address, kind, callback),
            name=f"ledgerlock-logs-{kind.value}-{address}",
        )

        def unsubscribe() -> None:
            task.cancel()

        return unsubscribe

    async def _watch_logs(
        self, address: str, kind: EventKind, callback: LogCallback
    ) -> None:
        log_filter = None
        try:
            while True:
                try:
                    if log_filter is None:
                        params = {
                            "address": AsyncWeb3.to_checksum_address(address),
                            "topics": [event_topic(kind)],
                        }
                        log_filter = await asyncio.wait_for(
                            self._w3.eth.filter(params), timeout=self._request_timeout
                        )
                    entries = await asyncio.wait_for(
                        log_filter.get_new_entries(), timeout=self._request_timeout
                    )
                except REQUEST_ERRORS as exc:
                    # Node-side filters expire, so the next round installs a fresh one.
                    log_filter = None
                    callback(None, LedgerTransportError(str(exc)))
                else:
                    for entry in entries:
                        callback(
                            LogEvent(
                                kind=kind,
                                hash=_hex(entry.get("transactionHash")),
                                number=int(entry.get("blockNumber") or 0),
                            ),
                            None,
                        )
                await asyncio.sleep(self._poll_interval)
        finally:
            if log_filter is not None:
                await self._uninstall(log_filter.filter_id)

    async def _uninstall(self, filter_id: Any) -> None:
        try:
            await asyncio.wait_for(
                self._w3.eth.uninstall_filter(filter_id), timeout=self._request_timeout
            )
        except REQUEST_ERRORS as exc:
            logger.debug("Could not uninstall log filter %s: %s", filter_id, exc)
