"""Event sources that listen to a node: new blocks, logs and pending txs.

The sources talk to the node through a *provider*: any object exposing the
asynchronous methods a given source needs:

* ``subscribe_blocks()`` returns an async iterator of block headers;
* ``subscribe_logs(filter)`` returns an async iterator of logs;
* ``subscribe_pending_transactions()`` returns an async iterator of hashes;
* ``get_transaction_by_hash(hash)`` returns a transaction or ``None``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from kazuka.errors import KazukaError, RpcError
from kazuka.types import EventSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _rpc_call(call: Awaitable[T]) -> T:
    """Await a provider call, turning foreign failures into :class:`RpcError`."""
    try:
        return await call
    except KazukaError:
        raise
    except Exception as err:
        raise RpcError(err) from err


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj[name]
    return getattr(obj, name)


@dataclass(frozen=True)
class NewBlock:
    """A newly produced block."""

    hash: Any
    number: int
    timestamp: int

    @classmethod
    def from_header(cls, header: Any) -> NewBlock:
        """Build from a header given as a mapping or an object with attributes."""
        return cls(
            hash=_field(header, "hash"),
            number=_field(header, "number"),
            timestamp=_field(header, "timestamp"),
        )


class BlockEventSource(EventSource[NewBlock]):
    """Listens for new blocks and emits a :class:`NewBlock` for each."""

    def __init__(self, provider: Any) -> None:
        self.provider = provider

    async def get_event_stream(self) -> AsyncIterator[NewBlock]:
        subscription = await _rpc_call(self.provider.subscribe_blocks())
        return self._blocks(subscription)

    @staticmethod
    async def _blocks(subscription: AsyncIterator[Any]) -> AsyncIterator[NewBlock]:
        async for header in subscription:
            yield NewBlock.from_header(header)


class LogEventSource(EventSource[Any]):
    """Listens for event logs matching a filter and emits them unchanged."""

    def __init__(self, provider: Any, filter: Any) -> None:
        self.provider = provider
        self.filter = filter

    async def get_event_stream(self) -> AsyncIterator[Any]:
        return await _rpc_call(self.provider.subscribe_logs(self.filter))


class MempoolEventSource(EventSource[Any]):
    """Listens for pending transactions and emits each full transaction.

    Hashes whose lookup fails or finds nothing are skipped.
    """

    def __init__(self, provider: Any) -> None:
        self.provider = provider

    async def get_event_stream(self) -> AsyncIterator[Any]:
        try:
            subscription = await _rpc_call(
                self.provider.subscribe_pending_transactions()
            )
        except KazukaError as err:
            logger.error("Error subscribing to pending transactions: %s", err)
            raise
        return self._transactions(subscription)

    async def _transactions(self, subscription: AsyncIterator[Any]) -> AsyncIterator[Any]:
        async for tx_hash in subscription:
            try:
                tx = await _rpc_call(self.provider.get_transaction_by_hash(tx_hash))
            except KazukaError as err:
                logger.error("Error getting transaction by hash: %s", err)
                continue
            if tx is not None:
                yield tx