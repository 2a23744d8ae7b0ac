"""Core abstractions: event sources, strategies and executors."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from typing import Generic, TypeVar

E = TypeVar("E")
E2 = TypeVar("E2")
A = TypeVar("A")
A2 = TypeVar("A2")

EventStream = AsyncIterator
"""A stream of events emitted by an :class:`EventSource`."""


class EventSource(ABC, Generic[E]):
    """Turns external happenings (new blocks, pending txs, ...) into events."""

    @abstractmethod
    async def get_event_stream(self) -> AsyncIterator[E]:
        """Return an asynchronous stream of events."""


async def _map_stream(
    stream: AsyncIterator[E], f: Callable[[E], E2]
) -> AsyncIterator[E2]:
    async for item in stream:
        yield f(item)


class EventSourceMap(EventSource[E2], Generic[E, E2]):
    """Wraps an event source and maps its events to another type."""

    def __init__(self, event_source: EventSource[E], f: Callable[[E], E2]) -> None:
        self._event_source = event_source
        self._f = f

    async def get_event_stream(self) -> AsyncIterator[E2]:
        stream = await self._event_source.get_event_stream()
        return _map_stream(stream, self._f)


class Executor(ABC, Generic[A]):
    """Carries out actions produced by strategies."""

    @abstractmethod
    async def execute(self, action: A) -> None:
        """Execute a single action, raising :class:`KazukaError` on failure."""


class ExecutorMap(Executor[A], Generic[A, A2]):
    """Wraps an executor and maps incoming actions to its action type.

    Actions for which the mapping returns ``None`` are dropped.
    """

    def __init__(self, executor: Executor[A2], f: Callable[[A], A2 | None]) -> None:
        self._executor = executor
        self._f = f

    async def execute(self, action: A) -> None:
        mapped = self._f(action)
        if mapped is not None:
            await self._executor.execute(mapped)


class Strategy(ABC, Generic[E, A]):
    """Decides, event by event, which actions to take."""

    async def sync_state(self) -> None:
        """Sync the initial state of the strategy; nothing to do by default."""
        return None

    @abstractmethod
    async def process_event(self, event: E) -> list[A]:
        """Process one event and return the actions it calls for."""


class Event(enum.Enum):
    NEW_BLOCK = enum.auto()
    TRANSACTION = enum.auto()


class Action(enum.Enum):
    SUBMIT_TX_TO_MEMPOOL = enum.auto()