"""The engine that wires event sources, strategies and executors together."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Iterable
from typing import Generic, TypeVar

from kazuka.types import EventSource, Executor, Strategy

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_CAPACITY = 512

E = TypeVar("E")
A = TypeVar("A")
T = TypeVar("T")


class _Lagged(Exception):
    def __init__(self, skipped: int) -> None:
        super().__init__(f"channel lagged by {skipped}")
        self.skipped = skipped


class _NoReceivers(Exception):
    def __init__(self) -> None:
        super().__init__("channel has no receivers")


class _Receiver(Generic[T]):
    """One subscriber's view of a bounded broadcast channel."""

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._buffer: deque[T] = deque()
        self._lagged = 0
        self._ready = asyncio.Event()

    def _push(self, item: T) -> None:
        if len(self._buffer) >= self._capacity:
            self._buffer.popleft()
            self._lagged += 1
        self._buffer.append(item)
        self._ready.set()

    async def recv(self) -> T:
        while not self._buffer and not self._lagged:
            self._ready.clear()
            await self._ready.wait()
        if self._lagged:
            skipped, self._lagged = self._lagged, 0
            raise _Lagged(skipped)
        return self._buffer.popleft()


class _Broadcast(Generic[T]):
    """Bounded channel where every receiver sees every value; slow ones lag."""

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._receivers: list[_Receiver[T]] = []

    def subscribe(self) -> _Receiver[T]:
        receiver: _Receiver[T] = _Receiver(self._capacity)
        self._receivers.append(receiver)
        return receiver

    def send(self, item: T) -> int:
        if not self._receivers:
            raise _NoReceivers()
        for receiver in self._receivers:
            receiver._push(item)
        return len(self._receivers)


async def _run_executor(executor: Executor[A], receiver: _Receiver[A]) -> None:
    logger.info("Starting executor...")
    while True:
        try:
            action = await receiver.recv()
        except _Lagged as err:
            logger.error("Error receiving action: %s", err)
            continue
        try:
            await executor.execute(action)
        except Exception as err:
            logger.error("Error executing action: %s", err)


async def _run_strategy(
    strategy: Strategy[E, A], receiver: _Receiver[E], actions: _Broadcast[A]
) -> None:
    logger.info("Starting strategy...")
    while True:
        try:
            event = await receiver.recv()
        except _Lagged as err:
            logger.error("Error receiving event: %s", err)
            continue
        for action in await strategy.process_event(event):
            try:
                actions.send(action)
            except _NoReceivers as err:
                logger.error("Error sending action: %s", err)


async def _run_event_source(source: EventSource[E], events: _Broadcast[E]) -> None:
    logger.info("Starting event source...")
    try:
        stream = await source.get_event_stream()
    except Exception:
        logger.exception("Event source didn't return event stream")
        raise
    async for event in stream:
        try:
            events.send(event)
        except _NoReceivers as err:
            logger.error("Error sending event: %s", err)


class RunningEngine:
    """The tasks of a started engine."""

    def __init__(self, tasks: Iterable[asyncio.Task[None]]) -> None:
        self.tasks: tuple[asyncio.Task[None], ...] = tuple(tasks)

    async def shutdown(self) -> None:
        """Cancel every task and wait for all of them to finish."""
        for task in self.tasks:
            task.cancel()
        await asyncio.gather(*self.tasks, return_exceptions=True)

    async def __aenter__(self) -> RunningEngine:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()


class Engine(Generic[E, A]):
    """Collects components and runs the data flow between them."""

    def __init__(
        self,
        *,
        event_channel_capacity: int = DEFAULT_CHANNEL_CAPACITY,
        action_channel_capacity: int = DEFAULT_CHANNEL_CAPACITY,
    ) -> None:
        if event_channel_capacity < 1 or action_channel_capacity < 1:
            raise ValueError("channel capacity must be at least 1")
        self.event_sources: list[EventSource[E]] = []
        self.strategies: list[Strategy[E, A]] = []
        self.executors: list[Executor[A]] = []
        self.event_channel_capacity = event_channel_capacity
        self.action_channel_capacity = action_channel_capacity

    def add_event_source(self, source: EventSource[E]) -> Engine[E, A]:
        self.event_sources.append(source)
        return self

    def add_strategy(self, strategy: Strategy[E, A]) -> Engine[E, A]:
        self.strategies.append(strategy)
        return self

    def add_executor(self, executor: Executor[A]) -> Engine[E, A]:
        self.executors.append(executor)
        return self

    async def run(self) -> RunningEngine:
        """Start a task per executor, strategy and event source.

        Each strategy's state is synced before its task starts; a failure
        there cancels whatever was already started and is raised.
        """
        events: _Broadcast[E] = _Broadcast(self.event_channel_capacity)
        actions: _Broadcast[A] = _Broadcast(self.action_channel_capacity)
        tasks: list[asyncio.Task[None]] = []
        try:
            for executor in self.executors:
                tasks.append(
                    asyncio.create_task(_run_executor(executor, actions.subscribe()))
                )
            for strategy in self.strategies:
                receiver = events.subscribe()
                logger.info("Syncing strategy's state...")
                await strategy.sync_state()
                tasks.append(
                    asyncio.create_task(_run_strategy(strategy, receiver, actions))
                )
            for source in self.event_sources:
                tasks.append(asyncio.create_task(_run_event_source(source, events)))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return RunningEngine(tasks)