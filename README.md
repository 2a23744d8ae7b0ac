# kazuka

An event-driven engine for building on-chain trading bots with asyncio.

A bot is made of three kinds of parts:

- **Event sources** (`kazuka.types.EventSource`) turn outside happenings,
  such as new blocks, pending mempool transactions and contract logs, into an
  async stream of events.
- **Strategies** (`kazuka.types.Strategy`) take each event, decide whether
  there is an opportunity, and return a list of actions.
- **Executors** (`kazuka.types.Executor`) carry the actions out, for example
  by submitting a transaction to the mempool.

`kazuka.engine.Engine` connects them. Every event goes to every strategy and
every action goes to every executor. Each part runs as its own asyncio task.

## Installation

```
pip install kazuka
```

For the test suite:

```
pip install "kazuka[test]"
pytest
```

## Usage

```python
import asyncio

from kazuka.engine import Engine
from kazuka.types import Action, Event, EventSource, Executor, Strategy


class Ticker(EventSource):
    async def get_event_stream(self):
        async def stream():
            yield Event.NEW_BLOCK
            yield Event.TRANSACTION
        return stream()


class Echo(Strategy):
    async def process_event(self, event):
        if event is Event.TRANSACTION:
            return [Action.SUBMIT_TX_TO_MEMPOOL]
        return []


class Printer(Executor):
    async def execute(self, action):
        print("executing", action)


async def main():
    engine = (
        Engine()
        .add_event_source(Ticker())
        .add_strategy(Echo())
        .add_executor(Printer())
    )
    async with await engine.run():
        await asyncio.sleep(0.2)


asyncio.run(main())
```

`Engine.run()` starts the tasks and returns a `RunningEngine`. You can call
`await running.shutdown()` to cancel every task and wait for them. You can
also use it as an async context manager, which shuts it down on exit.

### Engine behaviour

- A strategy can override `sync_state()` to load its starting state. `run()`
  awaits it before that strategy's task starts. If it raises, the tasks
  already started are cancelled and `run()` raises the same exception.
- Events and actions pass through bounded broadcast channels. Both default to
  512 slots (`DEFAULT_CHANNEL_CAPACITY`), and you can change them with the
  `event_channel_capacity` and `action_channel_capacity` keyword arguments of
  `Engine`. A capacity below 1 raises `ValueError`. When a receiver falls
  behind, its oldest items are dropped and the lag is logged.
- Exceptions raised by an executor are logged, and the executor keeps running.
  If an event source fails to return a stream, the failure is logged and that
  source's task ends.

### Adapting types

`EventSourceMap(source, f)` wraps an event source and passes every event it
emits through `f`. `ExecutorMap(executor, f)` wraps an executor and passes
every incoming action through `f`. If `f` returns `None`, the action is
dropped.

### Blockchain parts

These parts talk to a node through a *provider* that you supply. Any object
with the needed async methods will do.

`kazuka.event_sources` offers:

- `BlockEventSource(provider)` uses `subscribe_blocks()` and emits a
  `NewBlock` (`hash`, `number`, `timestamp`) for each header. A header may be
  a mapping or an object with attributes.
- `LogEventSource(provider, filter)` uses `subscribe_logs(filter)` and emits
  the logs unchanged.
- `MempoolEventSource(provider)` uses `subscribe_pending_transactions()` and
  looks each hash up with `get_transaction_by_hash(hash)`. Hashes whose lookup
  fails or returns `None` are skipped.

`kazuka.executors` offers `MempoolExecutor(provider)`, which carries out
`SubmitTxToMempool(tx, gas_bid_info=None)` actions. It calls
`estimate_gas(tx)`, sets the transaction's `"gasPrice"` field, and calls
`send_transaction(tx)`.

- With a `GasBidInfo(expected_profit, bid_percentage)`, the price comes from
  `GasBidInfo.bid_gas_price(gas_usage)`. The break-even price is
  `expected_profit // gas_usage`, and the bid is `bid_percentage` percent of
  it. Both values must fit in an unsigned 128-bit integer, and `gas_usage`
  must be positive.
- Without a `GasBidInfo`, the price comes from `get_gas_price()`.

### Errors

All errors the package raises derive from `kazuka.errors.KazukaError`. A
failing provider call is raised as `kazuka.errors.RpcError`, and the original
exception is kept in `source`.

## What it does not do

The package does not include a node client or provider. It opens no
connections of its own, so you must supply an object that speaks to your
node. Beyond the example types `Event` and `Action`, it also ships no
ready-made strategies.

## Command line

```
kazuka
```

prints a greeting and exits.