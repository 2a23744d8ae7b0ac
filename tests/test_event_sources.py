from types import SimpleNamespace

import pytest

from kazuka.errors import KazukaError, RpcError
from kazuka.event_sources import (
    BlockEventSource,
    LogEventSource,
    MempoolEventSource,
    NewBlock,
)


async def _aiter(items):
    for item in items:
        yield item


class FakeProvider:
    def __init__(self, headers=(), logs=(), pending=(), txs=None, fail=None):
        self.headers = list(headers)
        self.logs = list(logs)
        self.pending = list(pending)
        self.txs = txs or {}
        self.fail = fail
        self.filters = []

    def _maybe_fail(self):
        if self.fail is not None:
            raise self.fail

    async def subscribe_blocks(self):
        self._maybe_fail()
        return _aiter(self.headers)

    async def get_latest_block(self):
        return self.headers[-1]

    async def subscribe_logs(self, filter):
        self._maybe_fail()
        self.filters.append(filter)
        return _aiter(self.logs)

    async def subscribe_pending_transactions(self):
        self._maybe_fail()
        return _aiter(self.pending)

    async def get_transaction_by_hash(self, tx_hash):
        result = self.txs.get(tx_hash)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.mark.asyncio
async def test_block_event_source_emits_blocks():
    provider = FakeProvider(headers=[{"hash": "0xaa", "number": 1, "timestamp": 100}])
    source = BlockEventSource(provider)
    stream = await source.get_event_stream()
    block_a = await anext(stream)
    block_b = await provider.get_latest_block()
    assert block_a.hash == block_b["hash"]
    assert block_a == NewBlock(hash="0xaa", number=1, timestamp=100)


@pytest.mark.asyncio
async def test_block_event_source_accepts_attribute_headers():
    headers = [
        SimpleNamespace(hash="0x01", number=7, timestamp=70, extra="x"),
        SimpleNamespace(hash="0x02", number=8, timestamp=82, extra="y"),
    ]
    stream = await BlockEventSource(FakeProvider(headers=headers)).get_event_stream()
    blocks = [block async for block in stream]
    assert [b.number for b in blocks] == [7, 8]
    assert [b.hash for b in blocks] == ["0x01", "0x02"]


@pytest.mark.asyncio
async def test_block_subscription_failure_is_rpc_error():
    cause = ConnectionError("down")
    with pytest.raises(RpcError) as info:
        await BlockEventSource(FakeProvider(fail=cause)).get_event_stream()
    assert info.value.__cause__ is cause
    assert info.value.source is cause


@pytest.mark.asyncio
async def test_kazuka_error_from_provider_is_not_rewrapped():
    cause = KazukaError("already ours")
    with pytest.raises(KazukaError) as info:
        await BlockEventSource(FakeProvider(fail=cause)).get_event_stream()
    assert info.value is cause


@pytest.mark.asyncio
async def test_log_event_source_passes_filter_and_logs():
    logs = [{"address": "0x1", "data": "0x"}, {"address": "0x2", "data": "0xff"}]
    provider = FakeProvider(logs=logs)
    log_filter = {"address": "0x1"}
    stream = await LogEventSource(provider, log_filter).get_event_stream()
    received = [log async for log in stream]
    assert received == logs
    assert provider.filters == [log_filter]


@pytest.mark.asyncio
async def test_log_subscription_failure_is_rpc_error():
    with pytest.raises(RpcError):
        await LogEventSource(FakeProvider(fail=OSError("x")), {}).get_event_stream()


@pytest.mark.asyncio
async def test_mempool_event_source_emits_txs():
    tx = {"hash": "0xt1", "value": 42}
    provider = FakeProvider(pending=["0xt1"], txs={"0xt1": tx})
    stream = await MempoolEventSource(provider).get_event_stream()
    emitted_tx = await anext(stream)
    assert emitted_tx["value"] == 42


@pytest.mark.asyncio
async def test_mempool_skips_missing_and_failed_lookups():
    provider = FakeProvider(
        pending=["0xa", "0xb", "0xc", "0xd"],
        txs={"0xa": {"n": 1}, "0xb": None, "0xc": RuntimeError("boom"), "0xd": {"n": 4}},
    )
    stream = await MempoolEventSource(provider).get_event_stream()
    assert [tx async for tx in stream] == [{"n": 1}, {"n": 4}]


@pytest.mark.asyncio
async def test_mempool_subscription_failure_is_rpc_error():
    cause = TimeoutError("slow")
    with pytest.raises(RpcError) as info:
        await MempoolEventSource(FakeProvider(fail=cause)).get_event_stream()
    assert info.value.__cause__ is cause