"""Executors that send transactions to a node's mempool.

The executor talks to the node through a *provider* exposing the
asynchronous methods ``estimate_gas(tx)``, ``get_gas_price()`` and
``send_transaction(tx)``. Transactions are mappings of request fields.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from kazuka.event_sources import _rpc_call
from kazuka.types import Executor

_U128_LIMIT = 1 << 128


def _check_u128(name: str, value: int) -> None:
    if not 0 <= value < _U128_LIMIT:
        raise ValueError(f"{name} must fit in an unsigned 128-bit integer")


@dataclass(frozen=True)
class GasBidInfo:
    """How much of an opportunity's profit to bid for gas.

    ``expected_profit`` is in wei; ``bid_percentage`` is the share of the
    profit offered to the validator, as a percentage (50 means 50%).
    """

    expected_profit: int
    bid_percentage: int

    def __post_init__(self) -> None:
        _check_u128("expected_profit", self.expected_profit)
        _check_u128("bid_percentage", self.bid_percentage)

    def bid_gas_price(self, gas_usage: int) -> int:
        """Gas price giving ``bid_percentage`` of the profit to the validator.

        The break-even price is the profit divided by the gas usage; the bid
        is that share of it, in 128-bit wrapping arithmetic.
        """
        if gas_usage <= 0:
            raise ValueError("gas usage must be positive")
        breakeven_gas_price = self.expected_profit // gas_usage
        return (breakeven_gas_price * self.bid_percentage % _U128_LIMIT) // 100


@dataclass(frozen=True)
class SubmitTxToMempool:
    """Action: submit ``tx``, optionally pricing gas from a profit bid."""

    tx: Mapping[str, Any]
    gas_bid_info: GasBidInfo | None = None


class MempoolExecutor(Executor[SubmitTxToMempool]):
    """Sends transactions to the mempool."""

    def __init__(self, provider: Any) -> None:
        self.provider = provider

    async def execute(self, action: SubmitTxToMempool) -> None:
        """Price the transaction's gas and send it."""
        tx = dict(action.tx)
        gas_usage = await _rpc_call(self.provider.estimate_gas(dict(action.tx)))
        if action.gas_bid_info is not None:
            gas_price = action.gas_bid_info.bid_gas_price(int(gas_usage))
        else:
            gas_price = int(await _rpc_call(self.provider.get_gas_price()))
        tx["gasPrice"] = gas_price
        await _rpc_call(self.provider.send_transaction(tx))