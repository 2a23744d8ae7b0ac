"""Errors raised by the engine and its components."""

from __future__ import annotations


class KazukaError(Exception):
    """Base class for every error the package raises."""


class RpcError(KazukaError):
    """A call to a node over RPC failed.

    The underlying transport error, if any, is kept in ``source`` and is
    also chained as ``__cause__``.
    """

    def __init__(self, source: BaseException | None = None) -> None:
        super().__init__("RPC error")
        self.source = source
        if source is not None:
            self.__cause__ = source

    def __str__(self) -> str:
        return "RPC error"