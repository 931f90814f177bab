"""
Transport port.
"""
from __future__ import annotations

from typing import Any, Protocol, Sequence


class ITransport(Protocol):
    async def send(self, method: str, params: Sequence[Any] = ()) -> Any:
        """
        Send one JSON-RPC request and return its `result` verbatim.

        Raises TransportError, ParseError or ProtocolError.
        """
        ...


__all__ = ["ITransport"]
