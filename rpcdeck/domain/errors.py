"""
Error taxonomy for RPC invocations.

- RpcError and its subclasses are reported per slot by message.
- PersistenceError signals that the settings store could not be written.
"""

from __future__ import annotations

from typing import Any, Optional

TRANSPORT_PREFIX = "RPC Error"


class RpcError(Exception):
    """Base class for failures the execution engine reports by message."""

    @property
    def message(self) -> str:
        return str(self)


class TransportError(RpcError):
    """The endpoint could not be reached (connection refused, DNS, reset...)."""

    def __init__(self, cause: str) -> None:
        super().__init__(f"{TRANSPORT_PREFIX}: {cause}")
        self.cause = cause


class ParseError(RpcError):
    """The endpoint answered with something that is not a JSON-RPC envelope."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"{TRANSPORT_PREFIX}: {detail}")
        self.detail = detail


class ProtocolError(RpcError):
    """The endpoint answered with a JSON-RPC ``error`` object."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.data = data


class ConversionError(RpcError):
    """A parameter could not be converted before the request was sent."""


class PersistenceError(Exception):
    """Settings storage rejected a write."""


__all__ = [
    "RpcError",
    "TransportError",
    "ParseError",
    "ProtocolError",
    "ConversionError",
    "PersistenceError",
    "TRANSPORT_PREFIX",
]
