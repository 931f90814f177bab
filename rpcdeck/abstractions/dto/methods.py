"""
Method catalog DTOs.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from rpcdeck.domain.params import ParamType, coerce_param

Invoker = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    type: ParamType = "string"
    placeholder: str = ""

    def coerce(self, text: str) -> str:
        return coerce_param(self.name, self.type, text)


@dataclass(frozen=True)
class MethodDescriptor:
    """
    One invocable remote procedure.

    `method` receives the positional string arguments (in `params` order),
    performs any procedure-specific conversion, calls the transport and shapes
    the response.
    """
    name: str
    label: str
    method: Invoker
    params: Tuple[ParameterSpec, ...] = ()
    description: Optional[str] = None
    rpc_method: Optional[str] = None

    async def call(self, args: Sequence[str]) -> Any:
        if len(args) != len(self.params):
            raise TypeError(f"{self.name} takes {len(self.params)} argument(s), got {len(args)}")
        checked = [spec.coerce(arg) for spec, arg in zip(self.params, args)]
        return await self.method(*checked)


@dataclass(frozen=True)
class MethodCategory:
    key: str
    title: str
    methods: Dict[str, MethodDescriptor] = field(default_factory=dict)


@dataclass(frozen=True)
class MethodOption:
    value: str
    label: str


__all__ = ["Invoker", "ParameterSpec", "MethodDescriptor", "MethodCategory", "MethodOption"]
