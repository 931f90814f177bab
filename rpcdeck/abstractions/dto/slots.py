"""
Slot and execution-state DTOs.

InvocationSlot is the persisted identity of a dashboard panel. ExecutionState
is the ephemeral outcome of running it and is never persisted.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class InvocationSlot:
    id: str
    method_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "methodName": self.method_name}


SlotCollection = Tuple[InvocationSlot, ...]


class ExecutionStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ExecutionState:
    status: ExecutionStatus
    result: Any = None
    message: Optional[str] = None

    @classmethod
    def idle(cls) -> "ExecutionState":
        return cls(ExecutionStatus.IDLE)

    @classmethod
    def pending(cls) -> "ExecutionState":
        return cls(ExecutionStatus.PENDING)

    @classmethod
    def succeeded(cls, result: Any) -> "ExecutionState":
        return cls(ExecutionStatus.SUCCEEDED, result=result)

    @classmethod
    def failed(cls, message: str) -> "ExecutionState":
        return cls(ExecutionStatus.FAILED, message=message)

    @property
    def is_pending(self) -> bool:
        return self.status is ExecutionStatus.PENDING


__all__ = ["InvocationSlot", "SlotCollection", "ExecutionStatus", "ExecutionState"]
