"""
Execution Engine

One ExecutionEngine per slot drives the lifecycle

    Idle -> Pending -> (Succeeded | Failed) -> Pending -> ...

of invoking that slot's method descriptor. The ExecutionBoard keeps the
transient map slot id -> engine (and the operator's parameter text); it is
never persisted and dropping a slot discards its engine, so a call still in
flight for a removed slot completes without touching any visible state.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Mapping, Optional, Set

from rpcdeck.abstractions.dto.methods import MethodDescriptor
from rpcdeck.abstractions.dto.slots import ExecutionState, ExecutionStatus, InvocationSlot
from rpcdeck.domain.errors import RpcError

if TYPE_CHECKING:
    from rpcdeck.infrastructure.catalog.registry import MethodRegistry

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error occurred"

StateListener = Callable[[str, ExecutionState], None]


class ExecutionEngine:
    def __init__(self, slot_id: str, on_change: Optional[StateListener] = None) -> None:
        self.slot_id = slot_id
        self._state = ExecutionState.idle()
        self._listeners: List[StateListener] = [on_change] if on_change else []
        self._discarded = False
        self._run = 0
        self.last_result: Any = None

    @property
    def state(self) -> ExecutionState:
        return self._state

    @property
    def discarded(self) -> bool:
        return self._discarded

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def discard(self) -> None:
        """Detach the engine; later completions are dropped silently."""
        self._discarded = True
        self._listeners.clear()

    async def execute(self, descriptor: MethodDescriptor, param_values: Mapping[str, str]) -> ExecutionState:
        """
        Invoke `descriptor` with the operator's text values.

        Parameters are projected in declared order; a parameter with no entry
        in `param_values` is sent as "". Every failure is reduced to
        Failed(message): RpcError kinds keep their message, anything else
        becomes UNKNOWN_ERROR. Returns the terminal state of this invocation.
        """
        self._run += 1
        run = self._run
        self._transition(ExecutionState.pending())

        args = [param_values.get(spec.name, "") for spec in descriptor.params]
        try:
            result = await descriptor.call(args)
        except RpcError as e:
            final = ExecutionState.failed(e.message)
        except Exception:
            logger.exception("Unexpected failure invoking '%s' for slot %s", descriptor.name, self.slot_id)
            final = ExecutionState.failed(UNKNOWN_ERROR)
        else:
            final = ExecutionState.succeeded(result)

        if run != self._run:
            # superseded by a newer invocation of the same slot
            logger.debug("Dropping stale completion for slot %s", self.slot_id)
            return final
        if final.status is ExecutionStatus.SUCCEEDED:
            self.last_result = result
        self._transition(final)
        return final

    def _transition(self, state: ExecutionState) -> None:
        if self._discarded:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(self.slot_id, state)


class ExecutionBoard:
    """Transient per-slot execution state and parameter input, keyed by slot id."""

    def __init__(self, on_change: Optional[StateListener] = None) -> None:
        self._on_change = on_change
        self._engines: Dict[str, ExecutionEngine] = {}
        self._params: Dict[str, Dict[str, str]] = {}
        self._tasks: Set["asyncio.Task"] = set()

    def engine(self, slot_id: str) -> ExecutionEngine:
        engine = self._engines.get(slot_id)
        if engine is None:
            engine = ExecutionEngine(slot_id, on_change=self._on_change)
            self._engines[slot_id] = engine
        return engine

    def state(self, slot_id: str) -> ExecutionState:
        engine = self._engines.get(slot_id)
        return engine.state if engine else ExecutionState.idle()

    def params(self, slot_id: str) -> Dict[str, str]:
        return dict(self._params.get(slot_id, {}))

    def set_param(self, slot_id: str, name: str, value: str) -> None:
        self._params.setdefault(slot_id, {})[name] = value

    def drop(self, slot_id: str) -> None:
        engine = self._engines.pop(slot_id, None)
        if engine is not None:
            engine.discard()
        self._params.pop(slot_id, None)

    def sync(self, slots: Iterable[InvocationSlot]) -> None:
        """Drop engines whose slot is no longer in `slots`."""
        live = {s.id for s in slots}
        for slot_id in [sid for sid in self._engines if sid not in live]:
            self.drop(slot_id)
        for slot_id in [sid for sid in self._params if sid not in live]:
            self._params.pop(slot_id, None)

    async def run(self, slot: InvocationSlot, registry: "MethodRegistry") -> Optional[ExecutionState]:
        descriptor = registry.resolve(slot.method_name)
        if descriptor is None:
            logger.debug("Slot %s has no method configured; nothing to run", slot.id)
            return None
        return await self.engine(slot.id).execute(descriptor, self.params(slot.id))

    async def run_many(self, slots: Iterable[InvocationSlot], registry: "MethodRegistry") -> List[Optional[ExecutionState]]:
        """Run several slots concurrently; each reaches its own terminal state."""
        return list(await asyncio.gather(*(self.run(slot, registry) for slot in slots)))

    def schedule(self, slot: InvocationSlot, registry: "MethodRegistry") -> Optional["asyncio.Task"]:
        """
        Start `slot` on the running event loop and return without waiting.

        The slot shows Pending until its call settles; an endpoint that never
        answers leaves it Pending while every other slot stays usable.
        Returns None for an unconfigured slot.
        """
        if registry.resolve(slot.method_name) is None:
            return None
        task = asyncio.get_running_loop().create_task(self.run(slot, registry))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def schedule_many(self, slots: Iterable[InvocationSlot], registry: "MethodRegistry") -> List["asyncio.Task"]:
        tasks = (self.schedule(slot, registry) for slot in slots)
        return [t for t in tasks if t is not None]

    @property
    def in_flight(self) -> int:
        return len(self._tasks)


__all__ = ["ExecutionEngine", "ExecutionBoard", "UNKNOWN_ERROR", "StateListener"]
