"""
Shared test fixtures.

Provides an in-memory settings repository, a scriptable fake transport and a
registry bound to it, so that catalog, slot store and execution tests never
touch the network or the working directory.
"""

import asyncio
import os
import sys
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

# Ensure project root is on sys.path so 'rpcdeck' package imports resolve in tests
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from rpcdeck.domain.errors import PersistenceError  # noqa: E402
from rpcdeck.infrastructure.catalog import build_registry  # noqa: E402


class MemorySettingsRepository:
    """Dict-backed SettingsRepository; `fail_reads` / `fail_writes` make get_pref / set_pref raise."""

    def __init__(
        self,
        prefs: Optional[Dict[str, str]] = None,
        fail_writes: bool = False,
        fail_reads: bool = False,
    ) -> None:
        self.prefs: Dict[str, str] = dict(prefs or {})
        self.fail_writes = fail_writes
        self.fail_reads = fail_reads
        self.writes: List[Tuple[str, Optional[str]]] = []

    def get_pref(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise PersistenceError("database is locked")
        return self.prefs.get(key)

    def set_pref(self, key: str, value: Optional[str]) -> None:
        if self.fail_writes:
            raise PersistenceError("disk full")
        self.writes.append((key, value))
        if value is None:
            self.prefs.pop(key, None)
        else:
            self.prefs[key] = value

    def all_prefs(self) -> Dict[str, str]:
        if self.fail_reads:
            raise PersistenceError("database is locked")
        return dict(self.prefs)


class FakeTransport:
    """
    Scriptable ITransport.

    `outcomes` maps a wire method name to either a value (returned), an
    exception instance (raised) or an asyncio.Event (awaited, then the value
    from `after_event` is returned).
    """

    def __init__(self, outcomes: Optional[Dict[str, Any]] = None) -> None:
        self.outcomes: Dict[str, Any] = dict(outcomes or {})
        self.after_event: Dict[str, Any] = {}
        self.calls: List[Tuple[str, List[Any]]] = []

    async def send(self, method: str, params: Sequence[Any] = ()) -> Any:
        self.calls.append((method, list(params)))
        outcome = self.outcomes.get(method)
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, asyncio.Event):
            await outcome.wait()
            return self.after_event.get(method)
        return outcome


@pytest.fixture
def memory_repo() -> MemorySettingsRepository:
    return MemorySettingsRepository()


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def registry(fake_transport):
    return build_registry(fake_transport)


@pytest.fixture
def make_transport():
    return FakeTransport


@pytest.fixture
def make_repo():
    return MemorySettingsRepository
