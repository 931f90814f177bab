"""
Tests for CLI command handlers against a dashboard wired to fakes.
"""

import asyncio
import itertools
import threading

import pytest
import requests

from rpcdeck.abstractions.dto.slots import ExecutionState
from rpcdeck.api.di.composition import Dashboard
from rpcdeck.application.execution import ExecutionBoard
from rpcdeck.application.slot_store import SlotStore
from rpcdeck.config import Config
from rpcdeck.domain.errors import PersistenceError, ProtocolError
from rpcdeck.infrastructure.catalog import build_registry
from rpcdeck.infrastructure.rpc.transport import JsonRpcTransport
from rpcdeck.ui.cli.console import make_console
from rpcdeck.ui.cli.handlers import (
    handle_add, handle_bulk, handle_exit, handle_move, handle_param, handle_prefs, handle_remove,
    handle_run, handle_runall, handle_set, handle_theme, method_words, resolve_slot, show_slots,
)


class ScriptedSession:
    """Stands in for a PromptSession; answers prompts from a list."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.prompts = []

    async def prompt_async(self, message, default=""):
        self.prompts.append((message, default))
        return self.answers.pop(0)


def _dashboard(repo, transport, registry):
    counter = itertools.count(1)
    slots = SlotStore(repo, id_factory=lambda: f"slot{next(counter):02d}")
    slots.load()
    return Dashboard(
        config=Config(),
        transport=transport,
        registry=registry,
        settings=repo,
        slots=slots,
        board=ExecutionBoard(),
    )


@pytest.fixture
def console():
    return make_console("dark", use_color=False)


@pytest.fixture
def dash(memory_repo, fake_transport, registry):
    return _dashboard(memory_repo, fake_transport, registry)


def _names(dash):
    return [s.method_name for s in dash.slots.slots]


def test_resolve_slot_by_position_and_prefix(dash):
    first, second, _ = dash.slots.slots
    assert resolve_slot(dash, "1") == first
    assert resolve_slot(dash, "slot02") == second
    assert resolve_slot(dash, "0") is None
    assert resolve_slot(dash, "4") is None
    assert resolve_slot(dash, "slot") is None
    assert resolve_slot(dash, "") is None


def test_add_known_and_unconfigured(console, dash):
    with console.capture():
        handle_add(console, dash, ["/add", "mine"])
        handle_add(console, dash, ["/add"])
    assert _names(dash) == ["setBalance", "getBalance", "getBlockNumber", "mine", None]


def test_add_unknown_method_warns_and_keeps_layout(console, dash):
    with console.capture() as cap:
        handle_add(console, dash, ["/add", "noSuchMethod"])
    assert "Unknown method 'noSuchMethod'" in cap.get()
    assert len(dash.slots.slots) == 3


def test_set_and_unset(console, dash):
    with console.capture():
        handle_set(console, dash, ["/set", "2", "getChainId"])
        handle_set(console, dash, ["/set", "3", "-"])
    assert _names(dash) == ["setBalance", "getChainId", None]


def test_remove_drops_execution_state(console, dash):
    target = dash.slots.slots[0]
    dash.board.set_param(target.id, "address", "0x1")
    with console.capture():
        handle_remove(console, dash, ["/remove", "1"])
    assert _names(dash) == ["getBalance", "getBlockNumber"]
    assert dash.board.params(target.id) == {}


def test_move(console, dash):
    with console.capture():
        handle_move(console, dash, ["/move", "3", "1"])
    assert _names(dash) == ["getBlockNumber", "setBalance", "getBalance"]


def test_bulk_commands(console, dash, registry):
    with console.capture():
        handle_bulk(console, dash, "/loadall")
        assert _names(dash) == registry.names()
        handle_bulk(console, dash, "/clearall")
        assert dash.slots.slots == ()
        handle_bulk(console, dash, "/reset")
    assert _names(dash) == ["setBalance", "getBalance", "getBlockNumber"]


def test_param_rejects_unknown_name(console, dash):
    with console.capture() as cap:
        handle_param(console, dash, ["/param", "2", "nonce", "5"])
    assert "has no parameter 'nonce'" in cap.get()
    assert dash.board.params(dash.slots.slots[1].id) == {}


def test_runall_executes_configured_slots(console, dash, fake_transport):
    fake_transport.outcomes.update({
        "eth_blockNumber": "0x10",
        "eth_getBalance": ProtocolError("boom"),
        "anvil_setBalance": True,
    })
    first, second, _ = dash.slots.slots
    dash.board.set_param(first.id, "address", "0xabc")
    dash.board.set_param(first.id, "balance", "1.5")
    dash.board.set_param(second.id, "address", "0xabc")
    with console.capture():
        handle_add(console, dash, ["/add"])

    async def scenario():
        with console.capture() as cap:
            tasks = handle_runall(console, dash)
        assert len(tasks) == 3
        assert "Executing 3 slot(s)" in cap.get()
        await asyncio.gather(*tasks)

    asyncio.run(scenario())
    with console.capture() as cap:
        show_slots(console, dash)
    out = cap.get()

    assert ("anvil_setBalance", ["0xabc", "0x14d1120d7b160000"]) in fake_transport.calls
    assert dash.board.state(dash.slots.slots[2].id).result == "16"
    assert dash.board.state(second.id).message == "boom"
    assert "boom" in out
    assert "Select method..." in out


def test_runall_returns_while_endpoint_hangs(console, memory_repo):
    release = threading.Event()

    class HangingSession(requests.Session):
        def post(self, *args, **kwargs):
            release.wait(10)
            raise requests.ConnectionError("connection reset")

    transport = JsonRpcTransport("http://hung.test", session=HangingSession())
    dash = _dashboard(memory_repo, transport, build_registry(transport))
    dash.slots.replace_all(["getBlockNumber", "getChainId"])
    hung, other = dash.slots.slots

    async def scenario():
        with console.capture():
            tasks = handle_runall(console, dash)
        await asyncio.sleep(0.05)
        pending = [dash.board.state(s.id).is_pending for s in (hung, other)]
        with console.capture():
            handle_remove(console, dash, ["/remove", "1"])
        release.set()
        await asyncio.wait_for(asyncio.gather(*tasks), timeout=5)
        return pending, [t.done() for t in tasks]

    try:
        pending, done = asyncio.run(asyncio.wait_for(scenario(), timeout=5))
    finally:
        release.set()

    assert pending == [True, True]
    assert done == [True, True]
    assert dash.board.state(hung.id) == ExecutionState.idle()
    assert dash.board.state(other.id).message == "RPC Error: connection reset"
    assert dash.board.in_flight == 0


def test_run_prompts_for_params_and_schedules(console, dash, fake_transport):
    fake_transport.outcomes["eth_getBalance"] = "0xDE0B6B3A7640000"
    slot = dash.slots.slots[1]
    dash.board.set_param(slot.id, "address", "0xold")
    session = ScriptedSession(["0xabc"])

    async def scenario():
        with console.capture():
            task = await handle_run(console, session, dash, ["/run", "2"])
        return await task

    state = asyncio.run(scenario())

    assert session.prompts == [("address (0x...): ", "0xold")]
    assert state == ExecutionState.succeeded("1.000000")
    assert fake_transport.calls == [("eth_getBalance", ["0xabc", "latest"])]


def test_run_unconfigured_slot_warns(console, dash):
    with console.capture():
        handle_set(console, dash, ["/set", "1", "-"])

    async def scenario():
        with console.capture() as cap:
            task = await handle_run(console, ScriptedSession([]), dash, ["/run", "1"])
        return task, cap.get()

    task, out = asyncio.run(scenario())
    assert task is None
    assert "Select a method" in out


def test_persist_warning_is_not_read_as_markup(console, dash, monkeypatch):
    def locked(key, value):
        raise PersistenceError("database is locked [main]")

    monkeypatch.setattr(dash.settings, "set_pref", locked)
    with console.capture() as cap:
        handle_add(console, dash, ["/add", "mine"])
    assert "Layout not saved: database is locked [main]" in cap.get()


def test_prefs_storage_failure_warns(console, make_repo):
    with console.capture() as cap:
        handle_prefs(console, make_repo(fail_reads=True))
    assert "Preferences unavailable: database is locked" in cap.get()


def test_completion_words_follow_method_options(registry):
    words = method_words(registry)
    assert words == [o.value for o in registry.method_options]
    assert words[0] == "getAccounts"
    assert "traceTransaction" in words


def test_show_slots_empty(console, dash):
    dash.slots.clear()
    with console.capture() as cap:
        show_slots(console, dash)
    assert "No slots" in cap.get()


def test_theme_toggle_persists(console, memory_repo):
    assert handle_theme(console, memory_repo, "dark") == "light"
    assert memory_repo.get_pref("cli_theme") == "light"


def test_theme_toggle_survives_write_failure(console, make_repo):
    repo = make_repo(fail_writes=True)
    with console.capture() as cap:
        assert handle_theme(console, repo, "light") == "dark"
    assert "Theme not saved" in cap.get()


def test_exit_reports_abandoned_calls(console, dash, make_transport):
    async def scenario():
        gate = asyncio.Event()
        transport = make_transport({"eth_blockNumber": gate})
        registry = build_registry(transport)
        dash.board.schedule(dash.slots.slots[2], registry)
        await asyncio.sleep(0)
        with console.capture() as cap:
            handle_exit(console, dash)
        gate.set()
        return cap.get()

    assert "Abandoning 1 call(s)" in asyncio.run(scenario())
