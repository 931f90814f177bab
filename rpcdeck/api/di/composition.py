"""
Composition module (edge wiring).

Builds the transport, registry, settings repository and slot store from a
Config. The registry receives its transport explicitly so several endpoints
can coexist in one process.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from rpcdeck.application.execution import ExecutionBoard
from rpcdeck.application.slot_store import SlotStore
from rpcdeck.config import Config
from rpcdeck.infrastructure.catalog import MethodRegistry, build_registry

if TYPE_CHECKING:
    from rpcdeck.infrastructure.rpc.transport import JsonRpcTransport
    from rpcdeck.interfaces.services.transport import ITransport
    from rpcdeck.settings.interfaces import SettingsRepository


def build_transport(url: Optional[str] = None) -> "JsonRpcTransport":
    """
    Construct and return a JSON-RPC transport for `url` (Config().RPC_URL when omitted).
    """
    from rpcdeck.infrastructure.rpc.transport import JsonRpcTransport
    return JsonRpcTransport(url or Config().RPC_URL)


def build_method_registry(transport: "ITransport") -> MethodRegistry:
    """
    Construct and return the method registry bound to `transport`.
    """
    return build_registry(transport)


def build_settings_repository(db_path: Optional[str] = None) -> "SettingsRepository":
    """
    Construct and return a SettingsRepository instance.
    """
    from rpcdeck.settings.sqlite_repository import SqliteSettingsRepository
    if db_path and db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return SqliteSettingsRepository(db_path=db_path)


def build_slot_store(repo: "SettingsRepository") -> SlotStore:
    """
    Construct a SlotStore over `repo` and load the persisted layout.
    """
    store = SlotStore(repo)
    store.load()
    return store


@dataclass
class Dashboard:
    config: Config
    transport: "JsonRpcTransport"
    registry: MethodRegistry
    settings: "SettingsRepository"
    slots: SlotStore
    board: ExecutionBoard


def build_dashboard(config: Optional[Config] = None, db_path: Optional[str] = None) -> Dashboard:
    """
    Wire every component of the dashboard from `config`.
    """
    cfg = config or Config()
    transport = build_transport(cfg.RPC_URL)
    settings = build_settings_repository(db_path or cfg.db_path)
    return Dashboard(
        config=cfg,
        transport=transport,
        registry=build_method_registry(transport),
        settings=settings,
        slots=build_slot_store(settings),
        board=ExecutionBoard(),
    )
