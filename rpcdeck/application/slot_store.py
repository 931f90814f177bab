"""
Slot Store

Ordered, persisted collection of dashboard slots. Each slot references a
catalog method by name (or None while unconfigured).

Persisted layout (single key in the settings repository):
  [{"id": "<hex>", "methodName": "getBalance" | null}, ...]   # array order = display order

Every mutation writes the full collection before the in-memory state is
replaced. Storage failures do not fail the operation: the store logs them,
records the message on `last_persist_error`, and keeps working from memory.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Callable, Iterable, List, Optional, Sequence

from rpcdeck.abstractions.dto.slots import InvocationSlot, SlotCollection
from rpcdeck.domain.errors import PersistenceError
from rpcdeck.settings.interfaces import SettingsRepository

logger = logging.getLogger(__name__)

STORAGE_KEY = "rpcdeck.slots"
DEFAULT_METHODS = ("setBalance", "getBalance", "getBlockNumber")


def new_slot_id() -> str:
    return uuid.uuid4().hex


def decode_slots(raw: str) -> Optional[List[InvocationSlot]]:
    """Parse the persisted JSON array; None when it is not a valid slot list."""
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(data, list):
        return None
    slots: List[InvocationSlot] = []
    for item in data:
        if not isinstance(item, dict):
            return None
        slot_id = item.get("id")
        method_name = item.get("methodName")
        if not isinstance(slot_id, str) or not slot_id:
            return None
        if method_name is not None and not isinstance(method_name, str):
            return None
        slots.append(InvocationSlot(id=slot_id, method_name=method_name or None))
    return slots


def encode_slots(slots: Iterable[InvocationSlot]) -> str:
    return json.dumps([s.to_dict() for s in slots])


class SlotStore:
    def __init__(
        self,
        repo: SettingsRepository,
        key: str = STORAGE_KEY,
        defaults: Sequence[str] = DEFAULT_METHODS,
        id_factory: Callable[[], str] = new_slot_id,
    ) -> None:
        self._repo = repo
        self._key = key
        self._defaults = tuple(defaults)
        self._new_id = id_factory
        self._slots: SlotCollection = ()
        self.last_persist_error: Optional[str] = None

    @property
    def slots(self) -> SlotCollection:
        return self._slots

    # ---------- Queries ----------

    def index_of(self, slot_id: str) -> int:
        """Position of `slot_id`, or -1."""
        for i, slot in enumerate(self._slots):
            if slot.id == slot_id:
                return i
        return -1

    def get(self, slot_id: str) -> Optional[InvocationSlot]:
        i = self.index_of(slot_id)
        return self._slots[i] if i >= 0 else None

    # ---------- Operations ----------

    def load(self) -> SlotCollection:
        """
        Read persisted slots. Missing or unparsable state yields the default
        set with fresh ids, which is persisted right away. When the read
        itself fails the defaults are used in memory only and the stored
        layout is left untouched.
        """
        try:
            raw = self._repo.get_pref(self._key)
        except PersistenceError as e:
            logger.warning("Slot state unavailable, using defaults for this session: %s", e)
            self.last_persist_error = str(e)
            self._slots = self._fresh(self._defaults)
            return self._slots

        slots = decode_slots(raw) if raw is not None else None
        if slots is None:
            if raw is not None:
                logger.warning("Discarding unreadable slot state under '%s'", self._key)
            return self._commit(self._fresh(self._defaults))

        seen = set()
        repaired = False
        for i, slot in enumerate(slots):
            if slot.id in seen:
                slots[i] = InvocationSlot(id=self._new_id(), method_name=slot.method_name)
                repaired = True
            seen.add(slots[i].id)
        if repaired:
            logger.info("Reassigned duplicate slot ids")
            return self._commit(tuple(slots))

        self._slots = tuple(slots)
        return self._slots

    def add(self, method_name: Optional[str] = None) -> SlotCollection:
        slot = InvocationSlot(id=self._new_id(), method_name=method_name or None)
        return self._commit(self._slots + (slot,))

    def remove(self, slot_id: str) -> SlotCollection:
        if self.index_of(slot_id) < 0:
            return self._slots
        return self._commit(tuple(s for s in self._slots if s.id != slot_id))

    def set_method(self, slot_id: str, method_name: Optional[str]) -> SlotCollection:
        i = self.index_of(slot_id)
        if i < 0:
            return self._slots
        items = list(self._slots)
        items[i] = InvocationSlot(id=slot_id, method_name=method_name or None)
        return self._commit(tuple(items))

    def reorder(self, from_id: str, to_id: str) -> SlotCollection:
        """Move `from_id` to the current index of `to_id`, shifting the slots between."""
        old = self.index_of(from_id)
        new = self.index_of(to_id)
        if old < 0 or new < 0 or old == new:
            return self._slots
        items = list(self._slots)
        items.insert(new, items.pop(old))
        return self._commit(tuple(items))

    def replace_all(self, method_names: Iterable[Optional[str]]) -> SlotCollection:
        return self._commit(self._fresh(method_names))

    def clear(self) -> SlotCollection:
        return self.replace_all([])

    def reset(self) -> SlotCollection:
        return self.replace_all(self._defaults)

    def load_all(self, names: Iterable[str]) -> SlotCollection:
        """One slot per known method name, in catalog order."""
        return self.replace_all(names)

    # ---------- Private helpers ----------

    def _fresh(self, method_names: Iterable[Optional[str]]) -> SlotCollection:
        return tuple(InvocationSlot(id=self._new_id(), method_name=name or None) for name in method_names)

    def _commit(self, slots: SlotCollection) -> SlotCollection:
        try:
            self._repo.set_pref(self._key, encode_slots(slots))
            self.last_persist_error = None
        except PersistenceError as e:
            logger.warning("Slot layout kept in memory only: %s", e)
            self.last_persist_error = str(e)
        self._slots = slots
        return slots


__all__ = ["SlotStore", "STORAGE_KEY", "DEFAULT_METHODS", "new_slot_id", "decode_slots", "encode_slots"]
