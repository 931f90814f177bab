"""
Settings repository abstractions

- Application code (slot store, CLI) depends only on this contract.
- Infrastructure (sqlite, etc.) implements it.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol


class SettingsRepository(Protocol):
    """
    Repository contract for persisting simple string key/value preferences
    (slot layout, theme, color policy...).
    """

    def get_pref(self, key: str) -> Optional[str]:
        ...

    def set_pref(self, key: str, value: Optional[str]) -> None:
        """
        Persist/update preference. Passing None deletes the preference.

        Raises PersistenceError when the backend rejects the write.
        """
        ...

    def all_prefs(self) -> Dict[str, str]:
        ...
