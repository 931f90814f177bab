"""
SQLite Settings Repository (Infrastructure)

- Implements SettingsRepository to persist string preferences, including the
  serialized slot layout of the dashboard.
- Backend failures surface as PersistenceError; a missing key reads as None.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path
from typing import Dict, Optional

from rpcdeck.domain.errors import PersistenceError

from .interfaces import SettingsRepository

logger = logging.getLogger(__name__)


class SqliteSettingsRepository(SettingsRepository):
    """
    SQLite-backed implementation for settings persistence.

    Schema:
      - prefs(key TEXT PRIMARY KEY, value TEXT)
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        if db_path is None:
            # Default DB location: ./data/settings.db under RPCDECK_DATA_DIR (creates directory)
            default_dir = Path(os.getenv("RPCDECK_DATA_DIR", ".")) / "data"
            default_dir.mkdir(parents=True, exist_ok=True)
            db_path = str(default_dir / "settings.db")
        self.db_path = db_path
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS prefs (
              key   TEXT PRIMARY KEY,
              value TEXT
            )
            """
        )
        self._conn.commit()

    # ------------- Preferences -------------

    def get_pref(self, key: str) -> Optional[str]:
        try:
            cur = self._conn.cursor()
            cur.execute("SELECT value FROM prefs WHERE key = ?", (key,))
            row = cur.fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not read '{key}': {e}") from e
        return row[0] if row else None

    def set_pref(self, key: str, value: Optional[str]) -> None:
        try:
            cur = self._conn.cursor()
            if value is None:
                cur.execute("DELETE FROM prefs WHERE key = ?", (key,))
            else:
                cur.execute(
                    "INSERT INTO prefs(key, value) VALUES(?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (key, value),
                )
            self._conn.commit()
        except sqlite3.Error as e:
            logger.debug("set_pref(%s) failed: %s", key, e)
            raise PersistenceError(f"Could not store '{key}': {e}") from e

    def all_prefs(self) -> Dict[str, str]:
        try:
            cur = self._conn.cursor()
            cur.execute("SELECT key, value FROM prefs")
            rows = cur.fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not list preferences: {e}") from e
        return {row[0]: row[1] for row in rows}

    def close(self) -> None:
        self._conn.close()
