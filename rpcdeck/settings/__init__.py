"""
Settings persistence.

Callers depend on SettingsRepository (interfaces.py); the SQLite backend
lives in sqlite_repository.py and is wired in api.di.composition.
"""

from .interfaces import SettingsRepository  # re-exported contract

__all__ = ["SettingsRepository"]
