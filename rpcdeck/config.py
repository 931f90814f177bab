"""
Configuration module for loading environment variables and settings.

This module handles:
1. Loading a .env file from the working directory
2. Resolving the JSON-RPC endpoint (RPC_URL, default http://localhost:8545)
3. Data directory, log level and CLI presentation overrides
"""

import os
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_RPC_URL = "http://localhost:8545"


def _flag(value: Optional[str]) -> Optional[bool]:
    if value is None or value.strip() == "":
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Snapshot of the environment taken at construction time."""

    def __init__(self) -> None:
        self.RPC_URL: str = os.getenv("RPC_URL") or DEFAULT_RPC_URL
        self.DATA_DIR: str = os.getenv("RPCDECK_DATA_DIR", ".")
        self.LOG_LEVEL: str = (os.getenv("RPCDECK_LOG_LEVEL") or "WARNING").upper()
        self.CLI_THEME: Optional[str] = (os.getenv("CLI_THEME") or "").lower() or None
        self.CLI_COLOR: Optional[bool] = _flag(os.getenv("CLI_COLOR"))

    @property
    def db_path(self) -> str:
        return os.path.join(self.DATA_DIR, "data", "settings.db")

    def as_dict(self) -> dict:
        return {
            "rpc_url": self.RPC_URL,
            "data_dir": self.DATA_DIR,
            "log_level": self.LOG_LEVEL,
            "cli_theme": self.CLI_THEME,
            "cli_color": self.CLI_COLOR,
        }
