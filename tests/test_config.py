"""
Tests for environment-driven configuration.
"""

import os

from rpcdeck.config import DEFAULT_RPC_URL, Config


def _clear(monkeypatch):
    for var in ("RPC_URL", "RPCDECK_DATA_DIR", "RPCDECK_LOG_LEVEL", "CLI_THEME", "CLI_COLOR"):
        monkeypatch.delenv(var, raising=False)


def test_defaults(monkeypatch):
    _clear(monkeypatch)
    cfg = Config()
    assert cfg.RPC_URL == DEFAULT_RPC_URL == "http://localhost:8545"
    assert cfg.DATA_DIR == "."
    assert cfg.LOG_LEVEL == "WARNING"
    assert cfg.CLI_THEME is None
    assert cfg.CLI_COLOR is None
    assert cfg.db_path == os.path.join(".", "data", "settings.db")


def test_environment_overrides(monkeypatch, tmp_path):
    _clear(monkeypatch)
    monkeypatch.setenv("RPC_URL", "http://node:9545")
    monkeypatch.setenv("RPCDECK_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("RPCDECK_LOG_LEVEL", "debug")
    monkeypatch.setenv("CLI_THEME", "Light")
    monkeypatch.setenv("CLI_COLOR", "off")

    cfg = Config()

    assert cfg.as_dict() == {
        "rpc_url": "http://node:9545",
        "data_dir": str(tmp_path),
        "log_level": "DEBUG",
        "cli_theme": "light",
        "cli_color": False,
    }


def test_blank_rpc_url_uses_default(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("RPC_URL", "")
    assert Config().RPC_URL == DEFAULT_RPC_URL
