# inventory/services/config_svc.py
from __future__ import annotations

import os
from typing import Optional

import yaml

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
DEFAULT_CONFIG_PATH = os.path.join(_PROJECT_ROOT, "config.yaml")

DEFAULTS = {
    "connection_string": os.path.join(_PROJECT_ROOT, "inventory.db"),
    "test_connection_string": "",
    "max_value_chars": "1024",
    "log_level": "INFO",
}


def _read_config_yaml(path: Optional[str] = None) -> dict:
    cfg_path = path or os.environ.get("INVENTORY_CONFIG") or DEFAULT_CONFIG_PATH
    if not os.path.exists(cfg_path):
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"config file {cfg_path} must contain a mapping")
    return cfg


def _str_or_none(v) -> Optional[str]:
    if isinstance(v, str) and v.strip():
        return v.strip()
    return None


def _is_test_env() -> bool:
    return (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)


def get_config(path: Optional[str] = None) -> dict:
    """Typed config with defaults filled in.

    connection_string resolution:
    1) env INVENTORY_DSN
    2) test_connection_string (under pytest or APP_ENV=test)
    3) connection_string
    4) <project root>/inventory.db
    """
    cfg = _read_config_yaml(path)

    env_dsn = _str_or_none(os.environ.get("INVENTORY_DSN"))
    test_dsn = _str_or_none(cfg.get("test_connection_string"))
    cfg_dsn = _str_or_none(cfg.get("connection_string"))
    if env_dsn:
        dsn = env_dsn
    elif _is_test_env() and test_dsn:
        dsn = test_dsn
    elif cfg_dsn:
        dsn = cfg_dsn
    else:
        dsn = DEFAULTS["connection_string"]

    raw_max = cfg.get("max_value_chars", DEFAULTS["max_value_chars"])
    max_chars = None if raw_max is None else int(raw_max)
    if max_chars is not None and max_chars <= 0:
        raise ValueError("max_value_chars must be positive (or null to disable truncation)")

    level = os.environ.get("INVENTORY_LOG_LEVEL") or cfg.get("log_level") or DEFAULTS["log_level"]

    return {
        "connection_string": dsn,
        "max_value_chars": max_chars,
        "log_level": str(level).upper(),
    }
