"""
sayitanyway/config.py
Config with defaults. Persists to sayitanyway_config.json.

Every value is checked when the file is read: unknown keys are dropped
and an invalid value falls back to its default with a warning, so the
CLI and API always start from a usable config. build_store() turns the
validated config into the persistence collaborator.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from sayitanyway.storage.base import KeyValueStore
from sayitanyway.storage.json_store import JsonFileStore
from sayitanyway.storage.memory_store import MemoryStore
from sayitanyway.storage.sqlite_store import SqliteStore

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "sayitanyway_config.json"

DEFAULT_CONFIG = {
    "store_backend": "json",          # json / sqlite / memory
    "store_path": "sayitanyway_data",  # directory (json) or db file (sqlite)
    "billing_available": True,         # detected once at startup
    "api_host": "127.0.0.1",
    "api_port": 8765,
    "log_level": "INFO",
}

STORE_BACKENDS = ("json", "sqlite", "memory")
LOG_LEVELS     = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ── VALIDATORS ───────────────────────────────────────────────
# Each returns the normalized value or raises ValueError/TypeError/OverflowError.

def _backend(value: Any) -> str:
    backend = str(value).strip().lower()
    if backend not in STORE_BACKENDS:
        raise ValueError(f"Unknown store_backend {backend!r}, expected one of {', '.join(STORE_BACKENDS)}")
    return backend


def _non_empty_str(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise TypeError("expected a non-empty string")
    return value.strip()


def _flag(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError("expected true or false")
    return value


def _port(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("expected an integer port")
    port = int(value)
    if not 1 <= port <= 65535:
        raise ValueError("port out of range")
    return port


def _log_level(value: Any) -> str:
    level = str(value).strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"expected one of {', '.join(LOG_LEVELS)}")
    return level


VALIDATORS: Dict[str, Callable[[Any], Any]] = {
    "store_backend":     _backend,
    "store_path":        _non_empty_str,
    "billing_available": _flag,
    "api_host":          _non_empty_str,
    "api_port":          _port,
    "log_level":         _log_level,
}


def validate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Defaults overlaid with every valid known key from raw."""
    config = dict(DEFAULT_CONFIG)
    for key, value in raw.items():
        validator = VALIDATORS.get(key)
        if validator is None:
            logger.warning(f"Ignoring unknown config key: {key}")
            continue
        try:
            config[key] = validator(value)
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning(f"Invalid config value for '{key}' ({value!r}): {e}; using {DEFAULT_CONFIG[key]!r}")
    return config


# ── FILE I/O ─────────────────────────────────────────────────

def _config_path(project_root: Optional[Path] = None) -> Path:
    return Path(project_root or Path.cwd()) / CONFIG_FILENAME


def load_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """Read and validate sayitanyway_config.json. Missing or unreadable → defaults."""
    path = _config_path(project_root)
    if not path.exists():
        return dict(DEFAULT_CONFIG)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Config load failed, using defaults: {e}")
        return dict(DEFAULT_CONFIG)
    if not isinstance(raw, dict):
        logger.warning(f"Config root in {path} is not a JSON object, using defaults")
        return dict(DEFAULT_CONFIG)
    return validate_config(raw)


def save_config(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """Validate, then write sayitanyway_config.json. Returns the path written."""
    path = _config_path(project_root)
    path.write_text(json.dumps(validate_config(config), indent=2), encoding="utf-8")
    logger.info(f"Config saved → {path}")
    return path


# ── BACKEND ──────────────────────────────────────────────────

def build_store(config: Dict[str, Any]) -> KeyValueStore:
    """Instantiate the persistence backend named by config['store_backend']."""
    backend    = _backend(config.get("store_backend", DEFAULT_CONFIG["store_backend"]))
    store_path = Path(config.get("store_path") or DEFAULT_CONFIG["store_path"])
    if backend == "json":
        return JsonFileStore(store_path)
    if backend == "sqlite":
        if store_path.suffix != ".db":
            store_path = store_path.with_suffix(".db")
        return SqliteStore(store_path)
    return MemoryStore()
