"""
tests/test_config.py
Config load/save and backend selection.
"""

import json

import pytest

from sayitanyway.config import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG,
    build_store,
    load_config,
    save_config,
)
from sayitanyway.storage import JsonFileStore, MemoryStore, SqliteStore


def test_defaults_when_missing(tmp_path):
    assert load_config(tmp_path) == DEFAULT_CONFIG


def test_file_values_override_defaults(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text(
        json.dumps({"store_backend": "sqlite", "billing_available": False}), encoding="utf-8",
    )
    config = load_config(tmp_path)
    assert config["store_backend"] == "sqlite"
    assert config["billing_available"] is False
    assert config["api_port"] == DEFAULT_CONFIG["api_port"]


@pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
def test_bad_file_falls_back_to_defaults(tmp_path, content):
    (tmp_path / CONFIG_FILENAME).write_text(content, encoding="utf-8")
    assert load_config(tmp_path) == DEFAULT_CONFIG


def test_save_then_load(tmp_path):
    config = {**DEFAULT_CONFIG, "api_port": 9000}
    path = save_config(config, tmp_path)
    assert path == tmp_path / CONFIG_FILENAME
    assert load_config(tmp_path)["api_port"] == 9000


@pytest.mark.parametrize("key, value", [
    ("store_backend", "redis"),
    ("store_path", ""),
    ("billing_available", "yes"),
    ("api_port", 70000),
    ("api_port", "http"),
    ("api_port", float("inf")),
    ("log_level", "LOUD"),
])
def test_invalid_value_falls_back_to_its_default(tmp_path, key, value):
    (tmp_path / CONFIG_FILENAME).write_text(
        json.dumps({key: value, "api_host": "localhost"}), encoding="utf-8",
    )
    config = load_config(tmp_path)
    assert config[key] == DEFAULT_CONFIG[key]
    assert config["api_host"] == "localhost"


def test_values_are_normalized(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text(
        json.dumps({"store_backend": " SQLite ", "api_port": "9001", "log_level": "debug"}),
        encoding="utf-8",
    )
    config = load_config(tmp_path)
    assert config["store_backend"] == "sqlite"
    assert config["api_port"] == 9001
    assert config["log_level"] == "DEBUG"


def test_unknown_keys_are_dropped(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text(json.dumps({"theme": "dark"}), encoding="utf-8")
    assert load_config(tmp_path) == DEFAULT_CONFIG


def test_save_writes_validated_config(tmp_path):
    save_config({"store_backend": "MEMORY", "api_port": -1, "extra": 1}, tmp_path)
    written = json.loads((tmp_path / CONFIG_FILENAME).read_text(encoding="utf-8"))
    assert written["store_backend"] == "memory"
    assert written["api_port"] == DEFAULT_CONFIG["api_port"]
    assert "extra" not in written


def test_defaults_are_not_shared(tmp_path):
    config = load_config(tmp_path)
    config["api_port"] = 1
    assert DEFAULT_CONFIG["api_port"] == 8765


class TestBuildStore:
    def test_json_backend(self, tmp_path):
        store = build_store({"store_backend": "json", "store_path": str(tmp_path / "d")})
        assert isinstance(store, JsonFileStore)
        assert store.root == tmp_path / "d"

    def test_sqlite_backend_gets_db_suffix(self, tmp_path):
        store = build_store({"store_backend": "SQLite", "store_path": str(tmp_path / "d")})
        assert isinstance(store, SqliteStore)
        assert store.db_path == tmp_path / "d.db"

    def test_memory_backend(self):
        assert isinstance(build_store({"store_backend": "memory"}), MemoryStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_store({"store_backend": "redis"})
