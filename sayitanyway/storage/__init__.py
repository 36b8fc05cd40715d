"""
sayitanyway/storage — injected persistence backends (get/set JSON blobs).
"""

from sayitanyway.storage.base import (
    MESSAGES_KEY,
    RECORDING_TIME_KEY,
    SUBSCRIPTION_STATUS_KEY,
    KeyValueStore,
    StorageError,
)
from sayitanyway.storage.json_store import JsonFileStore
from sayitanyway.storage.memory_store import MemoryStore
from sayitanyway.storage.sqlite_store import SqliteStore

__all__ = [
    "MESSAGES_KEY",
    "RECORDING_TIME_KEY",
    "SUBSCRIPTION_STATUS_KEY",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "SqliteStore",
    "StorageError",
]
