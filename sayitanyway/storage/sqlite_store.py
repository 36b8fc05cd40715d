"""
sayitanyway/storage/sqlite_store.py
SQLite key/value store — single table, JSON text values.

SCHEMA:
  kv_store(key TEXT PRIMARY KEY, value TEXT NOT NULL, updated_at TEXT NOT NULL)

sqlite3 is blocking; every call runs in a worker thread via
asyncio.to_thread and opens its own connection.
"""

import asyncio
import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from sayitanyway.storage.base import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class SqliteStore(KeyValueStore):

    def __init__(self, db_path: Path = Path('sayitanyway.db')):
        self.db_path = Path(db_path)

    # ── INTERNAL ─────────────────────────────────────────────

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key         TEXT PRIMARY KEY,
                value       TEXT NOT NULL,
                updated_at  TEXT NOT NULL
            )
        """)
        return conn

    def _read(self, key: str) -> Optional[str]:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        finally:
            conn.close()
        return row[0] if row else None

    def _write(self, key: str, raw: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, raw, datetime.now().isoformat()),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        finally:
            conn.close()

    # ── KeyValueStore ────────────────────────────────────────

    async def get(self, key: str) -> Optional[Any]:
        try:
            raw = await asyncio.to_thread(self._read, key)
        except sqlite3.Error as e:
            logger.error(f"SQLite read failed for key '{key}': {e}")
            raise StorageError(f"Could not read '{key}' from {self.db_path}") from e

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupt JSON for key '{key}' — treating as absent: {e}")
            return None

    async def set(self, key: str, value: Any) -> None:
        raw = json.dumps(value)
        try:
            await asyncio.to_thread(self._write, key, raw)
        except sqlite3.Error as e:
            logger.error(f"SQLite write failed for key '{key}': {e}")
            raise StorageError(f"Could not write '{key}' to {self.db_path}") from e
