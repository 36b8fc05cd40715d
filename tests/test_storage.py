"""
tests/test_storage.py
Persistence backends — round trips, corrupt data reads as absent,
I/O failures raise StorageError. All files live under tmp_path.
"""

import asyncio
import sqlite3

import pytest

from sayitanyway.entitlements.ledger import RecordingTimeLedger
from sayitanyway.storage import (
    RECORDING_TIME_KEY,
    JsonFileStore,
    MemoryStore,
    SqliteStore,
    StorageError,
)
from tests.helpers import make_record


# ── MemoryStore ──────────────────────────────────────────────

class TestMemoryStore:
    def test_missing_key_is_none(self):
        assert asyncio.run(MemoryStore().get("nope")) is None

    def test_values_are_copied(self):
        store = MemoryStore()
        value = {"a": [1, 2]}
        asyncio.run(store.set("k", value))
        value["a"].append(3)
        loaded = asyncio.run(store.get("k"))
        assert loaded == {"a": [1, 2]}
        loaded["a"].append(4)
        assert asyncio.run(store.get("k")) == {"a": [1, 2]}

    def test_initial_data(self):
        store = MemoryStore({"x": 1})
        assert asyncio.run(store.get("x")) == 1
        assert store.keys() == ["x"]


# ── JsonFileStore ────────────────────────────────────────────

class TestJsonFileStore:
    def test_round_trip(self, tmp_path):
        store = JsonFileStore(tmp_path / "data")
        asyncio.run(store.set(RECORDING_TIME_KEY, make_record().to_dict()))
        assert asyncio.run(store.get(RECORDING_TIME_KEY)) == make_record().to_dict()
        assert (tmp_path / "data" / "recording_time.json").exists()

    def test_missing_is_none(self, tmp_path):
        assert asyncio.run(JsonFileStore(tmp_path).get("messages")) is None

    def test_overwrite(self, tmp_path):
        store = JsonFileStore(tmp_path)
        asyncio.run(store.set("k", 1))
        asyncio.run(store.set("k", 2))
        assert asyncio.run(store.get("k")) == 2
        assert not (tmp_path / "k.json.tmp").exists()

    def test_corrupt_file_reads_as_absent(self, tmp_path):
        (tmp_path / "recording_time.json").write_text("{not json", encoding="utf-8")
        store = JsonFileStore(tmp_path)
        assert asyncio.run(store.get(RECORDING_TIME_KEY)) is None

    def test_corrupt_file_recovers_through_ledger(self, tmp_path):
        (tmp_path / "recording_time.json").write_text("\x00\x01garbage", encoding="utf-8")
        ledger = RecordingTimeLedger(JsonFileStore(tmp_path))
        record = asyncio.run(ledger.get_recording_time())
        assert record.total == 300
        assert asyncio.run(JsonFileStore(tmp_path).get(RECORDING_TIME_KEY))["freeMonthly"] == 300

    def test_infinite_pool_recovers_through_ledger(self, tmp_path):
        (tmp_path / "recording_time.json").write_text(
            '{"freeMonthly": 10, "subscriberMonthly": 0, "purchasedExtra": 0, '
            '"lastResetMonth": 10, "lastResetYear": Infinity}',
            encoding="utf-8",
        )
        ledger = RecordingTimeLedger(JsonFileStore(tmp_path))
        assert asyncio.run(ledger.get_total_recording_time()) == 300

    @pytest.mark.parametrize("key", ["../escape", "a/b", "", "..", "with space"])
    def test_invalid_keys_rejected(self, tmp_path, key):
        store = JsonFileStore(tmp_path)
        with pytest.raises(ValueError):
            asyncio.run(store.get(key))

    def test_write_failure_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        store = JsonFileStore(blocker)
        with pytest.raises(StorageError):
            asyncio.run(store.set("k", 1))

    def test_read_failure_raises_storage_error(self, tmp_path):
        (tmp_path / "k.json").mkdir()
        store = JsonFileStore(tmp_path)
        with pytest.raises(StorageError):
            asyncio.run(store.get("k"))


# ── SqliteStore ──────────────────────────────────────────────

class TestSqliteStore:
    def test_round_trip(self, tmp_path):
        store = SqliteStore(tmp_path / "store.db")
        asyncio.run(store.set("messages", [{"id": "1"}]))
        assert asyncio.run(store.get("messages")) == [{"id": "1"}]

    def test_missing_is_none(self, tmp_path):
        assert asyncio.run(SqliteStore(tmp_path / "store.db").get("nope")) is None

    def test_upsert(self, tmp_path):
        store = SqliteStore(tmp_path / "store.db")
        asyncio.run(store.set("k", {"v": 1}))
        asyncio.run(store.set("k", {"v": 2}))
        assert asyncio.run(store.get("k")) == {"v": 2}
        conn = sqlite3.connect(str(tmp_path / "store.db"))
        count = conn.execute("SELECT COUNT(*) FROM kv_store WHERE key = 'k'").fetchone()[0]
        conn.close()
        assert count == 1

    def test_corrupt_value_reads_as_absent(self, tmp_path):
        db = tmp_path / "store.db"
        store = SqliteStore(db)
        asyncio.run(store.set("k", 1))
        conn = sqlite3.connect(str(db))
        conn.execute("UPDATE kv_store SET value = '{broken' WHERE key = 'k'")
        conn.commit()
        conn.close()
        assert asyncio.run(store.get("k")) is None

    def test_unopenable_database_raises_storage_error(self, tmp_path):
        store = SqliteStore(tmp_path / "missing-dir" / "store.db")
        with pytest.raises(StorageError):
            asyncio.run(store.get("k"))
        with pytest.raises(StorageError):
            asyncio.run(store.set("k", 1))

    def test_ledger_over_sqlite(self, tmp_path):
        db = tmp_path / "store.db"
        ledger = RecordingTimeLedger(SqliteStore(db))
        assert asyncio.run(ledger.deduct_recording_time(120)) is True
        # New store instance, same file
        assert asyncio.run(RecordingTimeLedger(SqliteStore(db)).get_total_recording_time()) == 180
