"""
tests/helpers.py
Test doubles shared across modules: a movable clock, a failing store,
and a RecordingTime factory.
"""

from datetime import datetime

from sayitanyway.models.record import RecordingTime
from sayitanyway.storage.base import KeyValueStore, StorageError
from sayitanyway.storage.memory_store import MemoryStore


class FixedClock:
    """Callable clock whose time can be moved between calls."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FailingStore(KeyValueStore):
    """Store whose reads and/or writes fail, for every key or only `keys`."""

    def __init__(self, fail_get: bool = False, fail_set: bool = True, keys=None):
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.keys     = keys
        self._inner   = MemoryStore()

    def _fails(self, key) -> bool:
        return self.keys is None or key in self.keys

    async def get(self, key):
        if self.fail_get and self._fails(key):
            raise StorageError(f"read failed: {key}")
        return await self._inner.get(key)

    async def set(self, key, value):
        if self.fail_set and self._fails(key):
            raise StorageError(f"write failed: {key}")
        await self._inner.set(key, value)


def make_record(
    free: int = 300,
    subscriber: int = 0,
    extra: int = 0,
    month: int = 10,
    year: int = 2026,
) -> RecordingTime:
    return RecordingTime(
        free_monthly=free,
        subscriber_monthly=subscriber,
        purchased_extra=extra,
        last_reset_month=month,
        last_reset_year=year,
    )
