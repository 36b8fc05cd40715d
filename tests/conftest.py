"""
tests/conftest.py
Shared fixtures. Every store here is in-memory or under tmp_path —
no test touches the real on-device data directory.
"""

from datetime import datetime

import pytest

from sayitanyway.storage.memory_store import MemoryStore
from tests.helpers import FixedClock


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 10, 18, 12, 0, 0))
