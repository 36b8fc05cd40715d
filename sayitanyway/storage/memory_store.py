"""
sayitanyway/storage/memory_store.py
In-process store. Values are deep-copied through JSON on the way in
and out, so callers never share mutable state with the store.
"""

import json
from typing import Any, Dict, Optional

from sayitanyway.storage.base import KeyValueStore


class MemoryStore(KeyValueStore):

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self._data[key] = json.dumps(value)

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def keys(self):
        return list(self._data)
