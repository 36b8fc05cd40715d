"""
sayitanyway/storage/json_store.py
On-device JSON store — one <key>.json file per key under a root directory.
File access goes through aiofiles so the event loop never blocks.

Corrupt files read as absent (logged as a warning) so the app stays
usable after storage corruption. OS errors raise StorageError.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Optional

import aiofiles

from sayitanyway.storage.base import KeyValueStore, StorageError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r'^[A-Za-z0-9_.-]+$')


class JsonFileStore(KeyValueStore):

    def __init__(self, root: Path):
        self.root = Path(root)

    def _path_for(self, key: str) -> Path:
        # Keys map to file names; refuse anything that could escape root
        if not _SAFE_KEY.match(key) or key in ('.', '..'):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    async def get(self, key: str) -> Optional[Any]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            async with aiofiles.open(path, 'r', encoding='utf-8') as f:
                raw = await f.read()
        except UnicodeDecodeError as e:
            logger.warning(f"Undecodable file for key '{key}' — treating as absent: {e}")
            return None
        except OSError as e:
            logger.error(f"Read failed for key '{key}': {e}")
            raise StorageError(f"Could not read '{key}' from {path}") from e

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupt JSON for key '{key}' — treating as absent: {e}")
            return None

    async def set(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        tmp  = path.with_suffix('.json.tmp')
        payload = json.dumps(value, indent=2)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp, 'w', encoding='utf-8') as f:
                await f.write(payload)
            os.replace(tmp, path)
        except OSError as e:
            logger.error(f"Write failed for key '{key}': {e}")
            raise StorageError(f"Could not write '{key}' to {path}") from e
        logger.debug(f"Saved key '{key}' → {path}")
