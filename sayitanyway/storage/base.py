"""
sayitanyway/storage/base.py
Abstract base class for all persistence backends.
To add a new backend: subclass KeyValueStore and implement get()/set().
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

# Fixed keys, one blob per concern
RECORDING_TIME_KEY      = 'recording_time'
SUBSCRIPTION_STATUS_KEY = 'subscription_status'
MESSAGES_KEY            = 'messages'


class StorageError(Exception):
    """Raised when the backing store cannot be read or written."""


class KeyValueStore(ABC):
    """
    All backends implement this interface.
    The ledger and subscription manager call get()/set() and never
    know which backend is running. Values are JSON-compatible.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Return the stored value, or None if absent.
        Undecodable (corrupt) data is reported as None, not raised.
        I/O failures raise StorageError.
        """
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Persist value under key. I/O failures raise StorageError."""
        ...
