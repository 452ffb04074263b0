"""
Abstract Storage Interface

The core persists through a tiny async key-value contract: each
collection is one blob under one well-known key. Any backend (files on
the device, a dict in tests) must implement these methods.

Each key's write is atomic in isolation. There is no transaction across
keys.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """Durable mapping from string keys to serialized records."""

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """
        Read the blob stored under a key.

        Args:
            key: The storage key

        Returns:
            The stored bytes, or None if nothing is stored

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: bytes) -> None:
        """
        Replace the blob stored under a key.

        Args:
            key: The storage key
            value: The full serialized record

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Remove a key. Removing an absent key is a no-op.

        Raises:
            StorageError: If the removal fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class StorageCorruptedError(StorageError):
    """Stored bytes could not be decoded into the expected records."""
    pass
