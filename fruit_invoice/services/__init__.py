"""
Services Package

Infrastructure the core persists through.
"""

from fruit_invoice.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    StorageCorruptedError,
    StorageError,
)

__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "StorageCorruptedError",
    "StorageError",
]
