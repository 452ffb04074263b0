"""
Storage Services Package

Provides the abstract key-value contract and its implementations.
"""

from fruit_invoice.services.storage.interface import (
    KeyValueStore,
    StorageCorruptedError,
    StorageError,
)
from fruit_invoice.services.storage.json_file import JsonFileKeyValueStore
from fruit_invoice.services.storage.memory import InMemoryKeyValueStore

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "StorageCorruptedError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]
