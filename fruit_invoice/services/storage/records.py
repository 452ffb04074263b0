"""
Collection codec.

Each collection is a JSON array of camelCase records under one key.
Reading an absent key yields an empty list; bytes that do not decode
into valid records raise StorageCorruptedError.
"""

from typing import Any, TypeVar

from pydantic import TypeAdapter

from fruit_invoice.config import get_logger
from fruit_invoice.services.storage.interface import (
    KeyValueStore,
    StorageCorruptedError,
)

logger = get_logger(__name__)

T = TypeVar("T")


async def read_records(
    store: KeyValueStore,
    key: str,
    adapter: TypeAdapter[list[T]],
) -> list[T]:
    raw = await store.get(key)
    if raw is None or not raw.strip():
        return []
    try:
        return adapter.validate_json(raw)
    except ValueError as e:
        logger.error("store_records_corrupted", key=key, error=str(e))
        raise StorageCorruptedError(f"Stored {key} could not be decoded", key=key) from e


async def write_records(
    store: KeyValueStore,
    key: str,
    adapter: TypeAdapter[list[Any]],
    records: list[Any],
) -> None:
    await store.set(key, adapter.dump_json(records, by_alias=True))
