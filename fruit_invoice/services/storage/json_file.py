"""
File-backed Key-Value Store

One file per key under a data directory. A write lands in a temporary
file next to the target and is then moved over it with os.replace, so a
reader sees either the old blob or the new one, never half of each.

File I/O runs in a worker thread. Transient OS errors are retried with
exponential backoff; the last failure surfaces as StorageError.
"""

import asyncio
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fruit_invoice.config import get_logger, get_settings
from fruit_invoice.services.storage.interface import KeyValueStore, StorageError

logger = get_logger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileKeyValueStore(KeyValueStore):
    """Stores each key as ``<data_dir>/<key>.json``."""

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        write_attempts: Optional[int] = None,
        retry_wait_seconds: float = 0.05,
    ):
        storage_settings = get_settings().storage
        self._data_dir = Path(data_dir or storage_settings.data_dir).expanduser()
        self._attempts = write_attempts or storage_settings.write_attempts
        self._retry_wait = retry_wait_seconds

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        """File holding a key. Keys are restricted to a filename-safe alphabet."""
        if not _KEY_PATTERN.match(key) or key in {".", ".."}:
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self._attempts),
            wait=wait_exponential(multiplier=self._retry_wait, max=1),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )

    # -------------------------------------------------------------------------
    # Blocking helpers (run in a worker thread)
    # -------------------------------------------------------------------------

    def _read_file(self, path: Path) -> Optional[bytes]:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def _write_file(self, path: Path, value: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(value)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    def _delete_file(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass

    # -------------------------------------------------------------------------
    # KeyValueStore
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        try:
            return await asyncio.to_thread(self._retrying(), self._read_file, path)
        except OSError as e:
            logger.error("store_read_failed", key=key, path=str(path), error=str(e))
            raise StorageError(f"Could not read {key}: {e}", key=key) from e

    async def set(self, key: str, value: bytes) -> None:
        path = self.path_for(key)
        try:
            await asyncio.to_thread(self._retrying(), self._write_file, path, value)
        except OSError as e:
            logger.error("store_write_failed", key=key, path=str(path), error=str(e))
            raise StorageError(f"Could not write {key}: {e}", key=key) from e
        logger.debug("store_write", key=key, size=len(value))

    async def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            await asyncio.to_thread(self._retrying(), self._delete_file, path)
        except OSError as e:
            logger.error("store_delete_failed", key=key, path=str(path), error=str(e))
            raise StorageError(f"Could not delete {key}: {e}", key=key) from e
