"""Tests for the key-value stores and the collection codec."""

import os

import pytest

from fruit_invoice.models import FruitPreset, PresetList
from fruit_invoice.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    StorageCorruptedError,
    StorageError,
)
from fruit_invoice.services.storage.records import read_records, write_records


class TestInMemoryStore:
    """Tests for InMemoryKeyValueStore."""

    @pytest.mark.asyncio
    async def test_get_absent_key(self):
        store = InMemoryKeyValueStore()
        assert await store.get("invoices") is None

    @pytest.mark.asyncio
    async def test_set_get_delete(self):
        store = InMemoryKeyValueStore()
        await store.set("k", b"[1]")
        assert await store.get("k") == b"[1]"
        await store.delete("k")
        assert await store.get("k") is None
        await store.delete("k")  # absent: no-op


class TestJsonFileStore:
    """Tests for JsonFileKeyValueStore."""

    @pytest.mark.asyncio
    async def test_write_creates_directory_and_file(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "nested" / "dir")
        await store.set("invoices", b"[]")
        assert (tmp_path / "nested" / "dir" / "invoices.json").read_bytes() == b"[]"
        assert await store.get("invoices") == b"[]"

    @pytest.mark.asyncio
    async def test_overwrite_leaves_no_temp_files(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path)
        await store.set("fruitPresets", b"[1]")
        await store.set("fruitPresets", b"[2]")
        assert await store.get("fruitPresets") == b"[2]"
        assert sorted(os.listdir(tmp_path)) == ["fruitPresets.json"]

    @pytest.mark.asyncio
    async def test_absent_key_reads_none(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path)
        assert await store.get("invoices") is None

    @pytest.mark.asyncio
    async def test_delete(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path)
        await store.set("k", b"x")
        await store.delete("k")
        await store.delete("k")
        assert await store.get("k") is None

    def test_rejects_path_like_keys(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path)
        for key in ("../escape", "a/b", "", ".."):
            with pytest.raises(ValueError):
                store.path_for(key)

    def test_defaults_to_configured_directory(self, tmp_path):
        store = JsonFileKeyValueStore()
        assert store.data_dir == tmp_path / "data"

    @pytest.mark.asyncio
    async def test_transient_write_error_is_retried(self, tmp_path, monkeypatch):
        store = JsonFileKeyValueStore(tmp_path, write_attempts=3, retry_wait_seconds=0)
        real_replace = os.replace
        calls = {"n": 0}

        def flaky_replace(src, dst):
            calls["n"] += 1
            if calls["n"] == 1:
                raise OSError("device busy")
            return real_replace(src, dst)

        monkeypatch.setattr(os, "replace", flaky_replace)
        await store.set("invoices", b"[]")

        assert calls["n"] == 2
        assert (tmp_path / "invoices.json").read_bytes() == b"[]"
        assert sorted(os.listdir(tmp_path)) == ["invoices.json"]

    @pytest.mark.asyncio
    async def test_persistent_write_error_raises_storage_error(self, tmp_path, monkeypatch):
        store = JsonFileKeyValueStore(tmp_path, write_attempts=2, retry_wait_seconds=0)

        def failing_replace(src, dst):
            raise OSError("read-only file system")

        monkeypatch.setattr(os, "replace", failing_replace)
        with pytest.raises(StorageError) as exc_info:
            await store.set("invoices", b"[]")

        assert exc_info.value.key == "invoices"
        assert not (tmp_path / "invoices.json").exists()


class TestRecordCodec:
    """Tests for reading and writing collections."""

    @pytest.mark.asyncio
    async def test_absent_collection_is_empty(self):
        store = InMemoryKeyValueStore()
        assert await read_records(store, "fruitPresets", PresetList) == []

    @pytest.mark.asyncio
    async def test_round_trip(self):
        store = InMemoryKeyValueStore()
        presets = [FruitPreset(id="a", name="Táo", price_per_kg=30000)]
        await write_records(store, "fruitPresets", PresetList, presets)

        raw = await store.get("fruitPresets")
        assert b'"pricePerKg":30000' in raw
        assert await read_records(store, "fruitPresets", PresetList) == presets

    @pytest.mark.asyncio
    async def test_garbage_raises_corrupted(self):
        store = InMemoryKeyValueStore({"fruitPresets": b"{not json"})
        with pytest.raises(StorageCorruptedError):
            await read_records(store, "fruitPresets", PresetList)

    @pytest.mark.asyncio
    async def test_invalid_record_raises_corrupted(self):
        store = InMemoryKeyValueStore({"fruitPresets": b'[{"id": "a", "pricePerKg": -5}]'})
        with pytest.raises(StorageCorruptedError):
            await read_records(store, "fruitPresets", PresetList)
