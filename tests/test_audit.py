"""Tests for the audit logger."""

import pytest

from fruit_invoice.audit import AuditLogger
from fruit_invoice.models import AuditEventBuilder
from fruit_invoice.services.storage import InMemoryKeyValueStore, StorageError


class BrokenStore(InMemoryKeyValueStore):
    async def set(self, key, value):
        raise StorageError("disk full", key=key)


class TestAuditLogger:
    """Tests for AuditLogger."""

    @pytest.mark.asyncio
    async def test_local_only(self):
        logger = AuditLogger()
        assert await logger.log(AuditEventBuilder.presets_saved(2)) is True
        assert await logger.recent_events() == []

    @pytest.mark.asyncio
    async def test_persists_newest_first(self):
        store = InMemoryKeyValueStore()
        logger = AuditLogger(store)
        await logger.log_presets_saved(1)
        await logger.log_invoice_saved("inv-1", 60000, 1)

        events = await logger.recent_events()
        assert [e.event_type.value for e in events] == ["invoice_saved", "presets_saved"]
        assert await store.get("auditLog") is not None

    @pytest.mark.asyncio
    async def test_trail_is_capped(self):
        logger = AuditLogger(InMemoryKeyValueStore(), max_events=3)
        for removed in range(5):
            await logger.log_history_cleared(removed)

        events = await logger.recent_events()
        assert [e.details["removed"] for e in events] == [4, 3, 2]

    @pytest.mark.asyncio
    async def test_cap_from_settings(self, monkeypatch):
        from fruit_invoice.config import get_settings

        monkeypatch.setenv("FRUIT_INVOICE_AUDIT_LOG_MAX_EVENTS", "2")
        get_settings.cache_clear()
        logger = AuditLogger(InMemoryKeyValueStore())
        for removed in range(4):
            await logger.log_history_cleared(removed)
        assert len(await logger.recent_events()) == 2

    @pytest.mark.asyncio
    async def test_storage_failure_reported_not_raised(self):
        logger = AuditLogger(BrokenStore())
        assert await logger.log(AuditEventBuilder.invoices_cleared(1)) is False

    @pytest.mark.asyncio
    async def test_custom_key(self):
        store = InMemoryKeyValueStore()
        logger = AuditLogger(store, key="trail")
        await logger.log_day_deleted("2024-05-01", 2)
        assert store.keys() == ["trail"]
