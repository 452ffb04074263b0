"""Tests for the invoice history repository."""

import pytest

from fruit_invoice.history import InvoiceHistory
from fruit_invoice.models import Invoice, InvoiceItem
from fruit_invoice.services.storage import (
    InMemoryKeyValueStore,
    StorageCorruptedError,
    StorageError,
)


def make_invoice(invoice_id, created_at, total=10000):
    return Invoice(
        id=invoice_id,
        created_at=created_at,
        items=[InvoiceItem(name="Táo", price_per_kg=total, weight_kg=1)],
        total_amount=total,
    )


@pytest.fixture
def may_invoices():
    return [
        make_invoice("a", "2024-05-01T10:00:00Z", 10000),
        make_invoice("b", "2024-05-01T12:00:00Z", 5000),
        make_invoice("c", "2024-05-02T09:00:00Z", 7000),
    ]


async def _seed(history, invoices):
    for invoice in invoices:
        await history.add_invoice(invoice)


class TestListing:
    """Tests for reading the history."""

    @pytest.mark.asyncio
    async def test_empty(self, history):
        assert await history.list_invoices() == []

    @pytest.mark.asyncio
    async def test_most_recent_first(self, history, may_invoices):
        await _seed(history, [may_invoices[2], may_invoices[0], may_invoices[1]])
        assert [inv.id for inv in await history.list_invoices()] == ["c", "b", "a"]

    @pytest.mark.asyncio
    async def test_mixed_offsets_sort_by_instant(self, history):
        await _seed(history, [
            make_invoice("utc", "2024-05-01T10:00:00Z"),
            make_invoice("ict", "2024-05-01T16:30:00+07:00"),  # 09:30 UTC
        ])
        assert [inv.id for inv in await history.list_invoices()] == ["utc", "ict"]

    @pytest.mark.asyncio
    async def test_get_invoice(self, history, may_invoices):
        await _seed(history, may_invoices)
        assert (await history.get_invoice("b")).total_amount == 5000
        assert await history.get_invoice("zzz") is None

    @pytest.mark.asyncio
    async def test_corrupted_store_raises(self):
        history = InvoiceHistory(InMemoryKeyValueStore({"invoices": b"[{]"}))
        with pytest.raises(StorageCorruptedError):
            await history.list_invoices()

    @pytest.mark.asyncio
    async def test_basic_format_timestamp_is_corruption(self):
        record = (
            b'[{"id": "x", "createdAt": "20240501T100000Z", "totalAmount": 1000,'
            b' "items": [{"id": "i", "name": "T\xc3\xa1o", "pricePerKg": 1000, "weightKg": 1}]}]'
        )
        history = InvoiceHistory(InMemoryKeyValueStore({"invoices": record}))
        with pytest.raises(StorageCorruptedError):
            await history.list_invoices()


class TestDeletion:
    """Tests for deleting invoices."""

    @pytest.mark.asyncio
    async def test_delete_by_id(self, history, may_invoices):
        await _seed(history, may_invoices)
        assert await history.delete_invoice_by_id("b") == 1
        assert [inv.id for inv in await history.list_invoices()] == ["c", "a"]

    @pytest.mark.asyncio
    async def test_delete_unknown_id_writes_nothing(self, history, store, may_invoices):
        await _seed(history, may_invoices)
        before = await store.get("invoices")
        assert await history.delete_invoice_by_id("zzz") == 0
        assert await store.get("invoices") == before

    @pytest.mark.asyncio
    async def test_delete_by_date_is_exact_and_idempotent(self, history, may_invoices):
        await _seed(history, may_invoices)

        assert await history.delete_invoices_by_date("2024-05-01") == 2
        remaining = await history.list_invoices()
        assert [inv.id for inv in remaining] == ["c"]

        assert await history.delete_invoices_by_date("2024-05-01") == 0
        assert await history.list_invoices() == remaining

    @pytest.mark.asyncio
    async def test_delete_by_date_rejects_malformed_key(self, history):
        with pytest.raises(ValueError):
            await history.delete_invoices_by_date("2024-5-1")

    @pytest.mark.asyncio
    async def test_clear_all(self, history, store, may_invoices):
        await _seed(history, may_invoices)
        assert await history.clear_all_invoices() == 3
        assert await history.list_invoices() == []
        assert await store.get("invoices") == b"[]"

    @pytest.mark.asyncio
    async def test_deletions_audited(self, components, may_invoices):
        history = components.history
        await _seed(history, may_invoices)
        await history.delete_invoice_by_id("a")
        await history.delete_invoices_by_date("2024-05-02")
        await history.clear_all_invoices()

        events = await components.audit_logger.recent_events(limit=3)
        assert [e.event_type.value for e in events] == [
            "invoices_cleared",
            "invoices_deleted_by_date",
            "invoice_deleted",
        ]


class TestWriteFailures:
    """Storage failures reach the caller and are audited."""

    @pytest.mark.asyncio
    async def test_failed_write_raises_and_is_audited(self, components, may_invoices):
        await _seed(components.history, may_invoices)
        store = components.store
        real_set = store.set

        async def failing_set(key, value):
            if key == "invoices":
                raise StorageError("disk full", key=key)
            await real_set(key, value)

        store.set = failing_set

        with pytest.raises(StorageError):
            await components.history.delete_invoices_by_date("2024-05-01")

        assert len(await components.history.list_invoices()) == 3
        events = await components.audit_logger.recent_events(limit=1)
        assert events[0].event_type.value == "storage_error"
        assert events[0].entity_id == "invoices"
