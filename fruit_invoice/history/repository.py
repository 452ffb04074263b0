"""
Invoice History Repository

Saved invoices live as one list under one key. Every change is a
read-modify-write of the whole list; nothing is cached between calls so
each screen always sees what the store holds.
"""

import re
from typing import Optional

from fruit_invoice.audit import AuditLogger
from fruit_invoice.config import get_logger, get_settings
from fruit_invoice.models.invoice import Invoice, InvoiceList
from fruit_invoice.services.storage import KeyValueStore, StorageError
from fruit_invoice.services.storage.records import read_records, write_records

logger = get_logger(__name__)

_DAY_KEY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvoiceHistory:
    """CRUD and bulk deletion over saved invoices."""

    def __init__(
        self,
        store: KeyValueStore,
        key: Optional[str] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._key = key or get_settings().storage.invoices_key
        self._audit = audit_logger

    async def _read(self) -> list[Invoice]:
        return await read_records(self._store, self._key, InvoiceList)

    async def _write(self, invoices: list[Invoice], operation: str) -> None:
        try:
            await write_records(self._store, self._key, InvoiceList, invoices)
        except StorageError as e:
            if self._audit:
                await self._audit.log_storage_error(operation, str(e), self._key)
            raise

    async def list_invoices(self) -> list[Invoice]:
        """All saved invoices, most recent first."""
        invoices = await self._read()
        return sorted(invoices, key=lambda inv: inv.created_datetime, reverse=True)

    async def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        for invoice in await self._read():
            if invoice.id == invoice_id:
                return invoice
        return None

    async def add_invoice(self, invoice: Invoice) -> None:
        """Prepend a finalized invoice and store the list."""
        invoices = await self._read()
        await self._write([invoice, *invoices], "add_invoice")

        logger.info(
            "invoice_saved",
            invoice_id=invoice.id,
            total_amount=invoice.total_amount,
            item_count=invoice.item_count,
        )
        if self._audit:
            await self._audit.log_invoice_saved(
                invoice.id, invoice.total_amount, invoice.item_count
            )

    async def delete_invoice_by_id(self, invoice_id: str) -> int:
        """
        Remove one invoice.

        Returns:
            Number of invoices removed (0 when the id is unknown)
        """
        invoices = await self._read()
        kept = [inv for inv in invoices if inv.id != invoice_id]
        removed = len(invoices) - len(kept)
        if removed:
            await self._write(kept, "delete_invoice_by_id")
            if self._audit:
                await self._audit.log_invoice_deleted(invoice_id, removed)

        logger.info("invoice_deleted", invoice_id=invoice_id, removed=removed)
        return removed

    async def delete_invoices_by_date(self, date_key: str) -> int:
        """
        Remove every invoice created on a day (YYYY-MM-DD).

        Calling it again for the same day is a no-op.

        Returns:
            Number of invoices removed
        """
        if not _DAY_KEY.match(date_key):
            raise ValueError(f"Day key must look like YYYY-MM-DD, got {date_key!r}")

        invoices = await self._read()
        kept = [inv for inv in invoices if inv.day_key != date_key]
        removed = len(invoices) - len(kept)
        if removed:
            await self._write(kept, "delete_invoices_by_date")
            if self._audit:
                await self._audit.log_day_deleted(date_key, removed)

        logger.info("invoices_deleted_by_date", date=date_key, removed=removed)
        return removed

    async def clear_all_invoices(self) -> int:
        """
        Remove every saved invoice.

        Returns:
            Number of invoices removed
        """
        removed = len(await self._read())
        await self._write([], "clear_all_invoices")

        logger.warning("invoices_cleared", removed=removed)
        if self._audit:
            await self._audit.log_history_cleared(removed)
        return removed
