"""
Audit Logger

Every persisted change, and every save the core refused, is logged.
The audit logger:
- always logs locally through structlog
- optionally appends to a capped audit list in the key-value store
- never raises: a failed audit write is logged and reported as False
"""

from typing import Optional

from pydantic import TypeAdapter

from fruit_invoice.config import get_logger, get_settings
from fruit_invoice.models.audit import AuditEvent, AuditEventBuilder
from fruit_invoice.services.storage import KeyValueStore, StorageError
from fruit_invoice.services.storage.records import read_records, write_records

AuditEventList = TypeAdapter(list[AuditEvent])


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The key-value store (for the on-device trail), when one is given
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        key: Optional[str] = None,
        max_events: Optional[int] = None,
    ):
        """
        Initialize audit logger.

        Args:
            store: Store backend for persistence. If None, only logs locally.
            key: Storage key for the trail (defaults to settings).
            max_events: Cap on stored events (defaults to settings).
        """
        settings = get_settings()
        self._store = store
        self._key = key or settings.storage.audit_key
        self._max_events = max_events or settings.app.audit_log_max_events
        self._logger = get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the stored trail was updated (or no store is set).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._store is None:
            return True

        try:
            events = await read_records(self._store, self._key, AuditEventList)
            events.append(event)
            await write_records(
                self._store,
                self._key,
                AuditEventList,
                events[-self._max_events:],
            )
        except StorageError as e:
            self._logger.error(
                "audit_storage_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False

        return True

    async def recent_events(self, limit: int = 50) -> list[AuditEvent]:
        """Most recent stored events, newest first."""
        if self._store is None:
            return []
        events = await read_records(self._store, self._key, AuditEventList)
        return list(reversed(events))[:limit]

    async def log_draft_rejected(self, index: Optional[int], message: str) -> None:
        await self.log(AuditEventBuilder.draft_validation_failed(index, message))

    async def log_invoice_saved(
        self,
        invoice_id: str,
        total_amount: int,
        item_count: int,
    ) -> None:
        await self.log(AuditEventBuilder.invoice_saved(invoice_id, total_amount, item_count))

    async def log_invoice_save_failed(self, error_message: str) -> None:
        await self.log(AuditEventBuilder.invoice_save_failed(error_message))

    async def log_invoice_deleted(self, invoice_id: str, removed: int) -> None:
        await self.log(AuditEventBuilder.invoice_deleted(invoice_id, removed))

    async def log_day_deleted(self, date_key: str, removed: int) -> None:
        await self.log(AuditEventBuilder.invoices_deleted_by_date(date_key, removed))

    async def log_history_cleared(self, removed: int) -> None:
        await self.log(AuditEventBuilder.invoices_cleared(removed))

    async def log_presets_saved(self, count: int) -> None:
        await self.log(AuditEventBuilder.presets_saved(count))

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        key: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.storage_error(operation, error_message, key))
