"""
Audit Models for Fruit Invoice

Every change that reaches the store, and every save the user attempted
but the core refused, produces one AuditEvent. The trail is append-only
and capped; events are never edited.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Draft
    DRAFT_VALIDATION_FAILED = "draft_validation_failed"

    # Invoices
    INVOICE_SAVED = "invoice_saved"
    INVOICE_SAVE_FAILED = "invoice_save_failed"
    INVOICE_DELETED = "invoice_deleted"
    INVOICES_DELETED_BY_DATE = "invoices_deleted_by_date"
    INVOICES_CLEARED = "invoices_cleared"

    # Catalog
    PRESETS_SAVED = "presets_saved"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What the event is about
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'invoice', 'day', 'catalog')"
    )
    entity_id: Optional[str] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Named constructors for the events the core emits.

    Usage:
        event = AuditEventBuilder.invoice_saved("9f1c...", 60000, 1)
        event = AuditEventBuilder.invoices_deleted_by_date("2024-05-01", 3)
    """

    @staticmethod
    def draft_validation_failed(index: Optional[int], message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DRAFT_VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="draft",
            description=f"Draft rejected: {message}",
            details={"invalid_index": index},
        )

    @staticmethod
    def invoice_saved(
        invoice_id: str,
        total_amount: int,
        item_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_SAVED,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice saved: {item_count} items, {total_amount} VND",
            details={
                "total_amount": total_amount,
                "item_count": item_count,
            },
        )

    @staticmethod
    def invoice_save_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="invoice",
            description="Invoice could not be saved",
            error_message=error_message,
        )

    @staticmethod
    def invoice_deleted(invoice_id: str, removed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_DELETED,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice deleted ({removed} removed)",
            details={"removed": removed},
        )

    @staticmethod
    def invoices_deleted_by_date(date_key: str, removed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICES_DELETED_BY_DATE,
            entity_type="day",
            entity_id=date_key,
            description=f"Deleted {removed} invoices from {date_key}",
            details={"removed": removed},
        )

    @staticmethod
    def invoices_cleared(removed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICES_CLEARED,
            severity=AuditSeverity.WARNING,
            entity_type="history",
            description=f"Invoice history cleared ({removed} removed)",
            details={"removed": removed},
        )

    @staticmethod
    def presets_saved(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PRESETS_SAVED,
            entity_type="catalog",
            description=f"Preset catalog replaced with {count} entries",
            details={"count": count},
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        key: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="store",
            entity_id=key,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
        )
