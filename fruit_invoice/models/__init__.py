"""
Data Models Package

All records the core stores or returns conform to these schemas.
"""

from fruit_invoice.models.invoice import (
    DayStat,
    FruitPreset,
    Invoice,
    InvoiceItem,
    InvoiceList,
    ItemField,
    PresetApplication,
    PresetList,
    SaveResult,
    SaveStatus,
    ValidationIssue,
    day_key,
    new_id,
    round_amount,
    utc_timestamp,
)
from fruit_invoice.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Invoice models
    "DayStat",
    "FruitPreset",
    "Invoice",
    "InvoiceItem",
    "InvoiceList",
    "ItemField",
    "PresetApplication",
    "PresetList",
    "SaveResult",
    "SaveStatus",
    "ValidationIssue",
    "day_key",
    "new_id",
    "round_amount",
    "utc_timestamp",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
