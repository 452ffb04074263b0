"""Audit logging package."""

from fruit_invoice.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
