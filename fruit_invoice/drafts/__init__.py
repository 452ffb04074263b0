"""Invoice draft package."""

from fruit_invoice.drafts.engine import InvoiceDraft

__all__ = ["InvoiceDraft"]
