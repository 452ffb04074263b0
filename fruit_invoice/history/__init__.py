"""Invoice history package."""

from fruit_invoice.history.repository import InvoiceHistory

__all__ = ["InvoiceHistory"]
