"""Validation package."""

from fruit_invoice.validation.validator import (
    InvoiceValidator,
    parse_numeric_input,
    parse_price_input,
)

__all__ = ["InvoiceValidator", "parse_numeric_input", "parse_price_input"]
