"""
Row Validation and Input Parsing

Two kinds of rows are checked before they reach the store:
- draft invoice lines (name, price per kg and weight are all required)
- preset rows in the settings flow (trimmed name and price are required)

Validation is first-invalid-row wins: the caller gets the position of
the first failing row in display order so it can scroll there, not a
list of every problem.

Validation never fixes anything. Free-text numeric input is the one
place values are coerced: anything unparseable or negative becomes 0.
"""

import math
import re
from typing import Iterable, Optional, Union

from fruit_invoice.models.invoice import (
    FruitPreset,
    InvoiceItem,
    ValidationIssue,
    round_amount,
)

# Leading number, like a lenient float parser: "12abc" -> 12, "abc" -> nothing
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

NumericInput = Union[str, int, float, None]


def parse_numeric_input(value: NumericInput) -> float:
    """
    Parse a quantity typed by the user.

    A comma is accepted as the decimal separator. Non-numeric,
    non-finite or negative input yields 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        match = _LEADING_NUMBER.match(text)
        if not match:
            return 0.0
        number = float(match.group(0))

    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def parse_price_input(value: NumericInput, unit: int = 1) -> int:
    """Parse a price typed in multiples of ``unit`` đồng into whole đồng."""
    return round_amount(parse_numeric_input(value) * unit)


class InvoiceValidator:
    """Required-field checks for draft lines and preset rows."""

    @staticmethod
    def check_item(index: int, item: InvoiceItem) -> Optional[ValidationIssue]:
        if not item.name:
            return ValidationIssue(
                index=index,
                field="name",
                message=f"Line {index + 1} needs a fruit name",
            )
        if item.price_per_kg <= 0:
            return ValidationIssue(
                index=index,
                field="price_per_kg",
                message=f"Line {index + 1} needs a price per kg",
            )
        if item.weight_kg <= 0:
            return ValidationIssue(
                index=index,
                field="weight_kg",
                message=f"Line {index + 1} needs a weight",
            )
        return None

    @classmethod
    def first_invalid_item(
        cls,
        items: Iterable[InvoiceItem],
    ) -> Optional[ValidationIssue]:
        """The first line that cannot be saved, or None."""
        for index, item in enumerate(items):
            issue = cls.check_item(index, item)
            if issue is not None:
                return issue
        return None

    @staticmethod
    def check_preset(index: int, preset: FruitPreset) -> Optional[ValidationIssue]:
        if not preset.name.strip():
            return ValidationIssue(
                index=index,
                field="name",
                message=f"Preset {index + 1} needs a fruit name",
            )
        if preset.price_per_kg <= 0:
            return ValidationIssue(
                index=index,
                field="price_per_kg",
                message=f"Preset {index + 1} needs a price per kg",
            )
        return None

    @classmethod
    def first_invalid_preset(
        cls,
        presets: Iterable[FruitPreset],
    ) -> Optional[ValidationIssue]:
        """The first preset row that cannot be saved, or None."""
        for index, preset in enumerate(presets):
            issue = cls.check_preset(index, preset)
            if issue is not None:
                return issue
        return None
