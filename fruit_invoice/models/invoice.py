"""
Core Data Models for Fruit Invoice

These models define the schemas for everything the core keeps or hands
to the presentation layer. They are designed to:
1. Enforce field constraints at runtime
2. Serialize to the camelCase records kept in the local store
3. Accept both snake_case and camelCase on input

Money is VND in whole đồng. Weights are kilograms and may be fractional.
"""

import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


DAY_KEY_LENGTH = 10

# Extended form only: the day key is the first 10 characters
_TIMESTAMP_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]")


def new_id() -> str:
    """Generate a fresh record identifier."""
    return uuid4().hex


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Format a moment as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC.

    Naive datetimes are taken to be UTC already.
    """
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def round_amount(value: float) -> int:
    """Round a currency amount half-up to whole đồng."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def day_key(created_at: str) -> str:
    """The YYYY-MM-DD prefix used for grouping and bulk deletion."""
    return created_at[:DAY_KEY_LENGTH]


class _RecordModel(BaseModel):
    """Shared config: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )

    def to_record(self) -> dict:
        """Dump in the stored (camelCase, JSON-safe) shape."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# ENUMS
# =============================================================================

class ItemField(str, Enum):
    """Editable fields of a draft line."""
    NAME = "name"
    PRICE_PER_KG = "price_per_kg"
    WEIGHT_KG = "weight_kg"

    @classmethod
    def parse(cls, value: "ItemField | str") -> "ItemField":
        """Accept the enum, its value, or the camelCase record name."""
        if isinstance(value, cls):
            return value
        aliases = {
            "pricePerKg": cls.PRICE_PER_KG,
            "weightKg": cls.WEIGHT_KG,
        }
        if value in aliases:
            return aliases[value]
        return cls(value)


class SaveStatus(str, Enum):
    """Outcome of saving the draft."""
    SAVED = "saved"
    INVALID = "invalid"  # A line failed validation, nothing written
    FAILED = "failed"    # The store refused the write


# =============================================================================
# CATALOG
# =============================================================================

class FruitPreset(_RecordModel):
    """
    A saved (fruit name, price per kg) template.

    An unnamed zero-priced preset is the placeholder the settings flow
    keeps instead of an empty list.
    """

    id: str = Field(default_factory=new_id, min_length=1)
    name: str = Field(default="")
    price_per_kg: int = Field(default=0, ge=0, description="Đồng per kg")

    @property
    def is_usable(self) -> bool:
        return bool(self.name.strip()) and self.price_per_kg > 0

    @classmethod
    def placeholder(cls) -> "FruitPreset":
        return cls(name="", price_per_kg=0)


# =============================================================================
# INVOICE
# =============================================================================

class InvoiceItem(_RecordModel):
    """
    One line of an invoice.

    preset_id is set only while the line still denotes the preset it was
    filled from. The line total is always derived.
    """

    id: str = Field(default_factory=new_id, min_length=1)
    preset_id: Optional[str] = None
    name: str = ""
    price_per_kg: int = Field(default=0, ge=0)
    weight_kg: float = Field(default=0.0, ge=0)

    @property
    def line_total(self) -> float:
        return self.price_per_kg * self.weight_kg

    @property
    def is_complete(self) -> bool:
        """Whether the line may be saved."""
        return bool(self.name) and self.price_per_kg > 0 and self.weight_kg > 0


class Invoice(_RecordModel):
    """
    A saved invoice.

    total_amount is the snapshot taken at save time; it is never
    recomputed, so old invoices do not move when presets change.
    """

    id: str = Field(default_factory=new_id, min_length=1)
    created_at: str = Field(default_factory=utc_timestamp)
    items: list[InvoiceItem] = Field(..., min_length=1)
    total_amount: int = Field(..., ge=0)
    note: Optional[str] = None

    @field_validator('created_at')
    @classmethod
    def validate_created_at(cls, v: str) -> str:
        """Must be extended ISO-8601 so the first 10 characters are the day."""
        if not _TIMESTAMP_PREFIX.match(v):
            raise ValueError(f"created_at is not an ISO-8601 timestamp: {v!r}")
        try:
            datetime.fromisoformat(v)
        except ValueError:
            raise ValueError(f"created_at is not an ISO-8601 timestamp: {v!r}")
        return v

    @model_validator(mode='after')
    def validate_items(self) -> 'Invoice':
        """Every saved line needs a name, a price and a weight."""
        for index, item in enumerate(self.items):
            if not item.is_complete:
                raise ValueError(f"Invoice item {index} is incomplete")
        return self

    @property
    def day_key(self) -> str:
        return day_key(self.created_at)

    @property
    def created_datetime(self) -> datetime:
        """Creation time as an aware datetime; naive stamps are read as UTC."""
        moment = datetime.fromisoformat(self.created_at)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment

    @property
    def item_count(self) -> int:
        return len(self.items)


class DayStat(BaseModel):
    """Per-day totals. Derived from the history, never stored."""

    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    total: int = 0
    count: int = Field(default=0, ge=0)


# =============================================================================
# OPERATION RESULTS
# =============================================================================

class ValidationIssue(BaseModel):
    """The first invalid row found in a draft or a preset list."""

    index: int = Field(..., ge=0)
    field: str
    message: str


class PresetApplication(BaseModel):
    """
    Result of putting a preset on a draft line.

    When rejected, existing_index / existing_item_id point at the line
    that already carries the preset so the caller can reveal it.
    """

    applied: bool
    item_id: Optional[str] = None
    existing_index: Optional[int] = None
    existing_item_id: Optional[str] = None


class SaveResult(BaseModel):
    """Result of saving the draft."""

    status: SaveStatus
    invoice: Optional[Invoice] = None
    invalid_index: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == SaveStatus.SAVED


# Adapters for the stored collections
InvoiceList = TypeAdapter(list[Invoice])
PresetList = TypeAdapter(list[FruitPreset])
