"""
Invoice Draft Engine

The in-progress invoice: its lines, its note, the running total and the
save flow. An InvoiceDraft is an ordinary object owned by whoever builds
it (usually the orchestrator) and handed to every view that edits it;
there is no module-level draft.

Lines are identified by id, never by position, since lines can be
removed from the middle.

One line per preset per invoice: the draft keeps an explicit map from
preset id to the line carrying it and consults it on every application.

Detachment rule: renaming a preset-linked line to something else clears
its preset link. Editing its price or weight keeps the link. A line's
price is its own value; a preset's price is copied only when the preset
is applied and is never re-applied later.
"""

import inspect
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from fruit_invoice.audit import AuditLogger
from fruit_invoice.catalog import PresetCatalog
from fruit_invoice.config import get_logger
from fruit_invoice.errors import DuplicatePresetError
from fruit_invoice.history import InvoiceHistory
from fruit_invoice.models.invoice import (
    FruitPreset,
    Invoice,
    InvoiceItem,
    ItemField,
    PresetApplication,
    SaveResult,
    SaveStatus,
    ValidationIssue,
    new_id,
    round_amount,
    utc_timestamp,
)
from fruit_invoice.services.storage import StorageError
from fruit_invoice.validation import (
    InvoiceValidator,
    parse_numeric_input,
    parse_price_input,
)

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InvoiceDraft:
    """
    Mutable, unsaved invoice.

    All mutations are synchronous; only save_current_invoice touches the
    store.
    """

    def __init__(
        self,
        history: InvoiceHistory,
        catalog: Optional[PresetCatalog] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._history = history
        self._catalog = catalog
        self._audit = audit_logger
        self._clock = clock or _utcnow
        self._new_id = id_factory or new_id

        self._items: list[InvoiceItem] = []
        self._preset_lines: dict[str, str] = {}  # preset id -> item id
        self.note = ""
        self.is_saving = False

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def items(self) -> list[InvoiceItem]:
        """Copies of the lines, in order."""
        return [item.model_copy() for item in self._items]

    @property
    def item_count(self) -> int:
        return len(self._items)

    @property
    def total_amount(self) -> int:
        return round_amount(sum(item.line_total for item in self._items))

    @property
    def used_preset_ids(self) -> frozenset[str]:
        return frozenset(self._preset_lines)

    def index_of(self, item_id: str) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.id == item_id:
                return index
        return None

    def get_item(self, item_id: str) -> InvoiceItem:
        index = self.index_of(item_id)
        if index is None:
            raise KeyError(item_id)
        return self._items[index].model_copy()

    def _require_index(self, item_id: str) -> int:
        index = self.index_of(item_id)
        if index is None:
            raise KeyError(item_id)
        return index

    def _fresh_item_id(self) -> str:
        taken = {item.id for item in self._items}
        item_id = self._new_id()
        while item_id in taken:
            item_id = self._new_id()
        return item_id

    def _release_preset(self, item: InvoiceItem) -> None:
        if item.preset_id and self._preset_lines.get(item.preset_id) == item.id:
            del self._preset_lines[item.preset_id]

    def _conflict(
        self,
        preset_id: str,
        item_id: Optional[str] = None,
    ) -> Optional[PresetApplication]:
        """A rejection if another line already carries the preset."""
        holder = self._preset_lines.get(preset_id)
        if holder is None or holder == item_id:
            return None
        index = self.index_of(holder)
        logger.info(
            "duplicate_preset_rejected",
            preset_id=preset_id,
            existing_index=index,
        )
        return PresetApplication(
            applied=False,
            item_id=item_id,
            existing_index=index,
            existing_item_id=holder,
        )

    # -------------------------------------------------------------------------
    # Presets
    # -------------------------------------------------------------------------

    async def available_presets(self) -> list[FruitPreset]:
        """
        Presets to offer in a picker.

        Raises:
            EmptyCatalogError: If no usable preset is defined
        """
        if self._catalog is None:
            raise RuntimeError("This draft was created without a preset catalog")
        return await self._catalog.require_presets()

    def ensure_preset_available(
        self,
        preset_id: str,
        item_id: Optional[str] = None,
    ) -> None:
        """
        Raise if a line other than ``item_id`` already carries the preset.

        Raises:
            DuplicatePresetError: With the conflicting line's position
        """
        conflict = self._conflict(preset_id, item_id)
        if conflict is not None:
            raise DuplicatePresetError(
                preset_id, conflict.existing_index, conflict.existing_item_id
            )

    def add_item(self) -> InvoiceItem:
        """Append a blank line."""
        item = InvoiceItem(id=self._fresh_item_id())
        self._items.append(item)
        return item.model_copy()

    def add_item_from_preset(self, preset: FruitPreset) -> PresetApplication:
        """Append a line filled from a preset, unless one already carries it."""
        if not preset.is_usable:
            raise ValueError(f"Preset {preset.id} has no name or price")

        conflict = self._conflict(preset.id)
        if conflict is not None:
            return conflict

        item = InvoiceItem(
            id=self._fresh_item_id(),
            preset_id=preset.id,
            name=preset.name,
            price_per_kg=preset.price_per_kg,
        )
        self._items.append(item)
        self._preset_lines[preset.id] = item.id
        return PresetApplication(applied=True, item_id=item.id)

    def apply_preset_to_item(self, item_id: str, preset: FruitPreset) -> PresetApplication:
        """
        Put a preset's name and price on an existing line.

        Rejected without any change when another line carries the preset.
        """
        if not preset.is_usable:
            raise ValueError(f"Preset {preset.id} has no name or price")

        index = self._require_index(item_id)
        conflict = self._conflict(preset.id, item_id)
        if conflict is not None:
            return conflict

        item = self._items[index]
        self._release_preset(item)
        item.preset_id = preset.id
        item.name = preset.name
        item.price_per_kg = preset.price_per_kg
        self._preset_lines[preset.id] = item.id
        return PresetApplication(applied=True, item_id=item.id)

    # -------------------------------------------------------------------------
    # Editing
    # -------------------------------------------------------------------------

    def remove_item(self, item_id: str) -> None:
        """Drop a line. Unknown ids are ignored."""
        index = self.index_of(item_id)
        if index is None:
            return
        item = self._items.pop(index)
        self._release_preset(item)

    def update_item_field(
        self,
        item_id: str,
        field: "ItemField | str",
        value: Any,
    ) -> InvoiceItem:
        """
        Edit one field of a line from user input.

        Numeric fields parse free text; non-numeric or negative input
        becomes 0.
        """
        item = self._items[self._require_index(item_id)]
        field = ItemField.parse(field)

        if field == ItemField.NAME:
            name = "" if value is None else str(value)
            if item.preset_id and name != item.name:
                self._release_preset(item)
                item.preset_id = None
            item.name = name
        elif field == ItemField.PRICE_PER_KG:
            item.price_per_kg = parse_price_input(value)
        else:
            item.weight_kg = parse_numeric_input(value)

        return item.model_copy()

    def set_note(self, note: Optional[str]) -> None:
        self.note = note or ""

    def reset_invoice(self) -> None:
        """Start over: no lines, no note."""
        self._items = []
        self._preset_lines = {}
        self.note = ""

    # -------------------------------------------------------------------------
    # Validation and saving
    # -------------------------------------------------------------------------

    def validate(self) -> Optional[ValidationIssue]:
        """The first line that cannot be saved, or None."""
        return InvoiceValidator.first_invalid_item(self._items)

    def first_invalid_index(self) -> Optional[int]:
        issue = self.validate()
        return issue.index if issue else None

    async def _reject(self, index: Optional[int], message: str) -> SaveResult:
        logger.info("draft_rejected", invalid_index=index, reason=message)
        if self._audit:
            await self._audit.log_draft_rejected(index, message)
        return SaveResult(
            status=SaveStatus.INVALID,
            invalid_index=index,
            error_message=message,
        )

    async def save_current_invoice(
        self,
        note: Optional[str] = None,
        on_success: Optional[Callable[[], Any]] = None,
    ) -> SaveResult:
        """
        Validate, snapshot and persist the draft.

        Args:
            note: Note to store; the draft's own note when omitted
            on_success: Called (and awaited if it returns an awaitable)
                after a successful write, before the draft resets. If it
                raises, the draft still resets and the error is logged and
                carried in the result's error_message.

        Returns:
            SaveResult: saved with the invoice, invalid with the first
            bad line's index, or failed with the storage error. Only a
            successful save changes the draft.
        """
        if self.is_saving:
            return SaveResult(
                status=SaveStatus.FAILED,
                error_message="A save is already in progress",
            )

        if not self._items:
            return await self._reject(None, "An invoice needs at least one line")

        issue = self.validate()
        if issue is not None:
            return await self._reject(issue.index, issue.message)

        note_text = (self.note if note is None else note).strip()
        self.is_saving = True
        try:
            invoice = Invoice(
                id=self._new_id(),
                created_at=utc_timestamp(self._clock()),
                items=self.items,
                total_amount=self.total_amount,
                note=note_text or None,
            )
            await self._history.add_invoice(invoice)
        except StorageError as e:
            logger.error("invoice_save_failed", error=str(e))
            if self._audit:
                await self._audit.log_invoice_save_failed(str(e))
            return SaveResult(status=SaveStatus.FAILED, error_message=str(e))
        finally:
            self.is_saving = False

        callback_error = None
        try:
            if on_success is not None:
                result = on_success()
                if inspect.isawaitable(result):
                    await result
        except Exception as e:
            # The invoice is stored by now; the draft resets regardless
            logger.exception("save_callback_failed", invoice_id=invoice.id)
            callback_error = str(e)
        finally:
            self.reset_invoice()

        return SaveResult(
            status=SaveStatus.SAVED,
            invoice=invoice,
            error_message=callback_error,
        )
