"""
Preset Catalog

Named (fruit, price per kg) templates kept as one ordered list under a
single key. Saving replaces the whole list; there is no merge.

The stored list is never empty once the settings flow has saved it: an
empty save stores a single unnamed placeholder instead. Placeholders are
hidden from anything that offers presets for picking.
"""

from typing import Any, Optional

from fruit_invoice.audit import AuditLogger
from fruit_invoice.config import get_logger, get_settings
from fruit_invoice.errors import EmptyCatalogError, PresetValidationError
from fruit_invoice.models.invoice import FruitPreset, ItemField, PresetList
from fruit_invoice.services.storage import KeyValueStore, StorageError
from fruit_invoice.services.storage.records import read_records, write_records
from fruit_invoice.validation import InvoiceValidator, parse_price_input

logger = get_logger(__name__)


class PresetCatalog:
    """CRUD over the stored preset list."""

    def __init__(
        self,
        store: KeyValueStore,
        key: Optional[str] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._key = key or get_settings().storage.presets_key
        self._audit = audit_logger

    async def list_presets(self) -> list[FruitPreset]:
        """All stored presets in order, placeholders included."""
        return await read_records(self._store, self._key, PresetList)

    async def list_usable_presets(self) -> list[FruitPreset]:
        """Presets that can be put on an invoice line."""
        return [p for p in await self.list_presets() if p.is_usable]

    async def require_presets(self) -> list[FruitPreset]:
        """
        Usable presets, for showing a picker.

        Raises:
            EmptyCatalogError: If none are defined
        """
        presets = await self.list_usable_presets()
        if not presets:
            raise EmptyCatalogError("No fruit presets are set up yet")
        return presets

    async def save_presets(self, presets: list[FruitPreset]) -> list[FruitPreset]:
        """
        Replace the stored list.

        The caller filters out invalid rows beforehand. An empty list is
        stored as one placeholder.

        Returns:
            The list actually stored
        """
        to_store = list(presets) or [FruitPreset.placeholder()]
        try:
            await write_records(self._store, self._key, PresetList, to_store)
        except StorageError as e:
            if self._audit:
                await self._audit.log_storage_error("save_presets", str(e), self._key)
            raise

        logger.info("presets_saved", count=len(to_store))
        if self._audit:
            await self._audit.log_presets_saved(len(to_store))
        return to_store


class PresetSettingsEditor:
    """
    Editable copy of the catalog for the settings flow.

    Rows are edited in memory and only reach the store on save(). The
    editor always holds at least one row; removing the last one leaves a
    fresh placeholder.
    """

    def __init__(
        self,
        catalog: PresetCatalog,
        price_input_unit: Optional[int] = None,
    ):
        self._catalog = catalog
        self._price_unit = price_input_unit or get_settings().app.price_input_unit
        self._presets: list[FruitPreset] = [FruitPreset.placeholder()]
        self.is_saving = False

    @property
    def presets(self) -> list[FruitPreset]:
        return list(self._presets)

    def index_of(self, preset_id: str) -> Optional[int]:
        for index, preset in enumerate(self._presets):
            if preset.id == preset_id:
                return index
        return None

    async def load(self) -> list[FruitPreset]:
        """Re-read the catalog; an empty catalog yields one placeholder."""
        stored = await self._catalog.list_presets()
        self._presets = stored or [FruitPreset.placeholder()]
        return self.presets

    def add_preset(self) -> FruitPreset:
        preset = FruitPreset.placeholder()
        self._presets.append(preset)
        return preset

    def remove_preset(self, preset_id: str) -> None:
        remaining = [p for p in self._presets if p.id != preset_id]
        self._presets = remaining or [FruitPreset.placeholder()]

    def update_field(self, preset_id: str, field: "ItemField | str", value: Any) -> FruitPreset:
        """
        Edit one row.

        Prices are typed in thousands of đồng by default ("12.5" is
        12,500); unparseable or negative input becomes 0.
        """
        index = self.index_of(preset_id)
        if index is None:
            raise KeyError(preset_id)

        field = ItemField.parse(field)
        preset = self._presets[index]
        if field == ItemField.NAME:
            name = "" if value is None else str(value)
            updated = preset.model_copy(update={"name": name})
        elif field == ItemField.PRICE_PER_KG:
            updated = preset.model_copy(
                update={"price_per_kg": parse_price_input(value, self._price_unit)}
            )
        else:
            raise ValueError(f"Presets have no {field.value} field")

        self._presets[index] = updated
        return updated

    def price_input_text(self, preset: FruitPreset) -> str:
        """The price as the user types it, or "" while unset."""
        if not preset.price_per_kg:
            return ""
        text = f"{preset.price_per_kg / self._price_unit:.3f}"
        return text.rstrip("0").rstrip(".")

    async def save(self) -> list[FruitPreset]:
        """
        Validate every row and store the list.

        Raises:
            PresetValidationError: First invalid row; nothing is stored
            StorageError: If the write fails; the rows are kept as they are
        """
        issue = InvoiceValidator.first_invalid_preset(self._presets)
        if issue is not None:
            raise PresetValidationError(issue.message, index=issue.index)

        cleaned = [p for p in self._presets if p.is_usable]
        self.is_saving = True
        try:
            await self._catalog.save_presets(cleaned)
        finally:
            self.is_saving = False

        self._presets = cleaned or [FruitPreset.placeholder()]
        return self.presets
