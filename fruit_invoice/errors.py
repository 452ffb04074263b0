"""
Domain exceptions.

Persistence failures live with the storage interface
(fruit_invoice.services.storage.StorageError); these cover the rules the
core itself enforces.
"""

from typing import Optional


class ValidationFailure(Exception):
    """A row failed its required-field checks. Nothing was changed."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class PresetValidationError(ValidationFailure):
    """A preset row in the settings flow cannot be saved."""
    pass


class DuplicatePresetError(Exception):
    """The preset is already on another line of the draft."""

    def __init__(self, preset_id: str, index: int, item_id: str):
        super().__init__(f"Preset {preset_id} is already on line {index}")
        self.preset_id = preset_id
        self.index = index
        self.item_id = item_id


class EmptyCatalogError(Exception):
    """An operation needs at least one usable preset and there is none."""
    pass
