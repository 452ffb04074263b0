"""Preset catalog package."""

from fruit_invoice.catalog.presets import PresetCatalog, PresetSettingsEditor

__all__ = ["PresetCatalog", "PresetSettingsEditor"]
