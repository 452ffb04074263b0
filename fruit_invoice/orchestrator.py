"""
Component Wiring for Fruit Invoice

Builds the object graph the presentation layer talks to:

    store -> catalog, history -> draft, statistics

Everything shares one key-value store, which is the single point where
writes are serialized. The draft is created here and handed to the views
that need it; nothing is a module-level singleton.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import structlog

from fruit_invoice.audit import AuditLogger
from fruit_invoice.catalog import PresetCatalog, PresetSettingsEditor
from fruit_invoice.config import configure_logging, get_logger
from fruit_invoice.drafts import InvoiceDraft
from fruit_invoice.history import InvoiceHistory
from fruit_invoice.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from fruit_invoice.stats import StatisticsService

logger = get_logger(__name__)


@dataclass
class AppComponents:
    """Everything a presentation layer needs, sharing one store."""

    store: KeyValueStore
    audit_logger: AuditLogger
    catalog: PresetCatalog
    history: InvoiceHistory
    draft: InvoiceDraft
    statistics: StatisticsService

    def preset_editor(self) -> PresetSettingsEditor:
        """A fresh settings-flow editor over the shared catalog."""
        return PresetSettingsEditor(self.catalog)


def create_app_components(
    store: Optional[KeyValueStore] = None,
    data_dir: Optional[Path] = None,
    persist_audit: bool = True,
    clock: Optional[Callable[[], datetime]] = None,
    id_factory: Optional[Callable[[], str]] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        store: Store to use. Defaults to the file store under data_dir
               (or the configured data directory).
        data_dir: Data directory for the default file store.
        persist_audit: Keep the audit trail in the store as well as the log.
        clock: Time source for invoice timestamps.
        id_factory: Id source for draft lines and invoices.

    Returns:
        AppComponents
    """
    # A host that configured structlog itself keeps its setup
    if not structlog.is_configured():
        configure_logging()

    if store is None:
        store = JsonFileKeyValueStore(data_dir)
        logger.info("store_opened", data_dir=str(store.data_dir))

    audit_logger = AuditLogger(store if persist_audit else None)
    catalog = PresetCatalog(store, audit_logger=audit_logger)
    history = InvoiceHistory(store, audit_logger=audit_logger)
    draft = InvoiceDraft(
        history,
        catalog=catalog,
        audit_logger=audit_logger,
        clock=clock,
        id_factory=id_factory,
    )

    return AppComponents(
        store=store,
        audit_logger=audit_logger,
        catalog=catalog,
        history=history,
        draft=draft,
        statistics=StatisticsService(history),
    )


def create_preview_components() -> AppComponents:
    """Components over a throwaway in-memory store, with local-only audit."""
    return create_app_components(InMemoryKeyValueStore(), persist_audit=False)
