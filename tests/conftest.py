"""Shared fixtures: isolated settings, in-memory store, fixed clock and ids."""

import itertools
from datetime import datetime, timezone

import pytest

from fruit_invoice.config import get_settings
from fruit_invoice.models import FruitPreset
from fruit_invoice.orchestrator import create_app_components
from fruit_invoice.services.storage import InMemoryKeyValueStore


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the data directory at a temp dir and reload settings."""
    monkeypatch.setenv("FRUIT_INVOICE_STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("FRUIT_INVOICE_PRICE_INPUT_UNIT", raising=False)
    monkeypatch.delenv("FRUIT_INVOICE_AUDIT_LOG_MAX_EVENTS", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def clock():
    return lambda: datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def components(store, clock, id_factory):
    return create_app_components(store, clock=clock, id_factory=id_factory)


@pytest.fixture
def draft(components):
    return components.draft


@pytest.fixture
def history(components):
    return components.history


@pytest.fixture
def catalog(components):
    return components.catalog


@pytest.fixture
def apple():
    return FruitPreset(id="p-apple", name="Táo", price_per_kg=30000)


@pytest.fixture
def orange():
    return FruitPreset(id="p-orange", name="Cam", price_per_kg=25000)
