"""
Pytest fixtures for Depot tests.
"""

from datetime import datetime, timedelta
from datetime import timezone as dt_timezone

import pytest

from depot.adapters.catalog import StoreCatalog
from depot.adapters.memory import MemoryRecordStore
from depot.service import Depot, reset_depot


PRODUCTS = [
    {'id': 1, 'sku': 'WID-001', 'name': 'Widget', 'category': 'Hardware', 'unitCost': 2.5, 'reorderPoint': 20},
    {'id': 2, 'sku': 'GAD-002', 'name': 'Gadget', 'category': 'Electronics', 'unitCost': 40.0, 'reorderPoint': 100},
    {'id': 3, 'sku': 'BOL-003', 'name': 'Bolt', 'category': 'Hardware', 'unitCost': 0.1, 'reorderPoint': 10},
]

WAREHOUSES = [
    {'id': 1, 'name': 'Main Warehouse', 'code': 'MAIN', 'location': 'Lisbon'},
    {'id': 2, 'name': 'East Depot', 'code': 'EAST', 'location': 'Porto'},
    {'id': 3, 'name': 'West Depot', 'code': 'WEST', 'location': 'Faro'},
]


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def now():
    return datetime(2026, 1, 22, 10, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def clock(now):
    return FrozenClock(now)


@pytest.fixture
def store():
    """Memory store seeded with the catalog collections."""
    return MemoryRecordStore(initial={'products': PRODUCTS, 'warehouses': WAREHOUSES})


@pytest.fixture
def catalog(store):
    return StoreCatalog(store=store)


@pytest.fixture
def depot(store, catalog, clock):
    return Depot(store=store, catalog=catalog, clock=clock)


@pytest.fixture
def ledger(depot):
    return depot.ledger


@pytest.fixture
def stocked(depot):
    """Widget: 50 at MAIN, 5 at EAST."""
    depot.adjust_stock(1, 1, 50, reason='initial-count')
    depot.adjust_stock(1, 2, 5, reason='initial-count')
    return depot


@pytest.fixture
def default_depot(settings):
    """Settings-built depot on a fresh memory store."""
    settings.DEPOT = {'RECORD_STORE': 'depot.adapters.memory.MemoryRecordStore'}
    reset_depot()
    yield
    reset_depot()
