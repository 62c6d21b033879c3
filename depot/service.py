"""
Depot Service — The single public interface for inventory operations.

Usage:
    from depot import depot, DepotError

    depot.execute_transfer(1, 2, product_id=7, quantity=10)
    depot.adjust_stock(7, 1, -3, reason='damaged')
    order = depot.create_purchase_order(7, 1, 20)
    depot.receive_purchase_order(order.id)
    depot.query_alerts(severity='critical')

The default instance is built from settings.DEPOT (see depot.conf).
Tests and embedding code can build their own:

    Depot(store=MemoryRecordStore(), catalog=my_catalog, clock=frozen_clock)
"""

import logging
import threading
from collections.abc import Callable
from datetime import datetime

from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone
from django.utils.module_loading import import_string

from depot.conf import depot_settings
from depot.models.alert import AlertTrackingRecord, AlertView
from depot.models.audit import AuditEntry
from depot.models.base import Page
from depot.models.purchase_order import PurchaseOrder, ReorderResult
from depot.models.stock import StockAdjustment, StockRecord
from depot.models.transfer import Transfer
from depot.protocols.catalog import Catalog
from depot.protocols.store import RecordStore
from depot.services import AlertTracker, PurchaseOrders, StockLedger, TransferEngine
from depot.services.validation import require_product, require_warehouse

logger = logging.getLogger('depot')


class Depot:
    """
    Single interface for all inventory operations.

    Every component shares one StockLedger, so transfers, receipts and
    adjustments are serialized by the same lock.
    """

    def __init__(self, store: RecordStore, catalog: Catalog,
                 clock: Callable[[], datetime] = timezone.now):
        self.store = store
        self.catalog = catalog
        self.ledger = StockLedger(store, clock=clock)
        self.alerts = AlertTracker(self.ledger, catalog)
        self.transfers = TransferEngine(self.ledger, catalog)
        self.purchase_orders = PurchaseOrders(self.ledger, catalog, self.alerts)

    def __repr__(self) -> str:
        return f"<Depot store={self.store!r}>"

    # ══════════════════════════════════════════════════════════════
    # STOCK
    # ══════════════════════════════════════════════════════════════

    def get_stock(self, product_id: int, warehouse_id: int) -> StockRecord | None:
        return self.ledger.get_stock(product_id, warehouse_id)

    def list_stock(self, product_id: int | None = None,
                   warehouse_id: int | None = None) -> list[StockRecord]:
        return self.ledger.list_stock(product_id=product_id, warehouse_id=warehouse_id)

    def adjust_stock(self, product_id: int, warehouse_id: int, delta: int,
                     reason: str = 'manual-adjustment', notes: str = '') -> StockAdjustment:
        """
        Manual stock correction.

        Over-subtraction clamps at zero; check StockAdjustment.applied
        (or .clamped) to see what actually happened.

        Raises:
            ValidationError: INVALID_DELTA, REASON_REQUIRED,
                PRODUCT_NOT_FOUND, WAREHOUSE_NOT_FOUND
        """
        require_product(self.catalog, product_id)
        require_warehouse(self.catalog, warehouse_id)
        return self.ledger.adjust(product_id, warehouse_id, delta, reason, notes=notes)

    # ══════════════════════════════════════════════════════════════
    # TRANSFERS
    # ══════════════════════════════════════════════════════════════

    def execute_transfer(self, from_warehouse_id: int, to_warehouse_id: int,
                         product_id: int, quantity: int, notes: str = '') -> Transfer:
        return self.transfers.execute(from_warehouse_id, to_warehouse_id, product_id, quantity, notes)

    def query_transfers(self, product_id=None, warehouse_id=None, status=None,
                        start_date=None, end_date=None, limit=None, offset=0) -> Page[Transfer]:
        return self.transfers.query(
            product_id=product_id,
            warehouse_id=warehouse_id,
            status=status,
            start_date=start_date,
            end_date=end_date,
            limit=limit,
            offset=offset,
        )

    def get_transfer(self, transfer_id: int) -> Transfer:
        return self.transfers.get(transfer_id)

    def recent_activity(self, product_id: int | None = None, limit: int = 5) -> list[dict]:
        return self.transfers.recent_activity(product_id=product_id, limit=limit)

    # ══════════════════════════════════════════════════════════════
    # PURCHASE ORDERS
    # ══════════════════════════════════════════════════════════════

    def create_purchase_order(self, product_id: int, warehouse_id: int, quantity: int) -> PurchaseOrder:
        return self.purchase_orders.create(product_id, warehouse_id, quantity)

    def receive_purchase_order(self, order_id: int) -> PurchaseOrder:
        return self.purchase_orders.receive(order_id)

    def get_purchase_order(self, order_id: int) -> PurchaseOrder:
        return self.purchase_orders.get(order_id)

    def get_purchase_orders(self, status: str | None = None) -> list[PurchaseOrder]:
        return self.purchase_orders.list_orders(status=status)

    def reorder_stock(self, product_id: int, warehouse_id: int, quantity: int) -> ReorderResult:
        return self.purchase_orders.reorder(product_id, warehouse_id, quantity)

    # ══════════════════════════════════════════════════════════════
    # ALERTS
    # ══════════════════════════════════════════════════════════════

    def query_alerts(self, severity=None, status='active', warehouse_id=None) -> list[AlertView]:
        return self.alerts.query(severity=severity, status=status, warehouse_id=warehouse_id)

    def get_alert(self, alert_id: int) -> AlertTrackingRecord:
        return self.alerts.get(alert_id)

    def update_alert_status(self, product_id: int, warehouse_id: int, status: str,
                            snooze_until=None, notes: str | None = None) -> AlertTrackingRecord:
        return self.alerts.update_status(
            product_id, warehouse_id, status, snooze_until=snooze_until, notes=notes,
        )

    def alert_stats(self) -> dict[str, int]:
        return self.alerts.stats()

    # ══════════════════════════════════════════════════════════════
    # AUDIT
    # ══════════════════════════════════════════════════════════════

    def query_audit_log(self, product_id=None, warehouse_id=None, event_type=None,
                        start_date=None, end_date=None) -> list[AuditEntry]:
        return self.ledger.audit.query(
            product_id=product_id,
            warehouse_id=warehouse_id,
            event_type=event_type,
            start_date=start_date,
            end_date=end_date,
        )


# ══════════════════════════════════════════════════════════════════
# DEFAULT INSTANCE
# ══════════════════════════════════════════════════════════════════

_lock = threading.Lock()
_depot: Depot | None = None


def _load(setting: str):
    path = getattr(depot_settings, setting)
    if not path:
        raise ImproperlyConfigured(f"DEPOT['{setting}'] must be configured.")
    try:
        return import_string(path)
    except ImportError as e:
        raise ImproperlyConfigured(f"Failed to import DEPOT['{setting}'] '{path}': {e}") from e


def get_depot() -> Depot:
    """
    Return the Depot built from settings.DEPOT.

    Raises:
        ImproperlyConfigured: If RECORD_STORE or CATALOG cannot be imported
    """
    global _depot

    if _depot is None:
        with _lock:
            if _depot is None:  # double-checked
                store = _load('RECORD_STORE')()
                catalog = _load('CATALOG')(store=store)
                _depot = Depot(store=store, catalog=catalog)
                logger.debug("Loaded depot: store=%r catalog=%r", store, catalog)

    return _depot


def reset_depot() -> None:
    """Reset the cached instance. Useful for testing."""
    global _depot
    _depot = None


__all__ = ['Depot', 'get_depot', 'reset_depot']
