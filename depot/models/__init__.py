"""
Depot Models.

Record types for the inventory engine:
- StockRecord: Quantity of a product at a warehouse
- Transfer: Audited movement between two warehouses
- PurchaseOrder: Replenishment credited exactly once
- AlertTrackingRecord: User interaction with a derived low-stock alert
- AuditEntry: Append-only log of stock changes
- StoredCollection: Django model backing the database record store
"""

from depot.models.alert import AlertTrackingRecord, AlertView
from depot.models.audit import AuditEntry
from depot.models.base import Page
from depot.models.collection import StoredCollection
from depot.models.enums import (
    AlertSeverity,
    AlertStatus,
    AuditEventType,
    Collection,
    PurchaseOrderStatus,
    StockStatus,
    TransferStatus,
)
from depot.models.purchase_order import PurchaseOrder, ReorderResult
from depot.models.stock import StockAdjustment, StockRecord
from depot.models.transfer import Transfer

__all__ = [
    'Collection',
    'TransferStatus',
    'PurchaseOrderStatus',
    'AlertStatus',
    'AlertSeverity',
    'StockStatus',
    'AuditEventType',
    'Page',
    'StockRecord',
    'StockAdjustment',
    'Transfer',
    'PurchaseOrder',
    'ReorderResult',
    'AlertTrackingRecord',
    'AlertView',
    'AuditEntry',
    'StoredCollection',
]
