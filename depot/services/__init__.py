"""
Depot services — modular organization of inventory operations.

    from depot.services import StockLedger, TransferEngine, PurchaseOrders, AlertTracker
"""

from depot.services.alerts import AlertTracker
from depot.services.audit import AuditTrail
from depot.services.ledger import LedgerSession, StockLedger
from depot.services.purchase_orders import PurchaseOrders
from depot.services.transfers import TransferEngine

__all__ = [
    'AlertTracker',
    'AuditTrail',
    'LedgerSession',
    'PurchaseOrders',
    'StockLedger',
    'TransferEngine',
]
