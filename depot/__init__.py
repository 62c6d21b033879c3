"""
Django Depot — warehouse inventory consistency engine.

Usage:
    from depot import depot, DepotError

    depot.execute_transfer(1, 2, product_id=7, quantity=10)
    depot.receive_purchase_order(order_id)
    depot.query_alerts(severity='critical')
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'depot':
        from depot.service import get_depot
        return get_depot()
    elif name == 'Depot':
        from depot.service import Depot
        return Depot
    elif name == 'DepotError':
        from depot.exceptions import DepotError
        return DepotError
    elif name == 'StockRecord':
        from depot.models.stock import StockRecord
        return StockRecord
    elif name == 'Transfer':
        from depot.models.transfer import Transfer
        return Transfer
    elif name == 'PurchaseOrder':
        from depot.models.purchase_order import PurchaseOrder
        return PurchaseOrder
    elif name == 'AlertTrackingRecord':
        from depot.models.alert import AlertTrackingRecord
        return AlertTrackingRecord
    elif name == 'AlertStatus':
        from depot.models.enums import AlertStatus
        return AlertStatus
    elif name == 'AlertSeverity':
        from depot.models.enums import AlertSeverity
        return AlertSeverity
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'depot',
    'Depot',
    'DepotError',
    'StockRecord',
    'Transfer',
    'PurchaseOrder',
    'AlertTrackingRecord',
    'AlertStatus',
    'AlertSeverity',
]

__version__ = '0.1.0'
