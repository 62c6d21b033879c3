"""
Enums for Depot models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Collection(models.TextChoices):
    """Record collections known to the record store."""
    STOCK = 'stock', _('Stock')
    TRANSFERS = 'transfers', _('Transfers')
    PURCHASE_ORDERS = 'purchase_orders', _('Purchase orders')
    ALERTS = 'alerts', _('Alert tracking')
    AUDIT_LOG = 'audit_log', _('Audit log')
    PRODUCTS = 'products', _('Products')
    WAREHOUSES = 'warehouses', _('Warehouses')


class TransferStatus(models.TextChoices):
    """Transfer status. Synchronous transfers are always created COMPLETED."""
    PENDING = 'pending', _('Pending')
    COMPLETED = 'completed', _('Completed')
    FAILED = 'failed', _('Failed')


class PurchaseOrderStatus(models.TextChoices):
    """Purchase order lifecycle: PENDING -> RECEIVED (terminal)."""
    PENDING = 'pending', _('Pending')
    RECEIVED = 'received', _('Received')


class AlertStatus(models.TextChoices):
    """
    Alert tracking status.

    ACTIVE is the implicit default of a derived alert; nothing is
    persisted until a user acts on it.
    """
    ACTIVE = 'active', _('Active')
    ACKNOWLEDGED = 'acknowledged', _('Acknowledged')
    RESOLVED = 'resolved', _('Resolved')
    SNOOZED = 'snoozed', _('Snoozed')


class AlertSeverity(models.TextChoices):
    """Severity derived from the stock status, never stored."""
    CRITICAL = 'critical', _('Critical')
    WARNING = 'warning', _('Warning')
    INFO = 'info', _('Info')


class StockStatus(models.TextChoices):
    """Classification of a quantity against its reorder point."""
    CRITICAL_LOW = 'critical-low', _('Critical low')
    LOW_STOCK = 'low-stock', _('Low stock')
    HEALTHY = 'healthy', _('Healthy')
    OVERSTOCKED = 'overstocked', _('Overstocked')


class AuditEventType(models.TextChoices):
    """Stock-affecting events recorded in the audit log."""
    TRANSFER_OUT = 'TRANSFER_OUT', _('Transfer out')
    TRANSFER_IN = 'TRANSFER_IN', _('Transfer in')
    ADJUSTMENT = 'ADJUSTMENT', _('Adjustment')
    RECEIPT = 'RECEIPT', _('Receipt')
