"""
Alert models — persisted user interaction overlaid on a derived condition.

An alert is not stored as such. The low-stock condition is derived from
the current stock record and the product's reorder point; what is stored
is the AlertTrackingRecord, i.e. what a user did about that condition
(acknowledge, snooze, resolve). AlertView is the merged read model.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from depot.models.base import from_iso, to_iso
from depot.models.enums import AlertStatus


@dataclass(frozen=True)
class AlertTrackingRecord:
    """
    Tracking state for one (product, warehouse) pair.

    Invariant: snooze_until is set if and only if status is SNOOZED.
    """

    id: int
    product_id: int
    warehouse_id: int
    status: str
    created_at: datetime
    updated_at: datetime
    snooze_until: datetime | None = None
    notes: str = ''
    acknowledged_at: datetime | None = None
    resolved_at: datetime | None = None

    @property
    def key(self) -> tuple[int, int]:
        return (self.product_id, self.warehouse_id)

    def effective_status(self, now: datetime, stock_updated_at: datetime | None = None) -> str:
        """
        Status as seen at `now`.

        Computed at read time, never stored:
        - a snooze that has elapsed reads as ACTIVE
        - a resolution followed by a later stock change reads as ACTIVE
        """
        if self.status == AlertStatus.SNOOZED:
            if self.snooze_until is None or self.snooze_until <= now:
                return AlertStatus.ACTIVE
        if self.status == AlertStatus.RESOLVED and stock_updated_at is not None:
            if self.resolved_at is not None and stock_updated_at > self.resolved_at:
                return AlertStatus.ACTIVE
        return AlertStatus(self.status)

    def with_changes(self, **changes) -> 'AlertTrackingRecord':
        return replace(self, **changes)

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> 'AlertTrackingRecord':
        return cls(
            id=data['id'],
            product_id=data['productId'],
            warehouse_id=data['warehouseId'],
            status=data['status'],
            created_at=from_iso(data['createdAt']),
            updated_at=from_iso(data['updatedAt']),
            snooze_until=from_iso(data.get('snoozeUntil')),
            notes=data.get('notes') or '',
            acknowledged_at=from_iso(data.get('acknowledgedAt')),
            resolved_at=from_iso(data.get('resolvedAt')),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'productId': self.product_id,
            'warehouseId': self.warehouse_id,
            'status': str(self.status),
            'snoozeUntil': to_iso(self.snooze_until),
            'notes': self.notes,
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
            'acknowledgedAt': to_iso(self.acknowledged_at),
            'resolvedAt': to_iso(self.resolved_at),
        }

    def __str__(self) -> str:
        return f"Alert #{self.id} product:{self.product_id} @ {self.warehouse_id}: {self.status}"


@dataclass(frozen=True)
class AlertView:
    """Derived alert: stock classification merged with the optional tracking record."""

    product_id: int
    warehouse_id: int
    status: str
    severity: str
    stock_status: str
    current_stock: int
    reorder_point: int
    shortage: int
    recommended_quantity: int
    id: int | None = None
    product_name: str = ''
    sku: str = ''
    category: str = ''
    warehouse_name: str = ''
    warehouse_code: str = ''
    snooze_until: datetime | None = None
    notes: str = ''
    acknowledged_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_tracked(self) -> bool:
        return self.id is not None

    def as_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'status': str(self.status),
            'severity': str(self.severity),
            'stockStatus': str(self.stock_status),
            'product': {
                'id': self.product_id,
                'name': self.product_name,
                'sku': self.sku,
                'category': self.category,
            },
            'warehouse': {
                'id': self.warehouse_id,
                'name': self.warehouse_name,
                'code': self.warehouse_code,
            },
            'currentStock': self.current_stock,
            'reorderPoint': self.reorder_point,
            'shortage': self.shortage,
            'recommendedQuantity': self.recommended_quantity,
            'snoozeUntil': to_iso(self.snooze_until),
            'notes': self.notes,
            'acknowledgedAt': to_iso(self.acknowledged_at),
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at),
        }
