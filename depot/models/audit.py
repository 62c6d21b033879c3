"""
AuditEntry — append-only log of stock-affecting events.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from depot.models.base import from_iso, to_iso


@dataclass(frozen=True)
class AuditEntry:
    """
    Immutable record of one quantity change.

    quantity_change is the delta actually applied (after clamping), so
    quantity_before + quantity_change == quantity_after always holds.
    """

    id: int
    event_type: str
    product_id: int
    warehouse_id: int
    quantity_change: int
    quantity_before: int
    quantity_after: int
    timestamp: datetime
    reference_number: str = ''
    reason: str = ''
    notes: str = ''

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> 'AuditEntry':
        return cls(
            id=data['id'],
            event_type=data['eventType'],
            reference_number=data.get('referenceNumber') or '',
            product_id=data['productId'],
            warehouse_id=data['warehouseId'],
            quantity_change=data['quantityChange'],
            quantity_before=data['quantityBefore'],
            quantity_after=data['quantityAfter'],
            timestamp=from_iso(data['timestamp']),
            reason=data.get('reason') or '',
            notes=data.get('notes') or '',
        )

    def to_record(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'eventType': str(self.event_type),
            'referenceNumber': self.reference_number,
            'productId': self.product_id,
            'warehouseId': self.warehouse_id,
            'quantityChange': self.quantity_change,
            'quantityBefore': self.quantity_before,
            'quantityAfter': self.quantity_after,
            'timestamp': to_iso(self.timestamp),
            'reason': self.reason,
            'notes': self.notes,
        }

    def __str__(self) -> str:
        sign = '+' if self.quantity_change > 0 else ''
        return f"{sign}{self.quantity_change} | {self.event_type} {self.reference_number}".rstrip()
