"""
Transfer model — audited movement of stock between two warehouses.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from depot.models.base import from_iso, to_iso
from depot.models.enums import TransferStatus


@dataclass(frozen=True)
class Transfer:
    """
    Immutable record of a completed transfer.

    Rules:
    - from_warehouse_id != to_warehouse_id
    - quantity > 0
    - created by the Transfer Engine once both stock sides are applied
    """

    id: int
    reference_number: str
    product_id: int
    from_warehouse_id: int
    to_warehouse_id: int
    quantity: int
    status: str
    created_at: datetime
    completed_at: datetime | None = None
    notes: str = ''

    @property
    def is_completed(self) -> bool:
        return self.status == TransferStatus.COMPLETED

    def involves(self, warehouse_id: int) -> bool:
        return warehouse_id in (self.from_warehouse_id, self.to_warehouse_id)

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> 'Transfer':
        return cls(
            id=data['id'],
            reference_number=data['referenceNumber'],
            product_id=data['productId'],
            from_warehouse_id=data['fromWarehouseId'],
            to_warehouse_id=data['toWarehouseId'],
            quantity=data['quantity'],
            status=data['status'],
            created_at=from_iso(data['createdAt']),
            completed_at=from_iso(data.get('completedAt')),
            notes=data.get('notes') or '',
        )

    def to_record(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'referenceNumber': self.reference_number,
            'productId': self.product_id,
            'fromWarehouseId': self.from_warehouse_id,
            'toWarehouseId': self.to_warehouse_id,
            'quantity': self.quantity,
            'status': str(self.status),
            'createdAt': to_iso(self.created_at),
            'completedAt': to_iso(self.completed_at),
            'notes': self.notes,
        }

    def __str__(self) -> str:
        return (
            f"{self.reference_number}: {self.quantity}x product:{self.product_id} "
            f"{self.from_warehouse_id} -> {self.to_warehouse_id}"
        )
