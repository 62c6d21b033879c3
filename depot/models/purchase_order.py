"""
PurchaseOrder model — pending replenishment that credits stock once.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from depot.models.base import from_iso, to_iso
from depot.models.enums import PurchaseOrderStatus


@dataclass(frozen=True)
class PurchaseOrder:
    """
    Replenishment order for one product at one warehouse.

    LIFECYCLE:

        ┌─────────┐   receive()   ┌──────────┐
        │ PENDING │ ────────────► │ RECEIVED │
        └─────────┘               └──────────┘

    RECEIVED is terminal. A second receive() is rejected, so stock is
    never credited twice for the same order.
    """

    id: int
    product_id: int
    warehouse_id: int
    quantity: int
    status: str
    created_at: datetime
    received_at: datetime | None = None

    @property
    def is_received(self) -> bool:
        return self.status == PurchaseOrderStatus.RECEIVED

    def mark_received(self, when: datetime) -> 'PurchaseOrder':
        return replace(self, status=PurchaseOrderStatus.RECEIVED, received_at=when)

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> 'PurchaseOrder':
        return cls(
            id=data['id'],
            product_id=data['productId'],
            warehouse_id=data['warehouseId'],
            quantity=data['quantity'],
            status=data['status'],
            created_at=from_iso(data['createdAt']),
            received_at=from_iso(data.get('receivedAt')),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'productId': self.product_id,
            'warehouseId': self.warehouse_id,
            'quantity': self.quantity,
            'status': str(self.status),
            'createdAt': to_iso(self.created_at),
            'receivedAt': to_iso(self.received_at),
        }

    def __str__(self) -> str:
        return f"PO #{self.id}: {self.quantity}x product:{self.product_id} -> {self.warehouse_id} ({self.status})"


@dataclass(frozen=True)
class ReorderResult:
    """Result of the reorder convenience operation (never raised as an error)."""

    success: bool
    message: str
    code: str | None = None
    order: PurchaseOrder | None = None

    def as_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {'success': self.success, 'message': self.message}
        if self.code:
            result['code'] = self.code
        if self.order is not None:
            result['orderId'] = self.order.id
        return result
