"""
StockRecord — authoritative quantity of one product at one warehouse.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from depot.models.base import from_iso, to_iso


@dataclass
class StockRecord:
    """
    Quantity of a product at a warehouse.

    Identity is (product_id, warehouse_id). Quantity is never negative.
    Records are created by the first positive adjustment and never deleted;
    only the Stock Ledger changes them.
    """

    product_id: int
    warehouse_id: int
    quantity: int = 0
    last_updated: datetime | None = None
    id: int | None = None

    @property
    def key(self) -> tuple[int, int]:
        return (self.product_id, self.warehouse_id)

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> 'StockRecord':
        return cls(
            id=data.get('id'),
            product_id=data['productId'],
            warehouse_id=data['warehouseId'],
            quantity=data.get('quantity', 0),
            last_updated=from_iso(data.get('lastUpdated')),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'productId': self.product_id,
            'warehouseId': self.warehouse_id,
            'quantity': self.quantity,
            'lastUpdated': to_iso(self.last_updated),
        }

    def __str__(self) -> str:
        return f"product:{self.product_id} @ warehouse:{self.warehouse_id} = {self.quantity}"


@dataclass(frozen=True)
class StockAdjustment:
    """
    Outcome of a ledger adjustment.

    `requested` is the delta the caller asked for; `applied` is what
    actually happened after clamping at zero. Callers must read `applied`
    rather than assume the requested delta took effect.
    """

    record: StockRecord
    requested: int
    applied: int
    quantity_before: int

    @property
    def quantity_after(self) -> int:
        return self.record.quantity

    @property
    def clamped(self) -> bool:
        return self.applied != self.requested

    def as_dict(self) -> dict[str, Any]:
        return {
            **self.record.to_record(),
            'requestedDelta': self.requested,
            'appliedDelta': self.applied,
            'quantityBefore': self.quantity_before,
            'clamped': self.clamped,
        }
