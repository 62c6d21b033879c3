"""
Catalog Protocol — product and warehouse lookups.

The inventory engine does not own products or warehouses. It only needs
to know whether an identifier resolves, and each product's reorder point.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ProductInfo:
    """Basic product information."""

    id: int
    sku: str
    name: str
    reorder_point: int = 0
    category: str = ''
    unit_cost: float = 0.0


@dataclass(frozen=True)
class WarehouseInfo:
    """Basic warehouse information."""

    id: int
    name: str
    code: str = ''
    location: str = ''


@runtime_checkable
class Catalog(Protocol):
    """
    Protocol for product/warehouse existence checks.

    Implementations should return None for unknown identifiers rather
    than raising; the engine turns that into a ValidationError.
    """

    def get_product(self, product_id: int) -> ProductInfo | None:
        """
        Look up a product.

        Args:
            product_id: Product identifier

        Returns:
            ProductInfo or None if not found
        """
        ...

    def get_warehouse(self, warehouse_id: int) -> WarehouseInfo | None:
        """
        Look up a warehouse.

        Args:
            warehouse_id: Warehouse identifier

        Returns:
            WarehouseInfo or None if not found
        """
        ...

    def list_products(self) -> list[ProductInfo]:
        """Return every known product."""
        ...
