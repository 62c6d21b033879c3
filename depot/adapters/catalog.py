"""
Store Catalog — product/warehouse lookups from the record store.

Reads the "products" and "warehouses" collections of the same record
store the engine writes to. Both collections are maintained outside the
engine (product and warehouse management are not part of it).

Settings:
    DEPOT = {
        "CATALOG": "depot.adapters.catalog.StoreCatalog",
    }

Any class implementing depot.protocols.catalog.Catalog and accepting a
`store` keyword argument can be configured instead.
"""

from __future__ import annotations

from depot.models.enums import Collection
from depot.protocols.catalog import ProductInfo, WarehouseInfo
from depot.protocols.store import Record, RecordStore


def product_from_record(data: Record) -> ProductInfo:
    return ProductInfo(
        id=data['id'],
        sku=data.get('sku') or '',
        name=data.get('name') or '',
        category=data.get('category') or '',
        unit_cost=data.get('unitCost') or 0.0,
        reorder_point=data.get('reorderPoint') or 0,
    )


def warehouse_from_record(data: Record) -> WarehouseInfo:
    return WarehouseInfo(
        id=data['id'],
        name=data.get('name') or '',
        code=data.get('code') or '',
        location=data.get('location') or '',
    )


class StoreCatalog:
    """
    Catalog reading the products and warehouses collections.

    Lookups always hit the store, so catalog edits made by other
    processes are picked up without a restart.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def get_product(self, product_id: int) -> ProductInfo | None:
        for data in self.store.load_all(Collection.PRODUCTS):
            if data.get('id') == product_id:
                return product_from_record(data)
        return None

    def get_warehouse(self, warehouse_id: int) -> WarehouseInfo | None:
        for data in self.store.load_all(Collection.WAREHOUSES):
            if data.get('id') == warehouse_id:
                return warehouse_from_record(data)
        return None

    def list_products(self) -> list[ProductInfo]:
        return [product_from_record(d) for d in self.store.load_all(Collection.PRODUCTS)]
