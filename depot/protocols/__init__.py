"""
Depot Protocols.

Defines interfaces for external system integration.
"""

from depot.protocols.catalog import (
    Catalog,
    ProductInfo,
    WarehouseInfo,
)
from depot.protocols.store import (
    Record,
    RecordStore,
    next_id,
)

__all__ = [
    "Catalog",
    "ProductInfo",
    "WarehouseInfo",
    "Record",
    "RecordStore",
    "next_id",
]
