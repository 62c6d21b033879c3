"""
Depot Adapters.

Implementations of the record store and catalog protocols.
"""

from depot.adapters.catalog import StoreCatalog
from depot.adapters.database import DatabaseRecordStore
from depot.adapters.json_file import JsonFileRecordStore
from depot.adapters.memory import MemoryRecordStore

__all__ = [
    "StoreCatalog",
    "DatabaseRecordStore",
    "JsonFileRecordStore",
    "MemoryRecordStore",
]
