"""
In-memory record store — for development and testing.

Usage in settings.py:
    DEPOT = {
        "RECORD_STORE": "depot.adapters.memory.MemoryRecordStore",
    }

Records go through a JSON round trip on every save and load, so the
store rejects anything the file and database stores could not persist
and callers never share mutable state with it.
"""

from __future__ import annotations

import json
from typing import Mapping

from django.core.serializers.json import DjangoJSONEncoder

from depot.adapters.base import BaseRecordStore
from depot.exceptions import StorageError
from depot.protocols.store import Record


def _roundtrip(records) -> list[Record]:
    return json.loads(json.dumps(list(records), cls=DjangoJSONEncoder))


class MemoryRecordStore(BaseRecordStore):
    """Process-local store. Contents are lost when the process exits."""

    def __init__(self, initial: Mapping[str, list[Record]] | None = None):
        super().__init__()
        self._collections: dict[str, list[Record]] = {
            name: _roundtrip(records) for name, records in (initial or {}).items()
        }

    def load_all(self, collection: str) -> list[Record]:
        with self._lock:
            return _roundtrip(self._collections.get(collection, []))

    def save_many(self, changes: Mapping[str, list[Record]]) -> None:
        try:
            staged = {name: _roundtrip(records) for name, records in changes.items()}
        except (TypeError, ValueError) as e:
            raise StorageError("Failed to serialize collections", collections=sorted(changes)) from e
        with self._lock:
            self._collections.update(staged)

    def __repr__(self) -> str:
        return f"<MemoryRecordStore {sorted(self._collections)}>"
