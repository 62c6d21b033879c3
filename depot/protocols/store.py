"""
Record Store Protocol — keyed-collection persistence.

Depot defines this protocol; adapters in depot.adapters implement it
(JSON files, in-memory, Django database).

A collection is an ordered list of JSON-compatible dicts, each carrying
an integer "id". Collections are always read and written whole.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

Record = dict[str, Any]


def next_id(records: Iterable[Mapping[str, Any]]) -> int:
    """Return an id strictly greater than every id in `records` (1 when empty)."""
    return max((r.get('id') or 0 for r in records), default=0) + 1


@runtime_checkable
class RecordStore(Protocol):
    """
    Protocol for record persistence.

    Implementations must guarantee:
    - save_all/save_many are all-or-nothing for any reader
    - failures surface as depot.exceptions.StorageError
    - a missing collection loads as an empty list
    - locked() excludes every other holder sharing the same storage,
      including engines in other processes
    """

    def load_all(self, collection: str) -> list[Record]:
        """
        Load every record of a collection.

        Args:
            collection: Collection name (see depot.models.enums.Collection)

        Returns:
            Records in stored order. The caller owns the returned list.
        """
        ...

    def save_all(self, collection: str, records: list[Record]) -> None:
        """
        Replace a whole collection atomically.

        Raises:
            StorageError: On I/O or serialization failure (nothing persisted)
        """
        ...

    def save_many(self, changes: Mapping[str, list[Record]]) -> None:
        """
        Replace several collections as one commit.

        Either every collection in `changes` is replaced or none is.

        Raises:
            StorageError: On I/O or serialization failure (nothing persisted)
        """
        ...

    def locked(self) -> AbstractContextManager[None]:
        """
        Exclusive section around a read-modify-write.

        Re-entrant within a thread.

        Raises:
            StorageError: The lock could not be taken
        """
        ...

    def next_id(self, records: Iterable[Mapping[str, Any]]) -> int:
        """Return an id strictly greater than every existing id."""
        ...
