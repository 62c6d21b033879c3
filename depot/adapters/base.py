"""
Common base for record store adapters.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Mapping

from depot.protocols.store import Record, next_id


class BaseRecordStore:
    """
    Shared behaviour of the bundled stores.

    Subclasses implement load_all() and save_many(); save_all() is a
    single-collection save_many(). locked() defaults to a re-entrant lock
    held by this store instance, which serializes every engine sharing it.
    """

    def __init__(self):
        self._lock = threading.RLock()

    def load_all(self, collection: str) -> list[Record]:
        raise NotImplementedError

    def save_many(self, changes: Mapping[str, list[Record]]) -> None:
        raise NotImplementedError

    def save_all(self, collection: str, records: list[Record]) -> None:
        self.save_many({collection: records})

    @contextmanager
    def locked(self) -> Iterator[None]:
        with self._lock:
            yield

    def next_id(self, records: Iterable[Mapping[str, Any]]) -> int:
        return next_id(records)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"
