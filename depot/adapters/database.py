"""
Database record store — collections as rows of StoredCollection.

Usage in settings.py:
    INSTALLED_APPS = [..., "depot"]
    DEPOT = {
        "RECORD_STORE": "depot.adapters.database.DatabaseRecordStore",
    }

Concurrency:
    - Each collection is one JSON document, replaced whole
    - locked() opens transaction.atomic() and holds select_for_update()
      on a dedicated lock row until the block exits, so every engine
      sharing the database runs its read-modify-write one at a time
    - save_many() runs under a single transaction.atomic()
    - Database errors surface as StorageError
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Mapping

from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction

from depot.adapters.base import BaseRecordStore
from depot.exceptions import StorageError
from depot.protocols.store import Record

logger = logging.getLogger('depot')

LOCK_ROW = 'depot-lock'


class DatabaseRecordStore(BaseRecordStore):
    """Record store on top of the Django ORM."""

    def __init__(self, using: str | None = None):
        super().__init__()
        self.using = using or DEFAULT_DB_ALIAS

    def _queryset(self):
        from depot.models.collection import StoredCollection
        return StoredCollection.objects.using(self.using)

    @contextmanager
    def locked(self) -> Iterator[None]:
        """
        Row lock held for the whole block.

        Nested blocks join the outer transaction; the lock is released
        when the outermost transaction commits or rolls back.
        """
        with transaction.atomic(using=self.using):
            try:
                self._queryset().get_or_create(name=LOCK_ROW)
                self._queryset().select_for_update().get(name=LOCK_ROW)
            except DatabaseError as e:
                logger.error("store.lock_failed", extra={"error": str(e)})
                raise StorageError("Failed to lock record store") from e
            yield

    def load_all(self, collection: str) -> list[Record]:
        try:
            records = (
                self._queryset()
                .filter(name=collection)
                .values_list('records', flat=True)
                .first()
            )
        except DatabaseError as e:
            logger.error("store.read_failed", extra={"collection": collection, "error": str(e)})
            raise StorageError(
                f"Failed to read collection '{collection}'", collection=collection
            ) from e
        return list(records or [])

    def save_many(self, changes: Mapping[str, list[Record]]) -> None:
        if not changes:
            return
        try:
            with transaction.atomic(using=self.using):
                for name, records in changes.items():
                    self._queryset().update_or_create(
                        name=name,
                        defaults={'records': list(records)},
                    )
        except (DatabaseError, TypeError, ValueError) as e:
            logger.error(
                "store.write_failed",
                extra={"collections": sorted(changes), "error": str(e)},
            )
            raise StorageError(
                "Failed to commit collections", collections=sorted(changes)
            ) from e

    def __repr__(self) -> str:
        return f"<DatabaseRecordStore using={self.using!r}>"
