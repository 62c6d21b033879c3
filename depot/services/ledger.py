"""
Stock Ledger — the single owner of stock quantities.

Every quantity change goes through StockLedger.adjust(), inside a
LedgerSession opened by StockLedger.atomic():

    with ledger.atomic() as session:
        ledger.adjust(7, 1, -50, 'transfer-out', event_type=TRANSFER_OUT)
        ledger.adjust(7, 2, +50, 'transfer-in', event_type=TRANSFER_IN)
        session.append(Collection.TRANSFERS, transfer.to_record())

Concurrency:
    - One re-entrant lock per ledger guards every read-modify-write
    - The outermost atomic() also holds store.locked(), which excludes
      other ledgers, threads and processes sharing the same store
    - Nested atomic() calls join the outer session
    - The session commits every touched collection with one save_many();
      an exception inside the block discards all staged changes
"""

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime

from django.utils import timezone

from depot.exceptions import ValidationError
from depot.models.enums import AuditEventType, Collection
from depot.models.stock import StockAdjustment, StockRecord
from depot.protocols.store import Record, RecordStore
from depot.services.audit import AuditTrail
from depot.services.validation import is_int

logger = logging.getLogger('depot')


class LedgerSession:
    """
    Unit of work for one critical section.

    Collections are loaded lazily on first access and kept in memory;
    mutated collections are written back together on commit().
    """

    def __init__(self, store: RecordStore):
        self.store = store
        self._collections: dict[str, list[Record]] = {}
        self._dirty: set[str] = set()

    def records(self, collection: str) -> list[Record]:
        """Live (staged) records of a collection."""
        if collection not in self._collections:
            self._collections[collection] = self.store.load_all(collection)
        return self._collections[collection]

    def mark_dirty(self, collection: str) -> None:
        self._dirty.add(collection)

    def append(self, collection: str, record: Record) -> None:
        self.records(collection).append(record)
        self.mark_dirty(collection)

    def replace(self, collection: str, record: Record) -> None:
        """Replace the record with the same id."""
        records = self.records(collection)
        for index, existing in enumerate(records):
            if existing.get('id') == record['id']:
                records[index] = record
                self.mark_dirty(collection)
                return
        raise KeyError(f"{collection} has no record with id {record['id']}")

    def next_id(self, collection: str) -> int:
        return self.store.next_id(self.records(collection))

    def commit(self) -> None:
        if not self._dirty:
            return
        self.store.save_many({name: self._collections[name] for name in sorted(self._dirty)})
        self._dirty.clear()


class StockLedger:
    """Stock reads and clamped adjustments with an audit entry per change."""

    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = timezone.now):
        self.store = store
        self.clock = clock
        self.audit = AuditTrail(self)
        self._lock = threading.RLock()
        self._local = threading.local()

    # ══════════════════════════════════════════════════════════════
    # UNIT OF WORK
    # ══════════════════════════════════════════════════════════════

    @property
    def session(self) -> LedgerSession | None:
        """Session active in the current thread, if any."""
        return getattr(self._local, 'session', None)

    @contextmanager
    def atomic(self) -> Iterator[LedgerSession]:
        """
        Serialize a read-modify-write sequence and commit it as one unit.

        Re-entrant: an inner atomic() yields the outer session and the
        commit happens when the outermost block exits cleanly.
        """
        with self._lock:
            current = self.session
            if current is not None:
                yield current
                return

            with self.store.locked():
                session = LedgerSession(self.store)
                self._local.session = session
                try:
                    yield session
                    session.commit()
                finally:
                    self._local.session = None

    def read(self, collection: str) -> list[Record]:
        """Records as seen by the caller (staged state inside a session)."""
        session = self.session
        if session is not None:
            return list(session.records(collection))
        return self.store.load_all(collection)

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    def get_stock(self, product_id: int, warehouse_id: int) -> StockRecord | None:
        """Stock record for (product, warehouse), or None if it was never stocked."""
        for data in self.read(Collection.STOCK):
            if data['productId'] == product_id and data['warehouseId'] == warehouse_id:
                return StockRecord.from_record(data)
        return None

    def list_stock(self, product_id: int | None = None,
                   warehouse_id: int | None = None) -> list[StockRecord]:
        records = [StockRecord.from_record(d) for d in self.read(Collection.STOCK)]
        if product_id is not None:
            records = [r for r in records if r.product_id == product_id]
        if warehouse_id is not None:
            records = [r for r in records if r.warehouse_id == warehouse_id]
        return records

    def quantity(self, product_id: int, warehouse_id: int) -> int:
        record = self.get_stock(product_id, warehouse_id)
        return record.quantity if record else 0

    # ══════════════════════════════════════════════════════════════
    # ADJUSTMENT
    # ══════════════════════════════════════════════════════════════

    def adjust(self, product_id: int, warehouse_id: int, delta: int, reason: str, *,
               event_type: str = AuditEventType.ADJUSTMENT,
               reference: str = '', notes: str = '') -> StockAdjustment:
        """
        Apply a signed delta, clamping the result at zero.

        Creates the record on the first positive delta. An adjustment that
        moves nothing (a zero delta, or a decrease on an empty or absent
        record) writes neither the record nor an audit entry; for an
        absent record the result carries a transient zero record.

        Args:
            product_id: Product
            warehouse_id: Warehouse
            delta: Signed quantity change
            reason: Why the stock changed (required)
            event_type: AuditEventType recorded for this change
            reference: Business reference (transfer number, PO number)
            notes: Free text for the audit entry

        Returns:
            StockAdjustment with requested and applied deltas

        Raises:
            ValidationError: INVALID_DELTA, REASON_REQUIRED
            StorageError: Persistence failed (nothing changed)
        """
        if not is_int(delta):
            raise ValidationError('INVALID_DELTA', delta=delta)
        if not reason:
            raise ValidationError('REASON_REQUIRED')

        with self.atomic() as session:
            stock = session.records(Collection.STOCK)
            index = next(
                (i for i, d in enumerate(stock)
                 if d['productId'] == product_id and d['warehouseId'] == warehouse_id),
                None,
            )

            if index is None:
                record = StockRecord(product_id=product_id, warehouse_id=warehouse_id)
            else:
                record = StockRecord.from_record(stock[index])
            before = record.quantity
            applied = max(0, before + delta) - before

            if applied == 0:
                # Nothing moved: lastUpdated and the audit log stay as they are
                if delta:
                    logger.warning(
                        "stock.adjust.clamped",
                        extra={
                            "product_id": product_id,
                            "warehouse_id": warehouse_id,
                            "requested": delta,
                            "applied": 0,
                        },
                    )
                return StockAdjustment(record=record, requested=delta, applied=0, quantity_before=before)

            now = self.clock()
            if index is None:
                record.id = session.next_id(Collection.STOCK)
                stock.append(record.to_record())
                index = len(stock) - 1

            record.quantity = before + applied
            record.last_updated = now
            stock[index] = record.to_record()
            session.mark_dirty(Collection.STOCK)

            self.audit.record(
                session,
                event_type=event_type,
                product_id=product_id,
                warehouse_id=warehouse_id,
                quantity_change=applied,
                quantity_before=before,
                quantity_after=record.quantity,
                timestamp=now,
                reference_number=reference,
                reason=reason,
                notes=notes,
            )

        logger.info(
            "stock.adjust",
            extra={
                "product_id": product_id,
                "warehouse_id": warehouse_id,
                "requested": delta,
                "applied": applied,
                "quantity": record.quantity,
                "reason": reason,
            },
        )
        if applied != delta:
            logger.warning(
                "stock.adjust.clamped",
                extra={
                    "product_id": product_id,
                    "warehouse_id": warehouse_id,
                    "requested": delta,
                    "applied": applied,
                },
            )
        return StockAdjustment(record=record, requested=delta, applied=applied, quantity_before=before)
