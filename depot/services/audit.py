"""
Audit trail — append-only log of stock-affecting events.

Entries are written by the Stock Ledger inside the same unit of work as
the quantity change they describe, so the log and the stock can never
disagree after a commit.
"""

from depot.models.audit import AuditEntry
from depot.models.enums import Collection
from depot.services.validation import date_range


class AuditTrail:
    """Write and query audit entries."""

    def __init__(self, ledger):
        self.ledger = ledger

    def record(self, session, *, event_type, product_id, warehouse_id,
               quantity_change, quantity_before, quantity_after, timestamp,
               reference_number='', reason='', notes='') -> AuditEntry:
        """Stage one entry in the session (persisted when the session commits)."""
        entry = AuditEntry(
            id=session.next_id(Collection.AUDIT_LOG),
            event_type=event_type,
            reference_number=reference_number,
            product_id=product_id,
            warehouse_id=warehouse_id,
            quantity_change=quantity_change,
            quantity_before=quantity_before,
            quantity_after=quantity_after,
            timestamp=timestamp,
            reason=reason,
            notes=notes,
        )
        session.append(Collection.AUDIT_LOG, entry.to_record())
        return entry

    def query(self, product_id=None, warehouse_id=None, event_type=None,
              start_date=None, end_date=None) -> list[AuditEntry]:
        """
        Filtered audit entries, newest first.

        Inside an open ledger.atomic() block, staged entries are included.

        Args:
            product_id: Only this product
            warehouse_id: Only this warehouse
            event_type: Only this AuditEventType
            start_date / end_date: Inclusive bounds (datetime, date or ISO string)
        """
        start, end = date_range(start_date, end_date)
        entries = [AuditEntry.from_record(d) for d in self.ledger.read(Collection.AUDIT_LOG)]

        if product_id is not None:
            entries = [e for e in entries if e.product_id == product_id]
        if warehouse_id is not None:
            entries = [e for e in entries if e.warehouse_id == warehouse_id]
        if event_type:
            entries = [e for e in entries if e.event_type == event_type]
        if start is not None:
            entries = [e for e in entries if e.timestamp >= start]
        if end is not None:
            entries = [e for e in entries if e.timestamp <= end]

        entries.sort(key=lambda e: (e.timestamp, e.id), reverse=True)
        return entries
