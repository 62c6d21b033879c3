"""
Transfer engine — move stock between warehouses, all or nothing.

A transfer validates its input, checks the source inside the ledger's
critical section, applies both sides through the ledger and appends the
Transfer record. Everything after validation commits as one unit.
"""

import logging
from datetime import datetime
from datetime import timezone as dt_timezone

from depot.conf import depot_settings
from depot.exceptions import InsufficientStockError, NotFound, ValidationError
from depot.models.base import Page
from depot.models.enums import AuditEventType, Collection, TransferStatus
from depot.models.transfer import Transfer
from depot.protocols.catalog import Catalog
from depot.services.ledger import StockLedger
from depot.services.validation import date_range, is_int, require_positive_int, require_product, require_warehouse

logger = logging.getLogger('depot')


def generate_reference_number(prefix: str, existing: list[str], when: datetime) -> str:
    """
    Next reference number for the day of `when` (UTC).

    Format PREFIX-YYYYMMDD-NNNN, where NNNN continues the highest sequence
    already used that day:

        >>> generate_reference_number('TRF', ['TRF-20260122-0001'], when)
        'TRF-20260122-0002'
    """
    if when.tzinfo is not None:
        when = when.astimezone(dt_timezone.utc)
    day_prefix = f"{prefix}-{when:%Y%m%d}-"
    sequences = [
        int(ref[len(day_prefix):])
        for ref in existing
        if ref.startswith(day_prefix) and ref[len(day_prefix):].isdigit()
    ]
    return f"{day_prefix}{max(sequences, default=0) + 1:04d}"


def clamp_page(limit, offset) -> tuple[int, int]:
    """Normalize pagination: limit in [1, MAX_PAGE_SIZE], offset >= 0."""
    if limit is None:
        limit = depot_settings.DEFAULT_PAGE_SIZE
    if not is_int(limit) or not is_int(offset):
        raise ValidationError('INVALID_PAGINATION', limit=limit, offset=offset)
    return max(1, min(limit, depot_settings.MAX_PAGE_SIZE)), max(0, offset)


class TransferEngine:
    """Execute and query inter-warehouse transfers."""

    def __init__(self, ledger: StockLedger, catalog: Catalog):
        self.ledger = ledger
        self.catalog = catalog

    # ══════════════════════════════════════════════════════════════
    # EXECUTION
    # ══════════════════════════════════════════════════════════════

    def validate(self, from_warehouse_id: int, to_warehouse_id: int,
                 product_id: int, quantity: int) -> None:
        """
        Check transfer input without touching stock.

        Raises:
            ValidationError: INVALID_QUANTITY, SAME_WAREHOUSE,
                PRODUCT_NOT_FOUND, SOURCE_WAREHOUSE_NOT_FOUND,
                DEST_WAREHOUSE_NOT_FOUND
        """
        require_positive_int(quantity)
        if from_warehouse_id == to_warehouse_id:
            raise ValidationError('SAME_WAREHOUSE', warehouse_id=from_warehouse_id)
        require_product(self.catalog, product_id)
        require_warehouse(self.catalog, from_warehouse_id,
                          code='SOURCE_WAREHOUSE_NOT_FOUND', label='Source warehouse')
        require_warehouse(self.catalog, to_warehouse_id,
                          code='DEST_WAREHOUSE_NOT_FOUND', label='Destination warehouse')

    def execute(self, from_warehouse_id: int, to_warehouse_id: int,
                product_id: int, quantity: int, notes: str = '') -> Transfer:
        """
        Move `quantity` units of a product from one warehouse to another.

        Returns:
            The completed Transfer

        Raises:
            ValidationError: Invalid input (see validate())
            InsufficientStockError: Source holds less than `quantity`
            StorageError: Persistence failed (nothing changed)
        """
        self.validate(from_warehouse_id, to_warehouse_id, product_id, quantity)

        with self.ledger.atomic() as session:
            available = self.ledger.quantity(product_id, from_warehouse_id)
            if available < quantity:
                logger.warning(
                    "transfer.rejected",
                    extra={
                        "product_id": product_id,
                        "from_warehouse_id": from_warehouse_id,
                        "to_warehouse_id": to_warehouse_id,
                        "available": available,
                        "requested": quantity,
                    },
                )
                raise InsufficientStockError(
                    available=available,
                    requested=quantity,
                    product_id=product_id,
                    warehouse_id=from_warehouse_id,
                )

            now = self.ledger.clock()
            transfers = session.records(Collection.TRANSFERS)
            reference = generate_reference_number(
                depot_settings.TRANSFER_REFERENCE_PREFIX,
                [t.get('referenceNumber') or '' for t in transfers],
                now,
            )

            self.ledger.adjust(
                product_id, from_warehouse_id, -quantity, 'transfer-out',
                event_type=AuditEventType.TRANSFER_OUT, reference=reference, notes=notes,
            )
            self.ledger.adjust(
                product_id, to_warehouse_id, quantity, 'transfer-in',
                event_type=AuditEventType.TRANSFER_IN, reference=reference, notes=notes,
            )

            transfer = Transfer(
                id=session.next_id(Collection.TRANSFERS),
                reference_number=reference,
                product_id=product_id,
                from_warehouse_id=from_warehouse_id,
                to_warehouse_id=to_warehouse_id,
                quantity=quantity,
                status=TransferStatus.COMPLETED,
                created_at=now,
                completed_at=now,
                notes=notes,
            )
            session.append(Collection.TRANSFERS, transfer.to_record())

        logger.info(
            "transfer.completed",
            extra={
                "reference": transfer.reference_number,
                "product_id": product_id,
                "from_warehouse_id": from_warehouse_id,
                "to_warehouse_id": to_warehouse_id,
                "qty": quantity,
            },
        )
        return transfer

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    def _all(self) -> list[Transfer]:
        transfers = [Transfer.from_record(d) for d in self.ledger.read(Collection.TRANSFERS)]
        transfers.sort(key=lambda t: (t.created_at, t.id), reverse=True)
        return transfers

    def query(self, product_id=None, warehouse_id=None, status=None,
              start_date=None, end_date=None, limit=None, offset=0) -> Page[Transfer]:
        """
        Filtered transfers, newest first, one page at a time.

        Args:
            product_id: Only this product
            warehouse_id: Transfers where this warehouse is source or destination
            status: Only this TransferStatus
            start_date / end_date: Inclusive createdAt bounds
            limit: Page size (clamped to [1, MAX_PAGE_SIZE])
            offset: Items to skip (negative means 0)
        """
        limit, offset = clamp_page(limit, offset)
        start, end = date_range(start_date, end_date)

        transfers = self._all()
        if product_id is not None:
            transfers = [t for t in transfers if t.product_id == product_id]
        if warehouse_id is not None:
            transfers = [t for t in transfers if t.involves(warehouse_id)]
        if status:
            transfers = [t for t in transfers if t.status == status]
        if start is not None:
            transfers = [t for t in transfers if t.created_at >= start]
        if end is not None:
            transfers = [t for t in transfers if t.created_at <= end]

        return Page(
            items=transfers[offset:offset + limit],
            total=len(transfers),
            limit=limit,
            offset=offset,
        )

    def get(self, transfer_id: int) -> Transfer:
        for data in self.ledger.read(Collection.TRANSFERS):
            if data.get('id') == transfer_id:
                return Transfer.from_record(data)
        raise NotFound('TRANSFER_NOT_FOUND', transfer_id=transfer_id)

    def recent_activity(self, product_id: int | None = None, limit: int = 5) -> list[dict]:
        """Newest transfers as activity feed events."""
        transfers = self._all()
        if product_id is not None:
            transfers = [t for t in transfers if t.product_id == product_id]

        names: dict[int, str] = {}

        def label(warehouse_id: int) -> str:
            if warehouse_id not in names:
                warehouse = self.catalog.get_warehouse(warehouse_id)
                names[warehouse_id] = warehouse.name if warehouse else f"#{warehouse_id}"
            return names[warehouse_id]

        return [
            {
                'id': t.id,
                'type': 'completed' if t.is_completed else 'pending',
                'referenceNumber': t.reference_number,
                'description': (
                    f"Transfer of {t.quantity} items from "
                    f"{label(t.from_warehouse_id)} to {label(t.to_warehouse_id)}"
                ),
                'timestamp': t.created_at.isoformat(),
            }
            for t in transfers[:max(0, limit)]
        ]
