"""
Stock alerts — derived low/over-stock conditions plus user tracking.

An alert is a pure function of the stock classification and the optional
tracking record for that (product, warehouse):

    condition = classify(stock.quantity, product.reorder_point)
    status    = tracking.effective_status(now, stock.last_updated) or ACTIVE

Usage:
    tracker = AlertTracker(ledger, catalog)
    for alert in tracker.query(severity='critical'):
        ...
    tracker.update_status(7, 1, 'snoozed', snooze_until=tomorrow)

Transitions (same status is rejected, except re-snoozing):

    active       -> acknowledged | resolved | snoozed
    acknowledged -> active | resolved | snoozed
    snoozed      -> active | acknowledged | resolved | snoozed
    resolved     -> active | acknowledged | snoozed
"""

import logging

from depot.conf import depot_settings
from depot.exceptions import InvalidStateError, NotFound, ValidationError
from depot.models.alert import AlertTrackingRecord, AlertView
from depot.models.enums import AlertSeverity, AlertStatus, Collection, StockStatus
from depot.models.purchase_order import PurchaseOrder
from depot.protocols.catalog import Catalog
from depot.services.ledger import StockLedger
from depot.services.validation import parse_moment, require_product, require_warehouse
from depot.stock_status import classify, recommended_quantity, severity_for

logger = logging.getLogger('depot')

ALLOWED_TRANSITIONS = {
    AlertStatus.ACTIVE: {AlertStatus.ACKNOWLEDGED, AlertStatus.RESOLVED, AlertStatus.SNOOZED},
    AlertStatus.ACKNOWLEDGED: {AlertStatus.ACTIVE, AlertStatus.RESOLVED, AlertStatus.SNOOZED},
    AlertStatus.SNOOZED: {
        AlertStatus.ACTIVE, AlertStatus.ACKNOWLEDGED, AlertStatus.RESOLVED, AlertStatus.SNOOZED,
    },
    AlertStatus.RESOLVED: {AlertStatus.ACTIVE, AlertStatus.ACKNOWLEDGED, AlertStatus.SNOOZED},
}

_SEVERITY_RANK = {
    AlertSeverity.CRITICAL: 0,
    AlertSeverity.WARNING: 1,
    AlertSeverity.INFO: 2,
}


class AlertTracker:
    """Query derived alerts and drive the tracking lifecycle."""

    def __init__(self, ledger: StockLedger, catalog: Catalog):
        self.ledger = ledger
        self.catalog = catalog

    # ══════════════════════════════════════════════════════════════
    # TRACKING RECORDS
    # ══════════════════════════════════════════════════════════════

    def _tracking(self) -> dict[tuple[int, int], AlertTrackingRecord]:
        records = (AlertTrackingRecord.from_record(d) for d in self.ledger.read(Collection.ALERTS))
        return {r.key: r for r in records}

    def get(self, alert_id: int) -> AlertTrackingRecord:
        for data in self.ledger.read(Collection.ALERTS):
            if data.get('id') == alert_id:
                return AlertTrackingRecord.from_record(data)
        raise NotFound('ALERT_NOT_FOUND', alert_id=alert_id)

    def get_for(self, product_id: int, warehouse_id: int) -> AlertTrackingRecord | None:
        return self._tracking().get((product_id, warehouse_id))

    def effective_status(self, product_id: int, warehouse_id: int) -> str:
        """Status a user would see right now (ACTIVE when untracked)."""
        record = self.get_for(product_id, warehouse_id)
        if record is None:
            return AlertStatus.ACTIVE
        stock = self.ledger.get_stock(product_id, warehouse_id)
        return record.effective_status(self.ledger.clock(), stock.last_updated if stock else None)

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    def query(self, severity=None, status=AlertStatus.ACTIVE, warehouse_id=None) -> list[AlertView]:
        """
        Current alerts, most severe first.

        Args:
            severity: Only this AlertSeverity (None = any)
            status: Only this effective AlertStatus (None = any)
            warehouse_id: Only this warehouse

        Returns:
            AlertView list; healthy stock never appears.
        """
        now = self.ledger.clock()
        tracking = self._tracking()
        products = {p.id: p for p in self.catalog.list_products()}
        warehouses = {}
        low = depot_settings.LOW_STOCK_MULTIPLIER
        over = depot_settings.OVERSTOCK_MULTIPLIER
        factor = depot_settings.RECOMMENDED_STOCK_FACTOR

        alerts = []
        for stock in self.ledger.list_stock(warehouse_id=warehouse_id):
            product = products.get(stock.product_id)
            if product is None:
                continue

            stock_status = classify(stock.quantity, product.reorder_point, low, over)
            alert_severity = severity_for(stock_status)
            if alert_severity is None:
                continue
            if severity and alert_severity != severity:
                continue

            record = tracking.get(stock.key)
            current = record.effective_status(now, stock.last_updated) if record else AlertStatus.ACTIVE
            if status and current != status:
                continue

            if stock.warehouse_id not in warehouses:
                warehouses[stock.warehouse_id] = self.catalog.get_warehouse(stock.warehouse_id)
            warehouse = warehouses[stock.warehouse_id]

            alerts.append(AlertView(
                id=record.id if record else None,
                product_id=stock.product_id,
                warehouse_id=stock.warehouse_id,
                status=current,
                severity=alert_severity,
                stock_status=stock_status,
                current_stock=stock.quantity,
                reorder_point=product.reorder_point,
                shortage=max(0, product.reorder_point - stock.quantity),
                recommended_quantity=recommended_quantity(stock.quantity, product.reorder_point, factor),
                product_name=product.name,
                sku=product.sku,
                category=product.category,
                warehouse_name=warehouse.name if warehouse else '',
                warehouse_code=warehouse.code if warehouse else '',
                snooze_until=record.snooze_until if record and current == AlertStatus.SNOOZED else None,
                notes=record.notes if record else '',
                acknowledged_at=record.acknowledged_at if record else None,
                created_at=record.created_at if record else None,
                updated_at=record.updated_at if record else None,
            ))

        alerts.sort(key=lambda a: (_SEVERITY_RANK[a.severity], a.product_id, a.warehouse_id))
        return alerts

    def stats(self) -> dict[str, int]:
        """Alert counts by severity, stock status and effective status."""
        alerts = self.query(status=None)
        counts = {
            'total': len(alerts),
            'critical': 0,
            'warning': 0,
            'info': 0,
            'overstocked': 0,
        }
        counts.update({s.value: 0 for s in AlertStatus})
        for alert in alerts:
            counts[str(alert.severity)] += 1
            counts[str(alert.status)] += 1
            if alert.stock_status == StockStatus.OVERSTOCKED:
                counts['overstocked'] += 1
        return counts

    # ══════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ══════════════════════════════════════════════════════════════

    def update_status(self, product_id: int, warehouse_id: int, status: str,
                      snooze_until=None, notes: str | None = None) -> AlertTrackingRecord:
        """
        Move the alert for (product, warehouse) to `status`.

        Args:
            product_id: Product
            warehouse_id: Warehouse
            status: Target AlertStatus
            snooze_until: Required (and only allowed) for SNOOZED; datetime or ISO string
            notes: Replaces the stored notes when given

        Returns:
            The upserted tracking record

        Raises:
            ValidationError: INVALID_STATUS, SNOOZE_UNTIL_REQUIRED,
                SNOOZE_UNTIL_IN_PAST, SNOOZE_UNTIL_NOT_ALLOWED,
                PRODUCT_NOT_FOUND, WAREHOUSE_NOT_FOUND
            InvalidStateError: INVALID_TRANSITION
        """
        if status not in AlertStatus.values:
            raise ValidationError('INVALID_STATUS', status=status, allowed=', '.join(AlertStatus.values))
        status = AlertStatus(status)

        until = parse_moment(snooze_until, 'snooze_until')
        if status == AlertStatus.SNOOZED:
            if until is None:
                raise ValidationError('SNOOZE_UNTIL_REQUIRED')
            if until <= self.ledger.clock():
                raise ValidationError('SNOOZE_UNTIL_IN_PAST', snooze_until=until.isoformat())
        elif until is not None:
            raise ValidationError('SNOOZE_UNTIL_NOT_ALLOWED', status=status)

        require_product(self.catalog, product_id)
        require_warehouse(self.catalog, warehouse_id)

        with self.ledger.atomic() as session:
            now = self.ledger.clock()
            existing = self.get_for(product_id, warehouse_id)
            if existing is None:
                current = AlertStatus.ACTIVE
            else:
                stock = self.ledger.get_stock(product_id, warehouse_id)
                current = existing.effective_status(now, stock.last_updated if stock else None)

            if status not in ALLOWED_TRANSITIONS[current]:
                raise InvalidStateError(
                    'INVALID_TRANSITION',
                    f"Cannot change alert from {current} to {status}",
                    current=current,
                    requested=status,
                )

            changes = {
                'status': status,
                'updated_at': now,
                'snooze_until': until if status == AlertStatus.SNOOZED else None,
            }
            if notes is not None:
                changes['notes'] = notes
            if status == AlertStatus.ACKNOWLEDGED:
                changes['acknowledged_at'] = now
            if status == AlertStatus.RESOLVED:
                changes['resolved_at'] = now

            if existing is None:
                record = AlertTrackingRecord(
                    id=session.next_id(Collection.ALERTS),
                    product_id=product_id,
                    warehouse_id=warehouse_id,
                    created_at=now,
                    **changes,
                )
                session.append(Collection.ALERTS, record.to_record())
            else:
                record = existing.with_changes(**changes)
                session.replace(Collection.ALERTS, record.to_record())

        logger.info(
            "alert.status_changed",
            extra={
                "alert_id": record.id,
                "product_id": product_id,
                "warehouse_id": warehouse_id,
                "from": str(current),
                "to": str(status),
            },
        )
        return record

    def resolve_for_receipt(self, order: PurchaseOrder) -> AlertTrackingRecord | None:
        """
        Resolve the tracked alert of a received order's product/warehouse.

        System action: runs inside the caller's ledger session and skips
        the transition table. Untracked alerts are left alone.
        """
        with self.ledger.atomic() as session:
            existing = self.get_for(order.product_id, order.warehouse_id)
            if existing is None:
                return None

            note = f"Received PO #{order.id} (+{order.quantity} units)"
            now = order.received_at or self.ledger.clock()
            record = existing.with_changes(
                status=AlertStatus.RESOLVED,
                snooze_until=None,
                resolved_at=now,
                updated_at=now,
                notes=f"{existing.notes}\n{note}" if existing.notes else note,
            )
            session.replace(Collection.ALERTS, record.to_record())

        logger.info(
            "alert.auto_resolved",
            extra={"alert_id": record.id, "order_id": order.id},
        )
        return record
