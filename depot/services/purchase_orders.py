"""
Purchase orders — pending replenishment, credited to stock exactly once.

    order = orders.create(product_id=7, warehouse_id=1, quantity=20)
    orders.receive(order.id)   # stock +20, order RECEIVED
    orders.receive(order.id)   # InvalidStateError, stock unchanged
"""

import logging

from depot.exceptions import InvalidStateError, NotFound, ValidationError
from depot.models.enums import AlertStatus, AuditEventType, Collection, PurchaseOrderStatus
from depot.models.purchase_order import PurchaseOrder, ReorderResult
from depot.protocols.catalog import Catalog
from depot.services.alerts import AlertTracker
from depot.services.ledger import StockLedger
from depot.services.validation import require_positive_int, require_product, require_warehouse

logger = logging.getLogger('depot')


class PurchaseOrders:
    """Create, receive and list purchase orders."""

    def __init__(self, ledger: StockLedger, catalog: Catalog, alerts: AlertTracker):
        self.ledger = ledger
        self.catalog = catalog
        self.alerts = alerts

    def create(self, product_id: int, warehouse_id: int, quantity: int) -> PurchaseOrder:
        """
        Create a PENDING order.

        Raises:
            ValidationError: INVALID_QUANTITY, PRODUCT_NOT_FOUND, WAREHOUSE_NOT_FOUND
        """
        require_positive_int(quantity)
        require_product(self.catalog, product_id)
        require_warehouse(self.catalog, warehouse_id)

        with self.ledger.atomic() as session:
            order = PurchaseOrder(
                id=session.next_id(Collection.PURCHASE_ORDERS),
                product_id=product_id,
                warehouse_id=warehouse_id,
                quantity=quantity,
                status=PurchaseOrderStatus.PENDING,
                created_at=self.ledger.clock(),
            )
            session.append(Collection.PURCHASE_ORDERS, order.to_record())

        logger.info(
            "purchase_order.created",
            extra={
                "order_id": order.id,
                "product_id": product_id,
                "warehouse_id": warehouse_id,
                "qty": quantity,
            },
        )
        return order

    def receive(self, order_id: int) -> PurchaseOrder:
        """
        Receive a pending order: credit stock and mark it RECEIVED.

        The stock credit, the status change and the alert resolution
        commit together.

        Raises:
            NotFound: ORDER_NOT_FOUND
            InvalidStateError: ORDER_ALREADY_RECEIVED
            StorageError: Persistence failed (nothing changed)
        """
        with self.ledger.atomic() as session:
            order = self.get(order_id)
            if order.is_received:
                raise InvalidStateError(
                    'ORDER_ALREADY_RECEIVED',
                    order_id=order.id,
                    received_at=order.received_at.isoformat() if order.received_at else None,
                )

            self.ledger.adjust(
                order.product_id, order.warehouse_id, order.quantity, 'purchase-order-receipt',
                event_type=AuditEventType.RECEIPT, reference=f"PO-{order.id}",
            )
            order = order.mark_received(self.ledger.clock())
            session.replace(Collection.PURCHASE_ORDERS, order.to_record())
            self.alerts.resolve_for_receipt(order)

        logger.info(
            "purchase_order.received",
            extra={
                "order_id": order.id,
                "product_id": order.product_id,
                "warehouse_id": order.warehouse_id,
                "qty": order.quantity,
            },
        )
        return order

    def get(self, order_id: int) -> PurchaseOrder:
        for data in self.ledger.read(Collection.PURCHASE_ORDERS):
            if data.get('id') == order_id:
                return PurchaseOrder.from_record(data)
        raise NotFound('ORDER_NOT_FOUND', order_id=order_id)

    def list_orders(self, status: str | None = None) -> list[PurchaseOrder]:
        """Orders newest first, optionally filtered by status."""
        orders = [PurchaseOrder.from_record(d) for d in self.ledger.read(Collection.PURCHASE_ORDERS)]
        if status:
            orders = [o for o in orders if o.status == status]
        orders.sort(key=lambda o: (o.created_at, o.id), reverse=True)
        return orders

    def reorder(self, product_id: int, warehouse_id: int, quantity: int) -> ReorderResult:
        """
        Create a pending order from an alert and acknowledge that alert.

        Never raises for expected failures; they come back as an
        unsuccessful ReorderResult and nothing is persisted.

        Raises:
            StorageError: Persistence failed
        """
        try:
            with self.ledger.atomic():
                order = self.create(product_id, warehouse_id, quantity)
                if self.alerts.effective_status(product_id, warehouse_id) == AlertStatus.ACTIVE:
                    self.alerts.update_status(product_id, warehouse_id, AlertStatus.ACKNOWLEDGED)
        except (ValidationError, NotFound, InvalidStateError) as e:
            logger.info(
                "purchase_order.reorder_rejected",
                extra={
                    "product_id": product_id,
                    "warehouse_id": warehouse_id,
                    "code": e.code,
                },
            )
            return ReorderResult(success=False, message=e.message, code=e.code)

        return ReorderResult(success=True, message="Purchase Order Created (Pending)", order=order)
