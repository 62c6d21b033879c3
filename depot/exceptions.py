"""
Exceptions for Depot.

Every error is a DepotError with a structured code for programmatic
handling. The subclass tells the caller which kind of failure it is:

    ValidationError         malformed or semantically invalid input
    NotFound                referenced entity is absent
    InsufficientStockError  a transfer would drive the source negative
    InvalidStateError       illegal lifecycle transition
    StorageError            persistence failure (not locally recoverable)
"""

from typing import Any


class DepotError(Exception):
    """
    Structured exception for depot operations.

    Usage:
        try:
            depot.execute_transfer(1, 2, product_id=7, quantity=100)
        except InsufficientStockError as e:
            print(f"Only {e.available} available")
        except DepotError as e:
            return JsonResponse(e.as_dict(), status=e.http_status)

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    http_status = 400

    _default_messages = {
        # validation
        'INVALID_QUANTITY': 'Quantity must be a positive integer',
        'INVALID_DELTA': 'Adjustment delta must be an integer',
        'SAME_WAREHOUSE': 'Cannot transfer to the same warehouse',
        'PRODUCT_NOT_FOUND': 'Product not found',
        'WAREHOUSE_NOT_FOUND': 'Warehouse not found',
        'SOURCE_WAREHOUSE_NOT_FOUND': 'Source warehouse not found',
        'DEST_WAREHOUSE_NOT_FOUND': 'Destination warehouse not found',
        'REASON_REQUIRED': 'A reason is required',
        'INVALID_STATUS': 'Unrecognized status',
        'SNOOZE_UNTIL_REQUIRED': 'snoozeUntil is required when status is snoozed',
        'SNOOZE_UNTIL_IN_PAST': 'snoozeUntil must be in the future',
        'SNOOZE_UNTIL_NOT_ALLOWED': 'snoozeUntil is only allowed when status is snoozed',
        'INVALID_DATE': 'Invalid date',
        'INVALID_PAGINATION': 'limit and offset must be integers',
        # lookups
        'TRANSFER_NOT_FOUND': 'Transfer not found',
        'ORDER_NOT_FOUND': 'Purchase order not found',
        'ALERT_NOT_FOUND': 'Alert not found',
        # stock
        'INSUFFICIENT_STOCK': 'Insufficient stock at source warehouse',
        # lifecycle
        'ORDER_ALREADY_RECEIVED': 'Purchase order was already received',
        'INVALID_TRANSITION': 'Status transition not allowed',
        # storage
        'STORAGE_ERROR': 'Storage failure',
    }

    def __init__(self, code: str, message: str | None = None, **data: Any):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code!r}, {self.message!r})"

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'code': self.code,
            'message': self.message,
            'data': {k: str(v) if not isinstance(v, (int, float, bool, type(None))) else v
                     for k, v in self.data.items()},
        }


class ValidationError(DepotError):
    """Malformed or semantically invalid input."""

    http_status = 400


class NotFound(DepotError):
    """Referenced entity does not exist."""

    http_status = 404


class InsufficientStockError(DepotError):
    """Source stock is lower than the requested transfer quantity."""

    http_status = 422

    def __init__(self, code: str = 'INSUFFICIENT_STOCK', message: str | None = None, **data: Any):
        if message is None and 'available' in data and 'requested' in data:
            message = (
                f"Insufficient stock. Available: {data['available']}, "
                f"Requested: {data['requested']}"
            )
        super().__init__(code, message, **data)

    @property
    def available(self) -> int:
        """Shortcut for data['available']."""
        return self.data.get('available', 0)

    @property
    def requested(self) -> int:
        """Shortcut for data['requested']."""
        return self.data.get('requested', 0)


class InvalidStateError(DepotError):
    """Requested lifecycle transition is not allowed from the current state."""

    http_status = 409


class StorageError(DepotError):
    """
    Persistence layer failure.

    Not recoverable at the component boundary. The detail stays on the
    exception (and in the logs); as_dict() only exposes a generic message.
    """

    http_status = 500

    def __init__(self, message: str | None = None, **data: Any):
        super().__init__('STORAGE_ERROR', message, **data)

    def as_dict(self) -> dict[str, Any]:
        return {
            'code': 'INTERNAL_ERROR',
            'message': 'Internal server error',
            'data': {},
        }
