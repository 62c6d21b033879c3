"""
Input checks shared by the services.

Callers hand in already-parsed values; these helpers enforce the
semantic rules (positive integers, known products and warehouses) and
raise ValidationError with a stable code.
"""

from datetime import date, datetime, time

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from depot.exceptions import ValidationError
from depot.protocols.catalog import Catalog, ProductInfo, WarehouseInfo


def is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def require_positive_int(value, code: str = 'INVALID_QUANTITY', field: str = 'quantity') -> int:
    if not is_int(value) or value <= 0:
        raise ValidationError(code, field=field, value=value)
    return value


def require_product(catalog: Catalog, product_id: int) -> ProductInfo:
    product = catalog.get_product(product_id)
    if product is None:
        raise ValidationError(
            'PRODUCT_NOT_FOUND',
            f"Product with ID {product_id} not found",
            product_id=product_id,
        )
    return product


def require_warehouse(catalog: Catalog, warehouse_id: int,
                      code: str = 'WAREHOUSE_NOT_FOUND', label: str = 'Warehouse') -> WarehouseInfo:
    warehouse = catalog.get_warehouse(warehouse_id)
    if warehouse is None:
        raise ValidationError(
            code,
            f"{label} with ID {warehouse_id} not found",
            warehouse_id=warehouse_id,
        )
    return warehouse


def parse_moment(value, field: str) -> datetime | None:
    """Accept a datetime or ISO-8601 string; naive values use the current timezone."""
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = parse_datetime(value)
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationError('INVALID_DATE', field=field, value=value)
    else:
        raise ValidationError('INVALID_DATE', field=field, value=value)
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _day_bound(value, field: str, upper: bool) -> datetime | None:
    if value in (None, ''):
        return None
    day = None
    if isinstance(value, date) and not isinstance(value, datetime):
        day = value
    elif isinstance(value, str) and 'T' not in value and ' ' not in value:
        try:
            day = parse_date(value)
        except ValueError:
            day = None
        if day is None:
            raise ValidationError('INVALID_DATE', field=field, value=value)
    if day is not None:
        return timezone.make_aware(datetime.combine(day, time.max if upper else time.min))
    return parse_moment(value, field)


def date_range(start, end) -> tuple[datetime | None, datetime | None]:
    """
    Normalize a filter range.

    Plain dates cover the whole day on both ends, so
    date_range(date(2026, 1, 22), date(2026, 1, 22)) matches that entire day.
    """
    return _day_bound(start, 'start_date', upper=False), _day_bound(end, 'end_date', upper=True)
