"""
Stock status classification — isolated, testable, reusable.

Classifies a quantity against the product's reorder point:

    quantity <  reorder_point                  -> critical-low
    quantity <= reorder_point * low_multiplier -> low-stock
    quantity >  reorder_point * over_multiplier -> overstocked
    otherwise                                  -> healthy

Examples (reorder_point=100, defaults 1.2 / 3.0):
    - 99  -> critical-low
    - 120 -> low-stock
    - 200 -> healthy
    - 301 -> overstocked
"""

from depot.models.enums import AlertSeverity, StockStatus

LOW_STOCK_THRESHOLD_MULTIPLIER = 1.2
OVERSTOCKED_THRESHOLD_MULTIPLIER = 3.0

_SEVERITY = {
    StockStatus.CRITICAL_LOW: AlertSeverity.CRITICAL,
    StockStatus.LOW_STOCK: AlertSeverity.WARNING,
    StockStatus.OVERSTOCKED: AlertSeverity.INFO,
}


def classify(quantity: int, reorder_point: int,
             low_multiplier: float = LOW_STOCK_THRESHOLD_MULTIPLIER,
             overstock_multiplier: float = OVERSTOCKED_THRESHOLD_MULTIPLIER) -> StockStatus:
    """
    Classify a stock quantity.

    Args:
        quantity: Current quantity
        reorder_point: Product's reorder point
        low_multiplier: Upper bound of low-stock, as a multiple of reorder_point
        overstock_multiplier: Overstock threshold, as a multiple of reorder_point

    Returns:
        StockStatus
    """
    if quantity < reorder_point:
        return StockStatus.CRITICAL_LOW
    if quantity <= reorder_point * low_multiplier:
        return StockStatus.LOW_STOCK
    if quantity > reorder_point * overstock_multiplier:
        return StockStatus.OVERSTOCKED
    return StockStatus.HEALTHY


def severity_for(status: StockStatus) -> AlertSeverity | None:
    """Alert severity for a stock status (None for healthy stock)."""
    return _SEVERITY.get(status)


def recommended_quantity(quantity: int, reorder_point: int, factor: int = 2) -> int:
    """Units to order to bring stock back to reorder_point * factor."""
    return max(0, reorder_point * factor - quantity)
