"""
Depot configuration.

Usage in settings.py:
    DEPOT = {
        "RECORD_STORE": "depot.adapters.json_file.JsonFileRecordStore",
        "CATALOG": "depot.adapters.catalog.StoreCatalog",
        "DATA_DIR": BASE_DIR / "data",
        "LOW_STOCK_MULTIPLIER": 1.2,
        "OVERSTOCK_MULTIPLIER": 3.0,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class DepotSettings:
    """Depot configuration settings."""

    # Record store backend (dotted path)
    RECORD_STORE: str = "depot.adapters.json_file.JsonFileRecordStore"

    # Product/warehouse catalog backend (dotted path)
    CATALOG: str = "depot.adapters.catalog.StoreCatalog"

    # Directory for the JSON file store ("" = <BASE_DIR or cwd>/data)
    DATA_DIR: Any = ""

    # Stock status thresholds, as multiples of the reorder point
    LOW_STOCK_MULTIPLIER: float = 1.2
    OVERSTOCK_MULTIPLIER: float = 3.0

    # Recommended reorder target, as a multiple of the reorder point
    RECOMMENDED_STOCK_FACTOR: int = 2

    # Pagination for transfer queries
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 100

    # Transfer reference numbers: PREFIX-YYYYMMDD-NNNN
    TRANSFER_REFERENCE_PREFIX: str = "TRF"


def get_depot_settings() -> DepotSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "DEPOT", {})
    return DepotSettings(**{
        k: v for k, v in user_settings.items()
        if k in DepotSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_depot_settings(), name)


depot_settings = _LazySettings()
