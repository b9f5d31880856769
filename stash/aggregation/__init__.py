"""Chart aggregation package."""

from stash.aggregation.engine import (
    category_series,
    category_totals,
    latest_snapshot,
    monthly_category_totals,
    nearest_snapshot,
)
from stash.aggregation.service import ChartDataService

__all__ = [
    "ChartDataService",
    "category_series",
    "category_totals",
    "latest_snapshot",
    "monthly_category_totals",
    "nearest_snapshot",
]
