"""
Chart Data Service

Bridges the snapshot store and the pure aggregation functions.

The aggregations are recomputed only when the store's version changes.
Results are cached per (version, view) and dropped as soon as a newer
version is seen.
"""

import datetime as dt
import threading
from typing import Optional, Union

import structlog

from stash.aggregation.engine import (
    category_series,
    latest_snapshot,
    monthly_category_totals,
    nearest_snapshot,
)
from stash.models.chart import CategoryPoint, MonthlyCategoryTotal
from stash.models.snapshot import Snapshot
from stash.store import SnapshotStore


logger = structlog.get_logger(__name__)


class ChartDataService:
    """Memoising read-side facade over a SnapshotStore."""

    def __init__(self, store: SnapshotStore):
        self._store = store
        self._lock = threading.Lock()
        self._cache_version: Optional[int] = None
        self._cache: dict[tuple, object] = {}

    def _cached(self, key: tuple, compute):
        version = self._store.version
        with self._lock:
            if self._cache_version != version:
                self._cache.clear()
                self._cache_version = version
            if key in self._cache:
                return self._cache[key]

        value = compute(self._store.snapshots)
        logger.debug("chart_data_computed", view=key[0], version=version)

        with self._lock:
            if self._cache_version == version:
                self._cache[key] = value
        return value

    def monthly_totals(self) -> list[MonthlyCategoryTotal]:
        return self._cached(("monthly",), monthly_category_totals)

    def series(self, include_overall: bool = True) -> list[CategoryPoint]:
        return self._cached(
            ("series", include_overall),
            lambda snapshots: category_series(snapshots, include_overall=include_overall),
        )

    def nearest(self, query: Union[dt.date, dt.datetime]) -> Optional[Snapshot]:
        return nearest_snapshot(self._store.snapshots, query)

    def latest(self) -> Optional[Snapshot]:
        return latest_snapshot(self._store.snapshots)
