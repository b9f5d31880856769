"""
Aggregation Engine

DESIGN DECISION: Aggregation is PURE.
Every function takes a collection of snapshots and returns fresh chart
data. Nothing here mutates its input or keeps state between calls, so
the same input always yields the same, deterministically ordered output.

Two views are supported:
1. Monthly-category totals (one line per category across months)
2. Per-date running series (one point per active category per snapshot)
"""

import datetime as dt
from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional, Union

from stash.models.chart import OVERALL_TOTAL, CategoryPoint, MonthlyCategoryTotal
from stash.models.snapshot import AccountCategory, Snapshot, sort_by_date


def monthly_category_totals(snapshots: Iterable[Snapshot]) -> list[MonthlyCategoryTotal]:
    """
    Sum balances per month and category, plus an overall total per month.

    All accounts of all snapshots falling in the same month are pooled.
    Output is sorted by month key (YYYY-MM) then category label.

    An empty collection yields a single "No Data" sentinel rather than
    an empty list.
    """
    ordered = sort_by_date(snapshots)
    if not ordered:
        return [MonthlyCategoryTotal.no_data()]

    by_month: dict[str, dict[str, Decimal]] = defaultdict(lambda: defaultdict(Decimal))
    for snapshot in ordered:
        month = by_month[snapshot.month_key]
        # months holding only empty snapshots still get an overall line
        month.setdefault(OVERALL_TOTAL, Decimal("0"))
        for account in snapshot.accounts:
            month[account.category.value] += account.amount
            month[OVERALL_TOTAL] += account.amount

    totals = [
        MonthlyCategoryTotal(month=month_key, category=category, total=total)
        for month_key, categories in by_month.items()
        for category, total in categories.items()
    ]
    totals.sort(key=lambda item: (item.month, item.category))
    return totals


def category_series(
    snapshots: Iterable[Snapshot],
    include_overall: bool = True,
) -> list[CategoryPoint]:
    """
    Build the per-date trend series.

    Once a category appears in any snapshot it stays "active": every later
    snapshot emits a point for it, zero if that snapshot doesn't hold it,
    so lines never disappear once started.

    Points for one snapshot are ordered by category label, with the
    overall total (if requested) last.
    """
    active: set[AccountCategory] = set()
    points: list[CategoryPoint] = []

    for snapshot in sort_by_date(snapshots):
        active |= snapshot.categories()
        for category in sorted(active, key=lambda c: c.value):
            points.append(CategoryPoint(
                snapshot_id=snapshot.id,
                date=snapshot.date,
                category=category.value,
                total=snapshot.total_for(category),
            ))
        if include_overall:
            points.append(CategoryPoint(
                snapshot_id=snapshot.id,
                date=snapshot.date,
                category=OVERALL_TOTAL,
                total=snapshot.total,
            ))

    return points


def nearest_snapshot(
    snapshots: Iterable[Snapshot],
    query: Union[dt.date, dt.datetime],
) -> Optional[Snapshot]:
    """
    Find the snapshot closest in time to `query`.

    Snapshot dates are taken at midnight. On a tie the earlier snapshot
    date wins; among snapshots sharing a date, the first in the given
    order wins.

    Returns:
        The nearest snapshot, or None for an empty collection
    """
    if isinstance(query, dt.datetime):
        query_moment = query
    else:
        query_moment = dt.datetime.combine(query, dt.time.min)

    best: Optional[Snapshot] = None
    best_key = None
    for snapshot in snapshots:
        moment = dt.datetime.combine(snapshot.date, dt.time.min, tzinfo=query_moment.tzinfo)
        key = (abs(moment - query_moment), snapshot.date)
        if best_key is None or key < best_key:
            best, best_key = snapshot, key
    return best


def category_totals(snapshot: Snapshot) -> dict[AccountCategory, Decimal]:
    """Per-category breakdown of one snapshot, in enum order, present categories only."""
    return {
        category: snapshot.total_for(category)
        for category in AccountCategory
        if category in snapshot.categories()
    }


def latest_snapshot(snapshots: Iterable[Snapshot]) -> Optional[Snapshot]:
    """Most recent snapshot by date (last in storage order among equal dates)."""
    ordered = sort_by_date(snapshots)
    return ordered[-1] if ordered else None
