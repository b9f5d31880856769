"""Tests for the aggregation engine and chart data service."""

from datetime import date, datetime
from decimal import Decimal

from stash.aggregation import (
    ChartDataService,
    category_series,
    category_totals,
    latest_snapshot,
    monthly_category_totals,
    nearest_snapshot,
)
from stash.models.chart import NO_DATA, OVERALL_TOTAL
from stash.models.snapshot import AccountCategory, Snapshot

SAVINGS = AccountCategory.SAVINGS
CRYPTO = AccountCategory.CRYPTO
STOCKS = AccountCategory.STOCKS_AND_SHARES


def as_triples(totals):
    return [(t.month, t.category, t.total) for t in totals]


class TestMonthlyCategoryTotals:
    """Tests for the monthly chart aggregation."""

    def test_empty_collection_yields_sentinel(self):
        """Test the single "No Data" placeholder."""
        totals = monthly_category_totals([])
        assert len(totals) == 1
        assert totals[0].month == NO_DATA
        assert totals[0].category == NO_DATA
        assert totals[0].total == Decimal("0")

    def test_pools_snapshots_within_a_month(self, snapshot_factory):
        """Two January snapshots and one February snapshot."""
        snapshots = [
            snapshot_factory(date(2024, 1, 5), ("A", 100, SAVINGS)),
            snapshot_factory(date(2024, 1, 20), ("B", 50, SAVINGS)),
            snapshot_factory(date(2024, 2, 3), ("A", 30, SAVINGS)),
        ]

        assert as_triples(monthly_category_totals(snapshots)) == [
            ("2024-01", OVERALL_TOTAL, Decimal("150")),
            ("2024-01", "Savings", Decimal("150")),
            ("2024-02", OVERALL_TOTAL, Decimal("30")),
            ("2024-02", "Savings", Decimal("30")),
        ]

    def test_sorted_by_month_then_category_label(self, snapshot_factory):
        """Output order is month key, then plain category label order."""
        snapshots = [
            snapshot_factory(
                date(2024, 3, 1),
                ("Broker", 10, STOCKS),
                ("Wallet", 5, CRYPTO),
            ),
            snapshot_factory(date(2023, 12, 31), ("Bank", 1, SAVINGS)),
        ]

        assert [(t.month, t.category) for t in monthly_category_totals(snapshots)] == [
            ("2023-12", OVERALL_TOTAL),
            ("2023-12", "Savings"),
            ("2024-03", "Crypto"),
            ("2024-03", OVERALL_TOTAL),
            ("2024-03", "Stocks & Shares"),
        ]

    def test_overall_total_equals_sum_of_categories(self, snapshot_factory):
        """Per month, the overall line is the sum of the category lines."""
        snapshots = [
            snapshot_factory(
                date(2024, 1, 1),
                ("A", "10.25", SAVINGS),
                ("B", "-3.25", CRYPTO),
                ("C", 100, STOCKS),
            ),
        ]
        totals = monthly_category_totals(snapshots)
        overall = [t.total for t in totals if t.category == OVERALL_TOTAL]
        categories = [t.total for t in totals if t.category != OVERALL_TOTAL]
        assert overall == [sum(categories)] == [Decimal("107.00")]

    def test_month_with_only_empty_snapshots(self):
        """An empty snapshot still produces an overall line for its month."""
        totals = monthly_category_totals([Snapshot(date=date(2024, 4, 1))])
        assert as_triples(totals) == [("2024-04", OVERALL_TOTAL, Decimal("0"))]

    def test_does_not_mutate_input(self, snapshot_factory):
        """Aggregation is a pure read."""
        snapshots = [
            snapshot_factory(date(2024, 2, 1), ("A", 1, SAVINGS)),
            snapshot_factory(date(2024, 1, 1), ("B", 2, SAVINGS)),
        ]
        before = list(snapshots)
        monthly_category_totals(snapshots)
        assert snapshots == before


class TestCategorySeries:
    """Tests for the per-date running series."""

    def test_active_category_emits_zero_when_absent(self, snapshot_factory):
        """Savings at t1, only Crypto at t2: Savings still gets a zero point."""
        t1 = snapshot_factory(date(2024, 1, 1), ("Bank", 100, SAVINGS))
        t2 = snapshot_factory(date(2024, 2, 1), ("Wallet", 20, CRYPTO))

        points = category_series([t2, t1], include_overall=False)

        assert [(p.date, p.category, p.total) for p in points] == [
            (date(2024, 1, 1), "Savings", Decimal("100")),
            (date(2024, 2, 1), "Crypto", Decimal("20")),
            (date(2024, 2, 1), "Savings", Decimal("0")),
        ]

    def test_categories_not_yet_seen_are_not_emitted(self, snapshot_factory):
        """A category only starts once it first appears."""
        t1 = snapshot_factory(date(2024, 1, 1), ("Bank", 100, SAVINGS))
        t2 = snapshot_factory(date(2024, 2, 1), ("Wallet", 20, CRYPTO))

        points = category_series([t1, t2], include_overall=False)

        first_day = [p.category for p in points if p.date == date(2024, 1, 1)]
        assert first_day == ["Savings"]

    def test_overall_point_per_snapshot(self, snapshot_factory):
        """Test the optional overall total point, last for each snapshot."""
        t1 = snapshot_factory(
            date(2024, 1, 1),
            ("Bank", 100, SAVINGS),
            ("Wallet", 5, CRYPTO),
        )

        points = category_series([t1], include_overall=True)

        assert [p.category for p in points] == ["Crypto", "Savings", OVERALL_TOTAL]
        assert points[-1].total == Decimal("105")
        assert points[-1].snapshot_id == t1.id
        assert points[-1].is_overall

    def test_overall_toggle_off(self, snapshot_factory):
        """Test that the toggle removes the overall points."""
        t1 = snapshot_factory(date(2024, 1, 1), ("Bank", 100, SAVINGS))
        points = category_series([t1], include_overall=False)
        assert all(not p.is_overall for p in points)

    def test_empty_collection(self):
        """Test that no snapshots means no points."""
        assert category_series([]) == []


class TestNearestSnapshot:
    """Tests for the nearest-date lookup."""

    def test_exact_match(self, snapshot_factory):
        """Test a query landing on a snapshot date."""
        a = snapshot_factory(date(2024, 1, 1))
        b = snapshot_factory(date(2024, 1, 10))
        assert nearest_snapshot([a, b], date(2024, 1, 10)) is b

    def test_closest_wins(self, snapshot_factory):
        """Test the minimum absolute difference."""
        a = snapshot_factory(date(2024, 1, 1))
        b = snapshot_factory(date(2024, 1, 10))
        assert nearest_snapshot([a, b], date(2024, 1, 4)) is a
        assert nearest_snapshot([a, b], date(2024, 1, 7)) is b

    def test_tie_resolves_to_earlier_date(self, snapshot_factory):
        """A query exactly between two snapshots picks the earlier one."""
        a = snapshot_factory(date(2024, 1, 1))
        b = snapshot_factory(date(2024, 1, 11))
        assert nearest_snapshot([b, a], date(2024, 1, 6)) is a
        assert nearest_snapshot([a, b], date(2024, 1, 6)) is a

    def test_datetime_query(self, snapshot_factory):
        """Pointer positions arrive as datetimes."""
        a = snapshot_factory(date(2024, 1, 1))
        b = snapshot_factory(date(2024, 1, 2))
        assert nearest_snapshot([a, b], datetime(2024, 1, 1, 13, 0)) is b
        assert nearest_snapshot([a, b], datetime(2024, 1, 1, 11, 0)) is a

    def test_empty_collection(self):
        """Test that there is nothing to find in an empty collection."""
        assert nearest_snapshot([], date(2024, 1, 1)) is None


class TestSnapshotHelpers:
    """Tests for single-snapshot helpers."""

    def test_category_totals(self, snapshot_factory):
        """Test the per-category breakdown of one snapshot."""
        snapshot = snapshot_factory(
            date(2024, 1, 1),
            ("A", 10, SAVINGS),
            ("B", 20, SAVINGS),
            ("C", 5, CRYPTO),
        )
        assert category_totals(snapshot) == {
            CRYPTO: Decimal("5"),
            SAVINGS: Decimal("30"),
        }

    def test_latest_snapshot(self, snapshot_factory):
        """Test picking the most recent snapshot by date."""
        old = snapshot_factory(date(2023, 1, 1))
        new = snapshot_factory(date(2024, 1, 1))
        assert latest_snapshot([new, old]) is new
        assert latest_snapshot([]) is None


class TestChartDataService:
    """Tests for the memoising chart facade."""

    def test_recomputes_after_mutation(self, store, snapshot_factory):
        """Cached results are dropped when the store version changes."""
        charts = ChartDataService(store)
        assert charts.monthly_totals()[0].is_sentinel

        store.add(snapshot_factory(date(2024, 1, 1), ("Bank", 100, SAVINGS)))

        assert as_triples(charts.monthly_totals()) == [
            ("2024-01", OVERALL_TOTAL, Decimal("100")),
            ("2024-01", "Savings", Decimal("100")),
        ]

    def test_reuses_result_for_same_version(self, store, snapshot_factory):
        """Test that repeated reads of an unchanged store hit the cache."""
        store.add(snapshot_factory(date(2024, 1, 1), ("Bank", 100, SAVINGS)))
        charts = ChartDataService(store)

        assert charts.series() is charts.series()
        assert charts.series(include_overall=False) is not charts.series()

    def test_nearest_and_latest(self, store, snapshot_factory):
        """Test the lookups through the service."""
        a = snapshot_factory(date(2024, 1, 1))
        b = snapshot_factory(date(2024, 3, 1))
        store.add_many([a, b])
        charts = ChartDataService(store)

        assert charts.nearest(date(2024, 2, 20)) == b
        assert charts.latest() == b
