"""Tests for category breakdowns, rankings and chart data."""

from decimal import Decimal

import pytest
import pytest_asyncio

from fintrax.application.dtos.analytics import CATEGORY_COLORS
from fintrax.application.services import CategoryAnalytics
from fintrax.application.services.category_analytics import build_breakdown
from fintrax.domain.calendar import Granularity
from fintrax.domain.ledger import Money, TransactionCategory, TransactionType
from tests.shared.fixtures import FAST_POLICY, at, make_transaction

FOOD = TransactionCategory.FOOD
HOUSING = TransactionCategory.HOUSING
TRANSPORTATION = TransactionCategory.TRANSPORTATION


def expense(amount, category, occurred_at=None):
    return make_transaction(
        amount,
        occurred_at or at(2024, 1, 10),
        type=TransactionType.EXPENSE,
        category=category,
    )


@pytest.fixture
def january(calendar):
    return calendar.bucket_from_key("2024-01", Granularity.MONTHLY)


@pytest_asyncio.fixture
async def analytics(ledger, calendar, clock):
    category_analytics = CategoryAnalytics(
        ledger,
        calendar,
        policy=FAST_POLICY,
        clock=clock,
    )
    await category_analytics.start()
    await category_analytics.wait_idle()
    yield category_analytics
    await category_analytics.stop()


class TestBuildBreakdown:
    def test_orders_by_total_then_category_order(self):
        transactions = [
            expense("50.00", FOOD),
            expense("100.00", HOUSING),
            expense("50.00", TRANSPORTATION),
        ]

        breakdown = build_breakdown(transactions, TransactionType.EXPENSE)

        assert [b.category for b in breakdown] == [HOUSING, TRANSPORTATION, FOOD]
        assert [b.percentage for b in breakdown] == [
            Decimal("50.00"),
            Decimal("25.00"),
            Decimal("25.00"),
        ]

    def test_percentages_add_up_to_one_hundred(self):
        transactions = [
            expense("1.00", FOOD),
            expense("1.00", HOUSING),
            expense("1.00", TRANSPORTATION),
        ]

        breakdown = build_breakdown(transactions, TransactionType.EXPENSE)

        total = sum(b.percentage for b in breakdown)
        assert abs(total - Decimal(100)) <= Decimal("0.01") * len(breakdown)

    def test_counts_and_totals_per_category(self):
        transactions = [
            expense("12.50", FOOD),
            expense("7.50", FOOD),
            expense("30.00", HOUSING),
        ]

        breakdown = build_breakdown(transactions, TransactionType.EXPENSE)

        food = next(b for b in breakdown if b.category is FOOD)
        assert food.total_amount == Money("20.00")
        assert food.transaction_count == 2

    def test_flows_are_kept_apart(self):
        transactions = [
            expense("30.00", FOOD),
            make_transaction("100.00", at(2024, 1, 1), type=TransactionType.INCOME),
        ]

        expenses = build_breakdown(transactions, TransactionType.EXPENSE)
        income = build_breakdown(transactions, TransactionType.INCOME)

        assert [b.category for b in expenses] == [FOOD]
        assert [b.category for b in income] == [TransactionCategory.INCOME]
        assert income[0].percentage == Decimal("100.00")

    def test_no_transactions_no_entries(self):
        assert build_breakdown([], TransactionType.EXPENSE) == []


class TestTopCategories:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, -5])
    async def test_non_positive_limit_is_empty(self, analytics, ledger, limit):
        await ledger.insert(expense("10.00", FOOD))

        assert await analytics.top_categories(limit) == []

    @pytest.mark.asyncio
    async def test_limits_the_ranking(self, analytics, ledger, january):
        for amount, category in [
            ("10.00", FOOD),
            ("30.00", HOUSING),
            ("20.00", TRANSPORTATION),
        ]:
            await ledger.insert(expense(amount, category))

        top = await analytics.top_categories(2, january)

        assert [b.category for b in top] == [HOUSING, TRANSPORTATION]

    @pytest.mark.asyncio
    async def test_defaults_to_current_month(self, analytics, ledger, clock):
        await ledger.insert(expense("10.00", FOOD, at(2023, 12, 31)))
        await ledger.insert(expense("10.00", HOUSING, clock()))

        top = await analytics.top_categories(5)

        assert [b.category for b in top] == [HOUSING]


class TestChartData:
    @pytest.mark.asyncio
    async def test_slices_carry_label_and_fixed_colour(
        self, analytics, ledger, january,
    ):
        await ledger.insert(expense("75.00", FOOD))
        await ledger.insert(expense("25.00", HOUSING))

        chart = await analytics.chart_data(january)

        assert [slice_.label for slice_ in chart] == ["Food", "Housing"]
        assert chart[0].color == CATEGORY_COLORS[FOOD]
        assert chart[0].value == Money("75.00")
        assert chart[0].percentage == Decimal("75.00")


class TestObservedBreakdown:
    @pytest.mark.asyncio
    async def test_observed_breakdown_follows_changes(self, analytics, ledger, january):
        observable = await analytics.observe(january)
        assert observable.value == []

        await ledger.insert(expense("40.00", FOOD))
        await analytics.wait_idle()

        assert [b.category for b in observable.value] == [FOOD]

    @pytest.mark.asyncio
    async def test_income_observer_sees_income_only(self, analytics, ledger, january):
        observable = await analytics.observe(january, TransactionType.INCOME)

        await ledger.insert(expense("40.00", FOOD))
        await ledger.insert(
            make_transaction("5.00", at(2024, 1, 2), type=TransactionType.INCOME),
        )
        await analytics.wait_idle()

        assert [b.flow for b in observable.value] == [TransactionType.INCOME]
