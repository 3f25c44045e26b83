"""Tests for trend series and year-over-year comparison."""

from decimal import Decimal

import pytest
import pytest_asyncio

from fintrax.application.services import TrendEngine
from fintrax.application.services.trend_engine import one_year_earlier
from fintrax.domain.calendar import Granularity
from fintrax.domain.ledger import Money, TransactionType
from fintrax.domain.shared.exceptions import InvalidPeriodError
from tests.shared.fixtures import FAST_POLICY, at, make_transaction


def income(amount, occurred_at):
    return make_transaction(amount, occurred_at, type=TransactionType.INCOME)


def expense(amount, occurred_at):
    return make_transaction(amount, occurred_at, type=TransactionType.EXPENSE)


@pytest_asyncio.fixture
async def trends(ledger, calendar, clock):
    clock.now = at(2024, 3, 15)
    trend_engine = TrendEngine(ledger, calendar, policy=FAST_POLICY, clock=clock)
    await trend_engine.start()
    await trend_engine.wait_idle()
    yield trend_engine
    await trend_engine.stop()


class TestMonthlyTrend:
    @pytest.mark.asyncio
    async def test_series_has_exactly_n_entries_with_zero_gaps(self, trends, ledger):
        await ledger.insert(income("100.00", at(2024, 1, 10)))

        series = await trends.monthly_trend(6)

        assert [entry.period for entry in series] == [
            "2023-10",
            "2023-11",
            "2023-12",
            "2024-01",
            "2024-02",
            "2024-03",
        ]
        assert [entry.is_empty for entry in series] == [
            True,
            True,
            True,
            False,
            True,
            True,
        ]
        assert series[3].net == Money("100.00")
        assert series[3].period_label == "January 2024"

    @pytest.mark.asyncio
    async def test_income_expenses_and_net(self, trends, ledger):
        await ledger.insert(income("1000.00", at(2024, 3, 1)))
        await ledger.insert(expense("250.00", at(2024, 3, 2)))

        (march,) = await trends.monthly_trend(1)

        assert march.income == Money("1000.00")
        assert march.expenses == Money("250.00")
        assert march.net == Money("750.00")

    @pytest.mark.asyncio
    async def test_zero_months_is_empty(self, trends):
        assert await trends.monthly_trend(0) == []

    @pytest.mark.asyncio
    async def test_negative_months_are_rejected(self, trends):
        with pytest.raises(InvalidPeriodError):
            await trends.monthly_trend(-1)

    @pytest.mark.asyncio
    async def test_reads_reflect_writes_immediately(self, trends, ledger):
        await trends.monthly_trend(3)

        await ledger.insert(income("5.00", at(2024, 2, 2)))
        series = await trends.monthly_trend(3)

        assert series[1].income == Money("5.00")

    @pytest.mark.asyncio
    async def test_weekly_trend_with_anchor(self, trends, ledger):
        await ledger.insert(expense("9.00", at(2024, 1, 2)))

        series = await trends.trend(2, Granularity.WEEKLY, anchor=at(2024, 1, 8))

        assert [entry.period for entry in series] == ["2024-W01", "2024-W02"]
        assert series[0].net == -Money("9.00")


class TestTrailingAverage:
    @pytest.mark.asyncio
    async def test_average_of_monthly_nets(self, trends, ledger):
        await ledger.insert(income("300.00", at(2024, 1, 5)))
        await ledger.insert(expense("60.00", at(2024, 3, 5)))

        assert await trends.trailing_monthly_average(3) == Money("80.00")

    @pytest.mark.asyncio
    async def test_average_rounds_half_up(self, trends, ledger):
        await ledger.insert(income("100.00", at(2024, 2, 5)))

        assert await trends.trailing_monthly_average(3) == Money("33.33")

    @pytest.mark.asyncio
    async def test_zero_months_is_zero(self, trends):
        assert await trends.trailing_monthly_average(0) == Money.zero()

    @pytest.mark.asyncio
    async def test_negative_months_are_rejected(self, trends):
        with pytest.raises(InvalidPeriodError):
            await trends.trailing_monthly_average(-2)


class TestYearOverYear:
    @pytest.mark.asyncio
    async def test_change_against_same_span_last_year(self, trends, ledger, clock):
        clock.now = at(2024, 6, 15)
        await ledger.insert(income("1500.00", at(2024, 2, 1)))
        await ledger.insert(expense("500.00", at(2024, 3, 1)))
        await ledger.insert(income("800.00", at(2023, 5, 1)))
        await ledger.insert(income("10000.00", at(2023, 6, 20)))

        comparison = await trends.year_over_year_comparison()

        assert comparison.current_label == "2024 YTD"
        assert comparison.previous_label == "2023 YTD"
        assert comparison.current_net == Money("1000.00")
        assert comparison.previous_net == Money("800.00")
        assert comparison.change_percentage == Decimal("25.00")
        assert comparison.is_defined

    @pytest.mark.asyncio
    async def test_zero_previous_net_is_undefined(self, trends, ledger, clock):
        clock.now = at(2024, 6, 15)
        await ledger.insert(income("200.00", at(2023, 3, 1)))
        await ledger.insert(expense("200.00", at(2023, 3, 2)))
        await ledger.insert(income("500.00", at(2024, 4, 1)))

        comparison = await trends.year_over_year_comparison()

        assert comparison.current_net == Money("500.00")
        assert comparison.previous_net == Money.zero()
        assert comparison.change_percentage is None
        assert not comparison.is_defined

    @pytest.mark.asyncio
    async def test_change_is_relative_to_magnitude(self, trends, ledger, clock):
        clock.now = at(2024, 6, 15)
        await ledger.insert(expense("200.00", at(2023, 2, 1)))
        await ledger.insert(income("100.00", at(2024, 2, 1)))

        comparison = await trends.year_over_year_comparison()

        assert comparison.change_percentage == Decimal("150.00")

    @pytest.mark.asyncio
    async def test_leap_day_compares_with_february_28(self, trends, ledger, clock):
        clock.now = at(2024, 2, 29, 12)
        await ledger.insert(income("100.00", at(2023, 2, 28, 11)))
        await ledger.insert(income("50.00", at(2023, 2, 28, 13)))

        comparison = await trends.year_over_year_comparison()

        assert comparison.previous_net == Money("100.00")

    def test_one_year_earlier(self):
        assert one_year_earlier(at(2024, 2, 29, 12)) == at(2023, 2, 28, 12)
        assert one_year_earlier(at(2024, 6, 15)) == at(2023, 6, 15)


class TestObservedTrend:
    @pytest.mark.asyncio
    async def test_observed_series_follows_changes(self, trends, ledger):
        observable = await trends.observe_monthly_trend(3)

        await ledger.insert(income("20.00", at(2024, 3, 1)))
        await trends.wait_idle()

        assert observable.value[-1].income == Money("20.00")
        assert observable.state.version == 1

    @pytest.mark.asyncio
    async def test_change_outside_window_is_not_republished(self, trends, ledger):
        observable = await trends.observe_monthly_trend(3)

        await ledger.insert(income("20.00", at(2020, 3, 1)))
        await trends.wait_idle()

        assert observable.state.version == 0
