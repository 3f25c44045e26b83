"""End-to-end tests of the engine on in-memory stores."""

import asyncio
from uuid import uuid4

import pytest

from fintrax.application.engine import FinanceEngine
from fintrax.domain.calendar import Granularity
from fintrax.domain.ledger import Money, TransactionCategory, TransactionType
from fintrax.domain.ledger.exceptions import TransactionNotFoundError
from fintrax.infrastructure.persistence.memory import InMemoryStoreFactory
from tests.shared.fixtures import FAST_POLICY, at, make_transaction


async def add_income(engine, amount, occurred_at):
    return await engine.add_transaction(
        amount,
        "Salary",
        TransactionCategory.INCOME,
        TransactionType.INCOME,
        occurred_at=occurred_at,
    )


async def add_expense(engine, amount, occurred_at, category=TransactionCategory.FOOD):
    return await engine.add_transaction(
        amount,
        "Groceries",
        category,
        TransactionType.EXPENSE,
        occurred_at=occurred_at,
    )


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_and_stop_toggle_every_worker(self, store_factory):
        engine = FinanceEngine.from_factory(store_factory, policy=FAST_POLICY)

        await engine.start()
        assert all(worker.running for worker in engine.workers)

        await engine.stop()
        assert not any(worker.running for worker in engine.workers)

    @pytest.mark.asyncio
    async def test_context_manager_stops_workers(self):
        async with FinanceEngine.from_factory(
            InMemoryStoreFactory(),
            policy=FAST_POLICY,
        ) as engine:
            await engine.wait_idle()
            assert engine.balance.running

        assert not engine.balance.running

    @pytest.mark.asyncio
    async def test_restart_sees_writes_made_while_stopped(self, engine):
        january = engine.calendar.bucket_for(at(2024, 1, 1), Granularity.MONTHLY)
        assert (await engine.summaries.summary(january)).total_income == Money.zero()
        await engine.stop()

        await engine.ledger.insert(
            make_transaction("50.00", at(2024, 1, 10), type=TransactionType.INCOME),
        )
        await engine.start()
        summary = await engine.summaries.summary(january)
        trend = await engine.trends.monthly_trend(1)
        # Stopping with the start-up rebuild still queued must not hang
        await asyncio.wait_for(engine.stop(), timeout=5)

        assert summary.total_income == Money("50.00")
        assert trend[0].income == Money("50.00")
        assert not any(worker.running for worker in engine.workers)

    @pytest.mark.asyncio
    async def test_refresh_leaves_results_unchanged(self, engine):
        await add_income(engine, "1200.00", at(2024, 1, 2))
        await add_expense(engine, "80.00", at(2024, 1, 8))
        await add_expense(
            engine,
            "35.25",
            at(2024, 1, 9),
            category=TransactionCategory.TRANSPORTATION,
        )
        await engine.wait_idle()
        january = engine.calendar.bucket_for(at(2024, 1, 1), Granularity.MONTHLY)
        summary_before = await engine.summaries.summary(january)
        breakdown_before = await engine.categories.category_breakdown(january)
        balance_before = engine.balance.current.value

        for worker in engine.workers:
            worker.refresh()
        await engine.wait_idle()

        assert await engine.summaries.summary(january) == summary_before
        assert await engine.categories.category_breakdown(january) == breakdown_before
        assert engine.balance.current.value.same_totals(balance_before)


class TestBalanceScenarios:
    @pytest.mark.asyncio
    async def test_income_and_expense_in_one_month(self, engine):
        await add_income(engine, "1000.00", at(2024, 1, 5))
        await add_expense(engine, "400.00", at(2024, 1, 10))
        await engine.wait_idle()

        current = engine.balance.current.value
        january = engine.calendar.bucket_for(at(2024, 1, 1), Granularity.MONTHLY)
        summary = await engine.summaries.summary(january)

        assert current.net_balance == Money("600.00")
        assert summary.total_income == Money("1000.00")
        assert summary.total_expenses == Money("400.00")
        assert summary.net_balance == Money("600.00")

    @pytest.mark.asyncio
    async def test_deleting_income_keeps_history(self, engine):
        salary = await add_income(engine, "1000.00", at(2024, 1, 5))
        await add_expense(engine, "400.00", at(2024, 1, 10))
        await engine.wait_idle()

        await engine.delete_transaction(salary.id)
        await engine.wait_idle()

        history = await engine.balance.history(Granularity.MONTHLY)
        nets = [snapshot.net_balance for snapshot in history.value]
        assert engine.balance.current.value.net_balance == Money.from_minor_units(
            -40000,
        )
        assert nets[0] == Money.from_minor_units(-40000)
        assert Money("600.00") in nets

    @pytest.mark.asyncio
    async def test_monthly_expenses_never_touch_the_balance(self, engine):
        await add_income(engine, "100.00", at(2024, 1, 5))
        await engine.add_monthly_expense(
            "900.00",
            "Rent",
            TransactionCategory.HOUSING,
            1,
        )
        await engine.wait_idle()

        assert engine.balance.current.value.net_balance == Money("100.00")
        assert [e.description for e in engine.expenses.active.value] == ["Rent"]

    @pytest.mark.asyncio
    async def test_moving_a_transaction_updates_both_months(self, engine):
        groceries = await add_expense(engine, "30.00", at(2024, 1, 31, 23, 59))
        await engine.wait_idle()

        await engine.update_transaction(groceries.id, occurred_at=at(2024, 2, 1))
        await engine.wait_idle()

        january = engine.calendar.bucket_for(at(2024, 1, 1), Granularity.MONTHLY)
        february = engine.calendar.bucket_for(at(2024, 2, 1), Granularity.MONTHLY)
        assert (await engine.summaries.summary(january)).is_empty
        assert (await engine.summaries.summary(february)).total_expenses == Money(
            "30.00",
        )
        assert engine.balance.current.value.net_balance == Money.from_minor_units(
            -3000,
        )

    @pytest.mark.asyncio
    async def test_unknown_transaction_is_rejected(self, engine):
        with pytest.raises(TransactionNotFoundError):
            await engine.delete_transaction(uuid4())


class TestAnalyticsThroughEngine:
    @pytest.mark.asyncio
    async def test_categories_and_trends_see_the_same_ledger(self, engine, clock):
        await add_income(engine, "500.00", at(2024, 1, 3))
        await add_expense(engine, "75.00", at(2024, 1, 4))
        await add_expense(
            engine,
            "25.00",
            at(2024, 1, 6),
            category=TransactionCategory.ENTERTAINMENT,
        )
        await engine.wait_idle()

        january = engine.calendar.bucket_for(clock(), Granularity.MONTHLY)
        breakdown = await engine.categories.category_breakdown(january)
        trend = await engine.trends.monthly_trend(1)

        assert [b.category for b in breakdown] == [
            TransactionCategory.FOOD,
            TransactionCategory.ENTERTAINMENT,
        ]
        assert trend[0].net == Money("400.00")

    @pytest.mark.asyncio
    async def test_monthly_expense_lifecycle(self, engine):
        rent = await engine.add_monthly_expense(
            "900.00",
            "Rent",
            TransactionCategory.HOUSING,
            1,
        )
        await engine.mark_monthly_expense_paid(rent.id, at(2024, 1, 2))
        await engine.deactivate_monthly_expense(rent.id)
        await engine.wait_idle()

        stored = await engine.expenses.get(rent.id)
        assert engine.expenses.active.value == []
        assert stored.last_paid_at == at(2024, 1, 2)
        assert not stored.is_active
