"""
Pytest configuration for fintrax tests.

Provides in-memory stores, a calendar and a fixed clock. Engines and
workers are always stopped at teardown so no task outlives its test.
"""

import pytest
import pytest_asyncio

from fintrax.application.engine import FinanceEngine
from fintrax.domain.calendar import PeriodCalendar
from fintrax.infrastructure.persistence.memory import (
    InMemoryBalanceSnapshotRepository,
    InMemoryLedgerStore,
    InMemoryMonthlyExpenseRepository,
    InMemoryStoreFactory,
)
from tests.shared.fixtures import FAST_POLICY, FixedClock, at


@pytest.fixture
def calendar() -> PeriodCalendar:
    return PeriodCalendar()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(at(2024, 1, 20))


@pytest.fixture
def ledger() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def snapshots() -> InMemoryBalanceSnapshotRepository:
    return InMemoryBalanceSnapshotRepository()


@pytest.fixture
def expense_repository() -> InMemoryMonthlyExpenseRepository:
    return InMemoryMonthlyExpenseRepository()


@pytest.fixture
def store_factory() -> InMemoryStoreFactory:
    return InMemoryStoreFactory()


@pytest_asyncio.fixture
async def engine(store_factory, calendar, clock):
    """Started engine on in-memory stores, caught up and ready for writes."""
    finance_engine = FinanceEngine.from_factory(
        store_factory,
        calendar=calendar,
        policy=FAST_POLICY,
        clock=clock,
    )
    await finance_engine.start()
    await finance_engine.wait_idle()
    yield finance_engine
    await finance_engine.stop()
