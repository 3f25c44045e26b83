"""The engine running against SQLAlchemy stores on a SQLite file."""

import pytest
import pytest_asyncio

from fintrax.application.engine import FinanceEngine
from fintrax.domain.calendar import Granularity
from fintrax.domain.ledger import Money, TransactionCategory, TransactionType
from fintrax.infrastructure.persistence.sqlalchemy.database import (
    create_engine,
    create_session_maker,
)
from fintrax.infrastructure.persistence.sqlalchemy.models import Base
from fintrax.infrastructure.persistence.sqlalchemy.repositories import (
    SqlAlchemyStoreFactory,
)
from tests.shared.fixtures import FAST_POLICY, FixedClock, at


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    # Workers and writers use separate connections here
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'fintrax.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


def new_factory(db_engine) -> SqlAlchemyStoreFactory:
    return SqlAlchemyStoreFactory(create_session_maker(db_engine))


@pytest.mark.asyncio
async def test_balance_and_summary_follow_database_writes(file_engine):
    clock = FixedClock(at(2024, 1, 20))
    async with FinanceEngine.from_factory(
        new_factory(file_engine),
        policy=FAST_POLICY,
        clock=clock,
    ) as engine:
        await engine.wait_idle()
        await engine.add_transaction(
            "1000.00",
            "Salary",
            TransactionCategory.INCOME,
            TransactionType.INCOME,
            occurred_at=at(2024, 1, 5),
        )
        await engine.add_transaction(
            "400.00",
            "Rent",
            TransactionCategory.HOUSING,
            TransactionType.EXPENSE,
            occurred_at=at(2024, 1, 6),
        )
        await engine.wait_idle()

        january = engine.calendar.bucket_for(at(2024, 1, 1), Granularity.MONTHLY)
        summary = await engine.summaries.summary(january)
        latest = await engine.balance.current_balance()

    assert engine.balance.current.value.net_balance == Money("600.00")
    assert summary.net_balance == Money("600.00")
    assert latest.net_balance == Money("600.00")


@pytest.mark.asyncio
async def test_restart_recovers_balance_from_database(file_engine):
    async with FinanceEngine.from_factory(
        new_factory(file_engine),
        policy=FAST_POLICY,
    ) as engine:
        await engine.wait_idle()
        await engine.add_transaction(
            "50.00",
            "Gift",
            TransactionCategory.INCOME,
            TransactionType.INCOME,
            occurred_at=at(2024, 1, 5),
        )
        await engine.wait_idle()

    async with FinanceEngine.from_factory(
        new_factory(file_engine),
        policy=FAST_POLICY,
    ) as engine:
        await engine.wait_idle()
        assert engine.balance.current.value.net_balance == Money("50.00")
