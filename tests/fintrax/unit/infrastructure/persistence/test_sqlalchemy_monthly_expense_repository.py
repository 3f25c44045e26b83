"""Tests for SqlAlchemyMonthlyExpenseRepository on SQLite."""

from uuid import uuid4

import pytest

from fintrax.domain.ledger import ChangeKind
from fintrax.domain.ledger.exceptions import MonthlyExpenseNotFoundError
from fintrax.domain.shared.exceptions import StoreUnavailableError
from fintrax.infrastructure.persistence.sqlalchemy.models import Base
from tests.shared.fixtures import at, make_expense


@pytest.fixture
def repository(sql_factory):
    return sql_factory.monthly_expense_repository()


@pytest.mark.asyncio
async def test_save_inserts_then_updates(repository):
    seen = []
    repository.on_change(seen.append)
    expense = make_expense("899.00", due_day=1, description="Rent")

    await repository.save(expense)
    await repository.save(expense.mark_paid(at(2024, 1, 2)))

    loaded = await repository.get(expense.id)
    assert [c.kind for c in seen] == [ChangeKind.INSERTED, ChangeKind.UPDATED]
    assert loaded.last_paid_at == at(2024, 1, 2)
    assert loaded.amount == expense.amount


@pytest.mark.asyncio
async def test_active_list_is_ordered_by_due_day(repository):
    late = make_expense(due_day=20, description="Insurance")
    early = make_expense(due_day=2, description="Rent")
    inactive = make_expense(due_day=1, description="Old gym").deactivate()
    for expense in (late, early, inactive):
        await repository.save(expense)

    active = await repository.list_active()
    everything = await repository.list_all()

    assert [e.description for e in active] == ["Rent", "Insurance"]
    assert [e.description for e in everything] == ["Old gym", "Rent", "Insurance"]


@pytest.mark.asyncio
async def test_delete_unknown_raises(repository):
    with pytest.raises(MonthlyExpenseNotFoundError):
        await repository.delete(uuid4())


@pytest.mark.asyncio
async def test_missing_tables_raise_store_unavailable(repository, db_engine):
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    with pytest.raises(StoreUnavailableError):
        await repository.save(make_expense())


@pytest.mark.asyncio
async def test_modify_reads_and_writes_in_one_step(repository):
    expense = make_expense("50.00", due_day=5)
    await repository.save(expense)
    seen = []
    repository.on_change(seen.append)

    updated = await repository.modify(expense.id, lambda e: e.with_changes(due_day=9))
    unchanged = await repository.modify(expense.id, lambda e: e)

    assert (await repository.get(expense.id)).due_day == 9
    assert unchanged == updated
    assert [c.kind for c in seen] == [ChangeKind.UPDATED]


@pytest.mark.asyncio
async def test_modify_unknown_raises(repository):
    with pytest.raises(MonthlyExpenseNotFoundError):
        await repository.modify(uuid4(), lambda e: e)
