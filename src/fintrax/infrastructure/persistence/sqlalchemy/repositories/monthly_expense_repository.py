"""SQLAlchemy implementation of MonthlyExpenseRepository."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fintrax.domain.ledger.entities import MonthlyExpense
from fintrax.domain.ledger.events import (
    ChangeKind,
    RecurringExpenseChange,
    RecurringExpenseChangeCallback,
    Unsubscribe,
)
from fintrax.domain.ledger.exceptions import MonthlyExpenseNotFoundError
from fintrax.domain.ledger.repositories import MonthlyExpenseRepository
from fintrax.domain.ledger.value_objects import Money, TransactionCategory
from fintrax.domain.shared.time import to_utc
from fintrax.infrastructure.persistence.change_feed import ChangeFeed
from fintrax.infrastructure.persistence.sqlalchemy.models import MonthlyExpenseModel
from fintrax.infrastructure.persistence.sqlalchemy.repositories._utils import (
    store_errors,
)

logger = logging.getLogger(__name__)


class SqlAlchemyMonthlyExpenseRepository(MonthlyExpenseRepository):
    """SQLAlchemy implementation of the recurring expense store."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker
        self._lock = asyncio.Lock()
        self._feed: ChangeFeed[RecurringExpenseChange] = ChangeFeed("monthly-expenses")

    async def save(self, expense: MonthlyExpense) -> None:
        async with self._lock, store_errors("expenses.save"):
            async with self._session_maker() as session, session.begin():
                model = await session.get(MonthlyExpenseModel, expense.id)
                if model:
                    logger.debug("Updating existing monthly expense: %s", expense.id)
                    kind = ChangeKind.UPDATED
                else:
                    logger.debug("Creating new monthly expense: %s", expense.id)
                    kind = ChangeKind.INSERTED
                    model = MonthlyExpenseModel(id=expense.id)
                    session.add(model)
                self._update_model(model, expense)
            logger.info(
                "Monthly expense saved: %s (ID: %s)",
                expense.description,
                expense.id,
            )
            self._feed.emit(RecurringExpenseChange(kind=kind, expense_id=expense.id))

    async def modify(
        self,
        expense_id: UUID,
        edit: Callable[[MonthlyExpense], MonthlyExpense],
    ) -> MonthlyExpense:
        async with self._lock, store_errors("expenses.modify"):
            async with self._session_maker() as session, session.begin():
                model = await session.get(MonthlyExpenseModel, expense_id)
                if model is None:
                    raise MonthlyExpenseNotFoundError(expense_id)
                previous = self._to_domain(model)
                updated = edit(previous)
                if updated == previous:
                    return previous
                self._update_model(model, updated)
            logger.info("Monthly expense updated: %s", expense_id)
            self._feed.emit(
                RecurringExpenseChange(kind=ChangeKind.UPDATED, expense_id=expense_id),
            )
            return updated

    async def get(self, expense_id: UUID) -> Optional[MonthlyExpense]:
        async with store_errors("expenses.get"), self._session_maker() as session:
            model = await session.get(MonthlyExpenseModel, expense_id)
            return self._to_domain(model) if model else None

    async def delete(self, expense_id: UUID) -> None:
        async with self._lock, store_errors("expenses.delete"):
            async with self._session_maker() as session, session.begin():
                model = await session.get(MonthlyExpenseModel, expense_id)
                if model is None:
                    raise MonthlyExpenseNotFoundError(expense_id)
                await session.delete(model)
            logger.info("Monthly expense deleted: %s", expense_id)
            self._feed.emit(
                RecurringExpenseChange(kind=ChangeKind.DELETED, expense_id=expense_id),
            )

    async def list_all(self) -> List[MonthlyExpense]:
        return await self._list(select(MonthlyExpenseModel), "expenses.list_all")

    async def list_active(self) -> List[MonthlyExpense]:
        stmt = select(MonthlyExpenseModel).where(MonthlyExpenseModel.is_active)
        return await self._list(stmt, "expenses.list_active")

    def on_change(self, callback: RecurringExpenseChangeCallback) -> Unsubscribe:
        return self._feed.subscribe(callback)

    async def _list(self, stmt, operation: str) -> List[MonthlyExpense]:
        stmt = stmt.order_by(
            MonthlyExpenseModel.due_day,
            MonthlyExpenseModel.created_at,
            MonthlyExpenseModel.id,
        )
        async with store_errors(operation), self._session_maker() as session:
            result = await session.execute(stmt)
            return [self._to_domain(m) for m in result.scalars().all()]

    def _update_model(
        self,
        model: MonthlyExpenseModel,
        expense: MonthlyExpense,
    ) -> None:
        model.amount_minor = expense.amount.minor_units
        model.scale = expense.amount.scale
        model.description = expense.description
        model.category = expense.category.value
        model.due_day = expense.due_day
        model.is_active = expense.is_active
        model.created_at = expense.created_at
        model.last_paid_at = expense.last_paid_at

    def _to_domain(self, model: MonthlyExpenseModel) -> MonthlyExpense:
        return MonthlyExpense(
            id=model.id,
            amount=Money.from_minor_units(model.amount_minor, model.scale),
            description=model.description,
            category=TransactionCategory(model.category),
            due_day=model.due_day,
            is_active=model.is_active,
            created_at=to_utc(model.created_at),
            last_paid_at=to_utc(model.last_paid_at) if model.last_paid_at else None,
        )
