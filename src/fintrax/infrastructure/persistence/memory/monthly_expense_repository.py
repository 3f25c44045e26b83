"""In-memory recurring expense store."""

from __future__ import annotations

import asyncio
from typing import Callable, List, Optional
from uuid import UUID

from fintrax.domain.ledger.entities import MonthlyExpense
from fintrax.domain.ledger.events import (
    ChangeKind,
    RecurringExpenseChange,
    RecurringExpenseChangeCallback,
    Unsubscribe,
)
from fintrax.domain.ledger.exceptions import MonthlyExpenseNotFoundError
from fintrax.domain.ledger.repositories import MonthlyExpenseRepository
from fintrax.infrastructure.persistence.change_feed import ChangeFeed


def due_order(expense: MonthlyExpense):
    return (expense.due_day, expense.created_at, str(expense.id))


class InMemoryMonthlyExpenseRepository(MonthlyExpenseRepository):
    def __init__(self):
        self._expenses: dict[UUID, MonthlyExpense] = {}
        self._lock = asyncio.Lock()
        self._feed: ChangeFeed[RecurringExpenseChange] = ChangeFeed("monthly-expenses")

    async def save(self, expense: MonthlyExpense) -> None:
        async with self._lock:
            kind = (
                ChangeKind.UPDATED
                if expense.id in self._expenses
                else ChangeKind.INSERTED
            )
            self._expenses[expense.id] = expense
            self._feed.emit(RecurringExpenseChange(kind=kind, expense_id=expense.id))

    async def modify(
        self,
        expense_id: UUID,
        edit: Callable[[MonthlyExpense], MonthlyExpense],
    ) -> MonthlyExpense:
        async with self._lock:
            previous = self._expenses.get(expense_id)
            if previous is None:
                raise MonthlyExpenseNotFoundError(expense_id)
            updated = edit(previous)
            if updated != previous:
                self._expenses[expense_id] = updated
                self._feed.emit(
                    RecurringExpenseChange(
                        kind=ChangeKind.UPDATED,
                        expense_id=expense_id,
                    ),
                )
            return updated

    async def get(self, expense_id: UUID) -> Optional[MonthlyExpense]:
        return self._expenses.get(expense_id)

    async def delete(self, expense_id: UUID) -> None:
        async with self._lock:
            if self._expenses.pop(expense_id, None) is None:
                raise MonthlyExpenseNotFoundError(expense_id)
            self._feed.emit(
                RecurringExpenseChange(kind=ChangeKind.DELETED, expense_id=expense_id),
            )

    async def list_all(self) -> List[MonthlyExpense]:
        return sorted(self._expenses.values(), key=due_order)

    async def list_active(self) -> List[MonthlyExpense]:
        return sorted(
            (e for e in self._expenses.values() if e.is_active),
            key=due_order,
        )

    def on_change(self, callback: RecurringExpenseChangeCallback) -> Unsubscribe:
        return self._feed.subscribe(callback)
