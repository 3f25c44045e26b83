"""Recurring expense store interface."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional
from uuid import UUID

from fintrax.domain.ledger.entities import MonthlyExpense
from fintrax.domain.ledger.events import RecurringExpenseChangeCallback, Unsubscribe


class MonthlyExpenseRepository(ABC):
    """Repository interface for MonthlyExpense records."""

    @abstractmethod
    async def save(self, expense: MonthlyExpense) -> None:
        """Insert or replace a monthly expense."""

    @abstractmethod
    async def modify(
        self,
        expense_id: UUID,
        edit: Callable[[MonthlyExpense], MonthlyExpense],
    ) -> MonthlyExpense:
        """
        Read, edit and save one expense as a single serialized write.

        An unchanged result is returned without a write or change event.
        Raises MonthlyExpenseNotFoundError.
        """

    @abstractmethod
    async def get(self, expense_id: UUID) -> Optional[MonthlyExpense]:
        """Find monthly expense by ID."""

    @abstractmethod
    async def delete(self, expense_id: UUID) -> None:
        """Delete a monthly expense (raises MonthlyExpenseNotFoundError)."""

    @abstractmethod
    async def list_all(self) -> List[MonthlyExpense]:
        """All monthly expenses ordered by due day ascending."""

    @abstractmethod
    async def list_active(self) -> List[MonthlyExpense]:
        """Active monthly expenses ordered by due day ascending."""

    @abstractmethod
    def on_change(self, callback: RecurringExpenseChangeCallback) -> Unsubscribe:
        """Register a change callback; returns a function that removes it."""
