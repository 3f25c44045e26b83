"""Lifecycle changes of an existing monthly expense."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from fintrax.domain.ledger.entities import MonthlyExpense
from fintrax.domain.ledger.exceptions import MonthlyExpenseNotFoundError
from fintrax.domain.ledger.repositories import MonthlyExpenseRepository
from fintrax.domain.ledger.value_objects import (
    DEFAULT_SCALE,
    Money,
    TransactionCategory,
)

if TYPE_CHECKING:
    from fintrax.application.factories import StoreFactory

logger = logging.getLogger(__name__)


class _MonthlyExpenseCommand:
    def __init__(
        self,
        repository: MonthlyExpenseRepository,
        scale: int = DEFAULT_SCALE,
    ):
        self._repository = repository
        self._scale = scale

    @classmethod
    def from_factory(cls, factory: StoreFactory, scale: int = DEFAULT_SCALE):
        return cls(repository=factory.monthly_expense_repository(), scale=scale)

    async def _load(self, expense_id: UUID) -> MonthlyExpense:
        expense = await self._repository.get(expense_id)
        if expense is None:
            raise MonthlyExpenseNotFoundError(expense_id)
        return expense


class UpdateMonthlyExpenseCommand(_MonthlyExpenseCommand):
    """Edit amount, description, category or due day."""

    async def execute(
        self,
        expense_id: UUID,
        amount: Optional[Money | Decimal | int | str] = None,
        description: Optional[str] = None,
        category: Optional[TransactionCategory] = None,
        due_day: Optional[int] = None,
    ) -> MonthlyExpense:
        changes: dict[str, Any] = {}
        if amount is not None:
            changes["amount"] = (
                amount if isinstance(amount, Money) else Money(amount, self._scale)
            )
        if description is not None:
            changes["description"] = description
        if category is not None:
            changes["category"] = category
        if due_day is not None:
            changes["due_day"] = due_day
        if not changes:
            return await self._load(expense_id)

        updated = await self._repository.modify(
            expense_id,
            lambda current: current.with_changes(**changes),
        )
        logger.info("Updated monthly expense %s", expense_id)
        return updated


class DeactivateMonthlyExpenseCommand(_MonthlyExpenseCommand):
    """Stop an expense from recurring; the record is kept."""

    async def execute(self, expense_id: UUID) -> MonthlyExpense:
        updated = await self._repository.modify(
            expense_id,
            lambda current: current.deactivate(),
        )
        logger.info("Deactivated monthly expense %s", expense_id)
        return updated


class MarkMonthlyExpensePaidCommand(_MonthlyExpenseCommand):
    """Record the payment date of an expense."""

    async def execute(
        self,
        expense_id: UUID,
        paid_at: Optional[datetime] = None,
    ) -> MonthlyExpense:
        updated = await self._repository.modify(
            expense_id,
            lambda current: current.mark_paid(paid_at),
        )
        logger.info(
            "Marked monthly expense %s paid at %s",
            expense_id,
            updated.last_paid_at,
        )
        return updated


class DeleteMonthlyExpenseCommand(_MonthlyExpenseCommand):
    """Remove an expense record entirely (user action only)."""

    async def execute(self, expense_id: UUID) -> None:
        await self._repository.delete(expense_id)
        logger.info("Deleted monthly expense %s", expense_id)
