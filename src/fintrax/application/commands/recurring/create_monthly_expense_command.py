"""Register a new recurring monthly expense."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from fintrax.domain.ledger.entities import MonthlyExpense
from fintrax.domain.ledger.repositories import MonthlyExpenseRepository
from fintrax.domain.ledger.value_objects import (
    DEFAULT_SCALE,
    Money,
    TransactionCategory,
)

if TYPE_CHECKING:
    from fintrax.application.factories import StoreFactory

logger = logging.getLogger(__name__)


class CreateMonthlyExpenseCommand:
    """Validate input and store a new monthly expense."""

    def __init__(
        self,
        repository: MonthlyExpenseRepository,
        scale: int = DEFAULT_SCALE,
    ):
        self._repository = repository
        self._scale = scale

    @classmethod
    def from_factory(
        cls,
        factory: StoreFactory,
        scale: int = DEFAULT_SCALE,
    ) -> CreateMonthlyExpenseCommand:
        return cls(repository=factory.monthly_expense_repository(), scale=scale)

    async def execute(
        self,
        amount: Money | Decimal | int | str,
        description: str,
        category: TransactionCategory,
        due_day: int,
    ) -> MonthlyExpense:
        expense = MonthlyExpense.create(
            amount=amount,
            description=description,
            category=category,
            due_day=due_day,
            scale=self._scale,
        )
        await self._repository.save(expense)
        logger.info(
            "Created monthly expense %s due on day %d",
            expense.id,
            expense.due_day,
        )
        return expense
