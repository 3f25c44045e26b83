"""MonthlyExpense entity: a recurring obligation, distinct from transactions."""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

from fintrax.domain.ledger.entities.transaction import (
    validate_description,
    validate_positive_amount,
)
from fintrax.domain.ledger.exceptions import CategoryMismatchError, InvalidDueDayError
from fintrax.domain.ledger.value_objects import (
    Money,
    TransactionCategory,
    TransactionType,
)
from fintrax.domain.shared.time import to_utc, utc_now

MIN_DUE_DAY = 1
MAX_DUE_DAY = 31


@dataclass(frozen=True)
class MonthlyExpense:
    """
    Recurring monthly obligation.

    Lifecycle: created by the user, deactivated (never deleted by the engine)
    when it stops recurring, and marked paid by setting ``last_paid_at``.
    It never contributes to balance or summary totals.
    """

    id: UUID
    amount: Money
    description: str
    category: TransactionCategory
    due_day: int
    is_active: bool = True
    created_at: datetime = field(default_factory=utc_now)
    last_paid_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        validate_positive_amount(self.amount)
        validate_description(self.description)
        if self.category is TransactionCategory.INCOME:
            raise CategoryMismatchError(TransactionType.EXPENSE, self.category)
        if (
            isinstance(self.due_day, bool)
            or not isinstance(self.due_day, int)
            or not MIN_DUE_DAY <= self.due_day <= MAX_DUE_DAY
        ):
            raise InvalidDueDayError(self.due_day)
        object.__setattr__(self, "created_at", to_utc(self.created_at))
        if self.last_paid_at is not None:
            object.__setattr__(self, "last_paid_at", to_utc(self.last_paid_at))

    @classmethod
    def create(
        cls,
        amount: Money | Decimal | int | str,
        description: str,
        category: TransactionCategory,
        due_day: int,
        scale: int = 2,
    ) -> MonthlyExpense:
        money = amount if isinstance(amount, Money) else Money(amount, scale=scale)
        return cls(
            id=uuid4(),
            amount=money,
            description=description,
            category=category,
            due_day=due_day,
        )

    def deactivate(self) -> MonthlyExpense:
        return replace(self, is_active=False)

    def activate(self) -> MonthlyExpense:
        return replace(self, is_active=True)

    def mark_paid(self, paid_at: Optional[datetime] = None) -> MonthlyExpense:
        return replace(self, last_paid_at=paid_at or utc_now())

    def with_changes(self, **changes: Any) -> MonthlyExpense:
        changes.pop("id", None)
        return replace(self, **changes)

    def due_date_in(self, year: int, month: int) -> date:
        """Due date within a month; clamps e.g. day 31 to the month's last day."""
        last_day = monthrange(year, month)[1]
        return date(year, month, min(self.due_day, last_day))

    def is_paid_between(self, start: datetime, end: datetime) -> bool:
        if self.last_paid_at is None:
            return False
        return to_utc(start) <= self.last_paid_at < to_utc(end)
