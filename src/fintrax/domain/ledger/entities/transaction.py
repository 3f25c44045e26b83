"""Transaction entity: the unit of record in the ledger."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

from fintrax.domain.ledger.exceptions import (
    CategoryMismatchError,
    InvalidDescriptionError,
)
from fintrax.domain.ledger.value_objects import (
    Money,
    RecurringPeriod,
    TransactionCategory,
    TransactionType,
)
from fintrax.domain.shared.exceptions import InvalidAmountError
from fintrax.domain.shared.time import to_utc, utc_now

MAX_DESCRIPTION_LENGTH = 255


def validate_description(description: str) -> None:
    if (
        not isinstance(description, str)
        or not description.strip()
        or len(description) > MAX_DESCRIPTION_LENGTH
    ):
        raise InvalidDescriptionError(str(description), MAX_DESCRIPTION_LENGTH)


def validate_positive_amount(amount: Any) -> None:
    if not isinstance(amount, Money):
        msg = f"Amount must be Money, got {type(amount).__name__}"
        raise InvalidAmountError(msg, amount)
    if not amount.is_positive():
        msg = f"Amount must be strictly positive, got {amount}"
        raise InvalidAmountError(msg, amount)


def _as_money(amount: Money | Decimal | int | str, scale: int) -> Money:
    if isinstance(amount, Money):
        return amount
    return Money(amount, scale=scale)


@dataclass(frozen=True)
class Transaction:
    """
    Immutable ledger record.

    The stored amount is always a positive magnitude; ``type`` alone decides
    whether it adds to or subtracts from aggregates. Edits produce a new
    instance with the same ``id`` (see ``with_changes``).

    Expenses may not use the INCOME category. Income may use any category.
    """

    id: UUID
    amount: Money
    description: str
    category: TransactionCategory
    type: TransactionType
    occurred_at: datetime
    recurrence: Optional[RecurringPeriod] = None

    def __post_init__(self) -> None:
        validate_positive_amount(self.amount)
        validate_description(self.description)
        if (
            self.type is TransactionType.EXPENSE
            and self.category is TransactionCategory.INCOME
        ):
            raise CategoryMismatchError(self.type, self.category)
        object.__setattr__(self, "occurred_at", to_utc(self.occurred_at))

    @classmethod
    def create(  # NOQA: PLR0913
        cls,
        amount: Money | Decimal | int | str,
        description: str,
        category: TransactionCategory,
        type: TransactionType,  # NOQA: A002
        occurred_at: Optional[datetime] = None,
        recurrence: Optional[RecurringPeriod] = None,
        scale: int = 2,
    ) -> Transaction:
        return cls(
            id=uuid4(),
            amount=_as_money(amount, scale),
            description=description,
            category=category,
            type=type,
            occurred_at=occurred_at or utc_now(),
            recurrence=recurrence,
        )

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type is TransactionType.EXPENSE

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None

    @property
    def signed_amount(self) -> Money:
        return self.amount if self.is_income else -self.amount

    def with_changes(self, **changes: Any) -> Transaction:
        """Return the full replacement of this transaction (same identity)."""
        changes.pop("id", None)
        return replace(self, **changes)

    def __str__(self) -> str:
        return (
            f"{self.occurred_at.date()} {self.type.value} "
            f"{self.amount} {self.category.value} '{self.description}'"
        )
