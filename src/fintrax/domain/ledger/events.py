"""Change events emitted by the ledger and recurring-expense stores."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional
from uuid import UUID


class ChangeKind(Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class LedgerChange:
    """
    Notification that one transaction was inserted, updated or deleted.

    ``previous_occurred_at`` is set on updates and deletes so subscribers can
    recompute the bucket the transaction left as well as the one it entered.
    """

    kind: ChangeKind
    transaction_id: UUID
    occurred_at: datetime
    previous_occurred_at: Optional[datetime] = None

    def affected_instants(self) -> tuple[datetime, ...]:
        if (
            self.previous_occurred_at is None
            or self.previous_occurred_at == self.occurred_at
        ):
            return (self.occurred_at,)
        return (self.previous_occurred_at, self.occurred_at)


@dataclass(frozen=True)
class RecurringExpenseChange:
    """Notification that a monthly expense record changed."""

    kind: ChangeKind
    expense_id: UUID


LedgerChangeCallback = Callable[[LedgerChange], None]
RecurringExpenseChangeCallback = Callable[[RecurringExpenseChange], None]
Unsubscribe = Callable[[], None]
