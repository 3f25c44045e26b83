"""Direction of a ledger transaction."""

from enum import Enum


class TransactionType(Enum):
    """Determines the sign applied to a transaction amount in aggregates."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"

    def sign(self) -> int:
        return 1 if self is TransactionType.INCOME else -1
