"""Ledger domain layer exports."""

# Entities
from fintrax.domain.ledger.entities import (
    LIFETIME_KEY,
    Balance,
    MonthlyExpense,
    Transaction,
)

# Events
from fintrax.domain.ledger.events import (
    ChangeKind,
    LedgerChange,
    RecurringExpenseChange,
)

# Repository Interfaces
from fintrax.domain.ledger.repositories import (
    BalanceSnapshotRepository,
    LedgerStore,
    MonthlyExpenseRepository,
)

# Value Objects
from fintrax.domain.ledger.value_objects import (
    Money,
    RecurringPeriod,
    TransactionCategory,
    TransactionType,
)

__all__ = [
    # Value Objects
    "Money",
    "RecurringPeriod",
    "TransactionCategory",
    "TransactionType",
    # Entities
    "LIFETIME_KEY",
    "Balance",
    "MonthlyExpense",
    "Transaction",
    # Events
    "ChangeKind",
    "LedgerChange",
    "RecurringExpenseChange",
    # Repository Interfaces
    "BalanceSnapshotRepository",
    "LedgerStore",
    "MonthlyExpenseRepository",
]
