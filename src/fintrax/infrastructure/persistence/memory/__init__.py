"""In-memory store implementations."""

from fintrax.infrastructure.persistence.memory.balance_snapshot_repository import (
    InMemoryBalanceSnapshotRepository,
)
from fintrax.infrastructure.persistence.memory.factory import InMemoryStoreFactory
from fintrax.infrastructure.persistence.memory.ledger_store import (
    InMemoryLedgerStore,
)
from fintrax.infrastructure.persistence.memory.monthly_expense_repository import (
    InMemoryMonthlyExpenseRepository,
)

__all__ = [
    "InMemoryBalanceSnapshotRepository",
    "InMemoryLedgerStore",
    "InMemoryMonthlyExpenseRepository",
    "InMemoryStoreFactory",
]
