"""Repository interfaces for the ledger domain."""

from fintrax.domain.ledger.repositories.balance_snapshot_repository import (
    BalanceSnapshotRepository,
)
from fintrax.domain.ledger.repositories.ledger_store import LedgerStore
from fintrax.domain.ledger.repositories.monthly_expense_repository import (
    MonthlyExpenseRepository,
)

__all__ = ["BalanceSnapshotRepository", "LedgerStore", "MonthlyExpenseRepository"]
