"""Store factory protocol for the application layer."""

from __future__ import annotations

from typing import Protocol

from fintrax.domain.ledger.repositories import (
    BalanceSnapshotRepository,
    LedgerStore,
    MonthlyExpenseRepository,
)


class StoreFactory(Protocol):
    """Protocol for obtaining the stores the engine runs on."""

    def ledger_store(self) -> LedgerStore:
        """Get the ledger store."""
        ...

    def monthly_expense_repository(self) -> MonthlyExpenseRepository:
        """Get the recurring expense store."""
        ...

    def balance_snapshot_repository(self) -> BalanceSnapshotRepository:
        """Get the balance snapshot repository."""
        ...
