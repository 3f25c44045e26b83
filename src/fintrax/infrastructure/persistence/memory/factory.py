"""Store factory backed by in-memory stores."""

from fintrax.infrastructure.persistence.memory.balance_snapshot_repository import (
    InMemoryBalanceSnapshotRepository,
)
from fintrax.infrastructure.persistence.memory.ledger_store import (
    InMemoryLedgerStore,
)
from fintrax.infrastructure.persistence.memory.monthly_expense_repository import (
    InMemoryMonthlyExpenseRepository,
)


class InMemoryStoreFactory:
    """In-memory implementation of the StoreFactory Protocol."""

    def __init__(self):
        self._ledger = InMemoryLedgerStore()
        self._expenses = InMemoryMonthlyExpenseRepository()
        self._snapshots = InMemoryBalanceSnapshotRepository()

    def ledger_store(self) -> InMemoryLedgerStore:
        return self._ledger

    def monthly_expense_repository(self) -> InMemoryMonthlyExpenseRepository:
        return self._expenses

    def balance_snapshot_repository(self) -> InMemoryBalanceSnapshotRepository:
        return self._snapshots
