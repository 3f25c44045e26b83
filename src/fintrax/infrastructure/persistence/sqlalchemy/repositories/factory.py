"""SQLAlchemy store factory."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fintrax.infrastructure.persistence.sqlalchemy.repositories.balance_snapshot_repository import (  # NOQA: E501
    SqlAlchemyBalanceSnapshotRepository,
)
from fintrax.infrastructure.persistence.sqlalchemy.repositories.ledger_store import (
    SqlAlchemyLedgerStore,
)
from fintrax.infrastructure.persistence.sqlalchemy.repositories.monthly_expense_repository import (  # NOQA: E501
    SqlAlchemyMonthlyExpenseRepository,
)


class SqlAlchemyStoreFactory:
    """SQLAlchemy implementation of the StoreFactory Protocol."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

        # Cached instances (created on demand); stores hold the write lock
        # and the change feed, so there must be exactly one of each
        self._ledger: SqlAlchemyLedgerStore | None = None
        self._expenses: SqlAlchemyMonthlyExpenseRepository | None = None
        self._snapshots: SqlAlchemyBalanceSnapshotRepository | None = None

    def ledger_store(self) -> SqlAlchemyLedgerStore:
        if self._ledger is None:
            self._ledger = SqlAlchemyLedgerStore(self._session_maker)
        return self._ledger

    def monthly_expense_repository(self) -> SqlAlchemyMonthlyExpenseRepository:
        if self._expenses is None:
            self._expenses = SqlAlchemyMonthlyExpenseRepository(self._session_maker)
        return self._expenses

    def balance_snapshot_repository(self) -> SqlAlchemyBalanceSnapshotRepository:
        if self._snapshots is None:
            self._snapshots = SqlAlchemyBalanceSnapshotRepository(self._session_maker)
        return self._snapshots
