"""SQLAlchemy store implementations."""

from fintrax.infrastructure.persistence.sqlalchemy.repositories.balance_snapshot_repository import (  # NOQA: E501
    SqlAlchemyBalanceSnapshotRepository,
)
from fintrax.infrastructure.persistence.sqlalchemy.repositories.factory import (
    SqlAlchemyStoreFactory,
)
from fintrax.infrastructure.persistence.sqlalchemy.repositories.ledger_store import (
    SqlAlchemyLedgerStore,
)
from fintrax.infrastructure.persistence.sqlalchemy.repositories.monthly_expense_repository import (  # NOQA: E501
    SqlAlchemyMonthlyExpenseRepository,
)

__all__ = [
    "SqlAlchemyBalanceSnapshotRepository",
    "SqlAlchemyLedgerStore",
    "SqlAlchemyMonthlyExpenseRepository",
    "SqlAlchemyStoreFactory",
]
