"""SQLAlchemy models.

Importing this package registers every table with ``Base.metadata``.
"""

from fintrax.infrastructure.persistence.sqlalchemy.models.balance_snapshot_model import (  # NOQA: E501
    BalanceSnapshotModel,
)
from fintrax.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
    UpdatedAtMixin,
)
from fintrax.infrastructure.persistence.sqlalchemy.models.monthly_expense_model import (  # NOQA: E501
    MonthlyExpenseModel,
)
from fintrax.infrastructure.persistence.sqlalchemy.models.transaction_model import (
    TransactionModel,
)

__all__ = [
    "BalanceSnapshotModel",
    "Base",
    "MonthlyExpenseModel",
    "TimestampMixin",
    "TransactionModel",
    "UpdatedAtMixin",
]
