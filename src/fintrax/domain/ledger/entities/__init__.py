"""Entities for the ledger domain."""

from fintrax.domain.ledger.entities.balance import LIFETIME_KEY, Balance
from fintrax.domain.ledger.entities.monthly_expense import MonthlyExpense
from fintrax.domain.ledger.entities.transaction import (
    MAX_DESCRIPTION_LENGTH,
    Transaction,
)

__all__ = [
    "LIFETIME_KEY",
    "MAX_DESCRIPTION_LENGTH",
    "Balance",
    "MonthlyExpense",
    "Transaction",
]
