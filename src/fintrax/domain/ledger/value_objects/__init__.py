"""Value objects for the ledger domain."""

from fintrax.domain.ledger.value_objects.money import DEFAULT_SCALE, Money
from fintrax.domain.ledger.value_objects.recurring_period import RecurringPeriod
from fintrax.domain.ledger.value_objects.transaction_category import (
    TransactionCategory,
)
from fintrax.domain.ledger.value_objects.transaction_type import TransactionType

__all__ = [
    "DEFAULT_SCALE",
    "Money",
    "RecurringPeriod",
    "TransactionCategory",
    "TransactionType",
]
