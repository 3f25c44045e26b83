"""Application commands (write side).

Every command validates its input through the domain entities before the
store is touched, so a rejected request never reaches an aggregate.
"""

from fintrax.application.commands.ledger import (
    CreateTransactionCommand,
    DeleteTransactionCommand,
    UpdateTransactionCommand,
)
from fintrax.application.commands.recurring import (
    CreateMonthlyExpenseCommand,
    DeactivateMonthlyExpenseCommand,
    DeleteMonthlyExpenseCommand,
    MarkMonthlyExpensePaidCommand,
    UpdateMonthlyExpenseCommand,
)

__all__ = [
    "CreateMonthlyExpenseCommand",
    "CreateTransactionCommand",
    "DeactivateMonthlyExpenseCommand",
    "DeleteMonthlyExpenseCommand",
    "DeleteTransactionCommand",
    "MarkMonthlyExpensePaidCommand",
    "UpdateMonthlyExpenseCommand",
    "UpdateTransactionCommand",
]
