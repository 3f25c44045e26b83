"""Recurring monthly expense commands."""

from fintrax.application.commands.recurring.create_monthly_expense_command import (
    CreateMonthlyExpenseCommand,
)
from fintrax.application.commands.recurring.update_monthly_expense_command import (
    DeactivateMonthlyExpenseCommand,
    DeleteMonthlyExpenseCommand,
    MarkMonthlyExpensePaidCommand,
    UpdateMonthlyExpenseCommand,
)

__all__ = [
    "CreateMonthlyExpenseCommand",
    "DeactivateMonthlyExpenseCommand",
    "DeleteMonthlyExpenseCommand",
    "MarkMonthlyExpensePaidCommand",
    "UpdateMonthlyExpenseCommand",
]
