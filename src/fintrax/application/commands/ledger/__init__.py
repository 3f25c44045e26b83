"""Ledger commands."""

from fintrax.application.commands.ledger.create_transaction_command import (
    CreateTransactionCommand,
)
from fintrax.application.commands.ledger.delete_transaction_command import (
    DeleteTransactionCommand,
)
from fintrax.application.commands.ledger.update_transaction_command import (
    UpdateTransactionCommand,
)

__all__ = [
    "CreateTransactionCommand",
    "DeleteTransactionCommand",
    "UpdateTransactionCommand",
]
