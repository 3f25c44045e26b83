"""Delete a transaction from the ledger."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from fintrax.domain.ledger.repositories import LedgerStore

if TYPE_CHECKING:
    from fintrax.application.factories import StoreFactory

logger = logging.getLogger(__name__)


class DeleteTransactionCommand:
    """Delete a transaction; unknown ids raise TransactionNotFoundError."""

    def __init__(self, ledger_store: LedgerStore):
        self._ledger = ledger_store

    @classmethod
    def from_factory(cls, factory: StoreFactory) -> DeleteTransactionCommand:
        return cls(ledger_store=factory.ledger_store())

    async def execute(self, transaction_id: UUID) -> None:
        await self._ledger.delete(transaction_id)
        logger.info("Deleted transaction %s", transaction_id)
