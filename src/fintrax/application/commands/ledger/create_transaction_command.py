"""Record a new income or expense in the ledger."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from fintrax.domain.ledger.entities import Transaction
from fintrax.domain.ledger.repositories import LedgerStore
from fintrax.domain.ledger.value_objects import (
    DEFAULT_SCALE,
    Money,
    RecurringPeriod,
    TransactionCategory,
    TransactionType,
)

if TYPE_CHECKING:
    from fintrax.application.factories import StoreFactory

logger = logging.getLogger(__name__)


class CreateTransactionCommand:
    """Validate input and insert a transaction."""

    def __init__(self, ledger_store: LedgerStore, scale: int = DEFAULT_SCALE):
        self._ledger = ledger_store
        self._scale = scale

    @classmethod
    def from_factory(
        cls,
        factory: StoreFactory,
        scale: int = DEFAULT_SCALE,
    ) -> CreateTransactionCommand:
        return cls(ledger_store=factory.ledger_store(), scale=scale)

    async def execute(  # NOQA: PLR0913
        self,
        amount: Money | Decimal | int | str,
        description: str,
        category: TransactionCategory,
        type: TransactionType,  # NOQA: A002
        occurred_at: Optional[datetime] = None,
        recurrence: Optional[RecurringPeriod] = None,
    ) -> Transaction:
        # Validation happens in the entity, before the store is touched
        transaction = Transaction.create(
            amount=amount,
            description=description,
            category=category,
            type=type,
            occurred_at=occurred_at,
            recurrence=recurrence,
            scale=self._scale,
        )
        await self._ledger.insert(transaction)
        logger.info("Created transaction %s", transaction)
        return transaction
