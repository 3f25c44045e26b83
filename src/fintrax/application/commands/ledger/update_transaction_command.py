"""Replace an existing transaction with an edited version."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from fintrax.domain.ledger.entities import Transaction
from fintrax.domain.ledger.exceptions import TransactionNotFoundError
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


class UpdateTransactionCommand:
    """Apply edits to a transaction and persist the full replacement."""

    def __init__(self, ledger_store: LedgerStore, scale: int = DEFAULT_SCALE):
        self._ledger = ledger_store
        self._scale = scale

    @classmethod
    def from_factory(
        cls,
        factory: StoreFactory,
        scale: int = DEFAULT_SCALE,
    ) -> UpdateTransactionCommand:
        return cls(ledger_store=factory.ledger_store(), scale=scale)

    async def execute(  # NOQA: PLR0913
        self,
        transaction_id: UUID,
        amount: Optional[Money | Decimal | int | str] = None,
        description: Optional[str] = None,
        category: Optional[TransactionCategory] = None,
        type: Optional[TransactionType] = None,  # NOQA: A002
        occurred_at: Optional[datetime] = None,
        recurrence: Optional[RecurringPeriod] = None,
        clear_recurrence: bool = False,
    ) -> Transaction:
        """
        Edit a transaction; omitted fields keep their stored value.

        ``clear_recurrence`` removes the recurrence marker. The read and the
        write run as one serialized store operation, so concurrent edits of
        the same transaction are applied one after the other.
        """
        changes: dict[str, Any] = {}
        if amount is not None:
            changes["amount"] = (
                amount if isinstance(amount, Money) else Money(amount, self._scale)
            )
        if description is not None:
            changes["description"] = description
        if category is not None:
            changes["category"] = category
        if type is not None:
            changes["type"] = type
        if occurred_at is not None:
            changes["occurred_at"] = occurred_at
        if recurrence is not None:
            changes["recurrence"] = recurrence
        elif clear_recurrence:
            changes["recurrence"] = None

        if not changes:
            transaction = await self._ledger.get(transaction_id)
            if transaction is None:
                raise TransactionNotFoundError(transaction_id)
            return transaction

        # Building the replacement re-runs every entity validation
        updated = await self._ledger.modify(
            transaction_id,
            lambda current: current.with_changes(**changes),
        )
        logger.info(
            "Updated transaction %s (%s)",
            transaction_id,
            ", ".join(sorted(changes)),
        )
        return updated
