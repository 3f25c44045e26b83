"""In-memory LedgerStore, used by tests and as the full-scan oracle."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from fintrax.domain.ledger.entities import Transaction
from fintrax.domain.ledger.events import (
    ChangeKind,
    LedgerChange,
    LedgerChangeCallback,
    Unsubscribe,
)
from fintrax.domain.ledger.exceptions import (
    DuplicateTransactionError,
    TransactionNotFoundError,
)
from fintrax.domain.ledger.repositories import LedgerStore
from fintrax.domain.ledger.value_objects import TransactionCategory, TransactionType
from fintrax.domain.shared.exceptions import InvalidPeriodError
from fintrax.domain.shared.time import to_utc
from fintrax.infrastructure.persistence.change_feed import ChangeFeed

logger = logging.getLogger(__name__)


def ledger_order(transaction: Transaction):
    return (transaction.occurred_at, str(transaction.id))


class InMemoryLedgerStore(LedgerStore):
    """Dictionary-backed ledger with serialized mutations."""

    def __init__(self):
        self._transactions: dict[UUID, Transaction] = {}
        self._lock = asyncio.Lock()
        self._feed: ChangeFeed[LedgerChange] = ChangeFeed("ledger")

    async def insert(self, transaction: Transaction) -> None:
        async with self._lock:
            if transaction.id in self._transactions:
                raise DuplicateTransactionError(transaction.id)
            self._transactions[transaction.id] = transaction
            self._feed.emit(
                LedgerChange(
                    kind=ChangeKind.INSERTED,
                    transaction_id=transaction.id,
                    occurred_at=transaction.occurred_at,
                ),
            )

    async def update(self, transaction: Transaction) -> None:
        async with self._lock:
            self._replace(self._existing(transaction.id), transaction)

    async def modify(
        self,
        transaction_id: UUID,
        edit: Callable[[Transaction], Transaction],
    ) -> Transaction:
        async with self._lock:
            previous = self._existing(transaction_id)
            updated = edit(previous)
            if updated != previous:
                self._replace(previous, updated)
            return updated

    async def delete(self, transaction_id: UUID) -> None:
        async with self._lock:
            previous = self._transactions.pop(transaction_id, None)
            if previous is None:
                raise TransactionNotFoundError(transaction_id)
            self._feed.emit(
                LedgerChange(
                    kind=ChangeKind.DELETED,
                    transaction_id=transaction_id,
                    occurred_at=previous.occurred_at,
                    previous_occurred_at=previous.occurred_at,
                ),
            )

    async def get(self, transaction_id: UUID) -> Optional[Transaction]:
        return self._transactions.get(transaction_id)

    async def query_range(self, start: datetime, end: datetime) -> List[Transaction]:
        start, end = to_utc(start), to_utc(end)
        if end < start:
            msg = f"Range end {end} is before start {start}"
            raise InvalidPeriodError(msg, f"{start}..{end}")
        matches = [
            t for t in self._transactions.values() if start <= t.occurred_at < end
        ]
        return sorted(matches, key=ledger_order)

    async def count(self) -> int:
        return len(self._transactions)

    async def find_all(self) -> List[Transaction]:
        return sorted(self._transactions.values(), key=ledger_order)

    async def find_by_type(
        self,
        transaction_type: TransactionType,
    ) -> List[Transaction]:
        matches = [t for t in self._transactions.values() if t.type is transaction_type]
        return sorted(matches, key=ledger_order, reverse=True)

    async def find_by_category(
        self,
        category: TransactionCategory,
    ) -> List[Transaction]:
        matches = [t for t in self._transactions.values() if t.category is category]
        return sorted(matches, key=ledger_order, reverse=True)

    def on_change(self, callback: LedgerChangeCallback) -> Unsubscribe:
        return self._feed.subscribe(callback)

    def _existing(self, transaction_id: UUID) -> Transaction:
        transaction = self._transactions.get(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        return transaction

    def _replace(self, previous: Transaction, transaction: Transaction) -> None:
        self._transactions[transaction.id] = transaction
        self._feed.emit(
            LedgerChange(
                kind=ChangeKind.UPDATED,
                transaction_id=transaction.id,
                occurred_at=transaction.occurred_at,
                previous_occurred_at=previous.occurred_at,
            ),
        )
