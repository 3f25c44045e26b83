"""Ledger store interface.

Defines the contract for the durable, ordered transaction log the engine
aggregates over. Mutations are serialized per store; each committed mutation
is announced to ``on_change`` subscribers in commit order.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from fintrax.domain.ledger.entities import Transaction
from fintrax.domain.ledger.events import LedgerChangeCallback, Unsubscribe
from fintrax.domain.ledger.value_objects import TransactionCategory, TransactionType


class LedgerStore(ABC):
    """Repository interface for Transaction records."""

    @abstractmethod
    async def insert(self, transaction: Transaction) -> None:
        """Insert a new transaction (raises DuplicateTransactionError)."""

    @abstractmethod
    async def update(self, transaction: Transaction) -> None:
        """Replace a transaction with the same id (raises TransactionNotFoundError)."""

    @abstractmethod
    async def modify(
        self,
        transaction_id: UUID,
        edit: Callable[[Transaction], Transaction],
    ) -> Transaction:
        """
        Read, edit and replace one transaction as a single serialized write.

        ``edit`` receives the stored version and returns its replacement.
        An unchanged result is returned without a write or change event.
        Raises TransactionNotFoundError.
        """

    @abstractmethod
    async def delete(self, transaction_id: UUID) -> None:
        """Delete a transaction (raises TransactionNotFoundError)."""

    @abstractmethod
    async def get(self, transaction_id: UUID) -> Optional[Transaction]:
        """Find transaction by ID; absence is not an error."""

    @abstractmethod
    async def query_range(self, start: datetime, end: datetime) -> List[Transaction]:
        """
        Find transactions with ``start <= occurred_at < end``.

        Results are ordered by ``occurred_at`` ascending, then by id.
        """

    @abstractmethod
    async def count(self) -> int:
        """Count all transactions."""

    @abstractmethod
    async def find_all(self) -> List[Transaction]:
        """Full ledger scan, ordered like ``query_range``."""

    @abstractmethod
    async def find_by_type(
        self,
        transaction_type: TransactionType,
    ) -> List[Transaction]:
        """Find all transactions of one direction, newest first."""

    @abstractmethod
    async def find_by_category(
        self,
        category: TransactionCategory,
    ) -> List[Transaction]:
        """Find all transactions in one category, newest first."""

    @abstractmethod
    def on_change(self, callback: LedgerChangeCallback) -> Unsubscribe:
        """Register a change callback; returns a function that removes it."""
