"""SQLAlchemy implementation of LedgerStore.

Each call runs in its own session. Mutations are serialized by a lock and
committed before the change event is emitted, so subscribers only ever hear
about durable writes, in commit order.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

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
from fintrax.domain.ledger.value_objects import (
    Money,
    RecurringPeriod,
    TransactionCategory,
    TransactionType,
)
from fintrax.domain.shared.exceptions import InvalidPeriodError
from fintrax.domain.shared.time import to_utc
from fintrax.infrastructure.persistence.change_feed import ChangeFeed
from fintrax.infrastructure.persistence.sqlalchemy.models import TransactionModel
from fintrax.infrastructure.persistence.sqlalchemy.repositories._utils import (
    store_errors,
)

logger = logging.getLogger(__name__)


class SqlAlchemyLedgerStore(LedgerStore):
    """SQLAlchemy implementation of the ledger store."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker
        self._lock = asyncio.Lock()
        self._feed: ChangeFeed[LedgerChange] = ChangeFeed("ledger")

    async def insert(self, transaction: Transaction) -> None:
        async with self._lock, store_errors("ledger.insert"):
            async with self._session_maker() as session, session.begin():
                if await session.get(TransactionModel, transaction.id) is not None:
                    raise DuplicateTransactionError(transaction.id)
                session.add(self._to_model(transaction))
            logger.info("Transaction inserted: %s", transaction.id)
            self._feed.emit(
                LedgerChange(
                    kind=ChangeKind.INSERTED,
                    transaction_id=transaction.id,
                    occurred_at=transaction.occurred_at,
                ),
            )

    async def update(self, transaction: Transaction) -> None:
        async with self._lock, store_errors("ledger.update"):
            async with self._session_maker() as session, session.begin():
                model = await session.get(TransactionModel, transaction.id)
                if model is None:
                    raise TransactionNotFoundError(transaction.id)
                previous_occurred_at = to_utc(model.occurred_at)
                self._update_model(model, transaction)
            logger.info("Transaction updated: %s", transaction.id)
            self._feed.emit(
                LedgerChange(
                    kind=ChangeKind.UPDATED,
                    transaction_id=transaction.id,
                    occurred_at=transaction.occurred_at,
                    previous_occurred_at=previous_occurred_at,
                ),
            )

    async def modify(
        self,
        transaction_id: UUID,
        edit: Callable[[Transaction], Transaction],
    ) -> Transaction:
        async with self._lock, store_errors("ledger.modify"):
            async with self._session_maker() as session, session.begin():
                model = await session.get(TransactionModel, transaction_id)
                if model is None:
                    raise TransactionNotFoundError(transaction_id)
                previous = self._to_domain(model)
                updated = edit(previous)
                if updated == previous:
                    return previous
                self._update_model(model, updated)
            logger.info("Transaction updated: %s", transaction_id)
            self._feed.emit(
                LedgerChange(
                    kind=ChangeKind.UPDATED,
                    transaction_id=transaction_id,
                    occurred_at=updated.occurred_at,
                    previous_occurred_at=previous.occurred_at,
                ),
            )
            return updated

    async def delete(self, transaction_id: UUID) -> None:
        async with self._lock, store_errors("ledger.delete"):
            async with self._session_maker() as session, session.begin():
                model = await session.get(TransactionModel, transaction_id)
                if model is None:
                    raise TransactionNotFoundError(transaction_id)
                occurred_at = to_utc(model.occurred_at)
                await session.delete(model)
            logger.info("Transaction deleted: %s", transaction_id)
            self._feed.emit(
                LedgerChange(
                    kind=ChangeKind.DELETED,
                    transaction_id=transaction_id,
                    occurred_at=occurred_at,
                    previous_occurred_at=occurred_at,
                ),
            )

    async def get(self, transaction_id: UUID) -> Optional[Transaction]:
        async with store_errors("ledger.get"), self._session_maker() as session:
            model = await session.get(TransactionModel, transaction_id)
            return self._to_domain(model) if model else None

    async def query_range(self, start: datetime, end: datetime) -> List[Transaction]:
        start, end = to_utc(start), to_utc(end)
        if end < start:
            msg = f"Range end {end} is before start {start}"
            raise InvalidPeriodError(msg, f"{start}..{end}")
        stmt = (
            select(TransactionModel)
            .where(TransactionModel.occurred_at >= start)
            .where(TransactionModel.occurred_at < end)
            .order_by(TransactionModel.occurred_at, TransactionModel.id)
        )
        return await self._execute_and_map(stmt, "ledger.query_range")

    async def count(self) -> int:
        async with store_errors("ledger.count"), self._session_maker() as session:
            stmt = select(func.count()).select_from(TransactionModel)
            result = await session.execute(stmt)
            return result.scalar_one()

    async def find_all(self) -> List[Transaction]:
        stmt = select(TransactionModel).order_by(
            TransactionModel.occurred_at,
            TransactionModel.id,
        )
        return await self._execute_and_map(stmt, "ledger.find_all")

    async def find_by_type(
        self,
        transaction_type: TransactionType,
    ) -> List[Transaction]:
        stmt = (
            select(TransactionModel)
            .where(TransactionModel.type == transaction_type.value)
            .order_by(TransactionModel.occurred_at.desc(), TransactionModel.id.desc())
        )
        return await self._execute_and_map(stmt, "ledger.find_by_type")

    async def find_by_category(
        self,
        category: TransactionCategory,
    ) -> List[Transaction]:
        stmt = (
            select(TransactionModel)
            .where(TransactionModel.category == category.value)
            .order_by(TransactionModel.occurred_at.desc(), TransactionModel.id.desc())
        )
        return await self._execute_and_map(stmt, "ledger.find_by_category")

    def on_change(self, callback: LedgerChangeCallback) -> Unsubscribe:
        return self._feed.subscribe(callback)

    # -------------------------------------------------------------------------
    # Mapping
    # -------------------------------------------------------------------------

    async def _execute_and_map(self, stmt, operation: str) -> List[Transaction]:
        async with store_errors(operation), self._session_maker() as session:
            result = await session.execute(stmt)
            return [self._to_domain(model) for model in result.scalars().all()]

    def _to_model(self, transaction: Transaction) -> TransactionModel:
        model = TransactionModel(id=transaction.id)
        self._update_model(model, transaction)
        return model

    def _update_model(self, model: TransactionModel, transaction: Transaction) -> None:
        model.amount_minor = transaction.amount.minor_units
        model.scale = transaction.amount.scale
        model.description = transaction.description
        model.category = transaction.category.value
        model.type = transaction.type.value
        model.occurred_at = transaction.occurred_at
        model.recurrence = (
            transaction.recurrence.value if transaction.recurrence else None
        )

    def _to_domain(self, model: TransactionModel) -> Transaction:
        return Transaction(
            id=model.id,
            amount=Money.from_minor_units(model.amount_minor, model.scale),
            description=model.description,
            category=TransactionCategory(model.category),
            type=TransactionType(model.type),
            occurred_at=to_utc(model.occurred_at),
            recurrence=RecurringPeriod(model.recurrence) if model.recurrence else None,
        )
