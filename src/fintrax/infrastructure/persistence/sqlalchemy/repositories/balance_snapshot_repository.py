"""SQLAlchemy implementation of BalanceSnapshotRepository (insert-only)."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fintrax.domain.calendar import Granularity
from fintrax.domain.ledger.entities import Balance
from fintrax.domain.ledger.repositories import BalanceSnapshotRepository
from fintrax.domain.ledger.value_objects import Money
from fintrax.domain.shared.time import to_utc
from fintrax.infrastructure.persistence.sqlalchemy.models import BalanceSnapshotModel
from fintrax.infrastructure.persistence.sqlalchemy.repositories._utils import (
    store_errors,
)

logger = logging.getLogger(__name__)


class SqlAlchemyBalanceSnapshotRepository(BalanceSnapshotRepository):
    """SQLAlchemy implementation of the balance snapshot repository."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def insert(self, balance: Balance) -> None:
        async with store_errors("snapshots.insert"):
            async with self._session_maker() as session, session.begin():
                session.add(self._to_model(balance))
        logger.debug(
            "Snapshot stored: %s %s net=%s",
            balance.granularity.value if balance.granularity else "lifetime",
            balance.bucket_key,
            balance.net_balance,
        )

    async def latest(
        self,
        granularity: Optional[Granularity] = None,
        bucket_key: Optional[str] = None,
    ) -> Optional[Balance]:
        stmt = self._scoped(granularity)
        if bucket_key is not None:
            stmt = stmt.where(BalanceSnapshotModel.bucket_key == bucket_key)
        stmt = stmt.limit(1)
        async with store_errors("snapshots.latest"), self._session_maker() as session:
            result = await session.execute(stmt)
            model = result.scalars().first()
            return self._to_domain(model) if model else None

    async def history(self, granularity: Optional[Granularity]) -> List[Balance]:
        stmt = self._scoped(granularity)
        async with store_errors("snapshots.history"), self._session_maker() as session:
            result = await session.execute(stmt)
            return [self._to_domain(m) for m in result.scalars().all()]

    async def count(self) -> int:
        async with store_errors("snapshots.count"), self._session_maker() as session:
            stmt = select(func.count()).select_from(BalanceSnapshotModel)
            result = await session.execute(stmt)
            return result.scalar_one()

    def _scoped(self, granularity: Optional[Granularity]):
        stmt = select(BalanceSnapshotModel)
        if granularity is None:
            stmt = stmt.where(BalanceSnapshotModel.granularity.is_(None))
        else:
            stmt = stmt.where(BalanceSnapshotModel.granularity == granularity.value)
        return stmt.order_by(
            BalanceSnapshotModel.computed_at.desc(),
            BalanceSnapshotModel.sequence.desc(),
        )

    def _to_model(self, balance: Balance) -> BalanceSnapshotModel:
        return BalanceSnapshotModel(
            id=balance.id,
            granularity=balance.granularity.value if balance.granularity else None,
            bucket_key=balance.bucket_key,
            total_income_minor=balance.total_income.minor_units,
            total_expenses_minor=balance.total_expenses.minor_units,
            net_balance_minor=balance.net_balance.minor_units,
            scale=balance.net_balance.scale,
            computed_at=balance.computed_at,
        )

    def _to_domain(self, model: BalanceSnapshotModel) -> Balance:
        return Balance(
            id=model.id,
            total_income=Money.from_minor_units(model.total_income_minor, model.scale),
            total_expenses=Money.from_minor_units(
                model.total_expenses_minor,
                model.scale,
            ),
            net_balance=Money.from_minor_units(model.net_balance_minor, model.scale),
            granularity=Granularity(model.granularity) if model.granularity else None,
            bucket_key=model.bucket_key,
            computed_at=to_utc(model.computed_at),
        )
