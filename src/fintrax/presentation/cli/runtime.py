"""Engine lifecycle for one CLI invocation."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fintrax.application.engine import FinanceEngine
from fintrax.application.services import RecomputePolicy
from fintrax.domain.calendar import Granularity
from fintrax.infrastructure.persistence.sqlalchemy.database import (
    create_engine,
    create_session_maker,
)
from fintrax.infrastructure.persistence.sqlalchemy.models import Base
from fintrax.infrastructure.persistence.sqlalchemy.repositories import (
    SqlAlchemyStoreFactory,
)
from fintrax_config import Settings

logger = logging.getLogger(__name__)


def policy_from_settings(settings: Settings) -> RecomputePolicy:
    return RecomputePolicy(
        query_timeout_seconds=settings.query_timeout_seconds,
        max_attempts=settings.recompute_max_attempts,
        backoff_seconds=settings.recompute_backoff_seconds,
        backoff_max_seconds=settings.recompute_backoff_max_seconds,
    )


@asynccontextmanager
async def open_engine(settings: Settings) -> AsyncIterator[FinanceEngine]:
    """
    Start an engine on the configured database and stop it on exit.

    Aggregates are caught up before the body runs and again before the
    engine stops, so snapshots of the body's writes are persisted.
    """
    db_engine = create_engine(settings.database_url, echo=settings.debug)
    try:
        async with db_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        factory = SqlAlchemyStoreFactory(create_session_maker(db_engine))
        engine = FinanceEngine.from_factory(
            factory,
            policy=policy_from_settings(settings),
            granularities=[Granularity.parse(g) for g in settings.granularities],
            scale=settings.money_scale,
        )
        async with engine:
            await engine.wait_idle()
            yield engine
            await engine.wait_idle()
    finally:
        await db_engine.dispose()
        logger.debug("Database engine disposed")
