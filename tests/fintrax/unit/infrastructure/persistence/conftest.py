"""Fixtures for the SQLAlchemy stores, backed by in-memory SQLite."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from fintrax.infrastructure.persistence.sqlalchemy.database import (
    create_session_maker,
)
from fintrax.infrastructure.persistence.sqlalchemy.models import Base
from fintrax.infrastructure.persistence.sqlalchemy.repositories import (
    SqlAlchemyStoreFactory,
)


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(db_engine):
    return create_session_maker(db_engine)


@pytest_asyncio.fixture
async def sql_factory(session_maker):
    return SqlAlchemyStoreFactory(session_maker)
