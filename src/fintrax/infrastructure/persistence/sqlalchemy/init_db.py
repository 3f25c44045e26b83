"""Database initialization utilities."""

import asyncio
import logging
from typing import Optional

# Import models to register with Base.metadata
import fintrax.infrastructure.persistence.sqlalchemy.models  # noqa: F401
from fintrax.infrastructure.persistence.sqlalchemy.database import create_engine
from fintrax.infrastructure.persistence.sqlalchemy.models.base import Base
from fintrax.logging_config import configure_logging
from fintrax_config.settings import get_settings

logger = logging.getLogger(__name__)


def _display_url(database_url: str) -> str:
    return database_url.split("@")[-1] if "@" in database_url else database_url


async def create_tables(database_url: Optional[str] = None) -> None:
    """
    Create all database tables (idempotent).

    Uses SQLAlchemy's create_all() which only creates missing tables.
    Existing tables and their data are never modified or deleted.
    """
    engine = create_engine(database_url or get_settings().database_url)
    logger.info("Ensuring all database tables exist...")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await engine.dispose()
    logger.info("Database schema is up to date (missing tables created if needed)")


async def drop_tables(database_url: Optional[str] = None) -> None:
    """
    Drop all database tables (USE WITH CAUTION!).

    This is primarily for testing and development reset scenarios.
    """
    engine = create_engine(database_url or get_settings().database_url)
    logger.warning("Dropping all database tables...")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()
    logger.info("Database tables dropped successfully")


async def _init_database() -> None:
    settings = get_settings()

    logger.info("Initializing database...")
    logger.info("Database URL: %s", _display_url(settings.database_url))

    await create_tables(settings.database_url)

    logger.info("Database initialized successfully!")


def db_init() -> None:
    """Initialize database (create tables)."""
    configure_logging(get_settings().log_level)
    asyncio.run(_init_database())
