"""Tests for the table maintenance helpers."""

import pytest
from sqlalchemy import inspect

from fintrax.infrastructure.persistence.sqlalchemy.database import create_engine
from fintrax.infrastructure.persistence.sqlalchemy.init_db import (
    create_tables,
    drop_tables,
)

TABLES = {"ledger_transactions", "monthly_expenses", "balance_snapshots"}


async def table_names(database_url: str) -> set[str]:
    engine = create_engine(database_url)
    try:
        async with engine.connect() as conn:
            return set(await conn.run_sync(lambda c: inspect(c).get_table_names()))
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_create_is_idempotent_and_drop_removes_tables(tmp_path):
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'init.db'}"

    await create_tables(database_url)
    await create_tables(database_url)
    created = await table_names(database_url)

    await drop_tables(database_url)
    dropped = await table_names(database_url)

    assert TABLES <= created
    assert not TABLES & dropped
