"""Tests for SqlAlchemyBalanceSnapshotRepository on SQLite."""

import pytest

from fintrax.domain.calendar import Granularity
from fintrax.domain.ledger import LIFETIME_KEY, Balance, Money
from tests.shared.fixtures import at


def snapshot(amount, granularity, key, computed_at):
    return Balance.from_totals(
        Money(amount),
        Money.zero(),
        granularity,
        key,
        computed_at,
    )


@pytest.fixture
def repository(sql_factory):
    return sql_factory.balance_snapshot_repository()


@pytest.mark.asyncio
async def test_lifetime_and_bucket_scopes_are_separate(repository):
    lifetime = snapshot("5.00", None, LIFETIME_KEY, at(2024, 1, 1))
    monthly = snapshot("3.00", Granularity.MONTHLY, "2024-01", at(2024, 1, 1))
    await repository.insert(lifetime)
    await repository.insert(monthly)

    assert await repository.latest(None) == lifetime
    assert await repository.latest(Granularity.MONTHLY) == monthly
    assert await repository.history(Granularity.WEEKLY) == []


@pytest.mark.asyncio
async def test_equal_timestamps_are_ordered_by_insertion(repository):
    first = snapshot("1.00", Granularity.DAILY, "2024-01-01", at(2024, 1, 1))
    second = snapshot("2.00", Granularity.DAILY, "2024-01-01", at(2024, 1, 1))
    await repository.insert(first)
    await repository.insert(second)

    history = await repository.history(Granularity.DAILY)

    assert [b.id for b in history] == [second.id, first.id]
    assert history[0].computed_at == at(2024, 1, 1)


@pytest.mark.asyncio
async def test_latest_by_bucket_key(repository):
    january = snapshot("1.00", Granularity.MONTHLY, "2024-01", at(2024, 1, 31))
    february = snapshot("2.00", Granularity.MONTHLY, "2024-02", at(2024, 2, 29))
    await repository.insert(january)
    await repository.insert(february)

    assert await repository.latest(Granularity.MONTHLY, "2024-01") == january
    assert await repository.count() == 2
