"""In-memory, insert-only balance snapshot repository."""

from __future__ import annotations

from itertools import count
from typing import List, Optional

from fintrax.domain.calendar import Granularity
from fintrax.domain.ledger.entities import Balance
from fintrax.domain.ledger.repositories import BalanceSnapshotRepository


class InMemoryBalanceSnapshotRepository(BalanceSnapshotRepository):
    def __init__(self):
        # (insertion sequence, snapshot); the sequence breaks computed_at ties
        self._snapshots: list[tuple[int, Balance]] = []
        self._sequence = count()

    async def insert(self, balance: Balance) -> None:
        self._snapshots.append((next(self._sequence), balance))

    async def latest(
        self,
        granularity: Optional[Granularity] = None,
        bucket_key: Optional[str] = None,
    ) -> Optional[Balance]:
        scoped = [
            (balance.computed_at, seq, balance)
            for seq, balance in self._snapshots
            if balance.granularity is granularity
            and (bucket_key is None or balance.bucket_key == bucket_key)
        ]
        if not scoped:
            return None
        return max(scoped, key=lambda item: (item[0], item[1]))[2]

    async def history(self, granularity: Optional[Granularity]) -> List[Balance]:
        scoped = [
            (balance.computed_at, seq, balance)
            for seq, balance in self._snapshots
            if balance.granularity is granularity
        ]
        scoped.sort(key=lambda item: (item[0], item[1]), reverse=True)
        return [balance for _, _, balance in scoped]

    async def count(self) -> int:
        return len(self._snapshots)
