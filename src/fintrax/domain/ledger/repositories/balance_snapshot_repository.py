"""Balance snapshot repository interface.

Snapshots are a derived, non-authoritative cache kept for history display.
The repository is insert-only: existing snapshots are never modified.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from fintrax.domain.calendar import Granularity
from fintrax.domain.ledger.entities import Balance


class BalanceSnapshotRepository(ABC):
    """Repository interface for Balance snapshots."""

    @abstractmethod
    async def insert(self, balance: Balance) -> None:
        """Append a snapshot."""

    @abstractmethod
    async def latest(
        self,
        granularity: Optional[Granularity] = None,
        bucket_key: Optional[str] = None,
    ) -> Optional[Balance]:
        """
        Most recent snapshot for a scope.

        ``granularity=None`` selects the ledger-wide (lifetime) scope.
        """

    @abstractmethod
    async def history(self, granularity: Optional[Granularity]) -> List[Balance]:
        """All snapshots of a scope, newest first."""

    @abstractmethod
    async def count(self) -> int:
        """Count all stored snapshots."""
