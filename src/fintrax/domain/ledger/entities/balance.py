"""Balance snapshot entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from fintrax.domain.calendar import Granularity
from fintrax.domain.ledger.value_objects import DEFAULT_SCALE, Money
from fintrax.domain.shared.time import to_utc

LIFETIME_KEY = "lifetime"


@dataclass(frozen=True)
class Balance:
    """
    Immutable, timestamped totals for one bucket or for the whole ledger.

    ``granularity`` is None for the ledger-wide (lifetime) scope, whose
    ``bucket_key`` is ``LIFETIME_KEY``. Snapshots are never mutated; a new
    ledger mutation produces a new snapshot.
    """

    total_income: Money
    total_expenses: Money
    net_balance: Money
    granularity: Optional[Granularity]
    bucket_key: str
    computed_at: datetime
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self) -> None:
        object.__setattr__(self, "computed_at", to_utc(self.computed_at))

    @classmethod
    def from_totals(
        cls,
        total_income: Money,
        total_expenses: Money,
        granularity: Optional[Granularity],
        bucket_key: str,
        computed_at: datetime,
    ) -> Balance:
        return cls(
            total_income=total_income,
            total_expenses=total_expenses,
            net_balance=total_income - total_expenses,
            granularity=granularity,
            bucket_key=bucket_key,
            computed_at=computed_at,
        )

    @classmethod
    def zero(cls, computed_at: datetime, scale: int = DEFAULT_SCALE) -> Balance:
        """Zero-valued lifetime balance."""
        zero = Money.zero(scale)
        return cls.from_totals(zero, zero, None, LIFETIME_KEY, computed_at)

    @property
    def is_lifetime(self) -> bool:
        return self.granularity is None

    def same_totals(self, other: Balance) -> bool:
        return (
            self.total_income == other.total_income
            and self.total_expenses == other.total_expenses
            and self.net_balance == other.net_balance
        )
