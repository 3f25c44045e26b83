"""Balance tracker: current balance and append-only balance history.

The ledger-wide (lifetime) totals are kept as a per-month cache. A change
event only re-queries the months it touches, so the lifetime balance stays
equal to a full ledger scan without rescanning the ledger on every write.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from fintrax.application.reactive import Observable
from fintrax.application.services.aggregate_worker import (
    AggregateWorker,
    RecomputePolicy,
)
from fintrax.domain.calendar import Bucket, Granularity, PeriodCalendar
from fintrax.domain.ledger import (
    LIFETIME_KEY,
    Balance,
    BalanceSnapshotRepository,
    LedgerChange,
    LedgerStore,
    Money,
    Transaction,
)
from fintrax.domain.ledger.value_objects import DEFAULT_SCALE
from fintrax.domain.shared.time import utc_now

logger = logging.getLogger(__name__)

ALL_GRANULARITIES = (
    Granularity.DAILY,
    Granularity.WEEKLY,
    Granularity.MONTHLY,
    Granularity.YEARLY,
)


def split_totals(
    transactions: Iterable[Transaction],
    scale: int = DEFAULT_SCALE,
) -> tuple[Money, Money]:
    """
    Return ``(income, expenses)`` as positive magnitudes.

    Amounts are added as Money, so a transaction stored with a scale other
    than ``scale`` raises InvalidAmountError instead of skewing the totals.
    """
    income = Money.zero(scale)
    expenses = Money.zero(scale)
    for txn in transactions:
        if txn.is_income:
            income = income + txn.amount
        else:
            expenses = expenses + txn.amount
    return income, expenses


def in_bucket(
    transactions: Sequence[Transaction],
    bucket: Bucket,
) -> list[Transaction]:
    return [t for t in transactions if bucket.start <= t.occurred_at < bucket.end]


class BalanceTracker(AggregateWorker[LedgerChange]):
    """Maintains the current balance and per-bucket snapshot history."""

    def __init__(  # NOQA: PLR0913
        self,
        ledger: LedgerStore,
        snapshots: BalanceSnapshotRepository,
        calendar: PeriodCalendar,
        policy: Optional[RecomputePolicy] = None,
        granularities: Sequence[Granularity] = ALL_GRANULARITIES,
        clock: Callable[[], datetime] = utc_now,
        scale: int = DEFAULT_SCALE,
    ):
        super().__init__("balance-tracker", ledger.on_change, policy)
        self._ledger = ledger
        self._snapshots = snapshots
        self._calendar = calendar
        self._granularities = tuple(granularities)
        self._clock = clock
        self._scale = scale

        # month key -> (income minor units, expense minor units)
        self._month_totals: dict[str, tuple[int, int]] = {}
        self._primed = False

        self._current = Observable[Balance](
            "balance:current",
            Balance.zero(clock(), scale),
        )
        self._history: dict[Optional[Granularity], Observable[list[Balance]]] = {}
        self._staged_current: Optional[Balance] = None
        self._staged_history: dict[Optional[Granularity], list[Balance]] = {}

    @property
    def current(self) -> Observable[Balance]:
        """Observable lifetime balance."""
        return self._current

    @property
    def granularities(self) -> tuple[Granularity, ...]:
        return self._granularities

    async def current_balance(self) -> Balance:
        """
        Most recent lifetime snapshot.

        Returns a zero balance dated now when nothing has been recorded yet.
        """
        latest = await self.bounded(
            self._snapshots.latest(None),
            "snapshots.latest",
        )
        if latest is None:
            return Balance.zero(self._clock(), self._scale)
        return latest

    async def record_balance(self, bucket: Bucket) -> Balance:
        """Recompute one bucket from the ledger and append a snapshot."""
        transactions = await self.bounded(
            self._ledger.query_range(bucket.start, bucket.end),
            "ledger.query_range",
        )
        income, expenses = split_totals(transactions, self._scale)
        snapshot = Balance.from_totals(
            income,
            expenses,
            bucket.granularity,
            bucket.key,
            self._clock(),
        )
        await self.bounded(self._snapshots.insert(snapshot), "snapshots.insert")
        if self.running:
            # The worker re-reads history, so a batch in flight cannot
            # publish a list that misses this snapshot
            self.refresh()
        else:
            observable = self._history.get(bucket.granularity)
            if observable is not None:
                observable.publish([snapshot, *observable.value])
        logger.info(
            "Recorded balance for %s %s: net %s",
            bucket.granularity.value,
            bucket.key,
            snapshot.net_balance,
        )
        return snapshot

    async def history(
        self,
        granularity: Optional[Granularity] = Granularity.MONTHLY,
    ) -> Observable[list[Balance]]:
        """
        Observable snapshot history for one scope, newest first.

        ``granularity=None`` selects the lifetime scope.
        """
        observable = self._history.get(granularity)
        if observable is None:
            snapshots = await self.bounded(
                self._snapshots.history(granularity),
                "snapshots.history",
            )
            observable = self._history.get(granularity)
            if observable is None:
                key = granularity.value if granularity else LIFETIME_KEY
                observable = Observable[list[Balance]](
                    f"balance:history:{key}",
                    snapshots,
                )
                self._history[granularity] = observable
        return observable

    def lifetime_totals(self) -> tuple[Money, Money]:
        """Ledger-wide totals from the month cache."""
        income = sum(totals[0] for totals in self._month_totals.values())
        expenses = sum(totals[1] for totals in self._month_totals.values())
        return (
            Money.from_minor_units(income, self._scale),
            Money.from_minor_units(expenses, self._scale),
        )

    async def _recompute(self, changes: list[LedgerChange], full: bool) -> None:
        now = self._clock()
        if full or not self._primed:
            await self._rebuild(now)
            tracked = self._touched(changes, self._granularities)
            if tracked:
                transactions = await self._query_hull(tracked)
                for snapshot in self._bucket_snapshots(tracked, transactions, now):
                    await self.bounded(
                        self._snapshots.insert(snapshot),
                        "snapshots.insert",
                    )
        else:
            await self._apply_changes(changes, now)

        for granularity in list(self._history):
            self._staged_history[granularity] = await self.bounded(
                self._snapshots.history(granularity),
                "snapshots.history",
            )

    async def _rebuild(self, now: datetime) -> None:
        transactions = await self.bounded(self._ledger.find_all(), "ledger.find_all")
        by_month: dict[str, list[Transaction]] = {}
        for txn in transactions:
            key = self._calendar.bucket_for(txn.occurred_at, Granularity.MONTHLY).key
            by_month.setdefault(key, []).append(txn)
        months: dict[str, tuple[int, int]] = {}
        for key, in_month in by_month.items():
            income, expenses = split_totals(in_month, self._scale)
            months[key] = (income.minor_units, expenses.minor_units)
        self._month_totals = months
        self._primed = True

        income, expenses = self.lifetime_totals()
        lifetime = Balance.from_totals(income, expenses, None, LIFETIME_KEY, now)
        latest = await self.bounded(
            self._snapshots.latest(None),
            "snapshots.latest",
        )
        if latest is None or not latest.same_totals(lifetime):
            await self.bounded(self._snapshots.insert(lifetime), "snapshots.insert")
        else:
            lifetime = latest
        self._staged_current = lifetime
        logger.info(
            "Rebuilt balance from %d transaction(s) in %d month(s): net %s",
            len(transactions),
            len(months),
            lifetime.net_balance,
        )

    async def _apply_changes(
        self,
        changes: list[LedgerChange],
        now: datetime,
    ) -> None:
        months = self._touched(changes, (Granularity.MONTHLY,))
        tracked = self._touched(changes, self._granularities)

        # One range query covering every touched bucket
        transactions = await self._query_hull(months + tracked)
        snapshots = self._bucket_snapshots(tracked, transactions, now)

        month_totals = dict(self._month_totals)
        for month in months:
            income, expenses = split_totals(in_bucket(transactions, month), self._scale)
            if income.is_zero() and expenses.is_zero():
                month_totals.pop(month.key, None)
            else:
                month_totals[month.key] = (income.minor_units, expenses.minor_units)

        income = Money.from_minor_units(
            sum(t[0] for t in month_totals.values()),
            self._scale,
        )
        expenses = Money.from_minor_units(
            sum(t[1] for t in month_totals.values()),
            self._scale,
        )
        lifetime = Balance.from_totals(income, expenses, None, LIFETIME_KEY, now)
        snapshots.append(lifetime)

        for snapshot in snapshots:
            await self.bounded(self._snapshots.insert(snapshot), "snapshots.insert")

        # Commit the cache only once every snapshot is stored so a retry
        # starts from the same state
        self._month_totals = month_totals
        self._staged_current = lifetime
        logger.debug(
            "Balance updated for %d change(s), %d snapshot(s): net %s",
            len(changes),
            len(snapshots),
            lifetime.net_balance,
        )

    def _touched(
        self,
        changes: list[LedgerChange],
        granularities: Sequence[Granularity],
    ) -> list[Bucket]:
        instants = [ts for change in changes for ts in change.affected_instants()]
        return [
            bucket
            for granularity in granularities
            for bucket in self._calendar.touched_buckets(instants, granularity)
        ]

    async def _query_hull(self, buckets: Sequence[Bucket]) -> list[Transaction]:
        start = min(bucket.start for bucket in buckets)
        end = max(bucket.end for bucket in buckets)
        return await self.bounded(
            self._ledger.query_range(start, end),
            "ledger.query_range",
        )

    def _bucket_snapshots(
        self,
        buckets: Sequence[Bucket],
        transactions: Sequence[Transaction],
        now: datetime,
    ) -> list[Balance]:
        snapshots = []
        for bucket in buckets:
            income, expenses = split_totals(
                in_bucket(transactions, bucket),
                self._scale,
            )
            snapshots.append(
                Balance.from_totals(
                    income,
                    expenses,
                    bucket.granularity,
                    bucket.key,
                    now,
                ),
            )
        return snapshots

    def _publish(self) -> None:
        if self._staged_current is not None:
            self._current.publish(self._staged_current)
            self._staged_current = None
        for granularity, snapshots in self._staged_history.items():
            self._history[granularity].publish(snapshots)
        self._staged_history = {}

    def _affected(self, changes: list[LedgerChange], full: bool) -> list[Observable]:
        return [self._current, *self._history.values()]
