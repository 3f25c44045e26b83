"""Category analytics: per-category totals, percentages and rankings."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence

from fintrax.application.dtos.analytics import (
    CATEGORY_COLORS,
    CategoryBreakdown,
    ChartData,
)
from fintrax.application.reactive import Observable
from fintrax.application.services.aggregate_worker import (
    AggregateWorker,
    RecomputePolicy,
)
from fintrax.domain.calendar import Bucket, Granularity, PeriodCalendar
from fintrax.domain.ledger import (
    LedgerChange,
    LedgerStore,
    Money,
    Transaction,
    TransactionCategory,
    TransactionType,
)
from fintrax.domain.ledger.value_objects import DEFAULT_SCALE
from fintrax.domain.shared.time import utc_now

logger = logging.getLogger(__name__)

Breakdowns = dict[TransactionType, list[CategoryBreakdown]]


def build_breakdown(
    transactions: Iterable[Transaction],
    flow: TransactionType,
    scale: int = DEFAULT_SCALE,
) -> list[CategoryBreakdown]:
    """
    Group one flow's transactions by category.

    Totals are magnitudes. Each percentage is ``total / sum(totals) * 100``
    rounded half-up to 2 places, so the entries add up to 100 within one
    hundredth per entry. Order is descending total, ties by category order.
    """
    totals: dict[TransactionCategory, Money] = {}
    counts: dict[TransactionCategory, int] = {}
    for txn in transactions:
        if txn.type is not flow:
            continue
        # Money addition rejects amounts stored with a different scale
        current = totals.get(txn.category, Money.zero(scale))
        totals[txn.category] = current + txn.amount
        counts[txn.category] = counts.get(txn.category, 0) + 1

    grand_total = Money.sum(totals.values(), scale)
    ordered = sorted(
        totals.items(),
        key=lambda item: (-item[1].minor_units, item[0].position),
    )
    breakdown: list[CategoryBreakdown] = []
    for category, amount in ordered:
        breakdown.append(
            CategoryBreakdown(
                category=category,
                flow=flow,
                total_amount=amount,
                transaction_count=counts[category],
                percentage=amount.percentage_of(grand_total),
            ),
        )
    return breakdown


def category_label(category: TransactionCategory) -> str:
    return category.value.replace("_", " ").title()


class CategoryAnalytics(AggregateWorker[LedgerChange]):
    """Category breakdowns per bucket, for expenses and income separately."""

    def __init__(
        self,
        ledger: LedgerStore,
        calendar: PeriodCalendar,
        policy: Optional[RecomputePolicy] = None,
        clock: Callable[[], datetime] = utc_now,
        scale: int = DEFAULT_SCALE,
    ):
        super().__init__("category-analytics", ledger.on_change, policy)
        self._ledger = ledger
        self._calendar = calendar
        self._clock = clock
        self._scale = scale
        self._cache: dict[Bucket, Breakdowns] = {}
        self._observed: dict[
            tuple[Bucket, TransactionType],
            Observable[list[CategoryBreakdown]],
        ] = {}
        self._staged: dict[Bucket, Breakdowns] = {}

    async def category_breakdown(
        self,
        bucket: Bucket,
        flow: TransactionType = TransactionType.EXPENSE,
    ) -> list[CategoryBreakdown]:
        """One entry per category with at least one ``flow`` transaction."""
        breakdowns = await self._breakdowns(bucket)
        return list(breakdowns[flow])

    async def top_categories(
        self,
        limit: int,
        bucket: Optional[Bucket] = None,
        flow: TransactionType = TransactionType.EXPENSE,
    ) -> list[CategoryBreakdown]:
        """
        The ``limit`` largest categories of a bucket (current month by default).

        ``limit <= 0`` yields an empty list.
        """
        if limit <= 0:
            return []
        if bucket is None:
            bucket = self._calendar.bucket_for(self._clock(), Granularity.MONTHLY)
        breakdown = await self.category_breakdown(bucket, flow)
        return breakdown[:limit]

    async def chart_data(
        self,
        bucket: Bucket,
        flow: TransactionType = TransactionType.EXPENSE,
    ) -> list[ChartData]:
        """Pie chart slices with a fixed colour per category."""
        return [
            ChartData(
                label=category_label(item.category),
                value=item.total_amount,
                percentage=item.percentage,
                color=CATEGORY_COLORS[item.category],
            )
            for item in await self.category_breakdown(bucket, flow)
        ]

    async def observe(
        self,
        bucket: Bucket,
        flow: TransactionType = TransactionType.EXPENSE,
    ) -> Observable[list[CategoryBreakdown]]:
        key = (bucket, flow)
        observable = self._observed.get(key)
        if observable is None:
            value = await self.category_breakdown(bucket, flow)
            observable = self._observed.setdefault(
                key,
                Observable[list[CategoryBreakdown]](
                    f"categories:{flow.value.lower()}:{bucket.key}",
                    value,
                ),
            )
        return observable

    async def _breakdowns(self, bucket: Bucket) -> Breakdowns:
        cached = self._cache.get(bucket)
        if cached is not None:
            return cached

        generation = self.generation
        transactions = await self.bounded(
            self._ledger.query_range(bucket.start, bucket.end),
            "ledger.query_range",
        )
        result = {
            flow: build_breakdown(transactions, flow, self._scale)
            for flow in TransactionType
        }
        if generation == self.generation:
            self._cache[bucket] = result
        return result

    def _observed_buckets(self) -> list[Bucket]:
        return list(dict.fromkeys(bucket for bucket, _ in self._observed))

    def _touched(
        self,
        buckets: Sequence[Bucket],
        changes: list[LedgerChange],
    ) -> list[Bucket]:
        instants = [ts for change in changes for ts in change.affected_instants()]
        return [b for b in buckets if any(b.contains(ts) for ts in instants)]

    def _reset(self) -> None:
        self._cache.clear()

    def _invalidate(self, change: LedgerChange) -> None:
        for bucket in self._touched(list(self._cache), [change]):
            del self._cache[bucket]

    async def _recompute(self, changes: list[LedgerChange], full: bool) -> None:
        if full:
            self._cache.clear()
            targets = self._observed_buckets()
        else:
            targets = self._touched(self._observed_buckets(), changes)
        for bucket in targets:
            self._staged[bucket] = await self._breakdowns(bucket)

    def _publish(self) -> None:
        for (bucket, flow), observable in self._observed.items():
            staged = self._staged.get(bucket)
            if staged is not None:
                observable.publish(list(staged[flow]))
        self._staged = {}

    def _affected(self, changes: list[LedgerChange], full: bool) -> list[Observable]:
        buckets = (
            self._observed_buckets()
            if full
            else self._touched(self._observed_buckets(), changes)
        )
        return [
            observable
            for (bucket, _), observable in self._observed.items()
            if bucket in buckets
        ]
