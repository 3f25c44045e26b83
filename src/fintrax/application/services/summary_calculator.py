"""Summary calculator: totals, normalized monthly average and extremes."""

from __future__ import annotations

import logging
from fractions import Fraction
from typing import Iterable, Optional, Sequence

from fintrax.application.dtos.analytics import FinancialSummary
from fintrax.application.reactive import Observable
from fintrax.application.services.aggregate_worker import (
    AggregateWorker,
    RecomputePolicy,
)
from fintrax.application.services.balance_tracker import split_totals
from fintrax.domain.calendar import Bucket
from fintrax.domain.ledger import LedgerChange, LedgerStore, Transaction
from fintrax.domain.ledger.value_objects import DEFAULT_SCALE

logger = logging.getLogger(__name__)

# Every bucket is normalized to a month of this many days
NORMALIZED_MONTH_DAYS = 30


def _ranking_key(txn: Transaction):
    return (-txn.amount.minor_units, txn.occurred_at, str(txn.id))


def biggest(transactions: Iterable[Transaction]) -> Optional[Transaction]:
    """Largest amount; ties go to the earliest, then the smallest id string."""
    return min(transactions, key=_ranking_key, default=None)


def build_summary(
    bucket: Bucket,
    transactions: Sequence[Transaction],
    scale: int = DEFAULT_SCALE,
) -> FinancialSummary:
    """
    Summarize the transactions of one bucket.

    ``monthly_average`` scales the net to a 30-day month by the number of
    days the bucket covers: a week is scaled by 30/7, February by 30/28 or
    30/29, a year by 30/365 or 30/366. Rounding is half-up.
    """
    income, expenses = split_totals(transactions, scale)
    net = income - expenses
    return FinancialSummary(
        bucket=bucket,
        total_income=income,
        total_expenses=expenses,
        net_balance=net,
        monthly_average=net.multiply(Fraction(NORMALIZED_MONTH_DAYS, bucket.days)),
        transaction_count=len(transactions),
        biggest_income=biggest(t for t in transactions if t.is_income),
        biggest_expense=biggest(t for t in transactions if t.is_expense),
    )


class SummaryCalculator(AggregateWorker[LedgerChange]):
    """Computes FinancialSummary values on demand and keeps observed ones live."""

    def __init__(
        self,
        ledger: LedgerStore,
        policy: Optional[RecomputePolicy] = None,
        scale: int = DEFAULT_SCALE,
    ):
        super().__init__("summary-calculator", ledger.on_change, policy)
        self._ledger = ledger
        self._scale = scale
        self._cache: dict[Bucket, FinancialSummary] = {}
        self._observed: dict[Bucket, Observable[FinancialSummary]] = {}
        self._staged: dict[Bucket, FinancialSummary] = {}

    async def summary(self, bucket: Bucket) -> FinancialSummary:
        """
        Summary of one bucket.

        An empty bucket yields zero totals and no extremes; it is not an error.
        """
        cached = self._cache.get(bucket)
        if cached is not None:
            return cached

        generation = self.generation
        transactions = await self.bounded(
            self._ledger.query_range(bucket.start, bucket.end),
            "ledger.query_range",
        )
        result = build_summary(bucket, transactions, self._scale)
        if generation == self.generation:
            self._cache[bucket] = result
        return result

    async def observe(self, bucket: Bucket) -> Observable[FinancialSummary]:
        observable = self._observed.get(bucket)
        if observable is None:
            value = await self.summary(bucket)
            observable = self._observed.setdefault(
                bucket,
                Observable[FinancialSummary](f"summary:{bucket.key}", value),
            )
        return observable

    def _touched(
        self,
        buckets: Iterable[Bucket],
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
            targets = list(self._observed)
        else:
            targets = self._touched(self._observed, changes)
        for bucket in targets:
            self._staged[bucket] = await self.summary(bucket)
        if targets:
            logger.debug("Recomputed %d observed summary bucket(s)", len(targets))

    def _publish(self) -> None:
        for bucket, summary in self._staged.items():
            self._observed[bucket].publish(summary)
        self._staged = {}

    def _affected(self, changes: list[LedgerChange], full: bool) -> list[Observable]:
        if full:
            return list(self._observed.values())
        return [self._observed[b] for b in self._touched(self._observed, changes)]
