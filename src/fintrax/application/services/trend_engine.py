"""Trend engine: gap-free per-period series and year-over-year change."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from fractions import Fraction
from typing import Callable, Optional

from fintrax.application.dtos.analytics import TrendData, YearOverYearComparison
from fintrax.application.reactive import Observable
from fintrax.application.services.aggregate_worker import (
    AggregateWorker,
    RecomputePolicy,
)
from fintrax.application.services.balance_tracker import in_bucket, split_totals
from fintrax.domain.calendar import Bucket, Granularity, PeriodCalendar
from fintrax.domain.ledger import LedgerChange, LedgerStore, Money
from fintrax.domain.ledger.value_objects import DEFAULT_SCALE
from fintrax.domain.ledger.value_objects.money import quantize_half_up
from fintrax.domain.shared.exceptions import InvalidPeriodError
from fintrax.domain.shared.time import to_utc, utc_now

logger = logging.getLogger(__name__)


def one_year_earlier(instant: datetime) -> datetime:
    """Same instant one year before; Feb 29 maps to Feb 28."""
    instant = to_utc(instant)
    try:
        return instant.replace(year=instant.year - 1)
    except ValueError:
        return instant.replace(year=instant.year - 1, day=28)


def year_start(year: int) -> datetime:
    return datetime(year, 1, 1, tzinfo=timezone.utc)


class TrendEngine(AggregateWorker[LedgerChange]):
    """Per-bucket income/expense/net series for charting."""

    def __init__(  # NOQA: PLR0913
        self,
        ledger: LedgerStore,
        calendar: PeriodCalendar,
        policy: Optional[RecomputePolicy] = None,
        clock: Callable[[], datetime] = utc_now,
        scale: int = DEFAULT_SCALE,
    ):
        super().__init__("trend-engine", ledger.on_change, policy)
        self._ledger = ledger
        self._calendar = calendar
        self._clock = clock
        self._scale = scale
        self._cache: dict[Bucket, TrendData] = {}
        self._observed: dict[int, Observable[list[TrendData]]] = {}
        self._staged: dict[int, list[TrendData]] = {}

    async def monthly_trend(self, n: int) -> list[TrendData]:
        """Exactly ``n`` monthly entries ending at the current month, oldest first."""
        return await self.trend(n, Granularity.MONTHLY)

    async def trend(
        self,
        n: int,
        granularity: Granularity,
        anchor: Optional[datetime] = None,
    ) -> list[TrendData]:
        """
        Exactly ``n`` entries ending at ``anchor``'s bucket, oldest first.

        Buckets without transactions produce zero entries, so the series never
        skips a period. ``n < 0`` raises InvalidPeriodError.
        """
        buckets = self._calendar.previous_buckets(
            n,
            granularity,
            anchor or self._clock(),
        )
        missing = [b for b in buckets if b not in self._cache]
        if not missing:
            return [self._cache[b] for b in buckets]

        generation = self.generation
        transactions = await self.bounded(
            self._ledger.query_range(missing[0].start, missing[-1].end),
            "ledger.query_range",
        )
        computed = {b: self._entry(b, in_bucket(transactions, b)) for b in missing}
        if generation == self.generation:
            self._cache.update(computed)
        return [self._cache.get(b) or computed[b] for b in buckets]

    async def year_over_year_comparison(self) -> YearOverYearComparison:
        """
        Net of the current year-to-date against the same span one year earlier.

        ``change = (current - previous) / |previous| * 100``, half-up to two
        places. A previous net of zero leaves the change undefined (None).
        """
        now = to_utc(self._clock())
        current_start = year_start(now.year)
        previous_start = year_start(now.year - 1)
        previous_end = one_year_earlier(now)

        transactions = await self.bounded(
            self._ledger.query_range(previous_start, now),
            "ledger.query_range",
        )
        current = [t for t in transactions if t.occurred_at >= current_start]
        previous = [t for t in transactions if t.occurred_at < previous_end]
        current_net = self._net(current)
        previous_net = self._net(previous)

        change = None
        if not previous_net.is_zero():
            ratio = Fraction(
                current_net.minor_units - previous_net.minor_units,
                abs(previous_net.minor_units),
            )
            change = quantize_half_up(ratio * 100, 2)
        else:
            logger.debug("Year-over-year change undefined: previous net is zero")

        return YearOverYearComparison(
            current_label=f"{now.year} YTD",
            previous_label=f"{now.year - 1} YTD",
            current_net=current_net,
            previous_net=previous_net,
            change_percentage=change,
        )

    async def trailing_monthly_average(self, n: int) -> Money:
        """Mean monthly net over the last ``n`` months, rounded half-up."""
        if n < 0:
            msg = f"Number of months cannot be negative: {n}"
            raise InvalidPeriodError(msg, n)
        if n == 0:
            return Money.zero(self._scale)
        series = await self.monthly_trend(n)
        total = Money.sum((entry.net for entry in series), self._scale)
        return total.divide(n)

    async def observe_monthly_trend(self, n: int) -> Observable[list[TrendData]]:
        observable = self._observed.get(n)
        if observable is None:
            value = await self.monthly_trend(n)
            observable = self._observed.setdefault(
                n,
                Observable[list[TrendData]](f"trend:monthly:{n}", value),
            )
        return observable

    def _entry(self, bucket: Bucket, transactions) -> TrendData:
        income, expenses = split_totals(transactions, self._scale)
        return TrendData(
            period=bucket.key,
            period_label=bucket.label,
            income=income,
            expenses=expenses,
            net=income - expenses,
        )

    def _net(self, transactions) -> Money:
        income, expenses = split_totals(transactions, self._scale)
        return income - expenses

    def _reset(self) -> None:
        self._cache.clear()

    def _invalidate(self, change: LedgerChange) -> None:
        instants = change.affected_instants()
        for bucket in [b for b in self._cache if any(b.contains(t) for t in instants)]:
            del self._cache[bucket]

    async def _recompute(self, changes: list[LedgerChange], full: bool) -> None:
        if full:
            self._cache.clear()
        # Observed series are re-read from the cache; only invalidated months
        # and months that rolled in since the last read hit the store
        for n in self._observed:
            self._staged[n] = await self.monthly_trend(n)

    def _publish(self) -> None:
        for n, series in self._staged.items():
            observable = self._observed[n]
            if observable.stale or series != observable.value:
                observable.publish(series)
        self._staged = {}

    def _affected(self, changes: list[LedgerChange], full: bool) -> list[Observable]:
        return list(self._observed.values())
