"""Read side of recurring monthly expenses.

Monthly expenses are obligations, not ledger records: they never enter
balance or summary totals. They are surfaced on their own, as the live list
of active expenses and as per-month ``RecurringObligations``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fintrax.application.dtos.analytics import RecurringObligations
from fintrax.application.reactive import Observable
from fintrax.application.services.aggregate_worker import (
    AggregateWorker,
    RecomputePolicy,
)
from fintrax.domain.calendar import Granularity, PeriodCalendar
from fintrax.domain.ledger import (
    Money,
    MonthlyExpense,
    MonthlyExpenseRepository,
    RecurringExpenseChange,
)
from fintrax.domain.ledger.value_objects import DEFAULT_SCALE
from fintrax.domain.shared.exceptions import InvalidPeriodError

logger = logging.getLogger(__name__)


class MonthlyExpenseService(AggregateWorker[RecurringExpenseChange]):
    """Keeps the active monthly expenses observable current."""

    def __init__(
        self,
        repository: MonthlyExpenseRepository,
        calendar: PeriodCalendar,
        policy: Optional[RecomputePolicy] = None,
        scale: int = DEFAULT_SCALE,
    ):
        super().__init__("monthly-expenses", repository.on_change, policy)
        self._repository = repository
        self._calendar = calendar
        self._scale = scale
        self._active = Observable[list[MonthlyExpense]]("monthly-expenses:active", [])
        self._staged: Optional[list[MonthlyExpense]] = None

    @property
    def active(self) -> Observable[list[MonthlyExpense]]:
        """Active monthly expenses ordered by due day ascending."""
        return self._active

    async def get(self, expense_id: UUID) -> Optional[MonthlyExpense]:
        return await self.bounded(self._repository.get(expense_id), "expenses.get")

    async def list_all(self) -> list[MonthlyExpense]:
        return await self.bounded(self._repository.list_all(), "expenses.list_all")

    async def list_active(self) -> list[MonthlyExpense]:
        return await self.bounded(
            self._repository.list_active(),
            "expenses.list_active",
        )

    async def obligations(self, year: int, month: int) -> RecurringObligations:
        """Active obligations of a month and the ones not yet paid in it."""
        try:
            anchor = datetime(year, month, 1, tzinfo=timezone.utc)
        except ValueError as e:
            msg = f"Invalid month: {year}-{month}"
            raise InvalidPeriodError(msg, f"{year}-{month}") from e
        bucket = self._calendar.bucket_for(anchor, Granularity.MONTHLY)

        active = await self.list_active()
        unpaid = [e for e in active if not e.is_paid_between(bucket.start, bucket.end)]
        return RecurringObligations(
            period=bucket.key,
            total_active=Money.sum((e.amount for e in active), self._scale),
            total_unpaid=Money.sum((e.amount for e in unpaid), self._scale),
            active=active,
            unpaid=unpaid,
        )

    async def _recompute(
        self,
        changes: list[RecurringExpenseChange],
        full: bool,
    ) -> None:
        self._staged = await self.list_active()
        logger.debug("Active monthly expenses: %d", len(self._staged))

    def _publish(self) -> None:
        if self._staged is not None:
            self._active.publish(self._staged)
            self._staged = None

    def _affected(
        self,
        changes: list[RecurringExpenseChange],
        full: bool,
    ) -> list[Observable]:
        return [self._active]
