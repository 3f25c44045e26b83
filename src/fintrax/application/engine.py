"""Composition root of the aggregation engine.

Every collaborator is handed in through the constructor; nothing is looked
up from process-wide state. The engine owns the aggregate components, their
observables and their worker tasks.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Optional, Sequence
from uuid import UUID

from fintrax.application.commands import (
    CreateMonthlyExpenseCommand,
    CreateTransactionCommand,
    DeactivateMonthlyExpenseCommand,
    DeleteMonthlyExpenseCommand,
    DeleteTransactionCommand,
    MarkMonthlyExpensePaidCommand,
    UpdateMonthlyExpenseCommand,
    UpdateTransactionCommand,
)
from fintrax.application.services import (
    ALL_GRANULARITIES,
    AggregateWorker,
    BalanceTracker,
    CategoryAnalytics,
    MonthlyExpenseService,
    RecomputePolicy,
    SummaryCalculator,
    TrendEngine,
)
from fintrax.domain.calendar import Granularity, PeriodCalendar
from fintrax.domain.ledger import (
    BalanceSnapshotRepository,
    LedgerStore,
    Money,
    MonthlyExpense,
    MonthlyExpenseRepository,
    RecurringPeriod,
    Transaction,
    TransactionCategory,
    TransactionType,
)
from fintrax.domain.ledger.value_objects import DEFAULT_SCALE
from fintrax.domain.shared.time import utc_now

if TYPE_CHECKING:
    from fintrax.application.factories import StoreFactory

logger = logging.getLogger(__name__)


class FinanceEngine:
    """Wires the stores to the balance, summary, category and trend components."""

    def __init__(  # NOQA: PLR0913
        self,
        ledger: LedgerStore,
        snapshots: BalanceSnapshotRepository,
        monthly_expenses: MonthlyExpenseRepository,
        calendar: Optional[PeriodCalendar] = None,
        policy: Optional[RecomputePolicy] = None,
        granularities: Sequence[Granularity] = ALL_GRANULARITIES,
        clock: Callable[[], datetime] = utc_now,
        scale: int = DEFAULT_SCALE,
    ):
        self._ledger = ledger
        self._monthly_expenses = monthly_expenses
        self._calendar = calendar or PeriodCalendar()
        self._scale = scale

        self.balance = BalanceTracker(
            ledger,
            snapshots,
            self._calendar,
            policy=policy,
            granularities=granularities,
            clock=clock,
            scale=scale,
        )
        self.summaries = SummaryCalculator(ledger, policy=policy, scale=scale)
        self.categories = CategoryAnalytics(
            ledger,
            self._calendar,
            policy=policy,
            clock=clock,
            scale=scale,
        )
        self.trends = TrendEngine(
            ledger,
            self._calendar,
            policy=policy,
            clock=clock,
            scale=scale,
        )
        self.expenses = MonthlyExpenseService(
            monthly_expenses,
            self._calendar,
            policy=policy,
            scale=scale,
        )

    @classmethod
    def from_factory(  # NOQA: PLR0913
        cls,
        factory: StoreFactory,
        calendar: Optional[PeriodCalendar] = None,
        policy: Optional[RecomputePolicy] = None,
        granularities: Sequence[Granularity] = ALL_GRANULARITIES,
        clock: Callable[[], datetime] = utc_now,
        scale: int = DEFAULT_SCALE,
    ) -> FinanceEngine:
        return cls(
            ledger=factory.ledger_store(),
            snapshots=factory.balance_snapshot_repository(),
            monthly_expenses=factory.monthly_expense_repository(),
            calendar=calendar,
            policy=policy,
            granularities=granularities,
            clock=clock,
            scale=scale,
        )

    @property
    def calendar(self) -> PeriodCalendar:
        return self._calendar

    @property
    def ledger(self) -> LedgerStore:
        return self._ledger

    @property
    def workers(self) -> tuple[AggregateWorker, ...]:
        return (
            self.balance,
            self.summaries,
            self.categories,
            self.trends,
            self.expenses,
        )

    async def start(self) -> None:
        for worker in self.workers:
            await worker.start()
        logger.info("Finance engine started")

    async def stop(self) -> None:
        """Cancel every worker; queued and in-flight recomputation is dropped."""
        for worker in self.workers:
            await worker.stop()
        logger.info("Finance engine stopped")

    async def wait_idle(self) -> None:
        """Wait until every component has caught up with the stores."""
        await asyncio.gather(*(worker.wait_idle() for worker in self.workers))

    async def __aenter__(self) -> FinanceEngine:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    # -------------------------------------------------------------------------
    # Write side
    # -------------------------------------------------------------------------

    async def add_transaction(  # NOQA: PLR0913
        self,
        amount: Money | Decimal | int | str,
        description: str,
        category: TransactionCategory,
        type: TransactionType,  # NOQA: A002
        occurred_at: Optional[datetime] = None,
        recurrence: Optional[RecurringPeriod] = None,
    ) -> Transaction:
        command = CreateTransactionCommand(self._ledger, self._scale)
        return await command.execute(
            amount=amount,
            description=description,
            category=category,
            type=type,
            occurred_at=occurred_at,
            recurrence=recurrence,
        )

    async def update_transaction(self, transaction_id: UUID, **changes) -> Transaction:
        command = UpdateTransactionCommand(self._ledger, self._scale)
        return await command.execute(transaction_id, **changes)

    async def delete_transaction(self, transaction_id: UUID) -> None:
        await DeleteTransactionCommand(self._ledger).execute(transaction_id)

    async def add_monthly_expense(
        self,
        amount: Money | Decimal | int | str,
        description: str,
        category: TransactionCategory,
        due_day: int,
    ) -> MonthlyExpense:
        command = CreateMonthlyExpenseCommand(self._monthly_expenses, self._scale)
        return await command.execute(amount, description, category, due_day)

    async def update_monthly_expense(
        self,
        expense_id: UUID,
        **changes,
    ) -> MonthlyExpense:
        command = UpdateMonthlyExpenseCommand(self._monthly_expenses, self._scale)
        return await command.execute(expense_id, **changes)

    async def deactivate_monthly_expense(self, expense_id: UUID) -> MonthlyExpense:
        command = DeactivateMonthlyExpenseCommand(self._monthly_expenses)
        return await command.execute(expense_id)

    async def mark_monthly_expense_paid(
        self,
        expense_id: UUID,
        paid_at: Optional[datetime] = None,
    ) -> MonthlyExpense:
        command = MarkMonthlyExpensePaidCommand(self._monthly_expenses)
        return await command.execute(expense_id, paid_at)

    async def delete_monthly_expense(self, expense_id: UUID) -> None:
        await DeleteMonthlyExpenseCommand(self._monthly_expenses).execute(expense_id)
