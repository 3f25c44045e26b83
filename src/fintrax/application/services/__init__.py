"""Application services: the aggregation engine components."""

from fintrax.application.services.aggregate_worker import (
    AggregateWorker,
    RecomputePolicy,
)
from fintrax.application.services.balance_tracker import (
    ALL_GRANULARITIES,
    BalanceTracker,
)
from fintrax.application.services.category_analytics import CategoryAnalytics
from fintrax.application.services.monthly_expense_service import (
    MonthlyExpenseService,
)
from fintrax.application.services.summary_calculator import SummaryCalculator
from fintrax.application.services.trend_engine import TrendEngine

__all__ = [
    "ALL_GRANULARITIES",
    "AggregateWorker",
    "BalanceTracker",
    "CategoryAnalytics",
    "MonthlyExpenseService",
    "RecomputePolicy",
    "SummaryCalculator",
    "TrendEngine",
]
