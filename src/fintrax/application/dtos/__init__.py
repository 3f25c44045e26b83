"""Data Transfer Objects for the presentation layer.

DTOs decouple readers (CLI, UI) from domain models. They are derived values
and are never written back to a store.
"""

# Analytics DTOs
from fintrax.application.dtos.analytics import (
    CATEGORY_COLORS,
    CategoryBreakdown,
    ChartData,
    FinancialSummary,
    RecurringObligations,
    TrendData,
    YearOverYearComparison,
)

__all__ = [
    "CATEGORY_COLORS",
    "CategoryBreakdown",
    "ChartData",
    "FinancialSummary",
    "RecurringObligations",
    "TrendData",
    "YearOverYearComparison",
]
