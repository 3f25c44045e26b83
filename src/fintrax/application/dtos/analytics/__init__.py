"""Analytics DTOs."""

from fintrax.application.dtos.analytics.analytics_dto import (
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
