"""Analytics DTOs for summaries, breakdowns, charts and trends.

These are derived view values: never authoritative and always reconstructible
from a full ledger scan. Monetary fields stay as Money so consumers keep exact
arithmetic; percentages are Decimals on a 0-100 scale.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from fintrax.domain.calendar import Bucket
from fintrax.domain.ledger import (
    Money,
    MonthlyExpense,
    Transaction,
    TransactionCategory,
    TransactionType,
)

# Fixed display colour per category, stable across runs
CATEGORY_COLORS: dict[TransactionCategory, str] = {
    TransactionCategory.HOUSING: "#3F51B5",
    TransactionCategory.TRANSPORTATION: "#009688",
    TransactionCategory.FOOD: "#FF9800",
    TransactionCategory.UTILITIES: "#607D8B",
    TransactionCategory.HEALTHCARE: "#E91E63",
    TransactionCategory.ENTERTAINMENT: "#9C27B0",
    TransactionCategory.SAVINGS: "#4CAF50",
    TransactionCategory.INCOME: "#2196F3",
    TransactionCategory.OTHER: "#9E9E9E",
}


@dataclass
class FinancialSummary:
    """Totals for one bucket.

    ``monthly_average`` is the net normalized to a 30-day month using the
    number of calendar days the bucket covers (``net * 30 / days``, half-up).
    It is not a pure average.
    """

    bucket: Bucket
    total_income: Money
    total_expenses: Money
    net_balance: Money
    monthly_average: Money
    transaction_count: int = 0
    biggest_income: Optional[Transaction] = None
    biggest_expense: Optional[Transaction] = None

    @property
    def is_empty(self) -> bool:
        return self.transaction_count == 0


@dataclass
class CategoryBreakdown:
    """One category's share of a bucket's income or expenses."""

    category: TransactionCategory
    flow: TransactionType
    total_amount: Money
    transaction_count: int
    percentage: Decimal  # 0-100 scale, 2 places


@dataclass
class ChartData:
    """Single slice of a category pie chart."""

    label: str
    value: Money
    percentage: Decimal
    color: str


@dataclass
class TrendData:
    """Income, expenses and net for one bucket of a trend series."""

    period: str  # bucket key, e.g. "2024-01"
    period_label: str  # "January 2024"
    income: Money
    expenses: Money
    net: Money

    @property
    def is_empty(self) -> bool:
        return self.income.is_zero() and self.expenses.is_zero()


@dataclass
class YearOverYearComparison:
    """Net balance of the current year-to-date against the same span last year.

    When the previous net is zero the change is undefined: ``is_defined`` is
    False and ``change_percentage`` is None.
    """

    current_label: str
    previous_label: str
    current_net: Money
    previous_net: Money
    change_percentage: Optional[Decimal]

    @property
    def is_defined(self) -> bool:
        return self.change_percentage is not None


@dataclass
class RecurringObligations:
    """Active monthly expenses due in one month, kept apart from summaries."""

    period: str
    total_active: Money
    total_unpaid: Money
    active: list[MonthlyExpense] = field(default_factory=list)
    unpaid: list[MonthlyExpense] = field(default_factory=list)
