"""Fixed category taxonomy for transactions and recurring expenses."""

from enum import Enum


class TransactionCategory(Enum):
    """Transaction categories.

    Declaration order is significant: it is the tie-breaker when two
    categories carry the same total in a breakdown.
    """

    HOUSING = "HOUSING"
    TRANSPORTATION = "TRANSPORTATION"
    FOOD = "FOOD"
    UTILITIES = "UTILITIES"
    HEALTHCARE = "HEALTHCARE"
    ENTERTAINMENT = "ENTERTAINMENT"
    SAVINGS = "SAVINGS"
    INCOME = "INCOME"
    OTHER = "OTHER"

    @property
    def position(self) -> int:
        return _POSITIONS[self]


_POSITIONS = {category: index for index, category in enumerate(TransactionCategory)}
