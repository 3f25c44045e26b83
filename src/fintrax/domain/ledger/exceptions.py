"""Ledger domain exceptions."""

from typing import Any
from uuid import UUID

from fintrax.domain.shared.exceptions import (
    ConflictError,
    EntityNotFoundError,
    ErrorCode,
    ValidationError,
)


class InvalidDescriptionError(ValidationError):
    """Raised when a description is blank or too long."""

    def __init__(self, description: str, max_length: int) -> None:
        super().__init__(
            message=(
                f"Description must be between 1 and {max_length} characters "
                "and not blank"
            ),
            code=ErrorCode.INVALID_DESCRIPTION,
            details={"length": len(description), "max_length": max_length},
        )


class CategoryMismatchError(ValidationError):
    """Raised when an expense is filed under the INCOME category."""

    def __init__(self, transaction_type: Any, category: Any) -> None:
        super().__init__(
            message=(
                f"Category {category.value} is reserved for income and cannot "
                f"be used with type {transaction_type.value}"
            ),
            code=ErrorCode.CATEGORY_MISMATCH,
            details={"type": transaction_type.value, "category": category.value},
        )


class InvalidDueDayError(ValidationError):
    """Raised when a monthly expense due day is outside 1-31."""

    def __init__(self, due_day: int) -> None:
        super().__init__(
            message=f"Due day must be between 1 and 31, got {due_day}",
            code=ErrorCode.INVALID_DUE_DAY,
            details={"due_day": due_day},
        )


class TransactionNotFoundError(EntityNotFoundError):
    """Raised when a write path references an unknown transaction."""

    def __init__(self, transaction_id: UUID | str) -> None:
        super().__init__(
            message=f"Transaction '{transaction_id}' not found",
            code=ErrorCode.TRANSACTION_NOT_FOUND,
            details={"transaction_id": str(transaction_id)},
        )


class DuplicateTransactionError(ConflictError):
    """Raised when inserting a transaction whose id already exists."""

    def __init__(self, transaction_id: UUID | str) -> None:
        super().__init__(
            message=f"Transaction '{transaction_id}' already exists",
            code=ErrorCode.DUPLICATE_TRANSACTION,
            details={"transaction_id": str(transaction_id)},
        )


class MonthlyExpenseNotFoundError(EntityNotFoundError):
    """Raised when a write path references an unknown monthly expense."""

    def __init__(self, expense_id: UUID | str) -> None:
        super().__init__(
            message=f"Monthly expense '{expense_id}' not found",
            code=ErrorCode.MONTHLY_EXPENSE_NOT_FOUND,
            details={"expense_id": str(expense_id)},
        )
