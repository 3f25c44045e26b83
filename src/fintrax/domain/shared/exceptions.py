"""Shared domain exceptions and error codes.

Every engine error derives from DomainException and carries a stable
ErrorCode, so the outer edge (the CLI) can report failures uniformly.
Each category sets a ``default_code``; concrete errors pass a narrower one.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Stable error codes for consumers of the engine.

    These codes are part of the public contract. Should not be changed.
    """

    # Validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_PERIOD = "INVALID_PERIOD"
    INVALID_DESCRIPTION = "INVALID_DESCRIPTION"
    INVALID_DUE_DAY = "INVALID_DUE_DAY"
    CATEGORY_MISMATCH = "CATEGORY_MISMATCH"

    # Lookups on write paths
    ENTITY_NOT_FOUND = "ENTITY_NOT_FOUND"
    TRANSACTION_NOT_FOUND = "TRANSACTION_NOT_FOUND"
    MONTHLY_EXPENSE_NOT_FOUND = "MONTHLY_EXPENSE_NOT_FOUND"

    # Conflicts
    CONFLICT = "CONFLICT"
    DUPLICATE_TRANSACTION = "DUPLICATE_TRANSACTION"

    # Backing stores
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class DomainException(Exception):  # NOQA: N818
    """Base exception for all engine errors.

    Attributes
    ----------
    message
        Text shown to the user
    code
        Stable error code; defaults to the class's ``default_code``
    details
        Extra context for logs
    """

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.value}: {self.message!r})"


class ValidationError(DomainException):
    """Input rejected before any store was touched."""

    default_code = ErrorCode.VALIDATION_ERROR


class EntityNotFoundError(DomainException):
    """A write path referenced an id that does not exist."""

    default_code = ErrorCode.ENTITY_NOT_FOUND


class ConflictError(DomainException):
    """A write collides with existing state."""

    default_code = ErrorCode.CONFLICT


class InvalidAmountError(ValidationError):
    """Raised for non-positive, non-finite or malformed monetary amounts."""

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(
            message,
            ErrorCode.INVALID_AMOUNT,
            {"value": None if value is None else str(value)},
        )


class InvalidPeriodError(ValidationError):
    """Raised for malformed bucket keys or range requests."""

    def __init__(self, message: str, period: Any = None) -> None:
        super().__init__(
            message,
            ErrorCode.INVALID_PERIOD,
            {"period": None if period is None else str(period)},
        )


class StoreUnavailableError(DomainException):
    """Raised when a backing store query fails or times out.

    Background recomputation treats this as retryable.
    """

    default_code = ErrorCode.STORE_UNAVAILABLE

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message, details={"operation": operation})
