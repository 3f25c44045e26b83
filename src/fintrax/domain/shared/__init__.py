"""Shared domain components.

This module exports shared exceptions and time helpers used across the
ledger and calendar domains.
"""

from fintrax.domain.shared.exceptions import (
    ConflictError,
    DomainException,
    EntityNotFoundError,
    ErrorCode,
    InvalidAmountError,
    InvalidPeriodError,
    StoreUnavailableError,
    ValidationError,
)
from fintrax.domain.shared.time import ensure_tz_aware, to_utc, utc_now

__all__ = [
    # Error codes
    "ErrorCode",
    # Base exception
    "DomainException",
    # Exception categories
    "ValidationError",
    "EntityNotFoundError",
    "ConflictError",
    # Engine taxonomy
    "InvalidAmountError",
    "InvalidPeriodError",
    "StoreUnavailableError",
    # Utilities
    "ensure_tz_aware",
    "to_utc",
    "utc_now",
]
