"""Shared test fixtures and builders."""

from tests.shared.fixtures.factories import (
    FAST_POLICY,
    FixedClock,
    at,
    make_expense,
    make_transaction,
)

__all__ = [
    "FAST_POLICY",
    "FixedClock",
    "at",
    "make_expense",
    "make_transaction",
]
