"""Recurrence markers for template transactions."""

from enum import Enum


class RecurringPeriod(Enum):
    """Recurrence of a template transaction.

    The engine stores the marker only; it never expands future instances.
    """

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"
