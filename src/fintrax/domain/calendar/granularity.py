"""Bucket granularities for period aggregation."""

from enum import Enum

from fintrax.domain.shared.exceptions import InvalidPeriodError


class Granularity(Enum):
    """Calendar bucket sizes, finest first."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"

    @classmethod
    def parse(cls, value: "str | Granularity") -> "Granularity":
        if isinstance(value, Granularity):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as e:
            valid = ", ".join(g.value for g in cls)
            msg = f"Unknown granularity '{value}'. Valid: {valid}"
            raise InvalidPeriodError(msg, value) from e
