"""Calendar domain: granularities and UTC bucketing."""

from fintrax.domain.calendar.granularity import Granularity
from fintrax.domain.calendar.period_calendar import Bucket, PeriodCalendar

__all__ = ["Bucket", "Granularity", "PeriodCalendar"]
